from __future__ import annotations

from pathlib import Path

import pytest

from flatten_common.discovery import discover_sources, name_contains, name_excludes


def _touch(path: Path, text: str = "contract X {}\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _tree(root: Path) -> None:
    _touch(root / "A.sol")
    _touch(root / "MockToken.sol")
    _touch(root / "README.md", "# notes\n")
    _touch(root / "a" / "B.sol")
    _touch(root / "a" / "c" / "C.sol")


def test_discover_walks_depth_first_in_lexical_order(tmp_path: Path):
    _tree(tmp_path)
    found = discover_sources(tmp_path)
    assert [p.relative_to(tmp_path).as_posix() for p in found] == [
        "A.sol",
        "MockToken.sol",
        "a/B.sol",
        "a/c/C.sol",
    ]


def test_discover_native_order_returns_same_files(tmp_path: Path):
    _tree(tmp_path)
    native = discover_sources(tmp_path, listing_order="native")
    assert sorted(native) == sorted(discover_sources(tmp_path))


def test_discover_predicate_sees_bare_file_names(tmp_path: Path):
    _tree(tmp_path)
    seen: list[str] = []

    def _pred(name: str) -> bool:
        seen.append(name)
        return True

    discover_sources(tmp_path, _pred)
    assert sorted(seen) == ["A.sol", "B.sol", "C.sol", "MockToken.sol"]


def test_discover_mock_partition(tmp_path: Path):
    _tree(tmp_path)
    production = discover_sources(tmp_path, name_excludes("Mock"))
    mocks = discover_sources(tmp_path, name_contains("Mock"))
    assert [p.name for p in mocks] == ["MockToken.sol"]
    assert "MockToken.sol" not in [p.name for p in production]
    assert set(production) | set(mocks) == set(discover_sources(tmp_path))


def test_discover_without_sources_returns_empty(tmp_path: Path):
    _touch(tmp_path / "notes.md", "nothing here\n")
    (tmp_path / "empty").mkdir()
    assert discover_sources(tmp_path) == []


def test_discover_appends_extra_paths_after_traversal(tmp_path: Path):
    tests_root = tmp_path / "test"
    tests_root.mkdir()
    _touch(tests_root / "helpers.txt", "not a source\n")
    extra = tmp_path / "script" / "LibDeploy.sol"
    assert discover_sources(tests_root, extra_paths=[extra]) == [extra]

    _touch(tests_root / "Token.t.sol")
    assert discover_sources(tests_root, extra_paths=[extra]) == [tests_root / "Token.t.sol", extra]


def test_discover_is_not_cached(tmp_path: Path):
    _touch(tmp_path / "A.sol")
    assert len(discover_sources(tmp_path)) == 1
    _touch(tmp_path / "B.sol")
    assert len(discover_sources(tmp_path)) == 2


def test_discover_missing_root_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        discover_sources(tmp_path / "missing")


def test_discover_rejects_unknown_listing_order(tmp_path: Path):
    with pytest.raises(ValueError):
        discover_sources(tmp_path, listing_order="random")
