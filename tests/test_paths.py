from __future__ import annotations

from pathlib import Path

import pytest

from flatten_common import paths


def _clear_caches():
    paths.repo_root.cache_clear()


@pytest.fixture(autouse=True)
def _reset(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("FLAT_REPO_ROOT", raising=False)
    monkeypatch.delenv("FLAT_FORGE_OUT", raising=False)
    _clear_caches()
    yield
    _clear_caches()


def test_repo_root_detects_pyproject():
    root = paths.repo_root(Path(__file__).resolve())
    assert (root / "pyproject.toml").exists()


def test_repo_root_env_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("FLAT_REPO_ROOT", str(tmp_path))
    _clear_caches()
    assert paths.repo_root() == tmp_path.resolve()


def test_default_roots_point_to_project_layout(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("FLAT_REPO_ROOT", str(tmp_path))
    _clear_caches()
    root = tmp_path.resolve()
    assert paths.flatten_config_path() == root / "configs" / "flatten.yaml"
    assert paths.forge_out_root() == root / "out"
    assert paths.broadcast_root() == root / "broadcast"
    assert paths.coverage_root() == root / "coverage"
    assert paths.lcov_info_path() == root / "lcov.info"


def test_forge_out_env_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("FLAT_FORGE_OUT", str(tmp_path / "build"))
    assert paths.forge_out_root() == (tmp_path / "build").resolve()


def test_as_repo_path_resolves_relative_against_root(tmp_path: Path):
    assert paths.as_repo_path("contracts", root=tmp_path) == tmp_path / "contracts"
    assert paths.as_repo_path(tmp_path / "abs") == tmp_path / "abs"


def test_repo_root_detects_foundry_project(tmp_path: Path):
    (tmp_path / "foundry.toml").write_text("[profile.default]\n", encoding="utf-8")
    nested = tmp_path / "contracts" / "lib"
    nested.mkdir(parents=True)
    assert paths.repo_root(nested) == tmp_path.resolve()


def test_repo_root_falls_back_to_start_dir(tmp_path: Path):
    project = tmp_path / "bare"
    project.mkdir()
    assert paths.repo_root(project) == project.resolve()
