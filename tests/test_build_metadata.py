from __future__ import annotations

import json
from pathlib import Path

from flatten_common.build_metadata import (
    STATUS_SKIPPED_MISSING,
    STATUS_SKIPPED_NO_METADATA,
    STATUS_TRIMMED,
    artifact_path,
    trim_build_metadata,
)


def _artifact(out_root: Path, name: str, payload: dict) -> Path:
    path = artifact_path(name, out_root)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _build_output() -> dict:
    return {
        "abi": [{"type": "function", "name": "owner"}],
        "bytecode": {"object": "0x6080"},
        "metadata": {
            "compiler": {"version": "0.8.20+commit.a1b79de6"},
            "language": "Solidity",
            "output": {"abi": [], "devdoc": {}},
            "settings": {
                "compilationTarget": {"src/FeeRegistry.sol": "FeeRegistry"},
                "optimizer": {"enabled": True, "runs": 200},
            },
            "sources": {
                "src/FeeRegistry.sol": {
                    "keccak256": "0xabc",
                    "license": "MIT",
                    "urls": ["bzz-raw://1", "dweb:/ipfs/Qm"],
                }
            },
            "version": 1,
        },
    }


def test_trim_rewrites_artifact_with_trimmed_metadata(tmp_path: Path):
    path = _artifact(tmp_path, "FeeRegistry", _build_output())

    [res] = trim_build_metadata(["FeeRegistry"], tmp_path)

    assert res.status == STATUS_TRIMMED
    assert res.size == path.stat().st_size
    text = path.read_text(encoding="utf-8")
    assert text.startswith('{\n "')
    assert json.loads(text) == {
        "language": "Solidity",
        "settings": {"optimizer": {"enabled": True, "runs": 200}},
        "sources": {"src/FeeRegistry.sol": {}},
    }


def test_missing_artifact_is_skipped(tmp_path: Path):
    [res] = trim_build_metadata(["Create3Factory"], tmp_path)
    assert res.status == STATUS_SKIPPED_MISSING
    assert res.skipped
    assert not res.path.exists()


def test_artifact_without_metadata_is_left_alone(tmp_path: Path):
    path = _artifact(tmp_path, "LegacyMessenger", {"abi": []})
    before = path.read_text(encoding="utf-8")

    [res] = trim_build_metadata(["LegacyMessenger"], tmp_path)

    assert res.status == STATUS_SKIPPED_NO_METADATA
    assert path.read_text(encoding="utf-8") == before


def test_duplicate_targets_are_processed_once(tmp_path: Path):
    _artifact(tmp_path, "FeeRegistry", _build_output())
    results = trim_build_metadata(["FeeRegistry", "FeeRegistry", "Missing"], tmp_path)
    assert [r.name for r in results] == ["FeeRegistry", "Missing"]
    assert [r.status for r in results] == [STATUS_TRIMMED, STATUS_SKIPPED_MISSING]
