"""
flatten_common.flatten_config

Loader for `configs/flatten.yaml` (+ optional `configs/flatten.local.yaml` overlay).

The YAML is the SSOT for where sources live and where flattened artifacts go.
A missing file is not an error: the defaults below match the usual
contracts/ + test/ + script/ project layout.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

from flatten_common import paths

LISTING_ORDERS = ("sorted", "native")


class FlattenConfigError(ValueError):
    pass


@dataclass(frozen=True)
class FlattenConfig:
    contracts_dir: str = "contracts"
    tests_dir: str = "test"
    test_extra_paths: Tuple[str, ...] = ("script/LibDeploy.sol",)
    source_suffix: str = ".sol"
    mock_marker: str = "Mock"
    output_dir: str = "flat"
    contracts_artifact: str = "contracts.sol"
    tests_artifact: str = "tests.sol"
    listing_order: str = "sorted"
    metadata_targets: Tuple[str, ...] = ()
    broadcast_script: str = "CryptoLegacyFactory.s.sol"

    def contracts_output(self) -> Path:
        return Path(self.output_dir) / self.contracts_artifact

    def tests_output(self) -> Path:
        return Path(self.output_dir) / self.tests_artifact


def _deep_merge_dict(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep-merge dicts (override wins).
    """
    out: Dict[str, Any] = dict(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _deep_merge_dict(out.get(key) or {}, value)
        else:
            out[key] = value
    return out


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path or not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        loaded = yaml.safe_load(f)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise FlattenConfigError(f"{path}: top-level YAML must be a mapping, got {type(loaded).__name__}")
    return loaded


def _as_str(raw: Dict[str, Any], key: str, default: str) -> str:
    value = raw.get(key, default)
    if value is None:
        return default
    if not isinstance(value, (str, int, float)):
        raise FlattenConfigError(f"{key}: expected a string, got {type(value).__name__}")
    return str(value)


def _metadata_targets(raw: Any) -> Tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        raise FlattenConfigError("metadata_targets: expected a list of contract names")
    return tuple(str(name).strip() for name in raw if str(name).strip())


def config_from_dict(raw: Dict[str, Any]) -> FlattenConfig:
    sources = raw.get("sources") or {}
    output = raw.get("output") or {}
    broadcast = raw.get("broadcast") or {}
    if not all(isinstance(section, dict) for section in (sources, output, broadcast)):
        raise FlattenConfigError("`sources`, `output` and `broadcast` must be mappings")

    extra = sources.get("test_extra_paths", FlattenConfig.test_extra_paths)
    if isinstance(extra, str):
        extra = [extra]
    if extra is None:
        extra = []
    if not isinstance(extra, (list, tuple)):
        raise FlattenConfigError("sources.test_extra_paths: expected a list of paths")

    cfg = FlattenConfig(
        contracts_dir=_as_str(sources, "contracts_dir", FlattenConfig.contracts_dir),
        tests_dir=_as_str(sources, "tests_dir", FlattenConfig.tests_dir),
        test_extra_paths=tuple(str(p) for p in extra),
        source_suffix=_as_str(sources, "suffix", FlattenConfig.source_suffix),
        mock_marker=_as_str(sources, "mock_marker", FlattenConfig.mock_marker),
        listing_order=_as_str(sources, "listing_order", FlattenConfig.listing_order).strip().lower(),
        output_dir=_as_str(output, "dir", FlattenConfig.output_dir),
        contracts_artifact=_as_str(output, "contracts", FlattenConfig.contracts_artifact),
        tests_artifact=_as_str(output, "tests", FlattenConfig.tests_artifact),
        metadata_targets=_metadata_targets(raw.get("metadata_targets")),
        broadcast_script=_as_str(broadcast, "script", FlattenConfig.broadcast_script),
    )
    return _validate(cfg)


def _validate(cfg: FlattenConfig) -> FlattenConfig:
    if not cfg.source_suffix:
        raise FlattenConfigError("sources.suffix must not be empty")
    if not cfg.mock_marker:
        raise FlattenConfigError("sources.mock_marker must not be empty")
    if cfg.listing_order not in LISTING_ORDERS:
        raise FlattenConfigError(
            f"sources.listing_order must be one of {', '.join(LISTING_ORDERS)} (got {cfg.listing_order!r})"
        )
    if cfg.contracts_artifact == cfg.tests_artifact:
        raise FlattenConfigError("output.contracts and output.tests must differ")
    return cfg


def _apply_env_overrides(raw: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(raw)
    output_dir = (os.getenv("FLAT_OUTPUT_DIR") or "").strip()
    if output_dir:
        out = _deep_merge_dict(out, {"output": {"dir": output_dir}})
    order = (os.getenv("FLAT_LISTING_ORDER") or "").strip()
    if order:
        out = _deep_merge_dict(out, {"sources": {"listing_order": order}})
    return out


def load_flatten_config(config_path: Path | str | None = None) -> FlattenConfig:
    """
    Load flatten config.

    Default:
      - Base: `configs/flatten.yaml`
      - Local overlay (deep-merge): `configs/flatten.local.yaml`

    Explicit `config_path` is loaded as-is (no overlay).
    Env overrides (applied last): FLAT_OUTPUT_DIR, FLAT_LISTING_ORDER.
    """
    if config_path is not None:
        raw = _load_yaml(paths.as_repo_path(config_path))
    else:
        raw = _load_yaml(paths.flatten_config_path())
        local_path = paths.flatten_config_local_path()
        if local_path.exists():
            raw = _deep_merge_dict(raw, _load_yaml(local_path))
    return config_from_dict(_apply_env_overrides(raw))
