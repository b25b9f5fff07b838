"""
Trim compiler metadata in build artifacts before source verification.

`out/<Name>.sol/<Name>.json` is replaced by its `metadata` object with
non-essential keys removed (source URLs/licenses/hashes, compiler info,
ABI/devdoc output, compilation target).

Missing artifacts and artifacts without metadata are skipped (incremental
builds only produce some of them); they are reported, not raised.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from flatten_common import paths

logger = logging.getLogger(__name__)

STATUS_TRIMMED = "trimmed"
STATUS_SKIPPED_MISSING = "skipped_missing"
STATUS_SKIPPED_NO_METADATA = "skipped_no_metadata"

SOURCE_KEYS_TO_DROP = ("urls", "license", "keccak256")
METADATA_KEYS_TO_DROP = ("compiler", "version", "output")


@dataclass(frozen=True)
class TrimResult:
    name: str
    path: Path
    status: str
    size: Optional[int] = None

    @property
    def skipped(self) -> bool:
        return self.status != STATUS_TRIMMED


def artifact_path(name: str, out_root: Optional[Path] = None) -> Path:
    base = out_root if out_root is not None else paths.forge_out_root()
    return base / f"{name}.sol" / f"{name}.json"


def trim_metadata(metadata: Dict[str, Any]) -> Dict[str, Any]:
    """Return a trimmed copy of a compiler `metadata` object."""
    out = dict(metadata)
    sources = out.get("sources")
    if isinstance(sources, dict):
        trimmed_sources: Dict[str, Any] = {}
        for src_path, entry in sources.items():
            if isinstance(entry, dict):
                entry = {k: v for k, v in entry.items() if k not in SOURCE_KEYS_TO_DROP}
            trimmed_sources[src_path] = entry
        out["sources"] = trimmed_sources
    for key in METADATA_KEYS_TO_DROP:
        out.pop(key, None)
    settings = out.get("settings")
    if isinstance(settings, dict):
        out["settings"] = {k: v for k, v in settings.items() if k != "compilationTarget"}
    return out


def trim_artifact(name: str, out_root: Optional[Path] = None) -> TrimResult:
    path = artifact_path(name, out_root)
    if not path.exists():
        logger.info("%s: artifact not found, skipping (%s)", name, path)
        return TrimResult(name=name, path=path, status=STATUS_SKIPPED_MISSING)

    data = json.loads(path.read_text(encoding="utf-8"))
    metadata = data.get("metadata") if isinstance(data, dict) else None
    if not isinstance(metadata, dict):
        logger.info("%s: no metadata in artifact, skipping", name)
        return TrimResult(name=name, path=path, status=STATUS_SKIPPED_NO_METADATA)

    path.write_text(json.dumps(trim_metadata(metadata), ensure_ascii=False, indent=1), encoding="utf-8")
    size = path.stat().st_size
    logger.info("%s size: %d", path, size)
    return TrimResult(name=name, path=path, status=STATUS_TRIMMED, size=size)


def trim_build_metadata(names: Iterable[str], out_root: Optional[Path] = None) -> List[TrimResult]:
    seen: set[str] = set()
    results: List[TrimResult] = []
    for name in names:
        if name in seen:
            continue
        seen.add(name)
        results.append(trim_artifact(name, out_root))
    return results
