"""
lcov.info -> coverage/coverage-summary.json (istanbul-style `total` block).

Categories: lines, functions, branches, statements. lcov has no statement
data, so `statements` reuses the branch counters.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from flatten_common import paths

logger = logging.getLogger(__name__)

SUMMARY_CATEGORIES = ("lines", "functions", "branches", "statements")
# statements -> branches: lcov carries no statement counters
_LCOV_SOURCE = {"statements": "branches"}


class LcovParseError(ValueError):
    pass


@dataclass
class LcovCounter:
    found: int = 0
    hit: int = 0
    details: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class LcovRecord:
    title: str = ""
    file: str = ""
    lines: LcovCounter = field(default_factory=LcovCounter)
    functions: LcovCounter = field(default_factory=LcovCounter)
    branches: LcovCounter = field(default_factory=LcovCounter)


def _int(value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        # BRDA taken may be "-" (never executed)
        return 0


def parse_lcov(text: str) -> List[LcovRecord]:
    records: List[LcovRecord] = []
    cur = LcovRecord()
    for raw in (text or "").splitlines():
        line = raw.strip()
        if not line:
            continue
        if line == "end_of_record":
            records.append(cur)
            cur = LcovRecord()
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        parts = value.split(",")
        if key == "TN":
            cur.title = value.strip()
        elif key == "SF":
            cur.file = value.strip()
        elif key == "FN" and len(parts) >= 2:
            name = ",".join(parts[1:]).strip()
            cur.functions.details.append({"name": name, "line": _int(parts[0]), "hit": 0})
        elif key == "FNDA" and len(parts) >= 2:
            name = ",".join(parts[1:]).strip()
            for detail in cur.functions.details:
                if detail["name"] == name:
                    detail["hit"] = _int(parts[0])
                    break
        elif key == "FNF":
            cur.functions.found = _int(value)
        elif key == "FNH":
            cur.functions.hit = _int(value)
        elif key == "DA" and len(parts) >= 2:
            cur.lines.details.append({"line": _int(parts[0]), "hit": _int(parts[1])})
        elif key == "LF":
            cur.lines.found = _int(value)
        elif key == "LH":
            cur.lines.hit = _int(value)
        elif key == "BRDA" and len(parts) >= 4:
            cur.branches.details.append(
                {
                    "line": _int(parts[0]),
                    "block": _int(parts[1]),
                    "branch": _int(parts[2]),
                    "taken": _int(parts[3]),
                }
            )
        elif key == "BRF":
            cur.branches.found = _int(value)
        elif key == "BRH":
            cur.branches.hit = _int(value)
    if not records:
        raise LcovParseError("no lcov records found (missing end_of_record?)")
    return records


def _pct(covered: int, total: int) -> Optional[float]:
    if total == 0:
        return None
    pct = covered * 100 / total
    # half-up, 2 decimals
    return math.floor(pct * 100 + 0.5) / 100


def summarize_coverage(records: List[LcovRecord]) -> Dict[str, Any]:
    summary: Dict[str, Any] = {}
    for name in SUMMARY_CATEGORIES:
        source = _LCOV_SOURCE.get(name, name)
        total = sum(getattr(r, source).found for r in records)
        covered = sum(getattr(r, source).hit for r in records)
        summary[name] = {"total": total, "covered": covered, "skipped": 0, "pct": _pct(covered, total)}
    return {"total": summary}


def coverage_summary_path(out_dir: Optional[Path] = None) -> Path:
    return (out_dir if out_dir is not None else paths.coverage_root()) / "coverage-summary.json"


def write_coverage_summary(lcov_path: Optional[Path] = None, out_dir: Optional[Path] = None) -> Dict[str, Any]:
    src = lcov_path if lcov_path is not None else paths.lcov_info_path()
    records = parse_lcov(src.read_text(encoding="utf-8"))
    result = summarize_coverage(records)
    dest = coverage_summary_path(out_dir)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(json.dumps(result, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("%s: %d record(s) summarized -> %s", src, len(records), dest)
    return result
