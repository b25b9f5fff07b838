from __future__ import annotations

import json
from pathlib import Path

import pytest

from flatten_common.lcov_summary import (
    LcovParseError,
    _pct,
    parse_lcov,
    summarize_coverage,
    write_coverage_summary,
)

LCOV = """TN:
SF:src/A.sol
FN:10,A.foo
FNDA:3,A.foo
FN:20,A.bar
FNDA:0,A.bar
FNF:2
FNH:1
DA:10,3
DA:11,0
LF:2
LH:1
BRDA:12,0,0,1
BRDA:12,0,1,-
BRF:2
BRH:1
end_of_record
TN:
SF:src/B.sol
FNF:1
FNH:1
LF:4
LH:3
BRF:0
BRH:0
end_of_record
"""


def test_parse_lcov_reads_records_and_details():
    records = parse_lcov(LCOV)
    assert [r.file for r in records] == ["src/A.sol", "src/B.sol"]
    a = records[0]
    assert (a.lines.found, a.lines.hit) == (2, 1)
    assert [d["hit"] for d in a.functions.details] == [3, 0]
    assert [d["taken"] for d in a.branches.details] == [1, 0]


def test_summary_aggregates_and_statements_mirror_branches():
    total = summarize_coverage(parse_lcov(LCOV))["total"]
    assert total["lines"] == {"total": 6, "covered": 4, "skipped": 0, "pct": 66.67}
    assert total["functions"] == {"total": 3, "covered": 2, "skipped": 0, "pct": 66.67}
    assert total["branches"] == {"total": 2, "covered": 1, "skipped": 0, "pct": 50.0}
    assert total["statements"] == total["branches"]


def test_pct_rounds_half_up_and_is_null_without_data():
    assert _pct(1, 800) == 0.13
    assert _pct(1, 3) == 33.33
    assert _pct(0, 0) is None


def test_parse_without_records_fails():
    with pytest.raises(LcovParseError):
        parse_lcov("SF:src/A.sol\nLF:1\n")


def test_write_coverage_summary(tmp_path: Path):
    lcov = tmp_path / "lcov.info"
    lcov.write_text(LCOV, encoding="utf-8")
    out_dir = tmp_path / "coverage"

    result = write_coverage_summary(lcov, out_dir)

    saved = json.loads((out_dir / "coverage-summary.json").read_text(encoding="utf-8"))
    assert saved == result
    assert list(saved["total"]) == ["lines", "functions", "branches", "statements"]
