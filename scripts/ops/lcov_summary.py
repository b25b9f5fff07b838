#!/usr/bin/env python3
"""
lcov_summary — write coverage/coverage-summary.json from lcov.info.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from _bootstrap import bootstrap

bootstrap(load_env=False)

from flatten_common.lcov_summary import LcovParseError, write_coverage_summary  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Summarize lcov.info into coverage-summary.json")
    ap.add_argument("--lcov", help="lcov file (default: <repo>/lcov.info)")
    ap.add_argument("--out-dir", help="output dir (default: <repo>/coverage)")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    lcov_path = Path(args.lcov).expanduser().resolve() if args.lcov else None
    out_dir = Path(args.out_dir).expanduser().resolve() if args.out_dir else None
    try:
        result = write_coverage_summary(lcov_path, out_dir)
    except (OSError, LcovParseError) as exc:
        print(f"[lcov_summary] {exc}", file=sys.stderr)
        return 1
    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
