#!/usr/bin/env python3
"""
flatten_contracts — merge contracts/ and test/ into two single-file artifacts.

Outputs (configs/flatten.yaml):
  - flat/contracts.sol : every contract except mocks
  - flat/tests.sol     : test sources + deploy helper + mocks

Usage:
  python3 scripts/ops/flatten_contracts.py
  python3 scripts/ops/flatten_contracts.py --only tests
  python3 scripts/ops/flatten_contracts.py --root /path/to/project --config configs/flatten.yaml
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from _bootstrap import bootstrap

PROJECT_ROOT = bootstrap(load_env=False)

from flatten_common.flatten_config import FlattenConfigError, load_flatten_config  # noqa: E402
from flatten_common.merge import JOB_NAMES, run_flatten  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Flatten Solidity sources into flat/contracts.sol + flat/tests.sol")
    ap.add_argument("--config", help="flatten YAML (default: configs/flatten.yaml + .local overlay)")
    ap.add_argument("--root", help="project root holding contracts/ and test/ (default: repo root)")
    ap.add_argument("--only", action="append", choices=JOB_NAMES, help="run only this job (repeatable)")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(message)s")

    try:
        cfg = load_flatten_config(args.config)
    except FlattenConfigError as exc:
        print(f"[flatten_contracts] config error: {exc}", file=sys.stderr)
        return 2

    root = Path(args.root).expanduser().resolve() if args.root else PROJECT_ROOT
    try:
        report = run_flatten(cfg, root, only=args.only)
    except FileNotFoundError as exc:
        print(f"[flatten_contracts] source root missing: {exc}", file=sys.stderr)
        return 2

    for name, message in report.failures.items():
        print(f"[flatten_contracts] {name}: FAILED: {message}", file=sys.stderr)
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
