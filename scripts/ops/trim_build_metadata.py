#!/usr/bin/env python3
"""
trim_build_metadata — shrink out/<Name>.sol/<Name>.json to verification-ready metadata.

Targets come from `metadata_targets` in configs/flatten.yaml unless
`--contract` is given. Missing artifacts are skipped (not an error).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from _bootstrap import bootstrap

bootstrap(load_env=False)

from flatten_common.build_metadata import trim_build_metadata  # noqa: E402
from flatten_common.flatten_config import FlattenConfigError, load_flatten_config  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Trim compiler metadata in forge build artifacts")
    ap.add_argument("--config", help="flatten YAML (default: configs/flatten.yaml + .local overlay)")
    ap.add_argument("--out", help="forge out/ dir (default: <repo>/out or FLAT_FORGE_OUT)")
    ap.add_argument("--contract", action="append", help="contract name (repeatable; overrides config)")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    names = args.contract
    if not names:
        try:
            names = list(load_flatten_config(args.config).metadata_targets)
        except FlattenConfigError as exc:
            print(f"[trim_build_metadata] config error: {exc}", file=sys.stderr)
            return 2
    if not names:
        print("[trim_build_metadata] no targets (metadata_targets is empty)", file=sys.stderr)
        return 0

    out_root = Path(args.out).expanduser().resolve() if args.out else None
    for res in trim_build_metadata(names, out_root):
        if res.skipped:
            print(f"{res.path} {res.status}")
        else:
            print(f"{res.path} size: {res.size}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
