#!/usr/bin/env python3
"""
backfill_broadcast_receipts — fetch receipts missing from a forge broadcast record.

Env (CLI flags win):
  - RPC:        node URL (`host/path` or full https URL)
  - NETWORK_ID: chain id used in broadcast/<script>/<id>/run-latest.json
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from _bootstrap import bootstrap

bootstrap(load_env=True)

from flatten_common.broadcast_receipts import RpcClient, backfill_broadcast_file, broadcast_path  # noqa: E402
from flatten_common.flatten_config import FlattenConfigError, load_flatten_config  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Backfill missing receipts in a forge broadcast run-latest.json")
    ap.add_argument("--rpc", default=os.getenv("RPC"), help="RPC url (default: $RPC)")
    ap.add_argument("--network-id", default=os.getenv("NETWORK_ID"), help="chain id (default: $NETWORK_ID)")
    ap.add_argument("--script", help="broadcast script name (default: broadcast.script in config)")
    ap.add_argument("--path", help="explicit run-latest.json path (skips script/network lookup)")
    ap.add_argument("--timeout", type=float, default=30.0, help="per-request timeout seconds")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    if not args.rpc:
        print("[backfill_broadcast_receipts] RPC is not set (--rpc or $RPC)", file=sys.stderr)
        return 2

    if args.path:
        target = Path(args.path).expanduser().resolve()
    else:
        if not args.network_id:
            print("[backfill_broadcast_receipts] NETWORK_ID is not set (--network-id or $NETWORK_ID)", file=sys.stderr)
            return 2
        script = args.script
        if not script:
            try:
                script = load_flatten_config().broadcast_script
            except FlattenConfigError as exc:
                print(f"[backfill_broadcast_receipts] config error: {exc}", file=sys.stderr)
                return 2
        target = broadcast_path(script, args.network_id)

    if not target.exists():
        print(f"[backfill_broadcast_receipts] broadcast record not found: {target}", file=sys.stderr)
        return 2

    try:
        client = RpcClient(args.rpc, timeout_s=args.timeout)
    except ValueError as exc:
        print(f"[backfill_broadcast_receipts] {exc}", file=sys.stderr)
        return 2

    report = backfill_broadcast_file(target, client)
    for index, message in sorted(report.failures.items()):
        print(f"tx[{index}]: {message}", file=sys.stderr)
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
