"""
Backfill missing transaction receipts in a forge broadcast record.

`broadcast/<script>/<network_id>/run-latest.json` sometimes ends up with
transactions whose receipts were never recorded (RPC hiccups during
`forge script --broadcast`). For each such transaction we ask the node via
`eth_getTransactionReceipt` and store the answer at the transaction's index.

A `null` result means the transaction is still pending: that is stored as-is
and is not a failure. An RPC error only fails its own transaction.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

import requests

from flatten_common import paths

logger = logging.getLogger(__name__)

RECEIPT_METHOD = "eth_getTransactionReceipt"


class RpcError(RuntimeError):
    def __init__(self, message: str, *, code: Any = None) -> None:
        super().__init__(message)
        self.code = code


@dataclass
class BackfillReport:
    fetched: Dict[int, Optional[Dict[str, Any]]] = field(default_factory=dict)
    failures: Dict[int, str] = field(default_factory=dict)

    @property
    def pending(self) -> list[int]:
        return sorted(i for i, receipt in self.fetched.items() if receipt is None)

    @property
    def ok(self) -> bool:
        return not self.failures


def broadcast_path(script_name: str, network_id: str | int, root: Optional[Path] = None) -> Path:
    base = root if root is not None else paths.broadcast_root()
    return base / str(script_name) / str(network_id) / "run-latest.json"


def normalize_rpc_url(rpc: str) -> str:
    """
    Accept `host/path` (scheme-less, the usual RPC env value) or a full URL.
    Scheme defaults to https and the path always ends with `/`.
    """
    raw = (rpc or "").strip()
    if not raw:
        raise ValueError("RPC url is empty")
    if "://" not in raw:
        raw = "https://" + raw
    parts = urlsplit(raw)
    if not parts.netloc:
        raise ValueError(f"invalid RPC url: {rpc!r}")
    path = parts.path if parts.path.endswith("/") else parts.path + "/"
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, ""))


class RpcClient:
    def __init__(self, url: str, *, session: Optional[requests.Session] = None, timeout_s: float = 30) -> None:
        self.url = normalize_rpc_url(url)
        self.session = session or requests.Session()
        self.timeout_s = timeout_s

    def call(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "method": method, "params": params, "id": 1}
        try:
            resp = self.session.post(self.url, json=payload, timeout=self.timeout_s)
        except requests.RequestException as exc:
            raise RpcError(f"{method} request failed: {exc}") from exc
        try:
            body = resp.json()
        except ValueError as exc:
            snippet = (resp.text or "")[:200]
            raise RpcError(f"{method}: malformed response (status={resp.status_code}): {snippet}") from exc
        if not isinstance(body, dict):
            raise RpcError(f"{method}: malformed response: expected an object")
        error = body.get("error")
        if error:
            if isinstance(error, dict):
                raise RpcError(str(error.get("message") or error), code=error.get("code"))
            raise RpcError(str(error))
        # may be None while the transaction is pending
        return body.get("result")

    def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        return self.call(RECEIPT_METHOD, [tx_hash])


def _has_receipt(receipts: list[Any], tx_hash: str) -> bool:
    return any(isinstance(r, dict) and r.get("transactionHash") == tx_hash for r in receipts)


def backfill_receipts(
    broadcast: Dict[str, Any],
    fetch: Callable[[str], Optional[Dict[str, Any]]],
) -> BackfillReport:
    """
    Mutates `broadcast["receipts"]` in place; receipts are stored at the transaction index.
    """
    report = BackfillReport()
    transactions = broadcast.get("transactions") or []
    receipts = broadcast.get("receipts")
    if not isinstance(receipts, list):
        receipts = []
        broadcast["receipts"] = receipts

    for i, tx in enumerate(transactions):
        tx_hash = tx.get("hash") if isinstance(tx, dict) else None
        if not tx_hash or _has_receipt(receipts, tx_hash):
            continue
        try:
            receipt = fetch(tx_hash)
        except RpcError as exc:
            logger.warning("tx[%d] %s: receipt fetch failed: %s", i, tx_hash, exc)
            report.failures[i] = str(exc)
            continue
        if len(receipts) <= i:
            receipts.extend([None] * (i + 1 - len(receipts)))
        receipts[i] = receipt
        report.fetched[i] = receipt
        if receipt is None:
            logger.info("tx[%d] %s: still pending", i, tx_hash)
    return report


def backfill_broadcast_file(path: Path, client: RpcClient) -> BackfillReport:
    broadcast = json.loads(path.read_text(encoding="utf-8"))
    report = backfill_receipts(broadcast, client.get_transaction_receipt)
    path.write_text(json.dumps(broadcast, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info(
        "%s: fetched %d receipt(s), %d pending, %d failed",
        path,
        len(report.fetched),
        len(report.pending),
        len(report.failures),
    )
    return report
