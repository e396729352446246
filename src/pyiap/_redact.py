"""Log-safe views of receipt validation payloads.

Requests carry the app shared secret and a base64 receipt; responses echo
the receipt back as ``latest_receipt`` and can list hundreds of renewals.
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from typing import Any

_SECRET_KEYS: frozenset[str] = frozenset({"password"})
_RECEIPT_BLOB_KEYS: frozenset[str] = frozenset({"receipt-data", "latest_receipt"})
_TRANSACTION_LIST_KEYS: frozenset[str] = frozenset({"in_app", "latest_receipt_info", "pending_renewal_info"})


def fingerprint_receipt(blob: str) -> str:
    """Identify a receipt blob without exposing it: length and a short SHA-256 prefix."""
    digest = hashlib.sha256(blob.encode("utf-8")).hexdigest()[:12]
    return f"<receipt len={len(blob)} sha256={digest}>"


def redact_for_log(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of a request or response body suitable for DEBUG logs.

    The shared secret is replaced, receipt blobs are fingerprinted, and
    transaction lists are summarized by product.
    """
    redacted: dict[str, Any] = {}
    for key, value in payload.items():
        if key in _SECRET_KEYS:
            redacted[key] = "<redacted>"
        elif key in _RECEIPT_BLOB_KEYS and isinstance(value, str):
            redacted[key] = fingerprint_receipt(value)
        elif key in _TRANSACTION_LIST_KEYS and isinstance(value, list):
            products = sorted({str(item.get("product_id")) for item in value if isinstance(item, Mapping)})
            redacted[key] = f"<{len(value)} transactions: {', '.join(products)}>"
        elif isinstance(value, Mapping):
            redacted[key] = redact_for_log(value)
        else:
            redacted[key] = value
    return redacted
