from __future__ import annotations

import hashlib

from pyiap._api.verify_receipt import build_verify_request
from pyiap._redact import fingerprint_receipt, redact_for_log


def test_request_body_hides_secret_and_fingerprints_receipt() -> None:
    body = build_verify_request(b"receipt-bytes", "shared-secret")

    redacted = redact_for_log(body)

    assert redacted["password"] == "<redacted>"
    blob = body["receipt-data"]
    digest = hashlib.sha256(blob.encode("utf-8")).hexdigest()[:12]
    assert redacted["receipt-data"] == f"<receipt len={len(blob)} sha256={digest}>"
    assert redacted["exclude-old-transactions"] is False
    assert "shared-secret" not in repr(redacted)


def test_same_receipt_yields_same_fingerprint() -> None:
    assert fingerprint_receipt("TUlJVE") == fingerprint_receipt("TUlJVE")
    assert fingerprint_receipt("TUlJVE") != fingerprint_receipt("TUlJVF")


def test_response_transactions_are_summarized() -> None:
    response = {
        "status": 0,
        "latest_receipt": "TUlJVE...",
        "receipt": {
            "bundle_id": "com.example.flashcards",
            "in_app": [{"product_id": "PublicLibraryOneYear", "transaction_id": "1"}],
        },
        "latest_receipt_info": [
            {"product_id": "PublicLibrarySixMonths"},
            {"product_id": "PublicLibraryOneYear"},
            {"product_id": "PublicLibraryOneYear"},
        ],
    }

    redacted = redact_for_log(response)

    assert redacted["status"] == 0
    assert redacted["latest_receipt"].startswith("<receipt len=9 ")
    assert redacted["receipt"]["bundle_id"] == "com.example.flashcards"
    assert redacted["receipt"]["in_app"] == "<1 transactions: PublicLibraryOneYear>"
    assert redacted["latest_receipt_info"] == "<3 transactions: PublicLibraryOneYear, PublicLibrarySixMonths>"
    assert response["latest_receipt"] == "TUlJVE..."
