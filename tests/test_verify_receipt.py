from __future__ import annotations

import base64
from collections.abc import Mapping
from typing import Any

import pytest

from pyiap._api.verify_receipt import build_verify_request, parse_verify_response, verify_receipt
from pyiap._constants import PRODUCTION_VERIFY_URL, SANDBOX_VERIFY_URL
from pyiap.config import ReceiptEnvironment
from pyiap.exceptions import ReceiptDecodeError, ReceiptInvalidError, ReceiptValidationError


class _RecordingTransport:
    def __init__(self, response: dict[str, Any]) -> None:
        self._response = response
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append((url, dict(payload)))
        return self._response


def test_build_verify_request_encodes_receipt() -> None:
    body = build_verify_request(b"\x01\x02receipt", "s3cret", exclude_old_transactions=True)

    assert base64.b64decode(body["receipt-data"]) == b"\x01\x02receipt"
    assert body["password"] == "s3cret"
    assert body["exclude-old-transactions"] is True


@pytest.mark.parametrize(
    ("environment", "url"),
    [
        (ReceiptEnvironment.SANDBOX, SANDBOX_VERIFY_URL),
        (ReceiptEnvironment.PRODUCTION, PRODUCTION_VERIFY_URL),
    ],
)
@pytest.mark.asyncio
async def test_verify_receipt_posts_once_to_environment_url(environment: ReceiptEnvironment, url: str) -> None:
    transport = _RecordingTransport({"status": 0, "environment": "Production"})

    bundle = await verify_receipt(transport, environment, b"receipt", "secret")

    assert bundle.status == 0
    assert [call[0] for call in transport.calls] == [url]


@pytest.mark.asyncio
async def test_sandbox_receipt_sent_to_production_is_not_retried() -> None:
    transport = _RecordingTransport({"status": 21007})

    with pytest.raises(ReceiptInvalidError) as exc_info:
        await verify_receipt(transport, ReceiptEnvironment.PRODUCTION, b"receipt", "secret")

    assert exc_info.value.status == 21007
    assert len(transport.calls) == 1


def test_expired_subscription_status_still_yields_bundle() -> None:
    bundle = parse_verify_response({"status": 21006, "latest_receipt_info": []})
    assert bundle.status == 21006


@pytest.mark.parametrize("status", [21002, 21003, 21004, 21010, 99999])
def test_rejected_statuses_raise_invalid(status: int) -> None:
    with pytest.raises(ReceiptInvalidError) as exc_info:
        parse_verify_response({"status": status})
    assert exc_info.value.status == status
    assert isinstance(exc_info.value, ReceiptValidationError)


def test_missing_status_is_decode_error() -> None:
    with pytest.raises(ReceiptDecodeError):
        parse_verify_response({"environment": "Sandbox"})


def test_schema_mismatch_is_decode_error() -> None:
    with pytest.raises(ReceiptDecodeError):
        parse_verify_response({"status": 0, "latest_receipt_info": [{"expires_date_ms": "1"}]})
