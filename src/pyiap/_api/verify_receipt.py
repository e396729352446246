"""Receipt validation endpoint (``verifyReceipt``)."""

from __future__ import annotations

import base64
import logging
from typing import Any

from pydantic import ValidationError

from pyiap._constants import STATUS_OK, STATUS_SUBSCRIPTION_EXPIRED, describe_status
from pyiap._transport import Transport
from pyiap.config import ReceiptEnvironment
from pyiap.exceptions import ReceiptDecodeError, ReceiptInvalidError
from pyiap.models.receipt import ReceiptBundle

_logger = logging.getLogger(__name__)

# Status codes for which the endpoint still returns a decodable receipt.
_USABLE_STATUSES: frozenset[int] = frozenset({STATUS_OK, STATUS_SUBSCRIPTION_EXPIRED})


def build_verify_request(
    receipt: bytes,
    shared_secret: str,
    *,
    exclude_old_transactions: bool = False,
) -> dict[str, Any]:
    """Build the JSON body for a validation request."""
    return {
        "receipt-data": base64.b64encode(receipt).decode("ascii"),
        "password": shared_secret,
        "exclude-old-transactions": exclude_old_transactions,
    }


def parse_verify_response(response: dict[str, Any]) -> ReceiptBundle:
    """Parse a validation response.

    Raises
    ------
    ReceiptDecodeError
        The response does not have the expected shape.
    ReceiptInvalidError
        The endpoint reported a status other than success.
    """
    status_raw = response.get("status")
    try:
        status = int(status_raw)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ReceiptDecodeError(f"Receipt response has no usable status: {status_raw!r}") from exc

    if status not in _USABLE_STATUSES:
        raise ReceiptInvalidError(f"Receipt rejected: status={status} ({describe_status(status)})", status=status)

    try:
        return ReceiptBundle.model_validate(response)
    except ValidationError as exc:
        raise ReceiptDecodeError(f"Receipt response failed validation: {exc.error_count()} error(s)") from exc


async def verify_receipt(
    transport: Transport,
    environment: ReceiptEnvironment,
    receipt: bytes,
    shared_secret: str,
    *,
    exclude_old_transactions: bool = False,
) -> ReceiptBundle:
    """Submit *receipt* to the validation endpoint for *environment*. One request, no retry."""
    url = environment.verify_url
    payload = build_verify_request(receipt, shared_secret, exclude_old_transactions=exclude_old_transactions)
    response = await transport.post_json(url, payload)
    bundle = parse_verify_response(response)
    _logger.debug(
        "Receipt validated env=%s status=%s transactions=%d",
        bundle.environment,
        bundle.status,
        len(bundle.transactions()),
    )
    return bundle
