"""Internal constants shared across the library."""

from __future__ import annotations

PRODUCTION_VERIFY_URL = "https://buy.itunes.apple.com/verifyReceipt"
SANDBOX_VERIFY_URL = "https://sandbox.itunes.apple.com/verifyReceipt"
USER_AGENT = "pyiap/1"

#: Suffix appended to a product identifier to derive its entitlement cache key.
ENTITLEMENT_KEY_SUFFIX = "ExpirationDateKey"

#: ``itemType`` attached to every purchase analytics record.
ANALYTICS_ITEM_TYPE = "Public Library Subscription"

DEFAULT_REQUEST_TIMEOUT: float = 30.0

# ------------------------------------------------------------------
# verifyReceipt status codes
# ------------------------------------------------------------------

STATUS_OK = 0
STATUS_SUBSCRIPTION_EXPIRED = 21006
RECEIPT_STATUS_MESSAGES: dict[int, str] = {
    21000: "request to the App Store was not made using HTTP POST",
    21002: "receipt-data property was malformed or missing",
    21003: "receipt could not be authenticated",
    21004: "shared secret does not match the account's file",
    21005: "receipt server is temporarily unavailable",
    21006: "receipt is valid but the subscription has expired",
    21007: "receipt is from the test environment but was sent to production",
    21008: "receipt is from production but was sent to the test environment",
    21009: "internal data access error",
    21010: "user account cannot be found or has been deleted",
}


def describe_status(status: int) -> str:
    """Human readable description for a verifyReceipt ``status`` code."""
    message = RECEIPT_STATUS_MESSAGES.get(status)
    if message is None:
        return f"unknown receipt status {status}"
    return message
