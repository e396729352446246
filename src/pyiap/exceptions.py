"""Custom exception hierarchy for pyiap."""

from __future__ import annotations


class IapError(Exception):
    """Base exception for all pyiap errors."""


class IapConfigError(IapError):
    """Invalid or missing configuration."""


class ReceiptValidationError(IapError):
    """Receipt could not be fetched or validated.

    Every failure of the validation step other than :class:`NoReceiptDataError`
    is surfaced to callers unchanged, so they can tell "unknown" apart from
    "not entitled".
    """

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NoReceiptDataError(ReceiptValidationError):
    """No receipt is present on this install.

    Entitlement checks recover this into a definitive negative result.
    """

    def __init__(self, detail: str = "no receipt data") -> None:
        super().__init__(detail)


class ReceiptNetworkError(ReceiptValidationError):
    """HTTP-level failure talking to the validation endpoint (network, non-200)."""

    def __init__(self, detail: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(detail)


class ReceiptDecodeError(ReceiptValidationError):
    """Validation endpoint replied with a body that could not be parsed."""


class ReceiptInvalidError(ReceiptValidationError):
    """Validation endpoint rejected the receipt (non-zero ``status``)."""

    def __init__(self, detail: str, *, status: int) -> None:
        self.status = status
        super().__init__(detail)


class CatalogError(IapError):
    """Vendor product catalog query failed."""


class PurchaseError(IapError):
    """Base for purchase failures."""


class PurchaseFailedError(PurchaseError):
    """Purchase did not complete.

    Vendor-specific detail is intentionally not carried.
    """

    def __init__(self) -> None:
        super().__init__("purchase failed")


class ResultAlreadyResolvedError(IapError, RuntimeError):
    """An :class:`~pyiap.deferred.AsyncResult` was resolved more than once."""
