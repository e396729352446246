"""Receipt validation payloads and per-tier subscription outcomes."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from pyiap.models._base import IapBaseModel, MsTimestamp, ensure_aware


class Purchased(BaseModel):
    """Subscription is active until ``expires_at``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["purchased"] = "purchased"
    expires_at: datetime


class Expired(BaseModel):
    """Subscription was bought but lapsed at ``expires_at``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["expired"] = "expired"
    expires_at: datetime


class NotPurchased(BaseModel):
    """Receipt holds no transaction for the product."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["not_purchased"] = "not_purchased"


ReceiptOutcome = Purchased | Expired | NotPurchased


class InAppReceipt(IapBaseModel):
    """One transaction line of a receipt (``in_app`` / ``latest_receipt_info`` item)."""

    product_id: str
    transaction_id: str | None = None
    original_transaction_id: str | None = None
    quantity: int = 1
    purchase_date: MsTimestamp = Field(default=None, alias="purchase_date_ms")
    expires_date: MsTimestamp = Field(default=None, alias="expires_date_ms")
    cancellation_date: MsTimestamp = Field(default=None, alias="cancellation_date_ms")
    is_trial_period: bool = False

    @property
    def is_cancelled(self) -> bool:
        return self.cancellation_date is not None


class ReceiptInfo(IapBaseModel):
    """The decoded ``receipt`` object."""

    bundle_id: str | None = None
    application_version: str | None = None
    request_date: MsTimestamp = Field(default=None, alias="request_date_ms")
    in_app: list[InAppReceipt] = Field(default_factory=list)


class ReceiptBundle(IapBaseModel):
    """Parsed response of the receipt validation endpoint."""

    status: int
    environment: str | None = None
    receipt: ReceiptInfo | None = None
    latest_receipt_info: list[InAppReceipt] | None = None
    latest_receipt: str | None = Field(default=None, repr=False)

    def transactions(self) -> list[InAppReceipt]:
        """Transactions to evaluate: the latest renewal info when present, else ``receipt.in_app``."""
        if self.latest_receipt_info is not None:
            return list(self.latest_receipt_info)
        if self.receipt is not None:
            return list(self.receipt.in_app)
        return []

    def verify_subscription(self, product_id: str, valid_until: datetime) -> ReceiptOutcome:
        """Classify an auto-renewable subscription against ``valid_until``.

        Cancelled (refunded) transactions do not extend the subscription. A
        product whose only transactions are cancelled is reported expired at
        the latest cancellation date. Transactions without an expiry date
        are not subscription evidence.
        """
        valid_until = ensure_aware(valid_until)
        items = [item for item in self.transactions() if item.product_id == product_id]
        if not items:
            return NotPurchased()

        expiries = sorted(
            (item.expires_date for item in items if not item.is_cancelled and item.expires_date is not None),
            reverse=True,
        )
        if expiries:
            latest = expiries[0]
            if latest > valid_until:
                return Purchased(expires_at=latest)
            return Expired(expires_at=latest)

        cancellations = [item.cancellation_date for item in items if item.cancellation_date is not None]
        if cancellations:
            return Expired(expires_at=max(cancellations))
        return NotPurchased()
