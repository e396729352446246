"""Data models for receipts, products and analytics."""

from pyiap.models._base import IapBaseModel, MsTimestamp, parse_ms_timestamp
from pyiap.models.analytics import PurchaseAnalyticsEvent
from pyiap.models.products import (
    ProductInfo,
    ProductsQueryResult,
    PurchaseFailure,
    PurchaseOutcome,
    PurchaseSuccess,
)
from pyiap.models.receipt import (
    Expired,
    InAppReceipt,
    NotPurchased,
    Purchased,
    ReceiptBundle,
    ReceiptInfo,
    ReceiptOutcome,
)

__all__ = [
    "Expired",
    "IapBaseModel",
    "InAppReceipt",
    "MsTimestamp",
    "NotPurchased",
    "ProductInfo",
    "ProductsQueryResult",
    "PurchaseAnalyticsEvent",
    "PurchaseFailure",
    "PurchaseOutcome",
    "PurchaseSuccess",
    "Purchased",
    "ReceiptBundle",
    "ReceiptInfo",
    "ReceiptOutcome",
    "parse_ms_timestamp",
]
