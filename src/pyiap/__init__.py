"""pyiap - Async subscription entitlement and purchase toolkit."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyiap")
except PackageNotFoundError:
    __version__ = "0+local"
from pyiap.analytics import AnalyticsSink, LoggingAnalyticsSink
from pyiap.catalog import SubscriptionTier, all_tiers, entitlement_key, product_identifier
from pyiap.client import IapClient
from pyiap.config import IapConfig, ReceiptEnvironment
from pyiap.deferred import AsyncResult, ResultState
from pyiap.exceptions import (
    CatalogError,
    IapConfigError,
    IapError,
    NoReceiptDataError,
    PurchaseError,
    PurchaseFailedError,
    ReceiptDecodeError,
    ReceiptInvalidError,
    ReceiptNetworkError,
    ReceiptValidationError,
    ResultAlreadyResolvedError,
)
from pyiap.models import (
    Expired,
    NotPurchased,
    ProductInfo,
    ProductsQueryResult,
    PurchaseAnalyticsEvent,
    Purchased,
    PurchaseFailure,
    PurchaseSuccess,
    ReceiptBundle,
)
from pyiap.purchases import PurchaseOrchestrator
from pyiap.receipt_source import FileReceiptSource, ReceiptSource, StaticReceiptSource
from pyiap.state.store import EntitlementStore, InMemoryEntitlementStore, JsonFileEntitlementStore
from pyiap.storefront import Storefront
from pyiap.validation import ReceiptValidationService

__all__ = [
    "__version__",
    "AnalyticsSink",
    "AsyncResult",
    "CatalogError",
    "EntitlementStore",
    "Expired",
    "FileReceiptSource",
    "IapClient",
    "IapConfig",
    "IapConfigError",
    "IapError",
    "InMemoryEntitlementStore",
    "JsonFileEntitlementStore",
    "LoggingAnalyticsSink",
    "NoReceiptDataError",
    "NotPurchased",
    "ProductInfo",
    "ProductsQueryResult",
    "PurchaseAnalyticsEvent",
    "PurchaseError",
    "PurchaseFailedError",
    "PurchaseFailure",
    "PurchaseOrchestrator",
    "PurchaseSuccess",
    "Purchased",
    "ReceiptBundle",
    "ReceiptDecodeError",
    "ReceiptEnvironment",
    "ReceiptInvalidError",
    "ReceiptNetworkError",
    "ReceiptSource",
    "ReceiptValidationError",
    "ReceiptValidationService",
    "ResultAlreadyResolvedError",
    "ResultState",
    "StaticReceiptSource",
    "Storefront",
    "SubscriptionTier",
    "all_tiers",
    "entitlement_key",
    "product_identifier",
]
