"""High-level async client for subscription entitlement and purchases."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import aiohttp

from pyiap._transport import HttpTransport, Transport
from pyiap.analytics import AnalyticsSink, LoggingAnalyticsSink
from pyiap.catalog import SubscriptionTier
from pyiap.config import IapConfig
from pyiap.exceptions import IapError
from pyiap.models.products import ProductInfo
from pyiap.purchases import PurchaseOrchestrator
from pyiap.receipt_source import FileReceiptSource, ReceiptSource
from pyiap.state.store import EntitlementStore, JsonFileEntitlementStore
from pyiap.storefront import Storefront
from pyiap.validation import ReceiptValidationService

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class IapClient:
    """Async client wiring receipt validation, the entitlement store and the storefront.

    Usage::

        async with IapClient(config, storefront=storefront) as client:
            if not await client.check_active_entitlement():
                await client.purchase(SubscriptionTier.ONE_YEAR)
    """

    def __init__(
        self,
        config: IapConfig,
        *,
        storefront: Storefront,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        store: EntitlementStore | None = None,
        receipt_source: ReceiptSource | None = None,
        analytics: AnalyticsSink | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config
        self._storefront = storefront
        self._external_session = session is not None
        self._http_session = session
        self._external_transport = transport
        self._store: EntitlementStore = store or JsonFileEntitlementStore(config.resolved_store_path, clock=clock)
        self._receipt_source: ReceiptSource = receipt_source or FileReceiptSource(config.receipt_path)
        self._analytics: AnalyticsSink = analytics or LoggingAnalyticsSink()
        self._clock = clock
        self._orchestrator: PurchaseOrchestrator | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> IapClient:
        transport = self._external_transport
        if transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            transport = HttpTransport(self._http_session, timeout=self._config.request_timeout)

        validation = ReceiptValidationService(
            transport=transport,
            receipt_source=self._receipt_source,
            store=self._store,
            environment=self._config.environment,
            shared_secret=self._config.shared_secret,
            exclude_old_transactions=self._config.exclude_old_transactions,
            clock=self._clock,
        )
        self._orchestrator = PurchaseOrchestrator(
            storefront=self._storefront,
            validation=validation,
            analytics=self._analytics,
            item_type=self._config.analytics_item_type,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        orchestrator = self._orchestrator
        self._orchestrator = None
        if orchestrator is not None:
            await orchestrator.drain()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    def _require_orchestrator(self) -> PurchaseOrchestrator:
        if self._orchestrator is None:
            raise IapError("Client not initialized. Use 'async with IapClient(...) as client:'")
        return self._orchestrator

    # ------------------------------------------------------------------
    # Entitlement
    # ------------------------------------------------------------------

    @property
    def store(self) -> EntitlementStore:
        return self._store

    async def check_active_entitlement(self) -> bool:
        """Re-validate the receipt and refresh the cached expirations."""
        return await self._require_orchestrator().check_active_entitlement()

    def has_valid_subscription(self, tier: SubscriptionTier) -> bool:
        """Answer from the cache only; no network."""
        return self._store.is_valid(tier, self._clock())

    def expiration(self, tier: SubscriptionTier) -> datetime | None:
        return self._store.get(tier)

    # ------------------------------------------------------------------
    # Storefront
    # ------------------------------------------------------------------

    async def list_products(self) -> list[ProductInfo]:
        return await self._require_orchestrator().list_products()

    async def purchase(self, tier: SubscriptionTier) -> bool:
        return await self._require_orchestrator().purchase(tier)
