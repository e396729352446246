"""Purchase orchestration: catalog lookups, buying, and purchase analytics."""

from __future__ import annotations

import asyncio
import logging

from pyiap._constants import ANALYTICS_ITEM_TYPE
from pyiap.analytics import AnalyticsSink
from pyiap.catalog import PRODUCT_IDENTIFIERS, SubscriptionTier, product_identifier
from pyiap.deferred import AsyncResult
from pyiap.exceptions import CatalogError, PurchaseFailedError
from pyiap.models.analytics import PurchaseAnalyticsEvent
from pyiap.models.products import ProductInfo, ProductsQueryResult, PurchaseFailure, PurchaseOutcome
from pyiap.storefront import Storefront
from pyiap.validation import ReceiptValidationService

_logger = logging.getLogger(__name__)


class PurchaseOrchestrator:
    """Coordinates the storefront, receipt validation and analytics.

    A successful purchase does not touch the entitlement store; the new
    entitlement becomes visible after the next
    :meth:`check_active_entitlement`.
    """

    def __init__(
        self,
        *,
        storefront: Storefront,
        validation: ReceiptValidationService,
        analytics: AnalyticsSink,
        item_type: str = ANALYTICS_ITEM_TYPE,
    ) -> None:
        self._storefront = storefront
        self._validation = validation
        self._analytics = analytics
        self._item_type = item_type
        self._background: set[asyncio.Task[None]] = set()

    async def check_active_entitlement(self) -> bool:
        return await self._validation.check_active_entitlement()

    async def list_products(self) -> list[ProductInfo]:
        """Fetch storefront metadata for every known product.

        Identifiers the storefront does not recognize are logged and left
        out of the result.

        Raises
        ------
        CatalogError
            The storefront query itself failed.
        """
        result: AsyncResult[ProductsQueryResult] = AsyncResult()
        try:
            self._storefront.retrieve_products_info(sorted(PRODUCT_IDENTIFIERS), result.completion())
        except Exception as exc:
            raise CatalogError(f"Error retrieving products: {exc}") from exc
        query = await result

        if query.error is not None:
            _logger.warning("Error retrieving products: %s", query.error)
            raise CatalogError(f"Error retrieving products: {query.error}")

        products: list[ProductInfo] = []
        for product in query.retrieved:
            _logger.debug("Retrieved product: %s for %s", product.localized_title, product.localized_price)
            products.append(product)
        for product_id in sorted(query.invalid_product_ids):
            _logger.warning("Invalid product: %s", product_id)
        return products

    async def purchase(self, tier: SubscriptionTier) -> bool:
        """Buy *tier* atomically.

        Returns ``True`` on success and schedules the purchase analytics
        record in the background.

        Raises
        ------
        PurchaseFailedError
            The purchase did not complete, for any vendor reason.
        """
        product_id = product_identifier(tier)
        result: AsyncResult[PurchaseOutcome] = AsyncResult()
        try:
            self._storefront.purchase_product(product_id, True, result.completion())
            outcome = await result
        except Exception:
            _logger.warning("Purchase failed: %s", product_id, exc_info=True)
            raise PurchaseFailedError() from None

        if isinstance(outcome, PurchaseFailure):
            _logger.warning("Purchase failed: %s (%s)", product_id, outcome.reason)
            raise PurchaseFailedError()

        _logger.info("Purchase success: %s", outcome.product_identifier)
        self._schedule_purchase_log(tier)
        return True

    # ------------------------------------------------------------------
    # Background analytics
    # ------------------------------------------------------------------

    def _schedule_purchase_log(self, tier: SubscriptionTier) -> None:
        task = asyncio.get_running_loop().create_task(self._log_purchase(tier))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _log_purchase(self, tier: SubscriptionTier) -> None:
        """Best-effort analytics; every failure is logged and dropped."""
        product_id = product_identifier(tier)
        try:
            products = await self.list_products()
            product = next((p for p in products if p.product_identifier == product_id), None)
            if product is None:
                _logger.debug("Purchased product %s missing from catalog; no analytics", product_id)
                return
            self._analytics.log_purchase(
                PurchaseAnalyticsEvent(
                    price=product.price,
                    currency=product.currency_code,
                    success=True,
                    item_name=product.localized_title,
                    item_type=self._item_type,
                    item_id=product.product_identifier,
                )
            )
        except Exception:
            _logger.debug("Purchase analytics failed for %s", product_id, exc_info=True)

    @property
    def pending_background_jobs(self) -> int:
        return len(self._background)

    async def drain(self) -> None:
        """Wait for outstanding analytics jobs."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
