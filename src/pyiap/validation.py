"""Receipt validation and entitlement reconciliation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime

from pyiap._api.verify_receipt import verify_receipt
from pyiap._transport import Transport
from pyiap.catalog import SubscriptionTier, all_tiers, product_identifier
from pyiap.config import ReceiptEnvironment
from pyiap.exceptions import NoReceiptDataError, ReceiptValidationError
from pyiap.models._base import ensure_aware
from pyiap.models.receipt import Expired, Purchased, ReceiptBundle, ReceiptOutcome
from pyiap.receipt_source import ReceiptSource
from pyiap.state.store import EntitlementStore

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ReceiptValidationService:
    """Fetches a validated receipt and writes per-tier expirations to the store.

    Parameters
    ----------
    transport : Transport
        Carries the validation request.
    receipt_source : ReceiptSource
        Supplies the local receipt bytes.
    store : EntitlementStore
        Receives the expiration of every tier the receipt has evidence for.
    environment : ReceiptEnvironment
        Endpoint used by :meth:`check_active_entitlement`.
    shared_secret : str
        App shared secret used by :meth:`check_active_entitlement`.
    exclude_old_transactions : bool
        Forwarded to the endpoint.
    clock : callable
        Source of "now"; injectable for tests.
    """

    def __init__(
        self,
        *,
        transport: Transport,
        receipt_source: ReceiptSource,
        store: EntitlementStore,
        environment: ReceiptEnvironment,
        shared_secret: str,
        exclude_old_transactions: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._transport = transport
        self._receipt_source = receipt_source
        self._store = store
        self._environment = environment
        self._shared_secret = shared_secret
        self._exclude_old_transactions = exclude_old_transactions
        self._clock = clock

    @property
    def store(self) -> EntitlementStore:
        return self._store

    async def fetch_receipt(self, environment: ReceiptEnvironment, shared_secret: str) -> ReceiptBundle:
        """Validate the local receipt against the endpoint for *environment*.

        Raises
        ------
        NoReceiptDataError
            This install has no receipt; the endpoint is not contacted.
        ReceiptValidationError
            Any other failure (network, decode, rejected receipt).
        """
        receipt = self._receipt_source.load_receipt()
        if not receipt:
            raise NoReceiptDataError()
        return await verify_receipt(
            self._transport,
            environment,
            receipt,
            shared_secret,
            exclude_old_transactions=self._exclude_old_transactions,
        )

    def evaluate(
        self,
        tier: SubscriptionTier,
        bundle: ReceiptBundle,
        now: datetime | None = None,
    ) -> ReceiptOutcome:
        """Classify *tier* against *bundle* and record the resulting expiration.

        ``Purchased`` and ``Expired`` overwrite the tier's cached expiration.
        ``NotPurchased`` leaves the store untouched.
        """
        valid_until = now if now is not None else self._clock()
        outcome = bundle.verify_subscription(product_identifier(tier), valid_until)

        if isinstance(outcome, Purchased):
            _logger.info("%s is valid until %s", tier.value, outcome.expires_at)
            self._store.set(tier, outcome.expires_at)
        elif isinstance(outcome, Expired):
            _logger.info("%s is expired since %s", tier.value, outcome.expires_at)
            self._store.set(tier, outcome.expires_at)
        else:
            _logger.info("%s has never been purchased", tier.value)
        return outcome

    async def check_active_entitlement(self) -> bool:
        """Return whether any tier is currently purchased.

        A missing receipt resolves to ``False``. Every other validation
        failure propagates.
        """
        now = ensure_aware(self._clock())
        try:
            bundle = await self.fetch_receipt(self._environment, self._shared_secret)
        except NoReceiptDataError:
            _logger.info("Receipt verification found no receipt on this install")
            return False
        except ReceiptValidationError as exc:
            _logger.warning("Receipt verification failed: %s", exc)
            raise

        outcomes = await asyncio.to_thread(self._evaluate_all, bundle, now)
        return any(isinstance(outcome, Purchased) and outcome.expires_at > now for outcome in outcomes)

    def _evaluate_all(self, bundle: ReceiptBundle, now: datetime) -> list[ReceiptOutcome]:
        # Store writes may hit disk; runs in a worker thread.
        return [self.evaluate(tier, bundle, now) for tier in all_tiers()]
