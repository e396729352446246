"""Purchase analytics sinks.

Emission is fire-and-forget: a sink may raise, and callers are expected to
log and drop the failure.
"""

from __future__ import annotations

import logging
from typing import Protocol

from pyiap.models.analytics import PurchaseAnalyticsEvent

_logger = logging.getLogger(__name__)


class AnalyticsSink(Protocol):
    def log_purchase(self, event: PurchaseAnalyticsEvent) -> None:
        ...


class LoggingAnalyticsSink:
    """Writes purchase events to the ``pyiap.analytics`` logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _logger

    def log_purchase(self, event: PurchaseAnalyticsEvent) -> None:
        self._logger.info("purchase %s", event.model_dump(mode="json", exclude_none=True))
