"""Analytics record emitted after a successful purchase."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PurchaseAnalyticsEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    price: Decimal
    currency: str | None = None
    success: bool = True
    item_name: str
    item_type: str
    item_id: str
    custom_attributes: dict[str, Any] | None = Field(default=None)
