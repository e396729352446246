"""Storefront catalog and purchase result models."""

from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ProductInfo(BaseModel):
    """Vendor metadata for one purchasable product. Never cached."""

    model_config = ConfigDict(frozen=True)

    product_identifier: str
    localized_title: str = ""
    price: Decimal
    currency_code: str | None = None
    localized_price: str | None = None


class ProductsQueryResult(BaseModel):
    """Outcome of a storefront catalog query.

    ``error`` is set when the query as a whole failed; unknown identifiers
    only show up in ``invalid_product_ids``.
    """

    model_config = ConfigDict(frozen=True)

    retrieved: list[ProductInfo] = Field(default_factory=list)
    invalid_product_ids: frozenset[str] = frozenset()
    error: str | None = None


class PurchaseSuccess(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    product_identifier: str


class PurchaseFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["failure"] = "failure"
    reason: str = ""


PurchaseOutcome = PurchaseSuccess | PurchaseFailure
