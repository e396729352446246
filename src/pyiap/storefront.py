"""Boundary to the vendor storefront (catalog queries and payments).

Storefront SDKs report results through completion callbacks, possibly from
their own threads. Every completion must be invoked exactly once.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Protocol

from pyiap.models.products import ProductsQueryResult, PurchaseOutcome

ProductsCompletion = Callable[[ProductsQueryResult], None]
PurchaseCompletion = Callable[[PurchaseOutcome], None]


class Storefront(Protocol):
    def retrieve_products_info(self, product_ids: Iterable[str], completion: ProductsCompletion) -> None:
        """Look up *product_ids*; unknown ids land in ``invalid_product_ids``."""
        ...

    def purchase_product(self, product_id: str, atomically: bool, completion: PurchaseCompletion) -> None:
        """Buy *product_id*. With ``atomically=True`` the charge and grant happen together or not at all."""
        ...
