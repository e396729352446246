"""Static registry of purchasable subscription tiers.

Tiers are plain identity: the enum value is the vendor product identifier.
Everything that touches the entitlement store lives in
:mod:`pyiap.validation`.
"""

from __future__ import annotations

import enum

from pyiap._constants import ENTITLEMENT_KEY_SUFFIX


class SubscriptionTier(enum.StrEnum):
    """Known subscription offerings, valued by vendor product identifier."""

    SIX_MONTHS = "PublicLibrarySixMonths"
    ONE_YEAR = "PublicLibraryOneYear"


_ALL_TIERS: tuple[SubscriptionTier, ...] = tuple(SubscriptionTier)

PRODUCT_IDENTIFIERS: frozenset[str] = frozenset(tier.value for tier in _ALL_TIERS)


def product_identifier(tier: SubscriptionTier) -> str:
    return tier.value


def entitlement_key(tier: SubscriptionTier) -> str:
    """Cache key under which the tier's expiration date is stored."""
    return f"{tier.value}{ENTITLEMENT_KEY_SUFFIX}"


def all_tiers() -> tuple[SubscriptionTier, ...]:
    return _ALL_TIERS


def tier_for_product(identifier: str) -> SubscriptionTier | None:
    """Reverse lookup; ``None`` for identifiers outside the catalog."""
    try:
        return SubscriptionTier(identifier)
    except ValueError:
        return None
