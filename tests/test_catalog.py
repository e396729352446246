from __future__ import annotations

from pyiap.catalog import (
    PRODUCT_IDENTIFIERS,
    SubscriptionTier,
    all_tiers,
    entitlement_key,
    product_identifier,
    tier_for_product,
)


def test_product_identifiers_match_storefront_ids() -> None:
    assert product_identifier(SubscriptionTier.SIX_MONTHS) == "PublicLibrarySixMonths"
    assert product_identifier(SubscriptionTier.ONE_YEAR) == "PublicLibraryOneYear"
    assert PRODUCT_IDENTIFIERS == {"PublicLibrarySixMonths", "PublicLibraryOneYear"}


def test_entitlement_key_is_identifier_plus_suffix() -> None:
    assert entitlement_key(SubscriptionTier.SIX_MONTHS) == "PublicLibrarySixMonthsExpirationDateKey"
    assert entitlement_key(SubscriptionTier.ONE_YEAR) == "PublicLibraryOneYearExpirationDateKey"


def test_entitlement_keys_do_not_collide() -> None:
    keys = [entitlement_key(tier) for tier in all_tiers()]
    assert len(set(keys)) == len(keys)


def test_all_tiers_is_ordered_and_complete() -> None:
    assert all_tiers() == (SubscriptionTier.SIX_MONTHS, SubscriptionTier.ONE_YEAR)


def test_tier_for_product_reverse_lookup() -> None:
    assert tier_for_product("PublicLibraryOneYear") is SubscriptionTier.ONE_YEAR
    assert tier_for_product("SomethingElse") is None
