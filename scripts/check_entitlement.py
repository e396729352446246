#!/usr/bin/env python3
"""Validate the local receipt and print per-tier entitlement.

This script submits the receipt at ``IAP_RECEIPT_PATH`` to the validation
endpoint, refreshes the cached expirations, and prints the resulting state.
It never purchases anything.

Usage
-----
Set environment variables and run::

    export IAP_SHARED_SECRET="..."
    export IAP_RECEIPT_PATH="/path/to/receipt"
    python scripts/check_entitlement.py

Options::

    --production     Use the production endpoint (default: IAP_ENVIRONMENT or sandbox)
    --cached         Only print the cached state, skip validation
    --json           Output machine-readable JSON
    --verbose        Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from pyiap import (
    IapClient,
    IapConfig,
    IapError,
    ProductsQueryResult,
    PurchaseFailure,
    ReceiptEnvironment,
    all_tiers,
)
from pyiap.storefront import ProductsCompletion, PurchaseCompletion


class _NoStorefront:
    """This tool validates receipts only."""

    def retrieve_products_info(self, product_ids: Iterable[str], completion: ProductsCompletion) -> None:
        completion(ProductsQueryResult(error="no storefront available"))

    def purchase_product(self, product_id: str, atomically: bool, completion: PurchaseCompletion) -> None:
        completion(PurchaseFailure(reason="no storefront available"))


def _tier_rows(client: IapClient) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for tier in all_tiers():
        expiration = client.expiration(tier)
        rows.append(
            {
                "tier": tier.name,
                "product_id": tier.value,
                "expires_at": expiration.isoformat() if expiration is not None else None,
                "valid": client.has_valid_subscription(tier),
            }
        )
    return rows


async def main() -> int:
    parser = argparse.ArgumentParser(description="Validate the local receipt and print entitlement state.")
    parser.add_argument("--production", action="store_true", help="Use the production validation endpoint")
    parser.add_argument("--cached", action="store_true", help="Only print cached state")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.production:
        overrides["environment"] = ReceiptEnvironment.PRODUCTION
    try:
        config = IapConfig.from_env(**overrides)
    except IapError as exc:
        print(f"configuration error: {exc}", file=sys.stderr)
        return 2

    result: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "environment": config.environment.value,
        "store": str(config.resolved_store_path),
    }

    async with IapClient(config, storefront=_NoStorefront()) as client:
        if not args.cached:
            try:
                result["active"] = await client.check_active_entitlement()
            except IapError as exc:
                result["error"] = f"{type(exc).__name__}: {exc}"
        result["tiers"] = _tier_rows(client)

    if args.json_mode:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    else:
        print(f"environment : {result['environment']}")
        print(f"store       : {result['store']}")
        if "active" in result:
            print(f"active      : {result['active']}")
        if "error" in result:
            print(f"error       : {result['error']}")
        for row in result["tiers"]:
            print(f"  {row['tier']:<11} expires={row['expires_at']} valid={row['valid']}")

    return 1 if "error" in result else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
