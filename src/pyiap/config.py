"""Client configuration for pyiap."""

from __future__ import annotations

import dataclasses
import enum
import os
from pathlib import Path
from typing import Any

from pyiap._constants import (
    ANALYTICS_ITEM_TYPE,
    DEFAULT_REQUEST_TIMEOUT,
    PRODUCTION_VERIFY_URL,
    SANDBOX_VERIFY_URL,
)
from pyiap.exceptions import IapConfigError

DEFAULT_STORE_PATH = Path("~/.pyiap/entitlements.json")


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


class ReceiptEnvironment(enum.StrEnum):
    """Which receipt validation endpoint to talk to."""

    SANDBOX = "sandbox"
    PRODUCTION = "production"

    @property
    def verify_url(self) -> str:
        if self is ReceiptEnvironment.PRODUCTION:
            return PRODUCTION_VERIFY_URL
        return SANDBOX_VERIFY_URL

    @classmethod
    def parse(cls, value: str | ReceiptEnvironment) -> ReceiptEnvironment:
        if isinstance(value, ReceiptEnvironment):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            raise IapConfigError(f"environment must be 'sandbox' or 'production', got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class IapConfig:
    """Client configuration.

    Parameters
    ----------
    shared_secret : str
        App-specific shared secret sent with every receipt validation.
    environment : ReceiptEnvironment
        Validation endpoint selection. Defaults to the sandbox.
    receipt_path : Path or None
        Location of the local app receipt. ``None`` means no receipt is
        available on this install.
    store_path : Path
        JSON file holding cached per-tier expiration dates.
    request_timeout : float
        Total timeout in seconds for one validation request.
    exclude_old_transactions : bool
        Ask the endpoint to return only the latest renewal per subscription.
    analytics_item_type : str
        ``item_type`` recorded on purchase analytics events.
    """

    shared_secret: str
    environment: ReceiptEnvironment = ReceiptEnvironment.SANDBOX
    receipt_path: Path | None = None
    store_path: Path = DEFAULT_STORE_PATH
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    exclude_old_transactions: bool = False
    analytics_item_type: str = ANALYTICS_ITEM_TYPE

    def __post_init__(self) -> None:
        object.__setattr__(self, "environment", ReceiptEnvironment.parse(self.environment))
        if not self.shared_secret:
            raise IapConfigError("shared_secret must be non-empty")
        if self.request_timeout <= 0:
            raise IapConfigError(f"request_timeout must be positive, got {self.request_timeout}")

    @property
    def resolved_store_path(self) -> Path:
        return Path(self.store_path).expanduser()

    @classmethod
    def from_env(cls, **overrides: Any) -> IapConfig:
        """Create configuration from environment variables.

        Reads ``IAP_SHARED_SECRET`` and optional ``IAP_*`` variables.
        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        IapConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        secret = env.get("IAP_SHARED_SECRET")
        if secret is not None:
            config_kwargs["shared_secret"] = secret

        environment = env.get("IAP_ENVIRONMENT")
        if environment is not None and "environment" not in overrides:
            config_kwargs["environment"] = ReceiptEnvironment.parse(environment)

        receipt_path = env.get("IAP_RECEIPT_PATH")
        if receipt_path:
            config_kwargs["receipt_path"] = Path(receipt_path)

        store_path = env.get("IAP_STORE_PATH")
        if store_path:
            config_kwargs["store_path"] = Path(store_path)

        timeout_env = env.get("IAP_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            try:
                config_kwargs["request_timeout"] = float(timeout_env)
            except ValueError as exc:
                raise IapConfigError(f"IAP_REQUEST_TIMEOUT must be a number, got {timeout_env!r}") from exc

        if "exclude_old_transactions" not in overrides:
            config_kwargs["exclude_old_transactions"] = _env_bool(
                env.get("IAP_EXCLUDE_OLD_TRANSACTIONS"),
                False,
            )

        if "environment" in overrides:
            overrides["environment"] = ReceiptEnvironment.parse(overrides["environment"])

        config_kwargs.update(overrides)
        if "shared_secret" not in config_kwargs:
            raise IapConfigError("IAP_SHARED_SECRET is not set")

        return cls(**config_kwargs)
