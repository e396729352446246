"""Base model and timestamp coercion for vendor payloads.

Every receipt payload model inherits from :class:`IapBaseModel` which
provides:

* frozen, extra-tolerant models (the endpoint adds fields over time),
* population by field name as well as by alias,
* a ``raw`` dict capturing the original payload.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator


def parse_ms_timestamp(value: Any) -> datetime | None:
    """Convert an epoch-milliseconds value (int or numeric string) to a UTC datetime.

    Returns ``None`` for ``None`` and empty strings. Naive datetimes are
    assumed to be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
    ms = int(value)
    return datetime.fromtimestamp(ms / 1000, tz=UTC)


def ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


MsTimestamp = Annotated[datetime | None, BeforeValidator(parse_ms_timestamp)]
"""Annotated type that coerces epoch-millisecond strings to UTC datetimes."""


class IapBaseModel(BaseModel):
    """Base for receipt endpoint payload models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict, repr=False)
    """Original payload dict."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict) or "raw" in values:
            return values
        return {**values, "raw": dict(values)}
