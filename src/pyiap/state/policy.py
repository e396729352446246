"""Entitlement validity policy."""

from __future__ import annotations

from datetime import datetime

from pyiap.models._base import ensure_aware


def is_entitled(expires_at: datetime | None, now: datetime) -> bool:
    """A cached expiration grants access only while ``now`` is strictly before it."""
    if expires_at is None:
        return False
    return ensure_aware(now) < ensure_aware(expires_at)
