"""Per-tier entitlement expiration store.

Values are replaced wholesale on every write; nothing is merged. The last
verification that wrote a tier's expiration wins.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from pyiap.catalog import SubscriptionTier, entitlement_key
from pyiap.models._base import ensure_aware
from pyiap.state.policy import is_entitled

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class EntitlementStore(Protocol):
    """Structural interface for the expiration cache.

    Implementations serialize their own writes; callers may deliver
    verification results from any thread.
    """

    def get(self, tier: SubscriptionTier) -> datetime | None:
        ...

    def set(self, tier: SubscriptionTier, expires_at: datetime | None) -> None:
        ...

    def is_valid(self, tier: SubscriptionTier, now: datetime | None = None) -> bool:
        ...


class InMemoryEntitlementStore:
    """Dict-backed store for tests and ephemeral use."""

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, datetime | None] = {}

    def get(self, tier: SubscriptionTier) -> datetime | None:
        with self._lock:
            return self._entries.get(entitlement_key(tier))

    def set(self, tier: SubscriptionTier, expires_at: datetime | None) -> None:
        value = ensure_aware(expires_at) if expires_at is not None else None
        with self._lock:
            self._entries[entitlement_key(tier)] = value

    def is_valid(self, tier: SubscriptionTier, now: datetime | None = None) -> bool:
        return is_entitled(self.get(tier), now if now is not None else self._clock())


class JsonFileEntitlementStore:
    """Durable store persisted as a flat JSON object.

    The document maps ``entitlement_key(tier)`` to an ISO-8601 UTC timestamp
    or ``null``. It is read lazily on first access; a missing file is an
    empty mapping. Every write rewrites the document atomically.
    """

    def __init__(self, path: Path | str, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._path = Path(path).expanduser()
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, datetime | None] | None = None

    def _load(self) -> dict[str, datetime | None]:
        """Return the in-memory mapping, reading the file once. Caller holds the lock."""
        if self._entries is not None:
            return self._entries

        entries: dict[str, datetime | None] = {}
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            self._entries = entries
            return entries

        try:
            document = json.loads(text)
        except json.JSONDecodeError:
            _logger.warning("Entitlement store %s is not valid JSON; starting empty", self._path)
            document = {}

        if not isinstance(document, dict):
            _logger.warning("Entitlement store %s is not a JSON object; starting empty", self._path)
            document = {}

        for key, raw_value in document.items():
            if raw_value is None:
                entries[key] = None
                continue
            try:
                entries[key] = ensure_aware(datetime.fromisoformat(str(raw_value)))
            except ValueError:
                _logger.warning("Dropping unparseable expiration %r for %s", raw_value, key)

        self._entries = entries
        return entries

    def _flush(self, entries: dict[str, datetime | None]) -> None:
        document = {key: (value.isoformat() if value is not None else None) for key, value in entries.items()}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise

    def get(self, tier: SubscriptionTier) -> datetime | None:
        with self._lock:
            return self._load().get(entitlement_key(tier))

    def set(self, tier: SubscriptionTier, expires_at: datetime | None) -> None:
        value = ensure_aware(expires_at) if expires_at is not None else None
        with self._lock:
            updated = dict(self._load())
            updated[entitlement_key(tier)] = value
            self._flush(updated)
            self._entries = updated
        _logger.debug("Stored expiration for %s: %s", tier.value, value)

    def is_valid(self, tier: SubscriptionTier, now: datetime | None = None) -> bool:
        return is_entitled(self.get(tier), now if now is not None else self._clock())
