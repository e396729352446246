"""Where the local app receipt comes from."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from pyiap.exceptions import ReceiptValidationError

_logger = logging.getLogger(__name__)


class ReceiptSource(Protocol):
    def load_receipt(self) -> bytes | None:
        """Return the raw receipt bytes, or ``None`` when this install has none."""
        ...


class FileReceiptSource:
    """Reads the receipt from a file on disk. Missing or empty file means no receipt.

    Any other read failure raises :class:`ReceiptValidationError`.
    """

    def __init__(self, path: Path | str | None) -> None:
        self._path = Path(path).expanduser() if path is not None else None

    def load_receipt(self) -> bytes | None:
        if self._path is None:
            return None
        try:
            data = self._path.read_bytes()
        except FileNotFoundError:
            _logger.debug("No receipt at %s", self._path)
            return None
        except OSError as exc:
            raise ReceiptValidationError(f"Cannot read receipt at {self._path}: {exc}") from exc
        return data or None


class StaticReceiptSource:
    """Serves fixed receipt bytes, e.g. a receipt forwarded by a device."""

    def __init__(self, data: bytes | None) -> None:
        self._data = data

    def load_receipt(self) -> bytes | None:
        return self._data or None
