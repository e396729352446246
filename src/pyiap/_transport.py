"""HTTP transport for the receipt validation endpoint."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyiap._constants import USER_AGENT
from pyiap._redact import redact_for_log
from pyiap.exceptions import ReceiptDecodeError, ReceiptNetworkError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        ...


class HttpTransport:
    """JSON-over-HTTPS transport backed by an :class:`aiohttp.ClientSession`."""

    def __init__(self, http_session: aiohttp.ClientSession, *, timeout: float) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        """POST *payload* as JSON and return the decoded JSON object.

        Raises
        ------
        ReceiptNetworkError
            Network failure, timeout or non-200 status.
        ReceiptDecodeError
            Body is not a JSON object.
        """
        headers = {
            "content-type": "application/json; charset=UTF-8",
            "user-agent": USER_AGENT,
        }
        body = json.dumps(dict(payload), separators=(",", ":"))

        _logger.debug("POST %s payload=%s", url, redact_for_log(payload))

        try:
            async with self._http.post(url, data=body, headers=headers, timeout=self._timeout) as resp:
                raw = await resp.read()
                if resp.status != 200:
                    snippet = raw[:200].decode("utf-8", errors="replace")
                    raise ReceiptNetworkError(
                        f"HTTP {resp.status} from {url}: {snippet}",
                        status_code=resp.status,
                    )
        except ReceiptNetworkError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise ReceiptNetworkError(f"Request to {url} failed: {exc!r}") from exc

        try:
            result = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            snippet = raw[:200].decode("utf-8", errors="replace")
            raise ReceiptDecodeError(f"Invalid JSON from {url}: {snippet}") from exc

        if not isinstance(result, dict):
            raise ReceiptDecodeError(f"Expected a JSON object from {url}, got {type(result).__name__}")

        _logger.debug("Response from %s: %s", url, redact_for_log(result))
        return result
