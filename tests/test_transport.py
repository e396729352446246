from __future__ import annotations

import asyncio
import base64
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import aiohttp
import pytest
from aiohttp import test_utils, web

from pyiap._api.verify_receipt import build_verify_request
from pyiap._transport import HttpTransport
from pyiap.exceptions import ReceiptDecodeError, ReceiptNetworkError

RECEIPT = b"\x30\x82\x01receipt-bytes"
SECRET = "app-shared-secret"


@asynccontextmanager
async def _serving(handler: Any) -> AsyncIterator[str]:
    app = web.Application()
    app.router.add_post("/verifyReceipt", handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        yield str(server.make_url("/verifyReceipt"))
    finally:
        await server.close()


def _body(raw: bytes, status: int = 200) -> Any:
    async def handler(request: web.Request) -> web.Response:
        return web.Response(body=raw, status=status, content_type="application/json")

    return handler


@pytest.mark.asyncio
async def test_posts_json_and_returns_object() -> None:
    received: list[dict[str, Any]] = []

    async def handler(request: web.Request) -> web.Response:
        received.append(await request.json())
        assert request.headers["content-type"].startswith("application/json")
        return web.json_response({"status": 0, "environment": "Sandbox"})

    async with _serving(handler) as url, aiohttp.ClientSession() as session:
        result = await HttpTransport(session, timeout=5).post_json(url, build_verify_request(RECEIPT, SECRET))

    assert result == {"status": 0, "environment": "Sandbox"}
    assert received[0]["password"] == SECRET
    assert base64.b64decode(received[0]["receipt-data"]) == RECEIPT


@pytest.mark.asyncio
async def test_non_200_raises_network_error_with_status() -> None:
    async with _serving(_body(b"service unavailable", status=503)) as url, aiohttp.ClientSession() as session:
        with pytest.raises(ReceiptNetworkError, match="HTTP 503") as excinfo:
            await HttpTransport(session, timeout=5).post_json(url, {"receipt-data": "x"})

    assert excinfo.value.status_code == 503


@pytest.mark.parametrize(
    "raw",
    [
        b"<html>not json</html>",
        b"[0, 1]",
        b'{"status": 0, "x": "\xff\xfe"}',
    ],
    ids=["html", "array", "non-utf8"],
)
@pytest.mark.asyncio
async def test_undecodable_body_raises_decode_error(raw: bytes) -> None:
    async with _serving(_body(raw)) as url, aiohttp.ClientSession() as session:
        with pytest.raises(ReceiptDecodeError):
            await HttpTransport(session, timeout=5).post_json(url, {"receipt-data": "x"})


@pytest.mark.asyncio
async def test_timeout_raises_network_error() -> None:
    async def handler(request: web.Request) -> web.Response:
        await asyncio.sleep(0.5)
        return web.json_response({"status": 0})

    async with _serving(handler) as url, aiohttp.ClientSession() as session:
        with pytest.raises(ReceiptNetworkError) as excinfo:
            await HttpTransport(session, timeout=0.05).post_json(url, {"receipt-data": "x"})

    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_connection_refused_raises_network_error() -> None:
    async with _serving(_body(b"{}")) as url:
        pass

    async with aiohttp.ClientSession() as session:
        with pytest.raises(ReceiptNetworkError, match="failed") as excinfo:
            await HttpTransport(session, timeout=5).post_json(url, {"receipt-data": "x"})

    assert isinstance(excinfo.value.__cause__, aiohttp.ClientError)


@pytest.mark.asyncio
async def test_debug_log_masks_secret_and_receipt(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="pyiap._transport")
    payload = build_verify_request(RECEIPT, SECRET)
    latest = "TUlJVE5nWUpLb1pJaHZjTkFRY0NvSUlUWHpDQ0U"

    async def handler(request: web.Request) -> web.Response:
        return web.json_response({"status": 0, "latest_receipt": latest})

    async with _serving(handler) as url, aiohttp.ClientSession() as session:
        await HttpTransport(session, timeout=5).post_json(url, payload)

    assert "<redacted>" in caplog.text
    assert "<receipt len=" in caplog.text
    assert SECRET not in caplog.text
    assert payload["receipt-data"] not in caplog.text
    assert latest not in caplog.text
