# File: tests/test_fetcher.py
"""Fetcher: single GET, status handling and Content-Type classification."""
from __future__ import annotations

import asyncio

import pytest
from aiohttp import ClientSession, web

from site_mirror.crawler.fetcher import Fetcher, classify_content_type
from site_mirror.crawler.models import ResourceKind
from site_mirror.errors import NetworkError


@pytest.mark.parametrize(
    "header,expected",
    [
        ("text/html", ResourceKind.PAGE),
        ("text/html; charset=UTF-8", ResourceKind.PAGE),
        ("application/xhtml+xml", ResourceKind.PAGE),
        ("TEXT/CSS", ResourceKind.STYLESHEET),
        ("text/css;charset=utf-8", ResourceKind.STYLESHEET),
        ("image/png", ResourceKind.ASSET),
        ("application/javascript", ResourceKind.ASSET),
        ("", None),
        (None, None),
    ],
)
def test_classify_content_type(header, expected):
    assert classify_content_type(header) is expected


def _app() -> web.Application:
    app = web.Application()

    async def page(_):
        return web.Response(text="<h1>hi</h1>", content_type="text/html")

    async def style(_):
        return web.Response(text="body{}", content_type="text/css")

    async def image(_):
        return web.Response(body=b"\x89PNG\r\n", content_type="image/png")

    async def broken(_):
        return web.Response(status=500, text="oops")

    async def slow(_):
        await asyncio.sleep(1.0)
        return web.Response(text="late", content_type="text/plain")

    app.router.add_get("/", page)
    app.router.add_get("/s.css", style)
    app.router.add_get("/pic.png", image)
    app.router.add_get("/broken", broken)
    app.router.add_get("/slow", slow)
    return app


@pytest.mark.asyncio()
async def test_fetch_classifies_responses(serve):
    base = await serve(_app())
    async with ClientSession() as session:
        fetcher = Fetcher(session, timeout=2.0)
        page = await fetcher.fetch(f"{base}/")
        style = await fetcher.fetch(f"{base}/s.css")
        image = await fetcher.fetch(f"{base}/pic.png")

    assert page.status == 200
    assert page.kind is ResourceKind.PAGE
    assert page.body == b"<h1>hi</h1>"
    assert style.kind is ResourceKind.STYLESHEET
    assert image.kind is ResourceKind.ASSET
    assert image.body == b"\x89PNG\r\n"


@pytest.mark.asyncio()
@pytest.mark.parametrize("path,reason", [("/missing", "HTTP 404"), ("/broken", "HTTP 500")])
async def test_fetch_non_2xx_is_network_error(serve, path, reason):
    base = await serve(_app())
    async with ClientSession() as session:
        with pytest.raises(NetworkError) as info:
            await Fetcher(session, timeout=2.0).fetch(f"{base}{path}")
    assert info.value.reason == reason
    assert info.value.url == f"{base}{path}"


@pytest.mark.asyncio()
async def test_fetch_timeout_is_network_error(serve):
    base = await serve(_app())
    async with ClientSession() as session:
        with pytest.raises(NetworkError) as info:
            await Fetcher(session, timeout=0.2).fetch(f"{base}/slow")
    assert info.value.reason == "timed out"


@pytest.mark.asyncio()
async def test_fetch_connection_refused_is_network_error(unused_tcp_port):
    async with ClientSession() as session:
        with pytest.raises(NetworkError):
            await Fetcher(session, timeout=2.0).fetch(f"http://127.0.0.1:{unused_tcp_port}/")
