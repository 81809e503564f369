# File: tests/conftest.py
from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path
from typing import Dict, Optional, Tuple, Union
from urllib.parse import urlsplit

import pytest
import pytest_asyncio
from aiohttp import web

from site_mirror.aggregator import MirrorReport
from site_mirror.config import MirrorConfig
from site_mirror.crawler.crawler import MirrorCrawler
from site_mirror.crawler.fetcher import classify_content_type
from site_mirror.crawler.models import FetchResult
from site_mirror.errors import NetworkError

HTML = "text/html; charset=utf-8"
CSS = "text/css"
PNG = "image/png"

Body = Union[str, bytes]


class FakeSite:
    """
    In-memory transport: maps ``path[?query]`` to ``(content_type, body)``.

    Counts calls per URL and tracks the peak number of concurrent fetches.
    """

    def __init__(self, base_url: str, pages: Dict[str, Tuple[str, Body]], delay: float = 0.0) -> None:
        self.host = urlsplit(base_url).netloc
        self.pages = pages
        self.delay = delay
        self.calls: Counter[str] = Counter()
        self.active = 0
        self.peak = 0

    async def fetch(self, url: str) -> FetchResult:
        self.calls[url] += 1
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delay)
            parts = urlsplit(url)
            key = parts.path + (f"?{parts.query}" if parts.query else "")
            if parts.netloc != self.host or key not in self.pages:
                raise NetworkError(url, "HTTP 404")
            ctype, body = self.pages[key]
            data = body.encode("utf-8") if isinstance(body, str) else body
            return FetchResult(
                url=url, status=200, body=data, content_type=ctype, kind=classify_content_type(ctype)
            )
        finally:
            self.active -= 1

    def fetched_paths(self) -> set[str]:
        return {urlsplit(url).path for url in self.calls}


@pytest.fixture()
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "mirror"


@pytest.fixture()
def make_config(output_dir: Path) -> Callable[..., MirrorConfig]:
    """Factory for a MirrorConfig that writes into the test's tmp dir."""

    def _make(base_url: str = "http://x.test/", **kwargs) -> MirrorConfig:
        kwargs.setdefault("timeout", 2.0)
        return MirrorConfig(base_url=base_url, output_dir=output_dir, **kwargs)

    return _make


@pytest.fixture()
def fake_site() -> Callable[..., FakeSite]:
    def _make(pages: Dict[str, Tuple[str, Body]], base_url: str = "http://x.test/", delay: float = 0.0) -> FakeSite:
        return FakeSite(base_url, pages, delay)

    return _make


async def run_mirror(
    config: MirrorConfig, fetcher: Optional[FakeSite] = None, timeout: float = 15.0
) -> MirrorReport:
    """Run a crawler to completion; the timeout turns a hang into a failure."""
    async with MirrorCrawler(config, fetcher=fetcher) as crawler:
        return await asyncio.wait_for(crawler.run(), timeout=timeout)


@pytest_asyncio.fixture
async def serve(unused_tcp_port: int) -> AsyncIterator[Callable[[web.Application], Awaitable[str]]]:
    """Start an aiohttp app on a free port and return its base URL."""
    runners: list[web.AppRunner] = []

    async def _serve(app: web.Application) -> str:
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, "127.0.0.1", unused_tcp_port)
        await site.start()
        runners.append(runner)
        return f"http://127.0.0.1:{unused_tcp_port}"

    try:
        yield _serve
    finally:
        for runner in runners:
            await runner.cleanup()
