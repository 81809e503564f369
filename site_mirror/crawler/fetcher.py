# site_mirror/crawler/fetcher.py
"""
Fetcher module: performs a single HTTP GET with a timeout and classifies the
response by its Content-Type.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_mirror.crawler.models import FetchResult, ResourceKind
from site_mirror.errors import NetworkError

__all__ = ("Fetcher", "classify_content_type")

_PAGE_TYPES = ("text/html", "application/xhtml+xml")
_STYLESHEET_TYPES = ("text/css",)


def classify_content_type(header: Optional[str]) -> Optional[ResourceKind]:
    """
    Map a Content-Type header to a :class:`ResourceKind`.

    Returns ``None`` when the header is missing so the caller falls back to
    the hint it got from the referring document.
    """
    if not header:
        return None
    mime = header.split(";", 1)[0].strip().lower()
    if mime in _PAGE_TYPES:
        return ResourceKind.PAGE
    if mime in _STYLESHEET_TYPES:
        return ResourceKind.STYLESHEET
    return ResourceKind.ASSET


class Fetcher:
    """Single-shot HTTP fetcher: no retries, redirects are left to aiohttp."""

    def __init__(self, session: ClientSession, timeout: float) -> None:
        self.session = session
        self.timeout = ClientTimeout(total=timeout)

    async def fetch(self, url: str) -> FetchResult:
        """
        GET *url* and return its body.

        Raises NetworkError on transport failure, timeout or a non-2xx status.
        """
        try:
            async with self.session.get(url, timeout=self.timeout, raise_for_status=False) as resp:
                if not 200 <= resp.status < 300:
                    raise NetworkError(url, f"HTTP {resp.status}")
                body = await resp.read()
                ctype = resp.headers.get("Content-Type", "")
                return FetchResult(
                    url=url,
                    status=resp.status,
                    body=body,
                    content_type=ctype,
                    kind=classify_content_type(ctype),
                )
        except asyncio.TimeoutError as exc:
            raise NetworkError(url, "timed out") from exc
        except ClientError as exc:
            raise NetworkError(url, str(exc) or exc.__class__.__name__) from exc
