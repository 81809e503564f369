# site_mirror/parser/css_rewriter.py
"""
Lexical CSS rewriting: ``url(...)`` tokens and ``@import '...'`` statements.

This is not a CSS parser. Anything the patterns do not match is kept verbatim.
"""
from __future__ import annotations

import re

from site_mirror.crawler.models import ResourceKind
from site_mirror.parser.links import LinkRewriter

__all__ = ("rewrite_css", "rewrite_css_bytes")

CSS_URL_RE = re.compile(r"""url\(\s*(['"]?)([^'"()\s]+)\1\s*\)""", re.IGNORECASE)
CSS_IMPORT_RE = re.compile(r"""@import\s+(['"])([^'"]+)\1""", re.IGNORECASE)


def rewrite_css(text: str, linker: LinkRewriter) -> str:
    """Rewrite same-host references in *text*; every hit is enqueued as an asset."""

    def _url(match: re.Match[str]) -> str:
        ref = match.group(2)
        if ref.lower().startswith("data:"):
            return match.group(0)
        local = linker.rewrite(ref, ResourceKind.ASSET)
        return match.group(0) if local is None else f"url('{local}')"

    def _import(match: re.Match[str]) -> str:
        local = linker.rewrite(match.group(2), ResourceKind.ASSET)
        return match.group(0) if local is None else f"@import '{local}'"

    text = CSS_URL_RE.sub(_url, text)
    return CSS_IMPORT_RE.sub(_import, text)


def rewrite_css_bytes(content: bytes, linker: LinkRewriter) -> bytes:
    # surrogateescape keeps undecodable bytes intact through the round trip
    text = content.decode("utf-8", errors="surrogateescape")
    return rewrite_css(text, linker).encode("utf-8", errors="surrogateescape")
