# File: site_mirror/errors.py
"""Error taxonomy for the mirror engine.

Every error is contained at the level of a single resource: the crawler logs
it, records it in the run report and moves on.
"""
from __future__ import annotations

__all__ = ("MirrorError", "UrlError", "NetworkError", "ParseError", "StorageError")


class MirrorError(Exception):
    """Base class for per-resource failures."""

    kind = "error"

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class UrlError(MirrorError):
    """Reference could not be parsed or is not an http(s) URL."""

    kind = "url"


class NetworkError(MirrorError):
    """Transport failure or non-2xx response."""

    kind = "network"


class ParseError(MirrorError):
    """HTML or CSS could not be processed; content is passed through as is."""

    kind = "parse"


class StorageError(MirrorError):
    """Directory creation or file write failed, or the local path is taken."""

    kind = "storage"
