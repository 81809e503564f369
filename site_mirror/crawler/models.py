# site_mirror/crawler/models.py
"""
Data models for the SiteMirror crawler.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class ResourceKind(str, enum.Enum):
    """How a fetched resource is processed before it is stored."""

    PAGE = "page"
    STYLESHEET = "stylesheet"
    ASSET = "asset"


@dataclass(frozen=True, slots=True)
class Task:
    """A unit of work: one canonical URL plus the kind its referrer expects."""

    url: str
    hint: ResourceKind = ResourceKind.ASSET


@dataclass(slots=True)
class FetchResult:
    """Raw response of a single GET.

    ``kind`` comes from the Content-Type header and is ``None`` when the
    server did not send one.
    """

    url: str
    status: int
    body: bytes
    content_type: str = ""
    kind: Optional[ResourceKind] = None

    def resolve_kind(self, hint: ResourceKind) -> ResourceKind:
        return self.kind if self.kind is not None else hint
