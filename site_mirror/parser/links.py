# site_mirror/parser/links.py
"""
Reference rewriting shared by the HTML and CSS rewriters.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urlsplit

from site_mirror.crawler.models import ResourceKind
from site_mirror.crawler.paths import is_same_host, relative_reference, resolve

__all__ = ("EnqueueFn", "LinkRewriter")

EnqueueFn = Callable[[str, ResourceKind], object]


@dataclass(slots=True)
class LinkRewriter:
    """Rewrites references found on *page_url* and reports them to the engine."""

    page_url: str
    base_host: str
    enqueue: EnqueueFn

    def rewrite(self, ref: str, hint: ResourceKind) -> Optional[str]:
        """
        Return the local relative reference that replaces *ref*, or ``None`` if
        *ref* must be left untouched (cross-host or not fetchable).

        Same-host targets are passed to ``enqueue`` before this returns.
        """
        target = resolve(self.page_url, ref)
        if target is None or not is_same_host(target, self.base_host):
            return None
        self.enqueue(target, hint)
        local = relative_reference(self.page_url, target)
        fragment = urlsplit(ref.strip()).fragment
        return f"{local}#{fragment}" if fragment else local
