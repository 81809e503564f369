# === FILE: site_mirror/parser/html_rewriter.py ===
"""HTML rewriting for SiteMirror.

Walks a BeautifulSoup tree and replaces every same-host reference with a path
relative to the page's own location in the mirror:

* ``href`` of ``<a>`` / ``<link>``
* ``src`` of ``<img>``, ``<script>``, ``<source>``, ``<video>``, ``<audio>``
* ``action`` of ``<form>``
* ``srcset`` candidates (descriptors are kept)
* inline ``style="..."`` attributes and ``<style>`` blocks, via
  :func:`site_mirror.parser.css_rewriter.rewrite_css`

Each call builds its own tree, so concurrent workers never share nodes.
"""
from __future__ import annotations

import re
from collections.abc import Sequence

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import Stylesheet, Tag

from site_mirror.crawler.models import ResourceKind
from site_mirror.errors import ParseError
from site_mirror.parser.css_rewriter import rewrite_css
from site_mirror.parser.links import LinkRewriter

__all__: Sequence[str] = ("URL_ATTRIBUTES", "rewrite_html", "rewrite_srcset")

URL_ATTRIBUTES: dict[str, str] = {
    "a": "href",
    "link": "href",
    "img": "src",
    "script": "src",
    "source": "src",
    "video": "src",
    "audio": "src",
    "form": "action",
}
_NON_PAGE_RELS = ("stylesheet", "icon")

# One srcset candidate: a URL (non-space run, commas allowed inside, not at the
# end) followed by an optional descriptor up to the next comma.
_SRCSET_CANDIDATE_RE = re.compile(r"(?P<url>[^\s,](?:\S*[^\s,])?)(?P<descriptor>\s+[^,]*)?")


def _reference_hint(tag: Tag) -> ResourceKind:
    """Pages are anchors and ``<link>``s that are neither stylesheets nor icons."""
    if tag.name == "a":
        return ResourceKind.PAGE
    if tag.name == "link":
        rel = tag.get("rel") or ""
        if not isinstance(rel, str):
            rel = " ".join(rel)
        rel = rel.lower()
        if not any(token in rel for token in _NON_PAGE_RELS):
            return ResourceKind.PAGE
    return ResourceKind.ASSET


def rewrite_srcset(value: str, linker: LinkRewriter) -> str:
    """Rewrite each candidate URL of a ``srcset`` value, keeping descriptors."""
    changed = False
    candidates: list[str] = []
    for match in _SRCSET_CANDIDATE_RE.finditer(value):
        url = match.group("url")
        descriptor = (match.group("descriptor") or "").strip()
        local = linker.rewrite(url, ResourceKind.ASSET)
        if local is not None:
            url = local
            changed = True
        candidates.append(f"{url} {descriptor}" if descriptor else url)
    return ", ".join(candidates) if changed else value


def _rewrite_element(tag: Tag, linker: LinkRewriter) -> None:
    attr = URL_ATTRIBUTES.get(tag.name)
    if attr is not None:
        value = tag.get(attr)
        if isinstance(value, str):
            local = linker.rewrite(value, _reference_hint(tag))
            if local is not None:
                tag[attr] = local

    srcset = tag.get("srcset")
    if isinstance(srcset, str) and srcset.strip():
        tag["srcset"] = rewrite_srcset(srcset, linker)

    style = tag.get("style")
    if isinstance(style, str) and style:
        tag["style"] = rewrite_css(style, linker)

    if tag.name == "style" and tag.string is not None:
        tag.string = Stylesheet(rewrite_css(str(tag.string), linker))


def rewrite_html(content: bytes, linker: LinkRewriter) -> bytes:
    """
    Parse *content*, rewrite every reference in place and return the new
    document encoded as UTF-8.

    Raises ParseError if the parser rejects the markup; callers store the
    original bytes in that case.
    """
    try:
        soup = BeautifulSoup(content, "html.parser")
    except ParserRejectedMarkup as exc:
        raise ParseError(linker.page_url, f"unparseable HTML: {exc}") from exc

    for tag in soup.find_all(True):
        _rewrite_element(tag, linker)
    return soup.encode("utf-8")
