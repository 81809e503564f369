# site_mirror/crawler/paths.py
"""
URL normalization and URL → local path mapping for SiteMirror.

Everything here is a pure function of its arguments. The same
:func:`local_path` is used to decide where a resource is written and to build
the relative links pointing at it, which keeps the mirror consistent.
"""
from __future__ import annotations

import hashlib
import posixpath
from pathlib import Path
from typing import Optional, Union
from urllib.parse import quote, unquote, urljoin, urlsplit, urlunsplit

from site_mirror.errors import UrlError

__all__ = (
    "SKIPPED_PREFIXES",
    "canonicalize",
    "normalize_path",
    "resolve",
    "host_of",
    "is_same_host",
    "local_path",
    "to_local_path",
    "relative_reference",
)

SKIPPED_PREFIXES = ("#", "data:", "javascript:", "mailto:", "tel:")
_FETCHABLE_SCHEMES = ("http", "https")
_INDEX = "index.html"
# sub-delimiters and ":" / "@" stay literal inside a path segment (RFC 3986)
_SEGMENT_SAFE = ":@!$&'()*+,;=~"


def canonicalize(url: str) -> str:
    """
    Return the canonical absolute form of *url* used as the deduplication key.

    Scheme and host are lower-cased, the path goes through
    :func:`normalize_path` (an empty path becomes ``/``) and the fragment is
    dropped. The query string is kept as is.
    """
    try:
        parts = urlsplit(url.strip())
    except ValueError as exc:
        raise UrlError(url, f"unparseable URL ({exc})") from exc
    scheme = parts.scheme.lower()
    if scheme not in _FETCHABLE_SCHEMES:
        raise UrlError(url, f"unsupported scheme {scheme!r}")
    if not parts.netloc:
        raise UrlError(url, "missing host")
    return urlunsplit((scheme, parts.netloc.lower(), normalize_path(parts.path), parts.query, ""))


def normalize_path(path: str) -> str:
    """
    Remove dot segments and bring percent-encoding to one form.

    Each segment is decoded and re-quoted on its own, so an encoded ``%2F``
    stays inside its segment. A trailing ``/`` is kept.
    """
    segments = path.split("/")
    if segments and segments[0] == "":
        segments = segments[1:]
    out: list[str] = []
    for i, raw in enumerate(segments):
        seg = unquote(raw, errors="surrogateescape")
        last = i == len(segments) - 1
        if seg in (".", ".."):
            if seg == ".." and out:
                out.pop()
            if last:
                out.append("")
            continue
        out.append(quote(seg, safe=_SEGMENT_SAFE, errors="surrogateescape"))
    return "/" + "/".join(out)


def resolve(base: str, ref: str) -> Optional[str]:
    """
    Resolve *ref* found on page *base* to a CanonicalURL.

    Returns ``None`` for references that must not be fetched: empty ones,
    fragment-only ones, ``data:``/``javascript:``/``mailto:``/``tel:`` and
    anything that does not resolve to an http(s) URL.
    """
    ref = ref.strip()
    if not ref or ref.lower().startswith(SKIPPED_PREFIXES):
        return None
    try:
        return canonicalize(urljoin(base, ref))
    except (UrlError, ValueError):
        return None


def host_of(url: str) -> str:
    return urlsplit(url).netloc.lower()


def is_same_host(url: str, base_host: str) -> bool:
    """True iff *url* lives on *base_host* (netloc, port included)."""
    return host_of(url) == base_host.lower()


def local_path(url: str) -> str:
    """
    Map a CanonicalURL to a relative POSIX path inside the mirror.

    * ``""`` or ``/`` → ``index.html``
    * trailing ``/`` → ``<dir>/index.html``
    * no extension → ``.html`` appended
    * a query string adds ``-q<hash>`` to the file stem
    """
    parts = urlsplit(url)
    path = unquote(parts.path)
    if path in ("", "/"):
        path = "/" + _INDEX
    elif path.endswith("/"):
        path += _INDEX
    if not posixpath.splitext(path)[1]:
        path += ".html"

    if parts.query:
        digest = hashlib.sha256(parts.query.encode("utf-8")).hexdigest()[:10]
        stem, ext = posixpath.splitext(path)
        path = f"{stem}-q{digest}{ext}"

    # "." and ".." segments must never leave the output root
    segments = [seg for seg in path.split("/") if seg not in ("", ".", "..")]
    return "/".join(segments) or _INDEX


def to_local_path(url: str, output_root: Union[str, Path]) -> Path:
    """Filesystem location of *url* under *output_root*."""
    return Path(output_root) / local_path(url)


def relative_reference(from_url: str, to_url: str) -> str:
    """
    Reference to put into the document of *from_url* so that it points at the
    mirrored copy of *to_url*. Always uses forward slashes.
    """
    start = posixpath.dirname(local_path(from_url)) or "."
    rel = posixpath.relpath(local_path(to_url), start)
    return quote(rel, safe="/")
