"""
URL policy helpers: strict parsing, canonical keys and host equivalence.
"""
from __future__ import annotations

import re
from typing import Union
from urllib.parse import SplitResult, urlsplit

from site_audit.errors import InvalidURLError

__all__ = (
    "parse_url",
    "host_of",
    "normalise_host",
    "same_site",
    "canonical_key",
    "robots_path",
)

_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")

_URLLike = Union[str, SplitResult]


def parse_url(raw: str) -> SplitResult:
    """
    Split *raw* into its components, rejecting strings a browser would not
    accept as a URL.

    ``urlsplit`` is permissive, so control characters, whitespace in the
    authority, malformed percent escapes and bad ports are checked here.
    """
    if _CONTROL_RE.search(raw):
        raise InvalidURLError(f"invalid control character in url: {raw!r}")
    if _BAD_ESCAPE_RE.search(raw):
        raise InvalidURLError(f"invalid percent escape in url: {raw!r}")
    try:
        parts = urlsplit(raw)
        parts.port  # raises ValueError on a non numeric or out of range port
    except ValueError as exc:
        raise InvalidURLError(f"{exc}: {raw!r}") from exc
    if any(ch.isspace() for ch in parts.netloc):
        raise InvalidURLError(f"invalid character in host: {raw!r}")
    return parts


def _split(url: _URLLike) -> SplitResult:
    return url if isinstance(url, SplitResult) else urlsplit(url)


def host_of(url: _URLLike) -> str:
    """Return the authority of *url* without userinfo, case preserved."""
    return _split(url).netloc.rpartition("@")[2]


def normalise_host(host: str) -> str:
    host = host.lower()
    return host[4:] if host.startswith("www.") else host


def same_site(a: _URLLike, b: _URLLike) -> bool:
    """True when both URLs live on the same host, ignoring a ``www.`` prefix."""
    return normalise_host(host_of(a)) == normalise_host(host_of(b))


def canonical_key(url: _URLLike) -> str:
    """
    Identity of a page: ``scheme://host/path`` without query or fragment.

    A single trailing slash is dropped except for the root, and an empty path
    becomes ``/``, so ``https://a.com``, ``https://a.com/`` and
    ``https://a.com/?q=1#top`` share one key.
    """
    parts = _split(url)
    path = parts.path
    if len(path) > 1 and path.endswith("/"):
        path = path[:-1]
    if not path:
        path = "/"
    return f"{parts.scheme}://{host_of(parts)}{path}"


def robots_path(url: _URLLike) -> str:
    return _split(url).path or "/"
