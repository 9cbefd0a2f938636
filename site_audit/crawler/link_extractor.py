"""
Link extraction for SiteAudit: turns an HTML body into resolved hyperlinks.
"""
from __future__ import annotations

import posixpath
from typing import FrozenSet, Iterable, List, Union
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup, ParserRejectedMarkup
from bs4.element import Tag

from site_audit.errors import ExtractionError

__all__ = ("LinkExtractor", "DEFAULT_IGNORED_EXTENSIONS")

DEFAULT_IGNORED_EXTENSIONS: FrozenSet[str] = frozenset((
    ".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg",
    ".zip", ".tar", ".gz", ".7z", ".rar",
    ".mp3", ".mp4", ".mov", ".wav", ".flac", ".ogg",
    ".doc", ".docx", ".pdf", ".txt", ".xls", ".xlsx", ".csv", ".ppt", ".rtf",
    ".exe", ".msi", ".deb", ".rpm", ".jar", ".sh",
    ".css", ".js",
    ".ttf", ".otf", ".woff", ".woff2",
))


def _normalise_extension(ext: str) -> str:
    ext = ext.strip().lower()
    return ext if ext.startswith(".") else "." + ext


class LinkExtractor:
    """Collects ``<a href>`` targets, skipping links to non-HTML resources by extension."""

    def __init__(self, ignored_extensions: Iterable[str] = ()) -> None:
        self.ignored: FrozenSet[str] = frozenset(_normalise_extension(e) for e in ignored_extensions)

    @classmethod
    def with_default_ignores(cls, extra: Iterable[str] = ()) -> LinkExtractor:
        return cls((*DEFAULT_IGNORED_EXTENSIONS, *extra))

    def extract(self, base_url: str, body: Union[bytes, str]) -> List[str]:
        """
        Return every hyperlink in *body* resolved against *base_url*.

        Links are deduplicated and keep document order. Raises ExtractionError
        when the parser rejects the markup.
        """
        try:
            soup = BeautifulSoup(body, "html.parser")
        except ParserRejectedMarkup as exc:
            raise ExtractionError(f"cannot parse {base_url}: {exc}") from exc

        seen: dict[str, None] = {}
        for tag in soup.find_all("a", href=True):
            if not isinstance(tag, Tag):
                continue
            href = tag.get("href")
            if not isinstance(href, str):
                continue
            href = href.strip()
            if self._ignored(href):
                continue
            try:
                seen.setdefault(urljoin(base_url, href), None)
            except ValueError:
                continue
        return list(seen)

    def _ignored(self, href: str) -> bool:
        if not self.ignored:
            return False
        try:
            path = urlsplit(href).path
        except ValueError:
            return False
        ext = posixpath.splitext(path)[1].lower()
        return bool(ext) and ext in self.ignored
