"""
Fetcher module: issues GET requests with a fixed User-Agent and per-request timeout.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout

from site_audit.errors import FetchError

__all__ = ("HTTPFetcher", "HTTPResponse", "DEFAULT_TIMEOUT")

DEFAULT_TIMEOUT: float = 5.0

logger = logging.getLogger("SiteAudit.fetcher")


class HTTPResponse:
    """Thin wrapper over :class:`aiohttp.ClientResponse` that maps transport errors to FetchError."""

    __slots__ = ("_raw",)

    def __init__(self, raw: ClientResponse) -> None:
        self._raw = raw

    @property
    def status(self) -> int:
        return self._raw.status

    @property
    def url(self) -> str:
        return str(self._raw.url)

    async def read(self) -> bytes:
        try:
            return await self._raw.read()
        except (ClientError, asyncio.TimeoutError) as exc:
            raise FetchError(f"reading body of {self.url} failed: {exc!r}") from exc

    def release(self) -> None:
        self._raw.release()


class HTTPFetcher:
    """
    Owns one :class:`aiohttp.ClientSession` for the lifetime of a crawl.

    Use as ``async with HTTPFetcher(agent) as fetcher: ...``. The body of every
    returned response must be released by the caller.
    """

    def __init__(self, user_agent: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.user_agent = user_agent
        self.timeout = timeout
        self.session: Optional[ClientSession] = None

    async def __aenter__(self) -> HTTPFetcher:
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.timeout),
            headers={"User-Agent": self.user_agent},
            raise_for_status=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    async def fetch(self, url: str) -> HTTPResponse:
        if self.session is None:
            raise RuntimeError("Session not initialized")
        try:
            raw = await self.session.get(url)
        except (ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise FetchError(f"GET {url} failed: {exc!r}") from exc
        logger.debug("GET %s -> %d", url, raw.status)
        return HTTPResponse(raw)
