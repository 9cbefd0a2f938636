# File: tests/conftest.py
from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import AsyncIterator
from typing import Dict, List, Optional, Sequence

import pytest
from aiohttp import web

from site_audit.config import AuditConfig
from site_audit.crawler.link_extractor import LinkExtractor
from site_audit.errors import ExtractionError, FetchError


class FakeResponse:
    """In-memory stand-in for an HTTP response; remembers whether it was released."""

    def __init__(self, body: str = "", status: int = 200) -> None:
        self.status = status
        self._body = body.encode("utf-8")
        self.released = False

    async def read(self) -> bytes:
        return self._body

    def release(self) -> None:
        self.released = True


class FakeFetcher:
    """Scripted fetcher: known URLs get their canned response, everything else a 404."""

    def __init__(
        self,
        pages: Optional[Dict[str, tuple[str, int] | str]] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ) -> None:
        self.pages = pages or {}
        self.error = error
        self.delay = delay
        self.calls: Counter[str] = Counter()
        self.responses: List[FakeResponse] = []

    async def fetch(self, url: str) -> FakeResponse:
        self.calls[url] += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        page = self.pages.get(url)
        if page is None:
            response = FakeResponse("", 404)
        elif isinstance(page, tuple):
            response = FakeResponse(*page)
        else:
            response = FakeResponse(page)
        self.responses.append(response)
        return response


class FakeExtractor:
    """Returns the same links for every page, or raises."""

    def __init__(self, links: Sequence[str] = (), error: Optional[Exception] = None) -> None:
        self.links = list(links)
        self.error = error

    def extract(self, base_url: str, body) -> List[str]:
        if self.error is not None:
            raise self.error
        return list(self.links)


@pytest.fixture()
def config() -> AuditConfig:
    """Baseline configuration used by the orchestrator tests."""
    return AuditConfig(
        log_level="info",
        start_url="https://example.com",
        agent="agent",
        respect_robots=True,
        max_workers=5,
        max_depth=2,
        valid_schemes="https,http",
    )


class ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(logging.DEBUG)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def messages(self, level: int = logging.DEBUG) -> List[str]:
        return [r.getMessage() for r in self.records if r.levelno >= level]


@pytest.fixture()
def log_handler() -> ListHandler:
    return ListHandler()


@pytest.fixture()
def audit_logger(log_handler: ListHandler) -> logging.Logger:
    """Isolated logger so assertions do not depend on global logging configuration."""
    lg = logging.getLogger("SiteAudit.tests")
    lg.handlers[:] = [log_handler]
    lg.setLevel(logging.DEBUG)
    lg.propagate = False
    return lg


@pytest.fixture()
def html_extractor() -> LinkExtractor:
    return LinkExtractor.with_default_ignores()


@pytest.fixture()
def fetch_error() -> FetchError:
    return FetchError("network failure")


@pytest.fixture()
def extraction_error() -> ExtractionError:
    return ExtractionError("extract error")


async def _serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


def html(text: str) -> web.Response:
    return web.Response(text=text, content_type="text/html")
