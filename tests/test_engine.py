# File: tests/test_engine.py
from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import web

from site_audit.config import AuditConfig
from site_audit.engine import Engine
from site_audit.errors import InvalidStartURLError, RobotsPreflightError

from conftest import _serve_app, html


@pytest_asyncio.fixture
async def slow_site(unused_tcp_port: int) -> AsyncIterator[str]:
    app = web.Application()

    async def root(_):
        return html('<a href="/fast">fast</a><a href="/slow">slow</a>')

    async def fast(_):
        return html("<p>fast</p>")

    async def slow(_):
        await asyncio.sleep(1.5)
        return html("<p>slow</p>")

    app.router.add_get("/", root)
    app.router.add_get("/fast", fast)
    app.router.add_get("/slow", slow)

    async for url in _serve_app(app, unused_tcp_port):
        yield url


def engine_config(base: str, **overrides) -> AuditConfig:
    values = dict(start_url=base, valid_schemes="http", respect_robots=False, max_workers=2, max_depth=2)
    values.update(overrides)
    return AuditConfig(**values)


@pytest.mark.asyncio()
async def test_crawl_runs_every_exporter(slow_site: str):
    exported = []
    engine = Engine(engine_config(slow_site, max_depth=1))
    audit = await engine.crawl([exported.append, lambda graph: exported.append(len(graph))])

    assert engine.audit is audit
    assert exported[0] is audit.graph
    assert exported[1] == 3
    assert audit.fetched == 1


@pytest.mark.asyncio()
async def test_crawl_timeout_stops_gracefully(slow_site: str):
    exported = []
    engine = Engine(engine_config(slow_site))
    started = time.perf_counter()
    audit = await engine.crawl([exported.append], crawl_timeout=0.5)
    elapsed = time.perf_counter() - started

    assert audit.stopped
    assert elapsed < 1.4
    assert f"{slow_site}/fast" in audit.visited
    assert exported == [audit.graph]


@pytest.mark.asyncio()
async def test_exporters_run_when_preflight_fails(unused_tcp_port: int):
    app = web.Application()

    async def robots(_):
        return web.Response(status=500, text="boom")

    app.router.add_get("/robots.txt", robots)
    exported = []
    async for base in _serve_app(app, unused_tcp_port):
        engine = Engine(engine_config(base, respect_robots=True))
        with pytest.raises(RobotsPreflightError):
            await engine.crawl([exported.append])
    assert len(exported) == 1
    assert len(exported[0]) == 0


def test_run_rejects_bad_start_url():
    with pytest.raises(InvalidStartURLError):
        Engine(AuditConfig(start_url="")).run()
