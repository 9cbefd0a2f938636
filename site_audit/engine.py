# File: site_audit/engine.py
"""site_audit.engine: wires the HTTP fetcher and link extractor into an Audit, runs it and exports the graph."""

from __future__ import annotations

import asyncio
import signal
from typing import Callable, List, Optional, Sequence

from site_audit.config import AuditConfig
from site_audit.crawler.audit import Audit, ExportFn
from site_audit.crawler.fetcher import HTTPFetcher
from site_audit.crawler.link_extractor import LinkExtractor
from site_audit.logger import logger

__all__ = ["Engine"]

_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _install_signal_handlers(loop: asyncio.AbstractEventLoop, callback: Callable[[], None]) -> List[int]:
    installed: List[int] = []
    for sig in _SIGNALS:
        try:
            loop.add_signal_handler(sig, _on_signal, sig, callback)
        except (NotImplementedError, RuntimeError, ValueError):
            # no signal support off the main thread or on Windows
            continue
        installed.append(sig)
    return installed


def _on_signal(sig: int, callback: Callable[[], None]) -> None:
    logger.info("Signal %s received, shutting down", signal.Signals(sig).name)
    callback()


class Engine:
    """Facade for the CLI and tests: build the collaborators, run one audit, export its graph."""

    def __init__(self, config: AuditConfig) -> None:
        self.config = config
        self.audit: Optional[Audit] = None

    def run(self, exporters: Sequence[ExportFn] = (), crawl_timeout: Optional[float] = None) -> Audit:
        """Blocking entry point: run :meth:`crawl` in a fresh event loop."""
        return asyncio.run(self.crawl(exporters, crawl_timeout))

    async def crawl(self, exporters: Sequence[ExportFn] = (), crawl_timeout: Optional[float] = None) -> Audit:
        """
        Run one audit against the live site.

        SIGINT/SIGTERM and *crawl_timeout* stop the workers gracefully. Every
        exporter runs once the audit returns, also when it raised.
        """
        logger.info("Starting audit of %s", self.config.start_url)
        async with HTTPFetcher(self.config.agent, self.config.timeout) as fetcher:
            audit = Audit(self.config, fetcher, LinkExtractor.with_default_ignores())
            self.audit = audit
            loop = asyncio.get_running_loop()
            installed = _install_signal_handlers(loop, audit.stop)
            timer = None
            if crawl_timeout:
                timer = loop.call_later(crawl_timeout, self._on_timeout, crawl_timeout)
            try:
                await audit.start()
            finally:
                if timer is not None:
                    timer.cancel()
                for sig in installed:
                    loop.remove_signal_handler(sig)
                for export in exporters:
                    audit.export_graph(export)
        return audit

    def _on_timeout(self, crawl_timeout: float) -> None:
        logger.warning("Audit did not finish within %s seconds, stopping", crawl_timeout)
        if self.audit is not None:
            self.audit.stop()
