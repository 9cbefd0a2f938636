"""
Crawl orchestrator: a fixed pool of asyncio workers sharing one queue,
visited set and link graph behind a single lock.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, FrozenSet, List, Optional, Protocol, Sequence, Set, Union
from urllib.parse import urljoin, urlsplit

from site_audit.config import AuditConfig
from site_audit.crawler.graph import LinkGraph
from site_audit.crawler.models import Response, Task, TaskQueue
from site_audit.crawler.robots import RobotsTxtRules, parse_robots
from site_audit.crawler.urls import canonical_key, host_of, parse_url, robots_path, same_site
from site_audit.errors import (
    ExtractionError,
    FetchError,
    InvalidMaxDepthError,
    InvalidMaxWorkersError,
    InvalidStartSchemeError,
    InvalidStartURLError,
    InvalidURLError,
    NoExtractorError,
    NoFetcherError,
    RobotsParseError,
    RobotsPreflightError,
)
from site_audit.logger import get_logger, parse_level

__all__ = ("Audit", "Fetcher", "Extractor", "ExportFn")


class Fetcher(Protocol):
    async def fetch(self, url: str) -> Response: ...


class Extractor(Protocol):
    def extract(self, base_url: str, body: Union[bytes, str]) -> Sequence[str]: ...


ExportFn = Callable[[LinkGraph], object]


class Audit:
    """
    One crawl of one site.

    Build it with a config and the two collaborators, ``await start()``, then
    hand the graph to an exporter with :meth:`export_graph`. An instance is
    not reusable across crawls.
    """

    def __init__(
        self,
        config: AuditConfig,
        fetcher: Optional[Fetcher],
        extractor: Optional[Extractor],
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if fetcher is None:
            raise NoFetcherError()
        if extractor is None:
            raise NoExtractorError()
        if not config.start_url:
            raise InvalidStartURLError(config.start_url)
        try:
            start = parse_url(config.start_url)
        except InvalidURLError as exc:
            raise InvalidStartURLError(config.start_url) from exc
        if not start.scheme:
            raise InvalidStartSchemeError(config.start_url)
        if config.max_workers < 0:
            raise InvalidMaxWorkersError(config.max_workers)
        if config.max_depth < 0:
            raise InvalidMaxDepthError(config.max_depth)

        level = parse_level(config.log_level)
        if logger is None:
            logger = get_logger("audit")
            logger.setLevel(logging.INFO if level is None else level)
        if level is None:
            logger.warning("Invalid log level %s, using info", config.log_level)

        self.config = config
        self.logger = logger
        self.fetcher = fetcher
        self.extractor = extractor
        self.start_url: str = config.start_url
        self.schemes: FrozenSet[str] = config.schemes()
        self.robots: Optional[RobotsTxtRules] = None
        self.tasks = TaskQueue()
        self.visited: Set[str] = set()
        self.graph = LinkGraph()
        self.fetched: int = 0
        self.disallowed: List[str] = []

        self._seed_key = canonical_key(start)
        self._in_flight = 0
        self._lock = asyncio.Lock()
        self._ready = asyncio.Condition(self._lock)
        self._stopping = asyncio.Event()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def start(self) -> None:
        """
        Run the crawl to completion.

        Raises RobotsPreflightError when robots.txt is required but cannot be
        honoured; per-page failures are logged and never raised.
        """
        started = time.monotonic()
        if self.config.respect_robots:
            await self._respect_robots()
        self.tasks.enqueue(Task(self.start_url, 0))
        self.visited.add(self.start_url)
        workers = [asyncio.create_task(self._worker(n)) for n in range(self.config.max_workers)]
        try:
            await asyncio.gather(*workers)
        finally:
            for w in workers:
                w.cancel()
        self.logger.info(
            "Auditing finished in %.2f s: %d visited, %d fetched, %d disallowed by robots.txt",
            time.monotonic() - started,
            len(self.visited),
            self.fetched,
            len(self.disallowed),
        )

    def stop(self) -> None:
        """Ask workers to wind down; in-flight fetches are abandoned."""
        if not self._stopping.is_set():
            self.logger.info("Stop requested, abandoning in-flight fetches")
            self._stopping.set()

    @property
    def stopped(self) -> bool:
        return self._stopping.is_set()

    def export_graph(self, export: ExportFn) -> None:
        """Pass the graph to *export*; failures are logged and swallowed."""
        try:
            export(self.graph)
        except Exception:
            self.logger.exception("Error exporting site graph")

    # ------------------------------------------------------------------ #
    # Robots preflight
    # ------------------------------------------------------------------ #

    async def _respect_robots(self) -> None:
        start = urlsplit(self.start_url)
        robots_url = f"{start.scheme}://{host_of(start)}/robots.txt"
        try:
            response = await self.fetcher.fetch(robots_url)
        except FetchError as exc:
            raise RobotsPreflightError(f"error fetching robots.txt: {exc}") from exc
        try:
            if response.status == 404:
                self.logger.info("robots.txt not found (404), proceeding without restrictions")
                self.visited.add(robots_url)
                return
            if response.status != 200:
                raise RobotsPreflightError(
                    f"robots.txt returned non 200/404 status: {response.status}"
                )
            try:
                body = await response.read()
            except FetchError as exc:
                raise RobotsPreflightError(f"error reading robots.txt: {exc}") from exc
        finally:
            response.release()
        try:
            self.robots = parse_robots(body)
        except RobotsParseError as exc:
            raise RobotsPreflightError(f"error parsing robots.txt: {exc}") from exc
        self.logger.debug("robots.txt configured from %s", robots_url)
        self.visited.add(robots_url)

    # ------------------------------------------------------------------ #
    # Workers
    # ------------------------------------------------------------------ #

    async def _worker(self, worker_id: int) -> None:
        while not self._stopping.is_set():
            task = await self._next_task()
            if task is None:
                break
            try:
                links = await self._visit(task)
            except BaseException:
                self._in_flight -= 1
                raise
            async with self._ready:
                if links is not None:
                    self._process_links(task, links)
                self._in_flight -= 1
                self._ready.notify_all()
        self.logger.debug("Worker %d exiting", worker_id)

    async def _next_task(self) -> Optional[Task]:
        """
        Dequeue under the lock. An empty queue only ends the worker once no
        other worker is still processing a page that may add more tasks.
        """
        async with self._ready:
            while self.tasks.is_empty() and self._in_flight and not self._stopping.is_set():
                await self._ready.wait()
            if self.tasks.is_empty() or self._stopping.is_set():
                return None
            self._in_flight += 1
            return self.tasks.dequeue()

    async def _visit(self, task: Task) -> Optional[Sequence[str]]:
        """Fetch and extract one page. Returns None when the page yields nothing to process."""
        self.logger.debug("Fetching %s", task.url)
        try:
            response = await self._fetch(task.url)
        except FetchError as exc:
            self.logger.error("Failed to fetch url %s: %s", task.url, exc)
            return None
        except Exception:
            self.logger.exception("Unexpected error fetching %s", task.url)
            return None
        self.fetched += 1
        try:
            if response.status >= 400:
                self.logger.warning(
                    "Received non successful status code %d for %s", response.status, task.url
                )
                return None
            body = await response.read()
            # off the event loop; extractors must not touch audit state
            links = await asyncio.to_thread(self.extractor.extract, task.url, body)
        except FetchError as exc:
            self.logger.error("Failed to read body of %s: %s", task.url, exc)
            return None
        except ExtractionError as exc:
            self.logger.error("Error extracting links from %s: %s", task.url, exc)
            return None
        except Exception:
            self.logger.exception("Unexpected error reading or extracting %s", task.url)
            return None
        finally:
            response.release()
        self.logger.debug("Links found on %s: %s", task.url, links)
        return links

    async def _fetch(self, url: str) -> Response:
        """Run the fetch, giving up as soon as :meth:`stop` is called."""
        fetch = asyncio.ensure_future(self.fetcher.fetch(url))
        stopped = asyncio.ensure_future(self._stopping.wait())
        abandoned = False
        try:
            await asyncio.wait((fetch, stopped), return_when=asyncio.FIRST_COMPLETED)
        finally:
            stopped.cancel()
            if not fetch.done():
                fetch.cancel()
                abandoned = True
        if abandoned:
            raise FetchError(f"audit stopped before {url} was fetched")
        return fetch.result()

    # ------------------------------------------------------------------ #
    # Link policy (caller holds the lock)
    # ------------------------------------------------------------------ #

    def _process_links(self, task: Task, links: Sequence[str]) -> None:
        source_key = canonical_key(task.url)
        for raw in links:
            try:
                parse_url(raw)
                resolved_url = urljoin(task.url, raw)
                resolved = parse_url(resolved_url)
            except (InvalidURLError, ValueError):
                self.logger.debug("Malformed link %r on %s", raw, task.url)
                continue
            if resolved.scheme not in self.schemes:
                self.logger.debug("Skipping link %s as scheme %r not permitted", raw, resolved.scheme)
                continue
            if not same_site(resolved, task.url):
                self.logger.debug("Skipping external link %s", resolved_url)
                continue
            if self.robots is not None and not self.robots.can_fetch(
                self.config.agent, robots_path(resolved)
            ):
                self.logger.info("Skipping url disallowed by robots.txt: %s", resolved_url)
                self.disallowed.append(resolved_url)
                continue
            key = canonical_key(resolved)
            if key == self._seed_key or key in self.visited:
                continue
            self.visited.add(key)
            self.graph.add_edge(source_key, key, 1)
            if task.depth + 1 < self.config.max_depth:
                self.tasks.enqueue(Task(resolved_url, task.depth + 1))
