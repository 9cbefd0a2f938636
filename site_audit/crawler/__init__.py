"""site_audit.crawler: orchestrator, URL policy and the HTTP/HTML collaborators."""

from .audit import Audit, Extractor, Fetcher
from .fetcher import HTTPFetcher
from .graph import Edge, LinkGraph
from .link_extractor import LinkExtractor
from .models import Task, TaskQueue

__all__ = [
    "Audit",
    "Fetcher",
    "Extractor",
    "HTTPFetcher",
    "LinkExtractor",
    "LinkGraph",
    "Edge",
    "Task",
    "TaskQueue",
]
