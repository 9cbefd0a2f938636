"""site_audit.errors: exception hierarchy shared by the orchestrator and its collaborators."""

from __future__ import annotations

__all__ = (
    "AuditError",
    "NoFetcherError",
    "NoExtractorError",
    "InvalidStartURLError",
    "InvalidStartSchemeError",
    "InvalidMaxWorkersError",
    "InvalidMaxDepthError",
    "InvalidURLError",
    "RobotsPreflightError",
    "RobotsParseError",
    "FetchError",
    "ExtractionError",
)


class AuditError(Exception):
    """Base class for every error raised by SiteAudit."""


# Construction ---------------------------------------------------------------


class NoFetcherError(AuditError, TypeError):
    def __init__(self) -> None:
        super().__init__("no fetcher provided")


class NoExtractorError(AuditError, TypeError):
    def __init__(self) -> None:
        super().__init__("no extractor provided")


class InvalidStartURLError(AuditError, ValueError):
    def __init__(self, url: str) -> None:
        super().__init__(f"invalid start url: {url}")
        self.url = url


class InvalidStartSchemeError(AuditError, ValueError):
    def __init__(self, url: str) -> None:
        super().__init__(f"invalid start url scheme: {url}")
        self.url = url


class InvalidMaxWorkersError(AuditError, ValueError):
    def __init__(self, value: int) -> None:
        super().__init__(f"invalid max workers: {value}")


class InvalidMaxDepthError(AuditError, ValueError):
    def __init__(self, value: int) -> None:
        super().__init__(f"invalid max depth: {value}")


class InvalidURLError(AuditError, ValueError):
    """A URL string could not be parsed."""


# Robots preflight -----------------------------------------------------------


class RobotsParseError(AuditError):
    """robots.txt body could not be turned into a ruleset."""


class RobotsPreflightError(AuditError):
    """robots.txt could not be fetched or understood; the crawl never starts."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"failed to respect robots: {reason}")
        self.reason = reason


# Per task -------------------------------------------------------------------


class FetchError(AuditError):
    """Transport level failure while fetching a URL."""


class ExtractionError(AuditError):
    """A document body could not be parsed for links."""
