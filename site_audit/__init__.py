# site_audit/__init__.py
"""
SiteAudit package initializer.
Defines package version and exposes the orchestrator.
"""
__version__ = "0.1.0"

from site_audit.crawler.audit import Audit  # noqa: E402

__all__ = ["Audit", "__version__"]
