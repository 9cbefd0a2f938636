"""site_audit.report: exporters that write the finished link graph to disk."""

from __future__ import annotations

from .dot_report import render_dot
from .json_report import graph_to_dict, render_json

__all__ = ["render_dot", "render_json", "graph_to_dict"]
