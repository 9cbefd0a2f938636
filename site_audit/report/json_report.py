# site_audit/report/json_report.py

"""
JSON export of the link graph.

Nodes in discovery order plus one entry per recorded edge.
"""
import json
from pathlib import Path
from typing import Any, Dict

from site_audit.crawler.graph import LinkGraph


def graph_to_dict(graph: LinkGraph) -> Dict[str, Any]:
    return {
        "nodes": graph.nodes(),
        "edges": [
            {"source": source, "target": target, "weight": weight}
            for source, target, weight in graph.edges()
        ],
    }


def render_json(graph: LinkGraph, output_path: Path | str) -> Path:
    """
    Save *graph* as JSON at *output_path*.

    :param graph: link graph built by an audit
    :param output_path: path to the JSON file
    :return: Path of the saved file
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open("w", encoding="utf-8") as f:
        json.dump(graph_to_dict(graph), f, ensure_ascii=False, indent=2)

    return output
