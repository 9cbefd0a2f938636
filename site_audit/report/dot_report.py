"""site_audit.report.dot_report: Graphviz DOT export of the link graph, rendered with Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from site_audit.crawler.graph import LinkGraph

TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "graph.dot.j2"
OUTPUT_NAME = "graph.dot"


def dot_escape(value: object) -> str:
    """Escape a value for use inside a double-quoted DOT identifier."""
    return str(value).replace("\\", "\\\\").replace('"', '\\"')


def render_dot(
    graph: LinkGraph,
    output_dir: Union[Path, str] = "out",
    template_dir: Union[Path, str] = TEMPLATE_DIR,
) -> Path:
    """Render *graph* as DOT and save it as ``graph.dot`` inside *output_dir*.

    Args:
        graph: link graph built by an audit.
        output_dir: directory for the output file, created if missing.
        template_dir: directory holding ``graph.dot.j2``.

    Returns:
        Path of the written file.

    Example:
    ```python
    from functools import partial
    from site_audit.report.dot_report import render_dot
    audit.export_graph(partial(render_dot, output_dir="out"))
    ```
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["dot_escape"] = dot_escape
    template = env.get_template(TEMPLATE_NAME)

    output_path = output_dir / OUTPUT_NAME
    output_path.write_text(template.render(graph=graph, nodes=graph.nodes()), encoding="utf-8")
    return output_path
