import json

from site_audit.crawler.graph import LinkGraph
from site_audit.report import graph_to_dict, render_dot, render_json


def sample_graph() -> LinkGraph:
    graph = LinkGraph()
    graph.add_edge("https://e.com/", "https://e.com/a")
    graph.add_edge("https://e.com/", "https://e.com/b")
    graph.add_edge("https://e.com/a", "https://e.com/c")
    return graph


def test_render_dot(tmp_path):
    path = render_dot(sample_graph(), output_dir=tmp_path / "nested" / "out")
    assert path == tmp_path / "nested" / "out" / "graph.dot"
    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines == [
        "digraph G{",
        '  rankdir="LR";',
        "  node [shape=circle];",
        '  "https://e.com/";',
        '  "https://e.com/" -> "https://e.com/a" [label="1"];',
        '  "https://e.com/" -> "https://e.com/b" [label="1"];',
        '  "https://e.com/a";',
        '  "https://e.com/a" -> "https://e.com/c" [label="1"];',
        '  "https://e.com/b";',
        '  "https://e.com/c";',
        "}",
    ]


def test_render_dot_empty_graph(tmp_path):
    text = render_dot(LinkGraph(), output_dir=tmp_path).read_text(encoding="utf-8")
    assert text.splitlines() == ["digraph G{", '  rankdir="LR";', "  node [shape=circle];", "}"]


def test_render_dot_escapes_quotes(tmp_path):
    graph = LinkGraph()
    graph.add_edge('https://e.com/say"hi"', "https://e.com/<b>&")
    text = render_dot(graph, output_dir=tmp_path).read_text(encoding="utf-8")
    assert '"https://e.com/say\\"hi\\"" -> "https://e.com/<b>&"' in text


def test_render_json(tmp_path):
    out = render_json(sample_graph(), tmp_path / "sub" / "graph.json")
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data == graph_to_dict(sample_graph())
    assert data["nodes"] == ["https://e.com/", "https://e.com/a", "https://e.com/b", "https://e.com/c"]
    assert data["edges"][0] == {"source": "https://e.com/", "target": "https://e.com/a", "weight": 1}
    assert len(data["edges"]) == 3
