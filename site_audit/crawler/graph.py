"""
Directed, edge-weighted link graph keyed by canonical URL.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

__all__ = ("Edge", "LinkGraph")


@dataclass(frozen=True, slots=True)
class Edge:
    target: str
    weight: int = 1


class LinkGraph:
    """
    Adjacency mapping ``node -> [Edge, ...]``.

    Nodes appear implicitly when an edge touches them and keep insertion
    order. Edges are never merged: adding the same pair twice records two
    edges.
    """

    def __init__(self) -> None:
        self._adjacency: Dict[str, List[Edge]] = {}

    def add_node(self, node: str) -> None:
        self._adjacency.setdefault(node, [])

    def add_edge(self, source: str, target: str, weight: int = 1) -> None:
        self.add_node(source)
        self.add_node(target)
        self._adjacency[source].append(Edge(target, weight))

    def nodes(self) -> List[str]:
        return list(self._adjacency)

    def neighbours(self, node: str) -> List[Edge]:
        """Outgoing edges of *node*; KeyError if the node is unknown."""
        try:
            return list(self._adjacency[node])
        except KeyError:
            raise KeyError(f"node not in graph: {node}") from None

    def edges(self) -> Iterator[Tuple[str, str, int]]:
        for source, out in self._adjacency.items():
            for edge in out:
                yield source, edge.target, edge.weight

    @property
    def edge_count(self) -> int:
        return sum(len(out) for out in self._adjacency.values())

    def __contains__(self, node: object) -> bool:
        return node in self._adjacency

    def __len__(self) -> int:
        return len(self._adjacency)

    def __repr__(self) -> str:
        return f"<LinkGraph nodes={len(self)} edges={self.edge_count}>"
