"""Edge management for the resource topology."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator

from astrolabe.core.schema import EdgeSchema, EdgeType


@dataclass(frozen=True)
class Edge:
    """Directed, typed relationship between two resource uids."""

    source: str
    target: str
    type: EdgeType

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Edge:
        schema = EdgeSchema.model_validate(data)
        return cls(schema.from_, schema.to, schema.type)

    def to_dict(self) -> dict[str, str]:
        return {"from": self.source, "to": self.target, "type": self.type.value}

    def __repr__(self) -> str:
        return f"Edge({self.source} -{self.type.value}-> {self.target})"


class EdgeSet:
    """
    Ordered collection of edges.

    Keeps insertion order (duplicates included) and provides the lookups
    the attachment engine and simplifier need.
    """

    def __init__(self, edges: Iterable[Edge]) -> None:
        self._edges = list(edges)
        self._type_index: dict[EdgeType, list[Edge]] = {}
        self._source_index: dict[str, list[Edge]] = {}
        self._target_index: dict[str, list[Edge]] = {}
        for edge in self._edges:
            self._type_index.setdefault(edge.type, []).append(edge)
            self._source_index.setdefault(edge.source, []).append(edge)
            self._target_index.setdefault(edge.target, []).append(edge)

    @classmethod
    def from_dicts(cls, data: Iterable[dict[str, Any]]) -> EdgeSet:
        return cls(Edge.from_dict(e) for e in data)

    def by_type(self, edge_type: EdgeType) -> list[Edge]:
        """Get all edges of a specific type."""
        return self._type_index.get(edge_type, [])

    def from_node(self, uid: str) -> list[Edge]:
        """Outgoing edges of a resource."""
        return self._source_index.get(uid, [])

    def targeting(self, uid: str) -> list[Edge]:
        """Incoming edges of a resource."""
        return self._target_index.get(uid, [])

    def to_list(self) -> list[Edge]:
        return list(self._edges)

    def __len__(self) -> int:
        return len(self._edges)

    def __iter__(self) -> Iterator[Edge]:
        return iter(self._edges)

    def __contains__(self, edge: object) -> bool:
        return edge in self._edges


def as_edge_set(edges: Iterable[Edge]) -> EdgeSet:
    return edges if isinstance(edges, EdgeSet) else EdgeSet(edges)


def validate_edges(edges: Iterable[Edge], node_ids: Iterable[str]) -> tuple[list[Edge], int]:
    """
    Drop edges whose endpoints are not in ``node_ids``.

    Returns (kept_edges, dropped_count).
    """
    ids = set(node_ids)
    kept: list[Edge] = []
    dropped = 0
    for edge in edges:
        if edge.source in ids and edge.target in ids:
            kept.append(edge)
        else:
            dropped += 1
    return kept, dropped


def restrict_edges(edges: Iterable[Edge], node_ids: Iterable[str]) -> list[Edge]:
    """Edges with both endpoints in ``node_ids``."""
    return validate_edges(edges, node_ids)[0]
