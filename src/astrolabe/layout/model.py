"""Layout output types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from astrolabe.core.edges import Edge
from astrolabe.core.schema import Resource
from astrolabe.layout.lanes import Lane


@dataclass
class LayoutNode:
    """A resource with its assigned position and lane."""

    resource: Resource
    x: float
    y: float
    width: float
    height: float
    lane: int
    attachments: dict[str, int] = field(default_factory=dict)

    @property
    def uid(self) -> str:
        return self.resource.uid

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def is_side_band(self) -> bool:
        return self.lane == Lane.SIDE_BAND

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.uid,
            "kind": self.resource.kind.value,
            "name": self.resource.name,
            "namespace": self.resource.namespace,
            "position": {"x": self.x, "y": self.y},
            "size": {"width": self.width, "height": self.height},
            "lane": int(self.lane),
            "attachments": dict(self.attachments),
        }


@dataclass
class LayoutDiagnostics:
    solver_failed: bool = False
    solver_error: str | None = None
    dropped_edges: int = 0
    orphan_attachments: int = 0
    generation: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "solver_failed": self.solver_failed,
            "solver_error": self.solver_error,
            "dropped_edges": self.dropped_edges,
            "orphan_attachments": self.orphan_attachments,
            "generation": self.generation,
        }


@dataclass
class LayoutResult:
    """Positioned nodes and the validated edges between them."""

    nodes: list[LayoutNode] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    diagnostics: LayoutDiagnostics = field(default_factory=LayoutDiagnostics)

    def node(self, uid: str) -> LayoutNode | None:
        for node in self.nodes:
            if node.uid == uid:
                return node
        return None

    def positions(self) -> dict[str, tuple[float, float]]:
        return {n.uid: (n.x, n.y) for n in self.nodes}

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "diagnostics": self.diagnostics.to_dict(),
        }

    def __len__(self) -> int:
        return len(self.nodes)
