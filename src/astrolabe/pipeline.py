"""Snapshot-to-layout pipeline.

``Topology`` holds everything derived once per snapshot (validated edges,
attachment sets). ``render`` recomputes the per-view stages from scratch
for a given filter and expansion state:

    filters -> collapse visibility -> visible edges -> simplify -> layout
"""

from __future__ import annotations

from typing import Iterable, Mapping

from astrolabe.core.attachments import AttachmentSet, compute_all_attachments, find_owner
from astrolabe.core.edges import Edge, restrict_edges, validate_edges
from astrolabe.core.index import ResourceIndex
from astrolabe.core.resolver import resolve_edges
from astrolabe.core.schema import Kind, Resource, ViewScope
from astrolabe.core.simplify import simplify_edges
from astrolabe.core.visibility import (
    ExpansionState,
    FilterState,
    apply_filters,
    filter_visible,
    is_collapsible,
)
from astrolabe.layout.engine import LayoutEngine, Size
from astrolabe.layout.model import LayoutResult
from astrolabe.layout.scheduler import LayoutScheduler
from astrolabe.observability.logging import get_logger
from astrolabe.snapshot import Snapshot

logger = get_logger("pipeline")


class Topology:
    """A snapshot's resources with their validated edges and attachments."""

    def __init__(
        self,
        resources: Iterable[Resource],
        edges: Iterable[Edge] | None = None,
        scope: ViewScope = ViewScope.CLUSTER,
    ) -> None:
        self.index = ResourceIndex(resources)
        self.scope = scope
        self.edges_supplied = edges is not None

        raw_edges = list(edges) if edges is not None else resolve_edges(self.index)
        self.edges, self.dropped_edges = validate_edges(raw_edges, self.index.uids)
        if self.dropped_edges:
            logger.debug("edges_dropped", count=self.dropped_edges, stage="snapshot")

        self.attachments: dict[str, AttachmentSet] = compute_all_attachments(self.index, self.edges)

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> Topology:
        return cls(snapshot.nodes, snapshot.edges, snapshot.scope)

    @property
    def resources(self) -> list[Resource]:
        return list(self.index)

    def get(self, uid: str) -> Resource | None:
        return self.index.get(uid)

    def owner_of(self, uid: str) -> Resource | None:
        resource = self.index.get(uid)
        if resource is None:
            return None
        return find_owner(resource, self.index, self.edges)

    def visible(
        self,
        filters: FilterState | None = None,
        expansion: Mapping[str, Iterable[Kind]] | None = None,
    ) -> list[Resource]:
        """Resources passing the filters, then collapse visibility."""
        filtered = apply_filters(self.index, filters, self.scope)
        return filter_visible(filtered, self.index, self.edges, expansion or ExpansionState())

    def view(
        self,
        filters: FilterState | None = None,
        expansion: Mapping[str, Iterable[Kind]] | None = None,
    ) -> tuple[list[Resource], list[Edge]]:
        """Visible resources and the simplified edges between them."""
        expansion = expansion or ExpansionState()
        nodes = self.visible(filters, expansion)
        edges = restrict_edges(self.edges, (n.uid for n in nodes))
        return nodes, simplify_edges(edges, nodes, expansion)

    def render(
        self,
        filters: FilterState | None = None,
        expansion: Mapping[str, Iterable[Kind]] | None = None,
        engine: LayoutEngine | None = None,
        sizes: Mapping[str, Size] | None = None,
    ) -> LayoutResult:
        nodes, edges = self.view(filters, expansion)
        result = (engine or LayoutEngine()).layout(nodes, edges, sizes)
        return self._annotate(result)

    async def render_async(
        self,
        scheduler: LayoutScheduler,
        filters: FilterState | None = None,
        expansion: Mapping[str, Iterable[Kind]] | None = None,
        sizes: Mapping[str, Size] | None = None,
    ) -> LayoutResult | None:
        """Render through ``scheduler``. Returns None when superseded."""
        nodes, edges = self.view(filters, expansion)
        result = await scheduler.request(nodes, edges, sizes)
        return self._annotate(result) if result is not None else None

    def _annotate(self, result: LayoutResult) -> LayoutResult:
        result.diagnostics.dropped_edges += self.dropped_edges
        for node in result.nodes:
            attachments = self.attachments.get(node.uid)
            node.attachments = attachments.summary() if attachments else {}
        return result

    @staticmethod
    def toggle(expansion: ExpansionState | None, uid: str, kind: Kind | str) -> ExpansionState:
        """Expand or collapse one kind under one resource."""
        return (expansion or ExpansionState()).toggle(uid, kind)

    def expand_all(self) -> ExpansionState:
        """Expansion state under which every resource is visible."""
        entries: dict[str, set[Kind]] = {}
        for edge in self.edges:
            target = self.index.get(edge.target)
            if target is not None and is_collapsible(target):
                entries.setdefault(edge.source, set()).add(target.kind)
        return ExpansionState(entries)

    def kind_options(self) -> list[str]:
        return sorted({r.kind.value for r in self.index})

    def status_options(self) -> list[str]:
        return sorted({r.status.value for r in self.index})

    def __len__(self) -> int:
        return len(self.index)
