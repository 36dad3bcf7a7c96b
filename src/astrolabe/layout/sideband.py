"""Side-band placement of attachments next to their anchors.

Placement is a pure function over a ``PlacementArena``, an immutable
accumulator of the boxes placed so far. Each attachment is checked against
everything already in the arena and nudged down until clear.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from astrolabe.core.edges import Edge, as_edge_set
from astrolabe.layout.lanes import ANCHOR_LANES, Lane
from astrolabe.layout.model import LayoutNode


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def overlaps(self, other: Box, gap: float = 0) -> bool:
        """Whether the boxes overlap once ``other`` is padded by ``gap``."""
        return (
            self.x < other.right + gap
            and other.x < self.right + gap
            and self.y < other.bottom + gap
            and other.y < self.bottom + gap
        )

    def moved_to(self, y: float) -> Box:
        return Box(self.x, y, self.width, self.height)


class PlacementArena:
    """Boxes placed so far. ``place`` returns a new arena."""

    def __init__(self, boxes: Iterable[Box] = ()) -> None:
        self._boxes: tuple[Box, ...] = tuple(boxes)

    @classmethod
    def of(cls, nodes: Iterable[LayoutNode]) -> PlacementArena:
        return cls(Box(n.x, n.y, n.width, n.height) for n in nodes)

    @property
    def boxes(self) -> tuple[Box, ...]:
        return self._boxes

    @property
    def bottom(self) -> float:
        return max((b.bottom for b in self._boxes), default=0.0)

    def collisions(self, box: Box, gap: float = 0) -> list[Box]:
        return [b for b in self._boxes if box.overlaps(b, gap)]

    def first_clear(self, box: Box, gap: float = 0) -> Box:
        """Move ``box`` down until it overlaps nothing in the arena."""
        while True:
            hits = self.collisions(box, gap)
            if not hits:
                return box
            box = box.moved_to(max(b.bottom for b in hits) + gap)

    def place(self, box: Box) -> PlacementArena:
        return PlacementArena(self._boxes + (box,))

    def __len__(self) -> int:
        return len(self._boxes)


def find_anchor(
    uid: str,
    edges: Iterable[Edge],
    raw_lanes: Mapping[str, Lane],
    placed: Mapping[str, LayoutNode],
) -> LayoutNode | None:
    """
    Main-flow node an attachment hangs off.

    Incoming edges are followed breadth-first through other side-band
    nodes. Candidates in the service, ephemeral or pod lanes win over the
    rest; otherwise the first main-flow candidate found is used.
    """
    edge_set = as_edge_set(edges)
    queue = deque([uid])
    seen = {uid}
    fallback: LayoutNode | None = None

    while queue:
        current = queue.popleft()
        for edge in edge_set.targeting(current):
            source = edge.source
            if source in seen:
                continue
            seen.add(source)
            lane = raw_lanes.get(source)
            if lane is None:
                continue
            if lane == Lane.SIDE_BAND:
                queue.append(source)
                continue
            node = placed.get(source)
            if node is None:
                continue
            if lane in ANCHOR_LANES:
                return node
            if fallback is None:
                fallback = node
    return fallback


def place_attachments(
    attachments: Sequence[LayoutNode],
    main_flow: Sequence[LayoutNode],
    edges: Iterable[Edge],
    raw_lanes: Mapping[str, Lane],
    attachment_offset: float,
    vertical_gap: float,
    orphan_gap: float,
    orphan_columns: int,
    lane_gap: float,
) -> tuple[list[LayoutNode], int]:
    """
    Position side-band nodes; returns (placed_nodes, orphan_count).

    Anchored attachments go right of their anchor, stacked per anchor.
    Unanchored ones fill a row-major region below everything else.
    """
    edge_set = as_edge_set(edges)
    placed = {n.uid: n for n in main_flow}
    arena = PlacementArena.of(main_flow)
    next_y: dict[str, float] = {}

    ordered = sorted(
        attachments,
        key=lambda n: (n.resource.namespace or "", n.resource.name, n.uid),
    )

    result: list[LayoutNode] = []
    orphans: list[LayoutNode] = []
    for node in ordered:
        anchor = find_anchor(node.uid, edge_set, raw_lanes, placed)
        if anchor is None:
            orphans.append(node)
            continue

        start_y = next_y.get(anchor.uid, anchor.y)
        box = Box(anchor.right + attachment_offset, start_y, node.width, node.height)
        box = arena.first_clear(box, vertical_gap)
        arena = arena.place(box)
        next_y[anchor.uid] = box.bottom + vertical_gap
        result.append(_moved(node, box))

    if orphans:
        top = arena.bottom + orphan_gap if len(arena) else 0.0
        cell_width = max(n.width for n in orphans) + lane_gap
        cell_height = max(n.height for n in orphans) + vertical_gap
        for i, node in enumerate(orphans):
            row, col = divmod(i, orphan_columns)
            box = Box(col * cell_width, top + row * cell_height, node.width, node.height)
            arena = arena.place(box)
            result.append(_moved(node, box))

    return result, len(orphans)


def _moved(node: LayoutNode, box: Box) -> LayoutNode:
    return LayoutNode(
        resource=node.resource,
        x=box.x,
        y=box.y,
        width=node.width,
        height=node.height,
        lane=node.lane,
        attachments=dict(node.attachments),
    )
