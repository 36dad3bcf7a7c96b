"""Lane-based layout engine.

Layout runs in three phases so the solve step can be moved off the
calling thread by the scheduler:

1. ``prepare``: validate edges, assign and compact lanes, build the
   solver input.
2. ``solve``: delegate to the layered solver and validate its output.
3. ``finish``: snap columns, resolve vertical collisions, place the side
   band.

Any solver failure falls back to a fixed-column grid, so ``layout``
always returns one node per input resource.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Mapping

from astrolabe.config import LayoutConfig
from astrolabe.core.edges import Edge, validate_edges
from astrolabe.core.schema import Resource
from astrolabe.layout.lanes import MAIN_FLOW_LANES, Lane, compact_lanes, lane_for_kind
from astrolabe.layout.model import LayoutDiagnostics, LayoutNode, LayoutResult
from astrolabe.layout.sideband import place_attachments
from astrolabe.layout.solver import BarycenterSolver, LayeredSolver, SolverInput, check_positions
from astrolabe.observability.logging import get_logger

logger = get_logger("layout")

Size = tuple[float, float]


def clean_size(value: object, default: Size) -> Size:
    """``value`` as a finite, positive (width, height) pair, else ``default``."""
    try:
        width, height = value  # type: ignore[misc]
        width, height = float(width), float(height)
    except (TypeError, ValueError):
        return default
    if not (math.isfinite(width) and math.isfinite(height)) or width <= 0 or height <= 0:
        return default
    return (width, height)


@dataclass
class PreparedLayout:
    """Everything the solve and finish phases need."""

    resources: list[Resource]
    edges: list[Edge]
    sizes: dict[str, Size]
    raw_lanes: dict[str, Lane]
    lanes: dict[str, int]
    solver_input: SolverInput
    dropped_edges: int = 0
    lane_count: int = 0

    @property
    def main_flow(self) -> list[Resource]:
        return [r for r in self.resources if self.raw_lanes[r.uid] in MAIN_FLOW_LANES]

    @property
    def side_band(self) -> list[Resource]:
        return [r for r in self.resources if self.raw_lanes[r.uid] == Lane.SIDE_BAND]


class LayoutEngine:
    """Assigns lanes, delegates to a solver, then post-processes positions."""

    def __init__(self, config: LayoutConfig | None = None, solver: LayeredSolver | None = None) -> None:
        self.config = config or LayoutConfig()
        self.solver = solver or BarycenterSolver(
            iterations=self.config.solver_iterations,
            layer_gap=self.config.lane_gap,
            vertical_gap=self.config.vertical_gap,
        )

    def layout(
        self,
        nodes: Iterable[Resource],
        edges: Iterable[Edge],
        sizes: Mapping[str, Size] | None = None,
    ) -> LayoutResult:
        """Position ``nodes``. Never raises on solver failure."""
        prepared = self.prepare(nodes, edges, sizes)
        if not prepared.resources:
            return LayoutResult(diagnostics=LayoutDiagnostics(dropped_edges=prepared.dropped_edges))
        try:
            positions = self.solve(prepared)
        except Exception as e:
            return self.fallback(prepared, e)
        return self.finish(prepared, positions)

    def prepare(
        self,
        nodes: Iterable[Resource],
        edges: Iterable[Edge],
        sizes: Mapping[str, Size] | None = None,
    ) -> PreparedLayout:
        unique: dict[str, Resource] = {}
        for r in nodes:
            unique.setdefault(r.uid, r)
        resources = list(unique.values())
        default_size = (self.config.node_width, self.config.node_height)
        node_sizes = {r.uid: clean_size((sizes or {}).get(r.uid), default_size) for r in resources}

        kept, dropped = validate_edges(edges, node_sizes)
        if dropped:
            logger.debug("edges_dropped", count=dropped, stage="layout")

        raw_lanes = {r.uid: lane_for_kind(r.kind) for r in resources}
        compacted = compact_lanes(raw_lanes.values())
        lanes = {
            uid: Lane.SIDE_BAND if lane == Lane.SIDE_BAND else compacted[lane] for uid, lane in raw_lanes.items()
        }

        layers: list[list[str]] = [[] for _ in compacted]
        for r in resources:
            if raw_lanes[r.uid] in MAIN_FLOW_LANES:
                layers[lanes[r.uid]].append(r.uid)

        main_ids = {uid for layer in layers for uid in layer}
        solver_input = SolverInput(
            layers=tuple(tuple(layer) for layer in layers),
            sizes={uid: node_sizes[uid] for uid in main_ids},
            edges=tuple((e.source, e.target) for e in kept if e.source in main_ids and e.target in main_ids),
            order_keys={r.uid: (r.namespace or "", r.name, r.uid) for r in resources if r.uid in main_ids},
        )

        return PreparedLayout(
            resources=resources,
            edges=kept,
            sizes=node_sizes,
            raw_lanes=raw_lanes,
            lanes=lanes,
            solver_input=solver_input,
            dropped_edges=dropped,
            lane_count=len(compacted),
        )

    def solve(self, prepared: PreparedLayout) -> dict[str, Size]:
        """Run the solver. Raises on failure or malformed output."""
        if not len(prepared.solver_input):
            return {}
        positions = self.solver.solve(prepared.solver_input)
        return check_positions(prepared.solver_input, positions)

    def finish(self, prepared: PreparedLayout, positions: Mapping[str, Size]) -> LayoutResult:
        cfg = self.config
        by_lane: dict[int, list[Resource]] = {}
        for r in prepared.main_flow:
            by_lane.setdefault(prepared.lanes[r.uid], []).append(r)

        placed: dict[str, LayoutNode] = {}
        x = 0.0
        for lane in range(prepared.lane_count):
            members = by_lane.get(lane, [])
            for r, y in zip(members, self._resolve_collisions(members, prepared.sizes, positions)):
                width, height = prepared.sizes[r.uid]
                placed[r.uid] = LayoutNode(r, x, y, width, height, lane)
            x += max((prepared.sizes[r.uid][0] for r in members), default=0.0) + cfg.lane_gap

        pending = [
            LayoutNode(r, 0.0, 0.0, *prepared.sizes[r.uid], Lane.SIDE_BAND) for r in prepared.side_band
        ]
        side_band, orphans = place_attachments(
            pending,
            list(placed.values()),
            prepared.edges,
            prepared.raw_lanes,
            attachment_offset=cfg.attachment_offset,
            vertical_gap=cfg.vertical_gap,
            orphan_gap=cfg.orphan_gap,
            orphan_columns=cfg.grid_columns,
            lane_gap=cfg.lane_gap,
        )
        for node in side_band:
            placed[node.uid] = node

        return LayoutResult(
            nodes=[placed[r.uid] for r in prepared.resources],
            edges=list(prepared.edges),
            diagnostics=LayoutDiagnostics(dropped_edges=prepared.dropped_edges, orphan_attachments=orphans),
        )

    def _resolve_collisions(
        self,
        members: list[Resource],
        sizes: Mapping[str, Size],
        positions: Mapping[str, Size],
    ) -> list[float]:
        """
        Final y for each lane member, in ``members`` order.

        Members are swept top to bottom in solver order, each pushed below
        the previous one plus the vertical gap; the lane is then shifted
        back so its mean y matches the solver's.
        """
        if not members:
            return []
        ordered = sorted(members, key=lambda r: (positions[r.uid][1], r.uid))
        original = [positions[r.uid][1] for r in ordered]

        swept: list[float] = []
        prev_bottom: float | None = None
        for r, y in zip(ordered, original):
            if prev_bottom is not None:
                y = max(y, prev_bottom + self.config.vertical_gap)
            swept.append(y)
            prev_bottom = y + sizes[r.uid][1]

        shift = (sum(original) - sum(swept)) / len(swept)
        final = {r.uid: y + shift for r, y in zip(ordered, swept)}
        return [final[r.uid] for r in members]

    def fallback(self, prepared: PreparedLayout, error: BaseException | str) -> LayoutResult:
        """Grid layout used when the solver cannot produce positions."""
        message = str(error) or type(error).__name__
        logger.warning("layout_solver_failed", error=message, nodes=len(prepared.resources), fallback="grid")
        nodes = grid_layout(prepared.resources, self.config, prepared.sizes, prepared.lanes)
        return LayoutResult(
            nodes=nodes,
            edges=list(prepared.edges),
            diagnostics=LayoutDiagnostics(
                solver_failed=True,
                solver_error=message,
                dropped_edges=prepared.dropped_edges,
            ),
        )


def grid_layout(
    resources: Iterable[Resource],
    config: LayoutConfig | None = None,
    sizes: Mapping[str, Size] | None = None,
    lanes: Mapping[str, int] | None = None,
) -> list[LayoutNode]:
    """Row-major grid in input order, ``grid_columns`` per row."""
    config = config or LayoutConfig()
    nodes = []
    for i, r in enumerate(resources):
        row, col = divmod(i, config.grid_columns)
        width, height = clean_size((sizes or {}).get(r.uid), (config.node_width, config.node_height))
        lane = lanes[r.uid] if lanes and r.uid in lanes else lane_for_kind(r.kind)
        nodes.append(
            LayoutNode(r, col * config.grid_cell_width, row * config.grid_cell_height, width, height, lane)
        )
    return nodes


def layout(
    nodes: Iterable[Resource],
    edges: Iterable[Edge],
    sizes: Mapping[str, Size] | None = None,
    config: LayoutConfig | None = None,
) -> LayoutResult:
    """Lay out with the default solver."""
    return LayoutEngine(config).layout(nodes, edges, sizes)
