"""Lane-based layout: lanes, solver, side band and scheduling."""

from astrolabe.layout.engine import LayoutEngine, grid_layout, layout
from astrolabe.layout.lanes import Lane, compact_lanes, lane_for_kind, lane_name
from astrolabe.layout.model import LayoutDiagnostics, LayoutNode, LayoutResult
from astrolabe.layout.scheduler import LayoutScheduler
from astrolabe.layout.sideband import Box, PlacementArena, find_anchor, place_attachments
from astrolabe.layout.solver import BarycenterSolver, LayeredSolver, SolverError, SolverInput

__all__ = [
    "BarycenterSolver",
    "Box",
    "Lane",
    "LayeredSolver",
    "LayoutDiagnostics",
    "LayoutEngine",
    "LayoutNode",
    "LayoutResult",
    "LayoutScheduler",
    "PlacementArena",
    "SolverError",
    "SolverInput",
    "compact_lanes",
    "find_anchor",
    "grid_layout",
    "lane_for_kind",
    "lane_name",
    "layout",
    "place_attachments",
]
