"""Layered coordinate solvers.

The engine pins every node to a layer (its compacted lane) and asks a
solver for initial coordinates. Solvers only order nodes within layers and
assign rough positions; column snapping and collision resolution happen
afterwards in the engine.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Mapping, Protocol

import networkx as nx


class SolverError(Exception):
    """Solver output was missing nodes or had non-finite coordinates."""

    pass


@dataclass(frozen=True)
class SolverInput:
    """
    A layered graph with pinned layer assignment.

    ``layers`` lists node uids per layer in initial order. ``order_keys``
    gives each node's sort key (namespace, name, uid) for the initial order.
    """

    layers: tuple[tuple[str, ...], ...]
    sizes: Mapping[str, tuple[float, float]]
    edges: tuple[tuple[str, str], ...] = ()
    order_keys: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def node_ids(self) -> list[str]:
        return [uid for layer in self.layers for uid in layer]

    def __len__(self) -> int:
        return sum(len(layer) for layer in self.layers)


class LayeredSolver(Protocol):
    def solve(self, graph: SolverInput) -> dict[str, tuple[float, float]]:
        ...


def count_crossings(ordering: list[list[str]], graph: nx.Graph) -> int:
    """Edge crossings between adjacent layers."""
    total = 0
    for l_idx in range(len(ordering) - 1):
        next_pos: dict[str, int] = {uid: i for i, uid in enumerate(ordering[l_idx + 1])}
        pairs: list[tuple[int, int]] = []
        for sp, uid in enumerate(ordering[l_idx]):
            for nb in sorted(graph.neighbors(uid)):
                if nb in next_pos:
                    pairs.append((sp, next_pos[nb]))
        for i in range(len(pairs)):
            for j in range(i + 1, len(pairs)):
                a, b = pairs[i], pairs[j]
                if (a[0] < b[0] and a[1] > b[1]) or (a[0] > b[0] and a[1] < b[1]):
                    total += 1
    return total


def _barycenter(uid: str, graph: nx.Graph, neighbor_pos: dict[str, float], fallback: float) -> float:
    positions = [neighbor_pos[nb] for nb in graph.neighbors(uid) if nb in neighbor_pos]
    if not positions:
        return fallback
    return sum(positions) / len(positions)


class BarycenterSolver:
    """
    Sugiyama-style placement over pinned layers.

    Layers start sorted by (namespace, name). Alternating down and up
    barycenter sweeps reorder them, keeping the ordering with the fewest
    crossings seen. Nodes are then stacked by measured height.
    """

    def __init__(self, iterations: int = 8, layer_gap: float = 150, vertical_gap: float = 40) -> None:
        self.iterations = iterations
        self.layer_gap = layer_gap
        self.vertical_gap = vertical_gap

    def build_graph(self, graph: SolverInput) -> nx.Graph:
        g: nx.Graph = nx.Graph()
        for layer_idx, layer in enumerate(graph.layers):
            for uid in layer:
                g.add_node(uid, layer=layer_idx)
        for source, target in graph.edges:
            if source in g and target in g and source != target:
                g.add_edge(source, target)
        return g

    def order(self, graph: SolverInput) -> list[list[str]]:
        """Crossing-minimized node order per layer."""
        g = self.build_graph(graph)
        ordering = [
            sorted(layer, key=lambda uid: graph.order_keys.get(uid, (uid,))) for layer in graph.layers
        ]
        best = [list(layer) for layer in ordering]
        best_crossings = count_crossings(best, g)

        for _pass in range(self.iterations):
            if best_crossings == 0:
                break

            for layer_idx in range(1, len(ordering)):
                prev = {uid: float(i) for i, uid in enumerate(ordering[layer_idx - 1])}
                current = {uid: float(i) for i, uid in enumerate(ordering[layer_idx])}
                ordering[layer_idx].sort(key=lambda uid: (_barycenter(uid, g, prev, current[uid]), current[uid]))

            for layer_idx in range(len(ordering) - 2, -1, -1):
                nxt = {uid: float(i) for i, uid in enumerate(ordering[layer_idx + 1])}
                current = {uid: float(i) for i, uid in enumerate(ordering[layer_idx])}
                ordering[layer_idx].sort(key=lambda uid: (_barycenter(uid, g, nxt, current[uid]), current[uid]))

            crossings = count_crossings(ordering, g)
            if crossings < best_crossings:
                best = [list(layer) for layer in ordering]
                best_crossings = crossings
            else:
                break

        return best

    def solve(self, graph: SolverInput) -> dict[str, tuple[float, float]]:
        positions: dict[str, tuple[float, float]] = {}
        x = 0.0
        for layer in self.order(graph):
            y = 0.0
            widest = 0.0
            for uid in layer:
                width, height = graph.sizes[uid]
                positions[uid] = (x, y)
                y += height + self.vertical_gap
                widest = max(widest, width)
            x += widest + self.layer_gap
        return positions


def check_positions(graph: SolverInput, positions: object) -> dict[str, tuple[float, float]]:
    """Validate solver output, raising SolverError when it is unusable."""
    if not isinstance(positions, Mapping):
        raise SolverError(f"Solver returned {type(positions).__name__}, expected a mapping")

    checked: dict[str, tuple[float, float]] = {}
    for uid in graph.node_ids:
        if uid not in positions:
            raise SolverError(f"Solver returned no position for {uid}")
        try:
            x, y = positions[uid]
            x, y = float(x), float(y)
        except (TypeError, ValueError) as e:
            raise SolverError(f"Malformed position for {uid}: {positions[uid]!r}") from e
        if not (math.isfinite(x) and math.isfinite(y)):
            raise SolverError(f"Non-finite position for {uid}: ({x}, {y})")
        checked[uid] = (x, y)
    return checked
