"""Asynchronous layout requests with last-request-wins commit."""

from __future__ import annotations

import asyncio
from typing import Iterable, Mapping

from astrolabe.core.edges import Edge
from astrolabe.core.schema import Resource
from astrolabe.layout.engine import LayoutEngine, Size
from astrolabe.layout.model import LayoutDiagnostics, LayoutResult
from astrolabe.observability.logging import get_logger

logger = get_logger("scheduler")


class LayoutScheduler:
    """
    Runs solves off the event loop and commits only the newest request.

    Every request takes a monotonically increasing generation id. When a
    solve completes, its result is committed to ``current`` only if no
    newer request was issued in the meantime; otherwise it is discarded
    and ``request`` returns None.
    """

    def __init__(self, engine: LayoutEngine | None = None, timeout: float | None = None) -> None:
        self.engine = engine or LayoutEngine()
        self.timeout = timeout if timeout is not None else self.engine.config.solver_timeout
        self.current: LayoutResult | None = None
        self._latest_generation = 0
        self._committed_generation = 0

    @property
    def latest_generation(self) -> int:
        return self._latest_generation

    @property
    def committed_generation(self) -> int:
        return self._committed_generation

    def is_latest(self, generation: int) -> bool:
        return generation == self._latest_generation

    async def request(
        self,
        nodes: Iterable[Resource],
        edges: Iterable[Edge],
        sizes: Mapping[str, Size] | None = None,
    ) -> LayoutResult | None:
        self._latest_generation += 1
        generation = self._latest_generation

        prepared = self.engine.prepare(nodes, edges, sizes)
        if not prepared.resources:
            result = LayoutResult(diagnostics=LayoutDiagnostics(dropped_edges=prepared.dropped_edges))
        else:
            try:
                positions = await asyncio.wait_for(
                    asyncio.to_thread(self.engine.solve, prepared), timeout=self.timeout
                )
            except asyncio.TimeoutError:
                result = self.engine.fallback(prepared, f"solver timed out after {self.timeout}s")
            except Exception as e:
                result = self.engine.fallback(prepared, e)
            else:
                result = self.engine.finish(prepared, positions)

        result.diagnostics.generation = generation
        if not self.is_latest(generation):
            logger.debug("layout_superseded", generation=generation, latest=self._latest_generation)
            return None

        self.current = result
        self._committed_generation = generation
        return result
