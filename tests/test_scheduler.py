"""Tests for the asynchronous layout scheduler."""

import asyncio
import time

from astrolabe.core.schema import parse_resource
from astrolabe.layout.engine import LayoutEngine
from astrolabe.layout.scheduler import LayoutScheduler
from astrolabe.layout.solver import BarycenterSolver


class SleepySolver(BarycenterSolver):
    """Sleeps before solving any graph containing the ``slow`` node."""

    def __init__(self, delay):
        super().__init__()
        self.delay = delay

    def solve(self, graph):
        if "slow" in graph.node_ids:
            time.sleep(self.delay)
        return super().solve(graph)


class BrokenSolver:
    def solve(self, graph):
        raise ValueError("bad graph")


def deployment(uid):
    return parse_resource({"uid": uid, "kind": "Deployment", "name": uid, "namespace": "ns"})


class TestLayoutScheduler:
    """Tests for LayoutScheduler class."""

    def test_single_request_commits(self):
        scheduler = LayoutScheduler()
        result = asyncio.run(scheduler.request([deployment("a")], []))
        assert result is scheduler.current
        assert result.diagnostics.generation == 1
        assert scheduler.committed_generation == 1

    def test_last_request_wins(self):
        """A slow earlier solve finishing late never replaces a newer result."""
        scheduler = LayoutScheduler(LayoutEngine(solver=SleepySolver(0.2)))

        async def run():
            return await asyncio.gather(
                scheduler.request([deployment("slow")], []),
                scheduler.request([deployment("fast")], []),
            )

        stale, fresh = asyncio.run(run())
        assert stale is None
        assert [n.uid for n in fresh.nodes] == ["fast"]
        assert scheduler.current is fresh
        assert scheduler.latest_generation == 2
        assert scheduler.committed_generation == 2

    def test_timeout_falls_back(self):
        scheduler = LayoutScheduler(LayoutEngine(solver=SleepySolver(0.5)), timeout=0.05)
        result = asyncio.run(scheduler.request([deployment("slow")], []))
        assert result.diagnostics.solver_failed
        assert result.diagnostics.solver_error == "solver timed out after 0.05s"
        assert result.positions() == {"slow": (0, 0)}

    def test_solver_error_falls_back(self):
        scheduler = LayoutScheduler(LayoutEngine(solver=BrokenSolver()))
        result = asyncio.run(scheduler.request([deployment("a"), deployment("b")], []))
        assert result.diagnostics.solver_failed
        assert result.diagnostics.solver_error == "bad graph"
        assert scheduler.current is result

    def test_empty_request(self):
        scheduler = LayoutScheduler(LayoutEngine(solver=BrokenSolver()))
        result = asyncio.run(scheduler.request([], []))
        assert len(result) == 0
        assert not result.diagnostics.solver_failed

    def test_timeout_from_config(self):
        assert LayoutScheduler().timeout == 5.0
