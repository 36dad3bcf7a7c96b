"""Tests for edges module."""

import pytest

from astrolabe.core.edges import Edge, EdgeSet, restrict_edges, validate_edges
from astrolabe.core.schema import EdgeType


@pytest.fixture
def sample_edges_data():
    """Sample edges in wire format."""
    return [
        {"from": "d1", "to": "rs1", "type": "owns"},
        {"from": "rs1", "to": "p1", "type": "owns"},
        {"from": "rs1", "to": "p2", "type": "owner"},
        {"from": "d1", "to": "cm1", "type": "uses"},
        {"from": "p1", "to": "pvc1", "type": "mounts"},
        {"from": "p2", "to": "pvc1", "type": "mounts"},
    ]


class TestEdge:
    """Tests for Edge class."""

    def test_from_dict(self):
        edge = Edge.from_dict({"from": "d1", "to": "rs1", "type": "owns"})
        assert edge == Edge("d1", "rs1", EdgeType.OWNS)

    def test_to_dict(self):
        """Wire form uses from/to."""
        edge = Edge("p1", "pvc1", EdgeType.MOUNTS)
        assert edge.to_dict() == {"from": "p1", "to": "pvc1", "type": "mounts"}

    def test_edges_are_hashable(self):
        """Equal edges collapse in a set."""
        edges = {Edge("a", "b", EdgeType.REF), Edge("a", "b", EdgeType.REF)}
        assert len(edges) == 1

    def test_repr(self):
        assert repr(Edge("a", "b", EdgeType.USES)) == "Edge(a -uses-> b)"


class TestEdgeSet:
    """Tests for EdgeSet class."""

    def test_from_dicts(self, sample_edges_data):
        edges = EdgeSet.from_dicts(sample_edges_data)
        assert len(edges) == 6

    def test_by_type(self, sample_edges_data):
        """Legacy ``owner`` edges are indexed as ``owns``."""
        edges = EdgeSet.from_dicts(sample_edges_data)
        assert len(edges.by_type(EdgeType.OWNS)) == 3
        assert len(edges.by_type(EdgeType.MOUNTS)) == 2
        assert edges.by_type(EdgeType.SCALES) == []

    def test_from_node(self, sample_edges_data):
        edges = EdgeSet.from_dicts(sample_edges_data)
        assert {e.target for e in edges.from_node("d1")} == {"rs1", "cm1"}

    def test_targeting(self, sample_edges_data):
        edges = EdgeSet.from_dicts(sample_edges_data)
        assert [e.source for e in edges.targeting("pvc1")] == ["p1", "p2"]
        assert edges.targeting("d1") == []

    def test_keeps_order_and_duplicates(self):
        edge = Edge("a", "b", EdgeType.REF)
        edges = EdgeSet([edge, edge])
        assert edges.to_list() == [edge, edge]

    def test_contains(self, sample_edges_data):
        edges = EdgeSet.from_dicts(sample_edges_data)
        assert Edge("d1", "cm1", EdgeType.USES) in edges
        assert Edge("cm1", "d1", EdgeType.USES) not in edges


class TestValidateEdges:
    """Tests for endpoint validation."""

    def test_drops_unknown_endpoints(self, sample_edges_data):
        edges = EdgeSet.from_dicts(sample_edges_data)
        kept, dropped = validate_edges(edges, ["d1", "rs1", "p1", "cm1"])
        assert dropped == 3
        assert all(e.source in {"d1", "rs1", "p1"} for e in kept)

    def test_ghost_counted_once(self):
        edges = [Edge("a", "b", EdgeType.OWNS), Edge("a", "ghost", EdgeType.OWNS)]
        kept, dropped = validate_edges(edges, {"a", "b"})
        assert kept == [Edge("a", "b", EdgeType.OWNS)]
        assert dropped == 1

    def test_restrict_edges(self, sample_edges_data):
        edges = EdgeSet.from_dicts(sample_edges_data)
        assert restrict_edges(edges, []) == []
