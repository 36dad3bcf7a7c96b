"""Tests for fan-in simplification."""

import pytest

from astrolabe.core.edges import Edge
from astrolabe.core.schema import EdgeType, parse_resource
from astrolabe.core.simplify import simplify_edges
from astrolabe.core.visibility import ExpansionState


@pytest.fixture
def scenario_b():
    """p1 and p2 owned via rs1 by d1, all using cm1."""
    resources = [
        parse_resource({"uid": "d1", "kind": "Deployment", "name": "d", "namespace": "ns"}),
        parse_resource({"uid": "rs1", "kind": "ReplicaSet", "name": "rs", "namespace": "ns"}),
        parse_resource({"uid": "p1", "kind": "Pod", "name": "p1", "namespace": "ns"}),
        parse_resource({"uid": "p2", "kind": "Pod", "name": "p2", "namespace": "ns"}),
        parse_resource({"uid": "cm1", "kind": "ConfigMap", "name": "cm", "namespace": "ns"}),
        parse_resource({"uid": "pvc1", "kind": "PersistentVolumeClaim", "name": "data", "namespace": "ns"}),
    ]
    edges = [
        Edge("d1", "rs1", EdgeType.OWNS),
        Edge("rs1", "p1", EdgeType.OWNS),
        Edge("rs1", "p2", EdgeType.OWNS),
        Edge("p1", "cm1", EdgeType.USES),
        Edge("p2", "cm1", EdgeType.USES),
        Edge("rs1", "cm1", EdgeType.USES),
        Edge("d1", "cm1", EdgeType.USES),
    ]
    return resources, edges


class TestSimplifyEdges:
    """Tests for simplify_edges."""

    def test_scenario_b(self, scenario_b):
        """Only the Deployment's edge into the ConfigMap survives."""
        resources, edges = scenario_b
        expansion = ExpansionState({"d1": ["ReplicaSet", "ConfigMap"], "rs1": ["Pod"]})
        simplified = simplify_edges(edges, resources, expansion)
        assert [e for e in simplified if e.target == "cm1"] == [Edge("d1", "cm1", EdgeType.USES)]
        assert Edge("p1", "cm1", EdgeType.USES) not in simplified
        assert Edge("rs1", "cm1", EdgeType.USES) not in simplified

    def test_other_targets_pass_through(self, scenario_b):
        resources, edges = scenario_b
        simplified = simplify_edges(edges, resources)
        assert simplified[:3] == edges[:3]
        assert len(simplified) == 4

    def test_without_controller_pod_wins(self, scenario_b):
        """ReplicaSet outranks Pod when the Deployment is not a source."""
        resources, edges = scenario_b
        simplified = simplify_edges(edges[:6], resources)
        assert [e for e in simplified if e.target == "cm1"] == [Edge("rs1", "cm1", EdgeType.USES)]

    def test_claim_keeps_every_pod(self, scenario_b):
        """Several pods can share a claim, so all pod edges stay."""
        resources, _ = scenario_b
        edges = [
            Edge("p1", "pvc1", EdgeType.MOUNTS),
            Edge("rs1", "pvc1", EdgeType.REF),
            Edge("p2", "pvc1", EdgeType.MOUNTS),
        ]
        assert simplify_edges(edges, resources) == [edges[0], edges[2]]

    def test_claim_without_pod_sources_keeps_all(self, scenario_b):
        resources, _ = scenario_b
        edges = [Edge("d1", "pvc1", EdgeType.REF), Edge("rs1", "pvc1", EdgeType.REF)]
        assert simplify_edges(edges, resources) == edges

    def test_unknown_target_dropped(self, scenario_b):
        resources, edges = scenario_b
        simplified = simplify_edges(edges + [Edge("d1", "ghost", EdgeType.USES)], resources)
        assert all(e.target != "ghost" for e in simplified)

    def test_groups_in_first_seen_target_order(self, scenario_b):
        resources, _ = scenario_b
        edges = [
            Edge("p1", "cm1", EdgeType.USES),
            Edge("d1", "rs1", EdgeType.OWNS),
            Edge("d1", "cm1", EdgeType.USES),
        ]
        assert simplify_edges(edges, resources) == [
            Edge("d1", "cm1", EdgeType.USES),
            Edge("d1", "rs1", EdgeType.OWNS),
        ]

    def test_empty(self, scenario_b):
        resources, _ = scenario_b
        assert simplify_edges([], resources) == []
