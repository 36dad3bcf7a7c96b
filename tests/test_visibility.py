"""Tests for filters, expansion state and collapse visibility."""

from itertools import combinations

import pytest

from astrolabe.core.edges import Edge
from astrolabe.core.resolver import resolve_edges
from astrolabe.core.schema import EdgeType, Kind, ViewScope, parse_resource
from astrolabe.core.visibility import (
    ExpansionState,
    FilterState,
    apply_filters,
    filter_visible,
    is_collapsible,
    is_problem,
    matches_search,
)


def visible_uids(resources, edges, expansion):
    return {r.uid for r in filter_visible(resources, resources, edges, expansion)}


class TestExpansionState:
    """Tests for ExpansionState class."""

    def test_toggle_on_and_off(self):
        state = ExpansionState().toggle("d1", Kind.REPLICA_SET)
        assert state.is_expanded("d1", Kind.REPLICA_SET)
        assert "d1" not in state.toggle("d1", Kind.REPLICA_SET)

    def test_toggle_is_pure(self):
        """Mutations return new states."""
        state = ExpansionState()
        state.toggle("d1", "ReplicaSet")
        assert len(state) == 0

    def test_toggle_accepts_strings(self):
        state = ExpansionState().toggle("d1", "Pod")
        assert state.is_expanded("d1", Kind.POD)

    def test_expand(self):
        state = ExpansionState().expand("d1", Kind.REPLICA_SET).expand("d1", Kind.CONFIG_MAP, Kind.SECRET)
        assert state["d1"] == frozenset({Kind.REPLICA_SET, Kind.CONFIG_MAP, Kind.SECRET})

    def test_empty_entries_dropped(self):
        assert len(ExpansionState({"d1": []})) == 0

    def test_unknown_kinds_skipped(self):
        state = ExpansionState({"d1": ["Bogus", "Pod"], "rs1": ["Gizmo"]})
        assert state.to_dict() == {"d1": ["Pod"]}
        assert state.expand("d1", "Bogus") == state
        assert state.toggle("d1", "Bogus") is state

    def test_key_is_canonical(self):
        """Insertion order does not change the key."""
        a = ExpansionState().expand("rs1", Kind.POD).expand("d1", Kind.SECRET, Kind.CONFIG_MAP)
        b = ExpansionState({"d1": ["Secret", "ConfigMap"], "rs1": ["Pod"]})
        assert a.key() == b.key() == "d1:ConfigMap+Secret,rs1:Pod"

    def test_dict_round_trip(self):
        state = ExpansionState.from_dict({"d1": ["ReplicaSet"]})
        assert state.to_dict() == {"d1": ["ReplicaSet"]}

    def test_issubset(self):
        small = ExpansionState({"d1": ["ReplicaSet"]})
        large = small.expand("d1", Kind.SECRET).expand("rs1", Kind.POD)
        assert small.issubset(large)
        assert not large.issubset(small)
        assert small.issubset({"d1": {"ReplicaSet", "Pod"}})


class TestFilters:
    """Tests for apply_filters."""

    def test_no_filters(self, shop):
        assert apply_filters(shop) == shop

    def test_status(self, shop):
        result = apply_filters(shop, FilterState(status="Pending"))
        assert [r.uid for r in result] == ["p2"]

    def test_kind(self, shop):
        result = apply_filters(shop, FilterState(kind="Pod"))
        assert [r.uid for r in result] == ["p1", "p2"]

    def test_search_case_insensitive(self, shop):
        """Search matches name, kind or namespace."""
        assert {r.uid for r in apply_filters(shop, FilterState(search="WEB-ABC"))} == {"rs1", "p1", "p2"}
        assert {r.uid for r in apply_filters(shop, FilterState(search="storageclass"))} == {"sc1"}

    def test_problems_only(self, shop):
        result = apply_filters(shop, FilterState(problems_only=True))
        assert [r.uid for r in result] == ["p2"]

    def test_problem_detection(self):
        restarted = parse_resource({"uid": "p", "kind": "Pod", "name": "p", "status": "Ready", "restartCount": 2})
        degraded = parse_resource(
            {"uid": "d", "kind": "Deployment", "name": "d", "status": "Ready", "replicasDesired": 3, "replicasReady": 1}
        )
        failed = parse_resource({"uid": "c", "kind": "ConfigMap", "name": "c", "status": "Error"})
        healthy = parse_resource({"uid": "h", "kind": "Pod", "name": "h", "status": "Ready", "restartCount": 0})
        assert is_problem(restarted)
        assert is_problem(degraded)
        assert is_problem(failed)
        assert not is_problem(healthy)

    def test_cluster_scoped_hidden_in_scoped_views(self, shop):
        filters = FilterState(show_cluster_scoped=False)
        namespaced = {r.uid for r in apply_filters(shop, filters, ViewScope.NAMESPACE)}
        assert "pv1" not in namespaced
        assert "sc1" not in namespaced
        assert len(apply_filters(shop, filters, ViewScope.CLUSTER)) == len(shop)

    def test_filters_combine(self, shop):
        result = apply_filters(shop, FilterState(kind="Pod", status="Ready"))
        assert [r.uid for r in result] == ["p1"]

    def test_matches_empty_search(self, by_uid):
        assert matches_search(by_uid["d1"], "")


class TestFilterVisible:
    """Tests for collapse visibility."""

    def test_collapsible_kinds(self, by_uid):
        assert is_collapsible(by_uid["p1"])
        assert is_collapsible(by_uid["cm1"])
        assert not is_collapsible(by_uid["d1"])
        assert not is_collapsible(by_uid["hpa1"])

    def test_scenario_a(self):
        """Expanding level by level reveals one level at a time."""
        resources = [
            parse_resource({"uid": "d1", "kind": "Deployment", "name": "d", "namespace": "ns"}),
            parse_resource({"uid": "rs1", "kind": "ReplicaSet", "name": "rs", "namespace": "ns"}),
            parse_resource({"uid": "p1", "kind": "Pod", "name": "p", "namespace": "ns"}),
            parse_resource({"uid": "cm1", "kind": "ConfigMap", "name": "cm", "namespace": "ns"}),
        ]
        edges = [
            Edge("d1", "rs1", EdgeType.OWNS),
            Edge("rs1", "p1", EdgeType.OWNS),
            Edge("p1", "cm1", EdgeType.USES),
        ]
        state = ExpansionState()
        assert visible_uids(resources, edges, state) == {"d1"}

        state = state.toggle("d1", Kind.REPLICA_SET)
        assert visible_uids(resources, edges, state) == {"d1", "rs1"}

        state = state.toggle("rs1", Kind.POD)
        assert visible_uids(resources, edges, state) == {"d1", "rs1", "p1"}

    def test_shop_collapsed(self, shop):
        assert visible_uids(shop, resolve_edges(shop), ExpansionState()) == {"ing1", "svc1", "d1", "hpa1"}

    def test_any_owner_reveals(self, shop):
        """A pod shows when either its ReplicaSet or its Endpoints expands pods."""
        edges = resolve_edges(shop)
        assert {"p1", "p2"} <= visible_uids(shop, edges, {"ep1": {"Pod"}})
        assert {"p1", "p2"} <= visible_uids(shop, edges, {"rs1": {"Pod"}})

    def test_orphan_collapsible_visible(self):
        """Collapsible resources without owners fail open."""
        cm = parse_resource({"uid": "cm", "kind": "ConfigMap", "name": "cm"})
        assert visible_uids([cm], [], ExpansionState()) == {"cm"}

    def test_owner_outside_set_is_ignored(self):
        """Edges from sources missing in all_resources do not hide."""
        cm = parse_resource({"uid": "cm", "kind": "ConfigMap", "name": "cm"})
        edges = [Edge("ghost", "cm", EdgeType.USES)]
        assert visible_uids([cm], edges, ExpansionState()) == {"cm"}

    def test_unknown_expanded_kind_ignored(self):
        """Unrecognised kind names in a plain-dict expansion are skipped."""
        resources = [
            parse_resource({"uid": "d1", "kind": "Deployment", "name": "d", "namespace": "ns"}),
            parse_resource({"uid": "rs1", "kind": "ReplicaSet", "name": "rs", "namespace": "ns"}),
        ]
        edges = [Edge("d1", "rs1", EdgeType.OWNS)]
        assert visible_uids(resources, edges, {"d1": ["Bogus"]}) == {"d1"}
        assert visible_uids(resources, edges, {"d1": ["Bogus", "ReplicaSet"]}) == {"d1", "rs1"}

    def test_owners_from_all_resources(self, shop, by_uid):
        """Owners hidden by filters still count as owners."""
        edges = resolve_edges(shop)
        visible = filter_visible([by_uid["rs1"]], shop, edges, ExpansionState())
        assert visible == []


ENTRIES = [
    ("d1", Kind.REPLICA_SET),
    ("rs1", Kind.POD),
    ("svc1", Kind.ENDPOINTS),
    ("d1", Kind.CONFIG_MAP),
    ("p1", Kind.PERSISTENT_VOLUME_CLAIM),
    ("pvc1", Kind.PERSISTENT_VOLUME),
]


def _state(entries):
    state = ExpansionState()
    for uid, kind in entries:
        state = state.expand(uid, kind)
    return state


@pytest.mark.parametrize("size", [1, 2, 3])
def test_expansion_monotonic(shop, size):
    """Adding expansion entries never hides a visible resource."""
    edges = resolve_edges(shop)
    for subset in combinations(ENTRIES, size):
        small = _state(subset)
        small_visible = visible_uids(shop, edges, small)
        for extra in ENTRIES:
            large = small.expand(*extra)
            assert small.issubset(large)
            assert small_visible <= visible_uids(shop, edges, large)
