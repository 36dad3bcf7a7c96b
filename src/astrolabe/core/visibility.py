"""Filters and expansion-driven visibility."""

from __future__ import annotations

from typing import Iterable, Iterator, Mapping

from pydantic import BaseModel

from astrolabe.core.edges import Edge, as_edge_set
from astrolabe.core.index import ResourceIndex
from astrolabe.core.kinds import is_collapsible_kind
from astrolabe.core.schema import Kind, Resource, ResourceStatus, ViewScope

ALL = "all"

PROBLEM_STATUSES = frozenset({ResourceStatus.ERROR, ResourceStatus.PENDING})


class ExpansionState(Mapping[str, frozenset[Kind]]):
    """
    Per-resource set of descendant kinds the user has expanded.

    Immutable: every mutation returns a new state, so callers can hand the
    same instance to each pipeline stage.
    """

    def __init__(self, entries: Mapping[str, Iterable[Kind | str]] | None = None) -> None:
        self._entries: dict[str, frozenset[Kind]] = {}
        for uid, kinds in (entries or {}).items():
            normalized = _known_kinds(kinds)
            if normalized:
                self._entries[uid] = normalized

    @classmethod
    def from_dict(cls, data: Mapping[str, Iterable[str]]) -> ExpansionState:
        return cls(data)

    def to_dict(self) -> dict[str, list[str]]:
        return {uid: sorted(k.value for k in kinds) for uid, kinds in sorted(self._entries.items())}

    def expanded(self, uid: str) -> frozenset[Kind]:
        return self._entries.get(uid, frozenset())

    def is_expanded(self, uid: str, kind: Kind) -> bool:
        return kind in self.expanded(uid)

    def expand(self, uid: str, *kinds: Kind) -> ExpansionState:
        entries = dict(self._entries)
        entries[uid] = self.expanded(uid) | _known_kinds(kinds)
        return ExpansionState(entries)

    def toggle(self, uid: str, kind: Kind | str) -> ExpansionState:
        """Flip one kind for one resource. Empty entries are removed.

        Unknown kind names leave the state unchanged.
        """
        known = _known_kinds((kind,))
        if not known:
            return self
        (kind,) = known
        entries = dict(self._entries)
        current = self.expanded(uid)
        entries[uid] = current - {kind} if kind in current else current | {kind}
        return ExpansionState(entries)

    def issubset(self, other: Mapping[str, Iterable[Kind]]) -> bool:
        return all(kinds <= _expanded_kinds(other, uid) for uid, kinds in self._entries.items())

    def key(self) -> str:
        """Canonical string form, usable as a memoization key.

        Format: "uid1:KindA+KindB,uid2:KindC" (sorted).
        """
        return ",".join(f"{uid}:{'+'.join(kinds)}" for uid, kinds in self.to_dict().items())

    def __getitem__(self, uid: str) -> frozenset[Kind]:
        return self._entries[uid]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ExpansionState({self.key()!r})"


class FilterState(BaseModel):
    """User filters applied before collapse visibility."""

    status: str = ALL
    kind: str = ALL
    search: str = ""
    problems_only: bool = False
    show_cluster_scoped: bool = True


def is_collapsible(resource: Resource) -> bool:
    """Whether the resource is hidden until an owner expands its kind."""
    return is_collapsible_kind(resource.kind)


def is_problem(resource: Resource) -> bool:
    """Error/Pending status, restarted containers or missing replicas."""
    if resource.status in PROBLEM_STATUSES:
        return True
    restarts = getattr(resource, "restart_count", None)
    if restarts is not None and restarts > 0:
        return True
    desired = getattr(resource, "replicas_desired", None)
    ready = getattr(resource, "replicas_ready", None)
    return desired is not None and ready is not None and ready < desired


def matches_search(resource: Resource, query: str) -> bool:
    if not query:
        return True
    q = query.lower()
    return (
        q in resource.name.lower()
        or q in resource.kind.value.lower()
        or q in (resource.namespace or "").lower()
    )


def apply_filters(
    resources: Iterable[Resource],
    filters: FilterState | None = None,
    scope: ViewScope = ViewScope.CLUSTER,
) -> list[Resource]:
    """Conjunction of the status, kind, search, problems and scope filters."""
    filters = filters or FilterState()
    hide_cluster_scoped = not filters.show_cluster_scoped and scope != ViewScope.CLUSTER

    filtered = []
    for resource in resources:
        if filters.status != ALL and resource.status.value != filters.status:
            continue
        if filters.kind != ALL and resource.kind.value != filters.kind:
            continue
        if not matches_search(resource, filters.search):
            continue
        if filters.problems_only and not is_problem(resource):
            continue
        if hide_cluster_scoped and resource.is_cluster_scoped:
            continue
        filtered.append(resource)
    return filtered


def filter_visible(
    resources: Iterable[Resource],
    all_resources: Iterable[Resource],
    edges: Iterable[Edge],
    expansion: Mapping[str, Iterable[Kind]],
) -> list[Resource]:
    """
    Resources visible under ``expansion``.

    Always-visible kinds pass. A collapsible resource is visible when it
    has no owner in ``all_resources`` or when any owner has its kind
    expanded. Owners are the sources of all incoming edges, so adding an
    expansion entry can only reveal resources, never hide them.
    """
    index = all_resources if isinstance(all_resources, ResourceIndex) else ResourceIndex(all_resources)
    edge_set = as_edge_set(edges)

    visible = []
    for resource in resources:
        if not is_collapsible(resource):
            visible.append(resource)
            continue

        owner_uids = [e.source for e in edge_set.targeting(resource.uid) if e.source in index]
        if not owner_uids:
            visible.append(resource)
            continue

        if any(resource.kind in _expanded_kinds(expansion, uid) for uid in owner_uids):
            visible.append(resource)
    return visible


def _expanded_kinds(expansion: Mapping[str, Iterable[Kind]], uid: str) -> frozenset[Kind]:
    """Expanded kinds for ``uid``, accepting plain dicts of kind strings."""
    if isinstance(expansion, ExpansionState):
        return expansion.expanded(uid)
    return _known_kinds(expansion.get(uid, ()))


def _known_kinds(kinds: Iterable[Kind | str]) -> frozenset[Kind]:
    """Kinds from ``kinds``, skipping names that are not a known Kind."""
    known: set[Kind] = set()
    for k in kinds:
        try:
            known.add(Kind(k))
        except ValueError:
            continue
    return frozenset(known)
