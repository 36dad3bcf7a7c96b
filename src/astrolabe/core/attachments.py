"""Attachment computation: which descendants collapse under a resource.

Attachments follow the canonical Kubernetes relationships:

- ReplicaSets, Jobs and Pods hang off their controllers.
- ConfigMaps, Secrets, ServiceAccounts and PVCs are referenced at Pod
  level, but are presented once at the controller for readability.
- A PVC attaches its bound PV, and a PV attaches its StorageClass.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Mapping, Sequence

from astrolabe.core.edges import Edge, EdgeSet, as_edge_set
from astrolabe.core.index import ResourceIndex
from astrolabe.core.kinds import (
    ENDPOINT_KINDS,
    EPHEMERAL_CONTROLLER_KINDS,
    POD_REFERENCE_KINDS,
    WORKLOAD_CONTROLLER_KINDS,
)
from astrolabe.core.priority import find_highest_owner
from astrolabe.core.schema import ClaimResource, EdgeType, Kind, PodResource, Resource, VolumeResource


class AttachmentSet(Mapping[Kind, tuple[Resource, ...]]):
    """Collapsible descendants of one resource, grouped by kind.

    Each group keeps first-seen order and holds a resource at most once.
    Empty groups are not stored.
    """

    def __init__(self, groups: Mapping[Kind, Iterable[Resource]] | None = None) -> None:
        self._groups: dict[Kind, tuple[Resource, ...]] = {}
        for kind, resources in (groups or {}).items():
            unique: dict[str, Resource] = {}
            for resource in resources:
                unique.setdefault(resource.uid, resource)
            if unique:
                self._groups[kind] = tuple(unique.values())

    def __getitem__(self, kind: Kind) -> tuple[Resource, ...]:
        return self._groups[kind]

    def __iter__(self) -> Iterator[Kind]:
        return iter(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def uids(self) -> set[str]:
        return {r.uid for group in self._groups.values() for r in group}

    def summary(self) -> dict[str, int]:
        """Descendant count per kind, for expand/collapse badges."""
        return {kind.value: len(group) for kind, group in self._groups.items()}

    def __repr__(self) -> str:
        return f"AttachmentSet({self.summary()})"


class _Context:
    """Index and edge lookups shared across one attachment computation."""

    def __init__(self, index: ResourceIndex, edges: EdgeSet) -> None:
        self.index = index
        self.edges = edges

    def targets(self, resource: Resource, edge_type: EdgeType | None = None) -> list[Resource]:
        found = []
        for edge in self.edges.from_node(resource.uid):
            if edge_type is not None and edge.type != edge_type:
                continue
            target = self.index.get(edge.target)
            if target is not None:
                found.append(target)
        return found

    def owned(self, resource: Resource, kinds: Iterable[Kind]) -> list[Resource]:
        wanted = set(kinds)
        return [t for t in self.targets(resource, EdgeType.OWNS) if t.kind in wanted]

    def pod_references(self, pod: Resource) -> list[Resource]:
        """Config, identity and storage objects a Pod references.

        Both the Pod's outgoing edges and its own reference fields count,
        since resolved snapshots only carry ``mounts`` edges from Pods.
        """
        refs = [t for t in self.targets(pod) if t.kind in POD_REFERENCE_KINDS]
        if isinstance(pod, PodResource):
            names: list[tuple[Kind, str]] = [(Kind.CONFIG_MAP, n) for n in pod.used_config_maps]
            names += [(Kind.SECRET, n) for n in pod.used_secrets]
            if pod.service_account_name:
                names.append((Kind.SERVICE_ACCOUNT, pod.service_account_name))
            names += [(Kind.PERSISTENT_VOLUME_CLAIM, n) for n in pod.mounted_pvcs]
            for kind, name in names:
                target = self.index.lookup(kind, pod.namespace, name)
                if target is not None:
                    refs.append(target)
        return refs

    def controller_pods(self, controller: Resource) -> list[Resource]:
        """Pods owned directly or through one ReplicaSet/Job layer."""
        pods = self.owned(controller, (Kind.POD,))
        for child in self.owned(controller, EPHEMERAL_CONTROLLER_KINDS):
            pods.extend(self.owned(child, (Kind.POD,)))
        return pods


def _group(resources: Iterable[Resource]) -> AttachmentSet:
    groups: dict[Kind, list[Resource]] = {}
    for resource in resources:
        groups.setdefault(resource.kind, []).append(resource)
    return AttachmentSet(groups)


def _attachments(resource: Resource, ctx: _Context) -> AttachmentSet:
    kind = resource.kind

    if kind == Kind.SERVICE:
        return _group(t for t in ctx.targets(resource, EdgeType.SELECTS) if t.kind in ENDPOINT_KINDS)

    if kind in WORKLOAD_CONTROLLER_KINDS:
        children = ctx.owned(resource, (Kind.REPLICA_SET, Kind.JOB, Kind.POD))
        references = [ref for pod in ctx.controller_pods(resource) for ref in ctx.pod_references(pod)]
        return _group(children + references)

    if kind in EPHEMERAL_CONTROLLER_KINDS:
        return _group(ctx.owned(resource, (Kind.POD,)))

    if kind == Kind.POD:
        return _group(ctx.pod_references(resource))

    if isinstance(resource, ClaimResource):
        return _group(t for t in ctx.targets(resource) if t.kind == Kind.PERSISTENT_VOLUME)

    if isinstance(resource, VolumeResource):
        return _group(t for t in ctx.targets(resource) if t.kind == Kind.STORAGE_CLASS)

    return AttachmentSet()


def compute_attachments(
    resource: Resource,
    all_resources: Iterable[Resource],
    edges: Iterable[Edge],
) -> AttachmentSet:
    """Collapsible descendants of ``resource``, grouped by kind."""
    index = all_resources if isinstance(all_resources, ResourceIndex) else ResourceIndex(all_resources)
    return _attachments(resource, _Context(index, as_edge_set(edges)))


def compute_all_attachments(
    resources: Iterable[Resource],
    edges: Iterable[Edge],
) -> dict[str, AttachmentSet]:
    """Attachment sets for every resource that has at least one."""
    index = resources if isinstance(resources, ResourceIndex) else ResourceIndex(resources)
    ctx = _Context(index, as_edge_set(edges))
    result: dict[str, AttachmentSet] = {}
    for resource in index:
        attachments = _attachments(resource, ctx)
        if attachments:
            result[resource.uid] = attachments
    return result


def find_all_owners(
    resource: Resource,
    all_resources: Iterable[Resource],
    edges: Iterable[Edge],
) -> list[Resource]:
    """Sources of every incoming edge that exist in the resource set."""
    index = all_resources if isinstance(all_resources, ResourceIndex) else ResourceIndex(all_resources)
    owners: dict[str, Resource] = {}
    for edge in as_edge_set(edges).targeting(resource.uid):
        source = index.get(edge.source)
        if source is not None:
            owners.setdefault(source.uid, source)
    return list(owners.values())


def find_owner(
    resource: Resource,
    all_resources: Iterable[Resource],
    edges: Iterable[Edge],
) -> Resource | None:
    """Highest-priority owner of ``resource``, or None for orphans."""
    owners: Sequence[Resource] = find_all_owners(resource, all_resources, edges)
    return find_highest_owner(owners)
