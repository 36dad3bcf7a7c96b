"""Edge inference from kind-specific reference fields."""

from __future__ import annotations

from typing import Iterable, Iterator, Sequence

from astrolabe.core.edges import Edge
from astrolabe.core.index import ResourceIndex
from astrolabe.core.kinds import EDGE_CONTROLLER_KINDS, ENDPOINT_KINDS, SCALE_TARGET_KINDS
from astrolabe.core.schema import (
    AutoscalerResource,
    ClaimResource,
    EdgeType,
    EndpointsResource,
    IngressResource,
    Kind,
    PodResource,
    Resource,
    ServiceResource,
    VolumeResource,
    WorkloadResource,
)


class EdgeResolver:
    """
    Infers typed edges between resources.

    References are matched through a ``ResourceIndex`` keyed by
    (kind, namespace, name). A reference that matches nothing emits no
    edge. Duplicate edges are possible and left for the simplifier.
    """

    def __init__(self, resources: Iterable[Resource]) -> None:
        self._index = resources if isinstance(resources, ResourceIndex) else ResourceIndex(resources)

    @property
    def index(self) -> ResourceIndex:
        return self._index

    def resolve(self) -> list[Edge]:
        """Build every edge for the indexed resource set."""
        edges: list[Edge] = []
        for resource in self._index:
            edges.extend(self.edges_for(resource))
        return edges

    def edges_for(self, resource: Resource) -> Iterator[Edge]:
        """Edges contributed by a single resource's reference fields."""
        yield from self._owner_edges(resource)

        if isinstance(resource, ServiceResource):
            yield from self._service_edges(resource)
        elif isinstance(resource, EndpointsResource):
            yield from self._endpoint_edges(resource)
        elif isinstance(resource, IngressResource):
            yield from self._fan_out(resource, (Kind.SERVICE,), EdgeType.BACKS)
        elif isinstance(resource, ClaimResource):
            yield from self._claim_edges(resource)
        elif isinstance(resource, VolumeResource):
            yield from self._volume_edges(resource)
        elif isinstance(resource, PodResource):
            yield from self._pod_edges(resource)
        elif isinstance(resource, WorkloadResource):
            if resource.kind in EDGE_CONTROLLER_KINDS:
                yield from self._controller_edges(resource)
        elif isinstance(resource, AutoscalerResource):
            # No scale target name in the snapshot: namespace fan-out
            yield from self._fan_out(resource, sorted(SCALE_TARGET_KINDS, key=_kind_order), EdgeType.SCALES)

    def unresolved(self) -> list[tuple[Resource, str, str]]:
        """Named references that match nothing, as (resource, kind, name)."""
        missing: list[tuple[Resource, str, str]] = []
        for resource in self._index:
            for kind, namespace, name in self._references(resource):
                if kind in (Kind.PERSISTENT_VOLUME.value, Kind.STORAGE_CLASS.value):
                    found = self._index.lookup_cluster_scoped(Kind(kind), name)
                else:
                    found = self._index.lookup(kind, namespace, name)
                if found is None:
                    missing.append((resource, kind, name))
        return missing

    def _references(self, resource: Resource) -> Iterator[tuple[str, str | None, str]]:
        for owner_ref in resource.owner_references:
            yield owner_ref.kind, resource.namespace, owner_ref.name
        if isinstance(resource, EndpointsResource):
            for pod_name in resource.target_pods:
                yield Kind.POD.value, resource.namespace, pod_name
        elif isinstance(resource, ClaimResource):
            if resource.volume_name:
                yield Kind.PERSISTENT_VOLUME.value, None, resource.volume_name
        elif isinstance(resource, VolumeResource):
            if resource.claim_ref is not None:
                yield Kind.PERSISTENT_VOLUME_CLAIM.value, resource.claim_ref.namespace, resource.claim_ref.name
            if resource.storage_class_name:
                yield Kind.STORAGE_CLASS.value, None, resource.storage_class_name
        elif isinstance(resource, PodResource):
            for claim_name in resource.mounted_pvcs:
                yield Kind.PERSISTENT_VOLUME_CLAIM.value, resource.namespace, claim_name
        elif isinstance(resource, WorkloadResource) and resource.kind in EDGE_CONTROLLER_KINDS:
            for name in resource.used_config_maps:
                yield Kind.CONFIG_MAP.value, resource.namespace, name
            for name in resource.used_secrets:
                yield Kind.SECRET.value, resource.namespace, name
            if resource.service_account_name:
                yield Kind.SERVICE_ACCOUNT.value, resource.namespace, resource.service_account_name

    def _owner_edges(self, resource: Resource) -> Iterator[Edge]:
        for owner_ref in resource.owner_references:
            owner = self._index.lookup(owner_ref.kind, resource.namespace, owner_ref.name)
            if owner is not None:
                yield Edge(owner.uid, resource.uid, EdgeType.OWNS)

    def _service_edges(self, service: ServiceResource) -> Iterator[Edge]:
        for kind in sorted(ENDPOINT_KINDS, key=_kind_order):
            for endpoints in self._index.lookup_all(kind, service.namespace, service.name):
                yield Edge(service.uid, endpoints.uid, EdgeType.SELECTS)

    def _endpoint_edges(self, endpoints: EndpointsResource) -> Iterator[Edge]:
        for pod_name in endpoints.target_pods:
            pod = self._index.lookup(Kind.POD, endpoints.namespace, pod_name)
            if pod is not None:
                yield Edge(endpoints.uid, pod.uid, EdgeType.SELECTS)

    def _claim_edges(self, claim: ClaimResource) -> Iterator[Edge]:
        if claim.volume_name:
            volume = self._index.lookup_cluster_scoped(Kind.PERSISTENT_VOLUME, claim.volume_name)
            if volume is not None:
                yield Edge(claim.uid, volume.uid, EdgeType.REF)

    def _volume_edges(self, volume: VolumeResource) -> Iterator[Edge]:
        if volume.claim_ref is not None:
            claim = self._index.lookup(
                Kind.PERSISTENT_VOLUME_CLAIM, volume.claim_ref.namespace, volume.claim_ref.name
            )
            if claim is not None:
                yield Edge(claim.uid, volume.uid, EdgeType.REF)
        if volume.storage_class_name:
            storage_class = self._index.lookup_cluster_scoped(Kind.STORAGE_CLASS, volume.storage_class_name)
            if storage_class is not None:
                yield Edge(volume.uid, storage_class.uid, EdgeType.REF)

    def _pod_edges(self, pod: PodResource) -> Iterator[Edge]:
        for claim_name in pod.mounted_pvcs:
            claim = self._index.lookup(Kind.PERSISTENT_VOLUME_CLAIM, pod.namespace, claim_name)
            if claim is not None:
                yield Edge(pod.uid, claim.uid, EdgeType.MOUNTS)

    def _controller_edges(self, controller: WorkloadResource) -> Iterator[Edge]:
        refs: list[tuple[Kind, str]] = [(Kind.CONFIG_MAP, name) for name in controller.used_config_maps]
        refs.extend((Kind.SECRET, name) for name in controller.used_secrets)
        if controller.service_account_name:
            refs.append((Kind.SERVICE_ACCOUNT, controller.service_account_name))

        for kind, name in refs:
            target = self._index.lookup(kind, controller.namespace, name)
            if target is not None:
                yield Edge(controller.uid, target.uid, EdgeType.USES)

    def _fan_out(self, resource: Resource, kinds: Sequence[Kind], edge_type: EdgeType) -> Iterator[Edge]:
        """Edges to every resource of ``kinds`` sharing the namespace."""
        for kind in kinds:
            for target in self._index.in_namespace(kind, resource.namespace):
                yield Edge(resource.uid, target.uid, edge_type)


def _kind_order(kind: Kind) -> str:
    return kind.value


def resolve_edges(resources: Iterable[Resource]) -> list[Edge]:
    """Infer all edges for a resource set."""
    return EdgeResolver(resources).resolve()


def resolve_edges_by_scan(resources: Sequence[Resource]) -> list[Edge]:
    """
    Reference implementation matching every reference with a linear scan.

    O(N * R); used to check ``resolve_edges`` rather than in the pipeline.
    """

    def find(kind: Kind | str, namespace: str | None, name: str) -> Resource | None:
        for r in resources:
            if r.kind == kind and r.name == name and (r.namespace or "") == (namespace or ""):
                return r
        return None

    def find_cluster_scoped(kind: Kind, name: str) -> Resource | None:
        found = find(kind, None, name)
        if found is not None:
            return found
        return next((r for r in resources if r.kind == kind and r.name == name), None)

    edges: list[Edge] = []
    for resource in resources:
        for owner_ref in resource.owner_references:
            owner = find(owner_ref.kind, resource.namespace, owner_ref.name)
            if owner is not None:
                edges.append(Edge(owner.uid, resource.uid, EdgeType.OWNS))

        if isinstance(resource, ServiceResource):
            for r in resources:
                if r.kind in ENDPOINT_KINDS and r.name == resource.name and r.namespace == resource.namespace:
                    edges.append(Edge(resource.uid, r.uid, EdgeType.SELECTS))

        elif isinstance(resource, EndpointsResource):
            for pod_name in resource.target_pods:
                pod = find(Kind.POD, resource.namespace, pod_name)
                if pod is not None:
                    edges.append(Edge(resource.uid, pod.uid, EdgeType.SELECTS))

        elif isinstance(resource, IngressResource):
            for r in resources:
                if r.kind == Kind.SERVICE and r.namespace == resource.namespace:
                    edges.append(Edge(resource.uid, r.uid, EdgeType.BACKS))

        elif isinstance(resource, ClaimResource):
            if resource.volume_name:
                volume = find_cluster_scoped(Kind.PERSISTENT_VOLUME, resource.volume_name)
                if volume is not None:
                    edges.append(Edge(resource.uid, volume.uid, EdgeType.REF))

        elif isinstance(resource, VolumeResource):
            if resource.claim_ref is not None:
                claim = find(Kind.PERSISTENT_VOLUME_CLAIM, resource.claim_ref.namespace, resource.claim_ref.name)
                if claim is not None:
                    edges.append(Edge(claim.uid, resource.uid, EdgeType.REF))
            if resource.storage_class_name:
                storage_class = find_cluster_scoped(Kind.STORAGE_CLASS, resource.storage_class_name)
                if storage_class is not None:
                    edges.append(Edge(resource.uid, storage_class.uid, EdgeType.REF))

        elif isinstance(resource, PodResource):
            for claim_name in resource.mounted_pvcs:
                claim = find(Kind.PERSISTENT_VOLUME_CLAIM, resource.namespace, claim_name)
                if claim is not None:
                    edges.append(Edge(resource.uid, claim.uid, EdgeType.MOUNTS))

        elif isinstance(resource, WorkloadResource) and resource.kind in EDGE_CONTROLLER_KINDS:
            names = [(Kind.CONFIG_MAP, n) for n in resource.used_config_maps]
            names += [(Kind.SECRET, n) for n in resource.used_secrets]
            if resource.service_account_name:
                names.append((Kind.SERVICE_ACCOUNT, resource.service_account_name))
            for kind, name in names:
                target = find(kind, resource.namespace, name)
                if target is not None:
                    edges.append(Edge(resource.uid, target.uid, EdgeType.USES))

        elif isinstance(resource, AutoscalerResource):
            for r in resources:
                if r.kind in SCALE_TARGET_KINDS and r.namespace == resource.namespace:
                    edges.append(Edge(resource.uid, r.uid, EdgeType.SCALES))

    return edges


def find_root_resources(resources: Sequence[Resource]) -> list[Resource]:
    """Resources with no owner present in the set."""
    index = resources if isinstance(resources, ResourceIndex) else ResourceIndex(resources)
    return [
        r
        for r in index
        if not any(index.lookup(o.kind, r.namespace, o.name) for o in r.owner_references)
    ]


def find_child_resources(parent: Resource, resources: Iterable[Resource]) -> list[Resource]:
    """Resources declaring an owner reference to ``parent``."""
    return [
        r
        for r in resources
        if r.namespace == parent.namespace
        and any(o.kind == parent.kind.value and o.name == parent.name for o in r.owner_references)
    ]
