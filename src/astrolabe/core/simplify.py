"""Fan-in simplification of visible edges."""

from __future__ import annotations

from typing import Iterable, Mapping

from astrolabe.core.edges import Edge
from astrolabe.core.index import ResourceIndex
from astrolabe.core.priority import find_highest_owner
from astrolabe.core.schema import Kind, Resource

# Targets whose fan-in collapses to one edge from the top-level source
COLLAPSED_FAN_IN_KINDS: frozenset[Kind] = frozenset({Kind.CONFIG_MAP, Kind.SECRET, Kind.SERVICE_ACCOUNT})


def simplify_edges(
    edges: Iterable[Edge],
    resources: Iterable[Resource],
    expansion: Mapping[str, Iterable[Kind]] | None = None,
) -> list[Edge]:
    """
    Collapse repeated fan-in into one representative edge per target.

    - ConfigMap/Secret/ServiceAccount targets keep only the edge from the
      highest-priority source (e.g. Deployment over ReplicaSet over Pod).
    - PersistentVolumeClaim targets keep every edge from a Pod, because
      several Pods can share a claim. Without Pod sources all edges stay.
    - Everything else passes through.

    ``edges`` should already be restricted to visible resources. Targets
    missing from ``resources`` are dropped. ``expansion`` is accepted for
    interface symmetry with the other stages; the result does not depend
    on it.
    """
    index = resources if isinstance(resources, ResourceIndex) else ResourceIndex(resources)

    by_target: dict[str, list[Edge]] = {}
    for edge in edges:
        by_target.setdefault(edge.target, []).append(edge)

    simplified: list[Edge] = []
    for target_uid, target_edges in by_target.items():
        target = index.get(target_uid)
        if target is None:
            continue

        if target.kind in COLLAPSED_FAN_IN_KINDS:
            sources = [s for s in (index.get(e.source) for e in target_edges) if s is not None]
            highest = find_highest_owner(sources)
            if highest is not None:
                simplified.append(next(e for e in target_edges if e.source == highest.uid))

        elif target.kind == Kind.PERSISTENT_VOLUME_CLAIM:
            pod_edges = [e for e in target_edges if _source_kind(index, e) == Kind.POD]
            simplified.extend(pod_edges or target_edges)

        else:
            simplified.extend(target_edges)

    return simplified


def _source_kind(index: ResourceIndex, edge: Edge) -> Kind | None:
    source = index.get(edge.source)
    return source.kind if source is not None else None
