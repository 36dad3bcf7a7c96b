"""Lookup index over a resource set."""

from __future__ import annotations

from typing import Iterable, Iterator

from astrolabe.core.schema import Kind, Resource


class ResourceIndex:
    """
    Resource set indexed for constant-time reference matching.

    The uid is the primary key. Secondary indices map the
    (kind, namespace, name) key and the (kind, namespace) pair used for
    namespace-scoped fan-out. When two resources share a key, the first
    one in snapshot order wins, which matches a linear scan.
    """

    def __init__(self, resources: Iterable[Resource]) -> None:
        self._resources = list(resources)
        self._uid_index: dict[str, Resource] = {}
        self._key_index: dict[tuple[str, str, str], list[Resource]] = {}
        self._namespace_index: dict[tuple[str, str], list[Resource]] = {}
        self._kind_index: dict[Kind, list[Resource]] = {}
        for resource in self._resources:
            self._uid_index.setdefault(resource.uid, resource)
            self._key_index.setdefault(resource.key, []).append(resource)
            self._namespace_index.setdefault(
                (resource.kind.value, resource.namespace or ""), []
            ).append(resource)
            self._kind_index.setdefault(resource.kind, []).append(resource)

    def get(self, uid: str) -> Resource | None:
        """Get resource by uid."""
        return self._uid_index.get(uid)

    def lookup(self, kind: Kind | str, namespace: str | None, name: str) -> Resource | None:
        """Get the first resource with key (kind, namespace, name)."""
        matches = self.lookup_all(kind, namespace, name)
        return matches[0] if matches else None

    def lookup_all(self, kind: Kind | str, namespace: str | None, name: str) -> list[Resource]:
        """All resources sharing the key (kind, namespace, name)."""
        kind_value = kind.value if isinstance(kind, Kind) else kind
        return self._key_index.get((kind_value, namespace or "", name), [])

    def lookup_cluster_scoped(self, kind: Kind, name: str) -> Resource | None:
        """Match by kind and name only, for kinds that live outside namespaces."""
        found = self.lookup(kind, None, name)
        if found is not None:
            return found
        for resource in self._kind_index.get(kind, []):
            if resource.name == name:
                return resource
        return None

    def in_namespace(self, kind: Kind, namespace: str | None) -> list[Resource]:
        """All resources of ``kind`` sharing ``namespace``."""
        return self._namespace_index.get((kind.value, namespace or ""), [])

    def by_kind(self, kind: Kind) -> list[Resource]:
        return self._kind_index.get(kind, [])

    def kinds(self) -> set[Kind]:
        return set(self._kind_index)

    @property
    def uids(self) -> set[str]:
        return set(self._uid_index)

    def __len__(self) -> int:
        return len(self._resources)

    def __iter__(self) -> Iterator[Resource]:
        return iter(self._resources)

    def __contains__(self, uid: object) -> bool:
        return uid in self._uid_index
