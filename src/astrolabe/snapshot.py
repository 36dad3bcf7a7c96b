"""Snapshot loading: the resource set handed over by a snapshot provider."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from astrolabe.core.edges import Edge
from astrolabe.core.schema import Resource, ScopeRef, SnapshotStats, ViewScope, parse_resource
from astrolabe.observability.logging import get_logger

logger = get_logger("snapshot")


class SnapshotError(Exception):
    """Snapshot could not be read or is structurally invalid."""

    pass


class SnapshotHeader(BaseModel):
    """Snapshot-level fields, validated strictly."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    scope: ViewScope = ViewScope.CLUSTER
    scope_ref: ScopeRef | None = None
    rv: str | None = None
    stats: SnapshotStats = Field(default_factory=SnapshotStats)

    @field_validator("rv", mode="before")
    @classmethod
    def coerce_rv(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class Snapshot(SnapshotHeader):
    """
    A resource snapshot.

    ``edges`` is None when the provider did not supply any, in which case
    they are synthesized by the resolver. Entries that fail validation are
    skipped and counted rather than failing the whole load.
    """

    nodes: list[Resource] = Field(default_factory=list)
    edges: list[Edge] | None = None
    skipped: int = 0
    skipped_edges: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> Snapshot:
        if not isinstance(data, Mapping):
            raise SnapshotError(f"Snapshot must be a mapping, got {type(data).__name__}")

        raw_nodes = data.get("nodes")
        if raw_nodes is None:
            raw_nodes = []
        if not isinstance(raw_nodes, list):
            raise SnapshotError("Snapshot 'nodes' must be a list")

        raw_edges = data.get("edges")
        if raw_edges is not None and not isinstance(raw_edges, list):
            raise SnapshotError("Snapshot 'edges' must be a list when present")

        try:
            header = SnapshotHeader.model_validate(
                {k: v for k, v in data.items() if k not in ("nodes", "edges")}
            )
        except ValidationError as e:
            raise SnapshotError(f"Invalid snapshot header: {e}") from e

        nodes: list[Resource] = []
        skipped = 0
        for i, entry in enumerate(raw_nodes):
            try:
                if not isinstance(entry, Mapping):
                    raise ValueError(f"expected a mapping, got {type(entry).__name__}")
                nodes.append(parse_resource(entry))
            except ValueError as e:
                skipped += 1
                logger.warning(
                    "snapshot_entry_skipped",
                    index=i,
                    kind=entry.get("kind") if isinstance(entry, Mapping) else None,
                    error=str(e).splitlines()[0],
                )

        edges: list[Edge] | None = None
        skipped_edges = 0
        if raw_edges is not None:
            edges = []
            for i, entry in enumerate(raw_edges):
                try:
                    if not isinstance(entry, Mapping):
                        raise ValueError(f"expected a mapping, got {type(entry).__name__}")
                    edges.append(Edge.from_dict(dict(entry)))
                except ValueError as e:
                    skipped_edges += 1
                    logger.warning("snapshot_edge_skipped", index=i, error=str(e).splitlines()[0])

        return cls(
            **header.model_dump(),
            nodes=nodes,
            edges=edges,
            skipped=skipped,
            skipped_edges=skipped_edges,
        )

    @classmethod
    def load(cls, path: str | Path) -> Snapshot:
        """Load a snapshot from a JSON or YAML file."""
        path = Path(path)
        try:
            with path.open() as f:
                data = json.load(f) if path.suffix == ".json" else yaml.safe_load(f)
        except OSError as e:
            raise SnapshotError(f"Cannot read snapshot {path}: {e}") from e
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SnapshotError(f"Cannot parse snapshot {path}: {e}") from e
        return cls.from_dict(data)

    @property
    def edges_supplied(self) -> bool:
        return self.edges is not None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"scope": self.scope.value}
        if self.scope_ref is not None:
            data["scopeRef"] = self.scope_ref.model_dump(exclude_none=True)
        if self.rv is not None:
            data["rv"] = self.rv
        data["nodes"] = [n.to_dict() for n in self.nodes]
        if self.edges is not None:
            data["edges"] = [e.to_dict() for e in self.edges]
        data["stats"] = self.stats.model_dump()
        return data


def load_snapshot(path: str | Path) -> Snapshot:
    return Snapshot.load(path)
