"""Pydantic schemas for resource snapshots.

Every resource kind maps to exactly one model in ``RESOURCE_MODELS``. A
model carries only the reference fields that are meaningful for its kinds,
so the resolver and attachment engine dispatch on the model class instead
of probing optional attributes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Kind(str, Enum):
    """Closed taxonomy of resource kinds understood by the engine."""

    DEPLOYMENT = "Deployment"
    STATEFUL_SET = "StatefulSet"
    DAEMON_SET = "DaemonSet"
    CRON_JOB = "CronJob"
    REPLICA_SET = "ReplicaSet"
    JOB = "Job"
    POD = "Pod"
    SERVICE = "Service"
    ENDPOINTS = "Endpoints"
    ENDPOINT_SLICE = "EndpointSlice"
    INGRESS = "Ingress"
    GATEWAY = "Gateway"
    CONFIG_MAP = "ConfigMap"
    SECRET = "Secret"
    SERVICE_ACCOUNT = "ServiceAccount"
    PERSISTENT_VOLUME_CLAIM = "PersistentVolumeClaim"
    PERSISTENT_VOLUME = "PersistentVolume"
    STORAGE_CLASS = "StorageClass"
    HORIZONTAL_POD_AUTOSCALER = "HorizontalPodAutoscaler"
    NETWORK_POLICY = "NetworkPolicy"
    ROLE = "Role"
    ROLE_BINDING = "RoleBinding"
    CLUSTER_ROLE = "ClusterRole"
    CLUSTER_ROLE_BINDING = "ClusterRoleBinding"


class ResourceStatus(str, Enum):
    """Coarse health status reported by the snapshot provider."""

    READY = "Ready"
    PENDING = "Pending"
    ERROR = "Error"
    UNKNOWN = "Unknown"


class EdgeType(str, Enum):
    """Typed relationships between resources."""

    OWNS = "owns"
    SELECTS = "selects"
    BACKS = "backs"
    REF = "ref"
    MOUNTS = "mounts"
    USES = "uses"
    SCALES = "scales"


class ViewScope(str, Enum):
    """Scope a snapshot was taken in."""

    CLUSTER = "cluster"
    NAMESPACE = "namespace"
    RELEASE = "release"


# Wire names older snapshot providers emit for edge types
LEGACY_EDGE_TYPES: dict[str, EdgeType] = {"owner": EdgeType.OWNS}


class OwnerReference(BaseModel):
    """A resource's declaration that another resource manages it."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    kind: str
    name: str
    uid: str | None = None


class ClaimRef(BaseModel):
    """Back-reference from a volume to the claim bound to it."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    namespace: str | None = None


class Resource(BaseModel):
    """Fields shared by every resource kind.

    Subclasses narrow ``KINDS`` to the kinds they represent. The base class
    is never instantiated for snapshot data; use ``parse_resource``.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    KINDS: ClassVar[frozenset[Kind]] = frozenset()

    uid: str
    name: str
    kind: Kind
    namespace: str | None = None
    status: ResourceStatus = ResourceStatus.UNKNOWN
    reason: str | None = None
    message: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    is_cluster_scoped: bool = False
    creation_timestamp: str | None = None
    release: str | None = None
    chart: str | None = None
    owner_references: tuple[OwnerReference, ...] = ()

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> ResourceStatus:
        """Map unrecognized status strings to Unknown."""
        if isinstance(v, ResourceStatus):
            return v
        try:
            return ResourceStatus(v)
        except ValueError:
            return ResourceStatus.UNKNOWN

    @field_validator("kind")
    @classmethod
    def check_kind(cls, v: Kind) -> Kind:
        if cls.KINDS and v not in cls.KINDS:
            raise ValueError(f"{cls.__name__} cannot hold kind {v.value}")
        return v

    @property
    def key(self) -> tuple[str, str, str]:
        """(kind, namespace, name) lookup key."""
        return (self.kind.value, self.namespace or "", self.name)

    @property
    def display_name(self) -> str:
        if self.namespace:
            return f"{self.kind.value}/{self.namespace}/{self.name}"
        return f"{self.kind.value}/{self.name}"

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_defaults=True)


class WorkloadResource(Resource):
    """Long-lived workload controllers."""

    KINDS: ClassVar[frozenset[Kind]] = frozenset(
        {Kind.DEPLOYMENT, Kind.STATEFUL_SET, Kind.DAEMON_SET, Kind.CRON_JOB}
    )

    used_config_maps: tuple[str, ...] = ()
    used_secrets: tuple[str, ...] = ()
    service_account_name: str | None = None
    image: str | None = None
    replicas_desired: int | None = None
    replicas_current: int | None = None
    replicas_ready: int | None = None
    replicas_available: int | None = None


class EphemeralResource(Resource):
    """Controllers created and replaced by a workload controller."""

    KINDS: ClassVar[frozenset[Kind]] = frozenset({Kind.REPLICA_SET, Kind.JOB})

    replicas_desired: int | None = None
    replicas_current: int | None = None
    replicas_ready: int | None = None
    replicas_available: int | None = None


class PodResource(Resource):
    KINDS: ClassVar[frozenset[Kind]] = frozenset({Kind.POD})

    used_config_maps: tuple[str, ...] = ()
    used_secrets: tuple[str, ...] = ()
    service_account_name: str | None = None
    mounted_pvcs: tuple[str, ...] = Field(default=(), alias="mountedPVCs")
    restart_count: int | None = None
    node_name: str | None = None
    image: str | None = None


class ServiceResource(Resource):
    KINDS: ClassVar[frozenset[Kind]] = frozenset({Kind.SERVICE})


class EndpointsResource(Resource):
    """Endpoints and EndpointSlices, listing the pods behind a Service."""

    KINDS: ClassVar[frozenset[Kind]] = frozenset({Kind.ENDPOINTS, Kind.ENDPOINT_SLICE})

    target_pods: tuple[str, ...] = ()


class IngressResource(Resource):
    KINDS: ClassVar[frozenset[Kind]] = frozenset({Kind.INGRESS, Kind.GATEWAY})


class ClaimResource(Resource):
    KINDS: ClassVar[frozenset[Kind]] = frozenset({Kind.PERSISTENT_VOLUME_CLAIM})

    volume_name: str | None = None
    storage_class_name: str | None = None


class VolumeResource(Resource):
    KINDS: ClassVar[frozenset[Kind]] = frozenset({Kind.PERSISTENT_VOLUME})

    claim_ref: ClaimRef | None = None
    storage_class_name: str | None = None


class AutoscalerResource(Resource):
    """HorizontalPodAutoscaler. The snapshot carries no scale target name."""

    KINDS: ClassVar[frozenset[Kind]] = frozenset({Kind.HORIZONTAL_POD_AUTOSCALER})


class PlainResource(Resource):
    """Kinds with no outgoing references of their own."""

    KINDS: ClassVar[frozenset[Kind]] = frozenset(
        {
            Kind.CONFIG_MAP,
            Kind.SECRET,
            Kind.SERVICE_ACCOUNT,
            Kind.STORAGE_CLASS,
            Kind.NETWORK_POLICY,
            Kind.ROLE,
            Kind.ROLE_BINDING,
            Kind.CLUSTER_ROLE,
            Kind.CLUSTER_ROLE_BINDING,
        }
    )


RESOURCE_MODELS: dict[Kind, type[Resource]] = {
    kind: model
    for model in (
        WorkloadResource,
        EphemeralResource,
        PodResource,
        ServiceResource,
        EndpointsResource,
        IngressResource,
        ClaimResource,
        VolumeResource,
        AutoscalerResource,
        PlainResource,
    )
    for kind in model.KINDS
}


def parse_resource(data: Mapping[str, Any]) -> Resource:
    """Validate a raw resource dict into its kind-specific model.

    Raises ValueError (pydantic's ValidationError included) for unknown
    kinds or invalid fields.
    """
    raw_kind = data.get("kind")
    try:
        kind = Kind(raw_kind)
    except ValueError:
        raise ValueError(f"Unknown resource kind: {raw_kind!r}") from None
    return RESOURCE_MODELS[kind].model_validate(dict(data))


# --- Edge Schemas ---


class EdgeSchema(BaseModel):
    """Wire form of an edge supplied by the snapshot provider."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    from_: str = Field(alias="from")
    to: str
    type: EdgeType

    @field_validator("type", mode="before")
    @classmethod
    def normalize_legacy_type(cls, v: Any) -> Any:
        """Accept legacy wire names such as ``owner``."""
        if isinstance(v, str) and v in LEGACY_EDGE_TYPES:
            return LEGACY_EDGE_TYPES[v]
        return v


class ScopeRef(BaseModel):
    namespaces: list[str] = Field(default_factory=list)
    release: str | None = None


class SnapshotStats(BaseModel):
    nodes: int = 0
    edges: int = 0
    warnings: int = 0
    errors: int = 0
