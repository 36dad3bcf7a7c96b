"""Kind families used by the resolver, attachment engine and layout."""

from __future__ import annotations

from astrolabe.core.schema import Kind

# Controllers that own ReplicaSets, Jobs or Pods directly
WORKLOAD_CONTROLLER_KINDS: frozenset[Kind] = frozenset(
    {Kind.DEPLOYMENT, Kind.STATEFUL_SET, Kind.DAEMON_SET, Kind.CRON_JOB}
)

# Controllers whose pod template references are emitted as ``uses`` edges
EDGE_CONTROLLER_KINDS: frozenset[Kind] = frozenset(
    {Kind.DEPLOYMENT, Kind.STATEFUL_SET, Kind.DAEMON_SET}
)

# Namespace fan-out targets of a HorizontalPodAutoscaler
SCALE_TARGET_KINDS: frozenset[Kind] = frozenset(
    {Kind.DEPLOYMENT, Kind.STATEFUL_SET, Kind.REPLICA_SET}
)

EPHEMERAL_CONTROLLER_KINDS: frozenset[Kind] = frozenset({Kind.REPLICA_SET, Kind.JOB})

ENDPOINT_KINDS: frozenset[Kind] = frozenset({Kind.ENDPOINTS, Kind.ENDPOINT_SLICE})

ENTRY_KINDS: frozenset[Kind] = frozenset({Kind.INGRESS, Kind.GATEWAY})

# Pod-level references that are presented once at the controller level
POD_REFERENCE_KINDS: tuple[Kind, ...] = (
    Kind.CONFIG_MAP,
    Kind.SECRET,
    Kind.SERVICE_ACCOUNT,
    Kind.PERSISTENT_VOLUME_CLAIM,
)

# Hidden behind an expand toggle on their owner until expanded
COLLAPSIBLE_KINDS: frozenset[Kind] = frozenset(
    {
        Kind.REPLICA_SET,
        Kind.JOB,
        Kind.POD,
        Kind.ENDPOINTS,
        Kind.ENDPOINT_SLICE,
        Kind.CONFIG_MAP,
        Kind.SECRET,
        Kind.SERVICE_ACCOUNT,
        Kind.PERSISTENT_VOLUME_CLAIM,
        Kind.PERSISTENT_VOLUME,
        Kind.STORAGE_CLASS,
    }
)


def is_collapsible_kind(kind: Kind) -> bool:
    return kind in COLLAPSIBLE_KINDS
