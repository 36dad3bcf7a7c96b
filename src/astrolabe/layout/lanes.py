"""Lane classification: the horizontal column a resource kind belongs to."""

from __future__ import annotations

from enum import IntEnum
from typing import Iterable

from astrolabe.core.kinds import ENTRY_KINDS, EPHEMERAL_CONTROLLER_KINDS, WORKLOAD_CONTROLLER_KINDS
from astrolabe.core.schema import Kind


class Lane(IntEnum):
    """Left-to-right flow: entry, service/controller, ephemeral, pod, claim, volume."""

    ENTRY = 0
    SERVICE = 1
    EPHEMERAL = 2
    POD = 3
    CLAIM = 4
    VOLUME = 5
    SIDE_BAND = 6


MAIN_FLOW_LANES = tuple(lane for lane in Lane if lane != Lane.SIDE_BAND)

# Preferred anchors for side-band attachments
ANCHOR_LANES = frozenset({Lane.SERVICE, Lane.EPHEMERAL, Lane.POD})

LANE_NAMES = {
    Lane.ENTRY: "Ingress / L7",
    Lane.SERVICE: "Service / Controllers",
    Lane.EPHEMERAL: "Ephemeral",
    Lane.POD: "Pods",
    Lane.CLAIM: "Claims",
    Lane.VOLUME: "Volumes",
    Lane.SIDE_BAND: "Attachments",
}


def lane_for_kind(kind: Kind | str) -> Lane:
    """Map a kind to its lane. Unclassified kinds go to the side band."""
    kind = Kind(kind)
    if kind in ENTRY_KINDS:
        return Lane.ENTRY
    if kind == Kind.SERVICE or kind in WORKLOAD_CONTROLLER_KINDS:
        return Lane.SERVICE
    if kind in EPHEMERAL_CONTROLLER_KINDS:
        return Lane.EPHEMERAL
    if kind == Kind.POD:
        return Lane.POD
    if kind == Kind.PERSISTENT_VOLUME_CLAIM:
        return Lane.CLAIM
    if kind == Kind.PERSISTENT_VOLUME:
        return Lane.VOLUME
    return Lane.SIDE_BAND


def compact_lanes(lanes: Iterable[Lane]) -> dict[Lane, int]:
    """
    Remap the used main-flow lanes to 0..K-1, preserving order.

    The side band is not a column and is never compacted.
    """
    present = {Lane(lane) for lane in lanes}
    used = [lane for lane in MAIN_FLOW_LANES if lane in present]
    return {lane: i for i, lane in enumerate(used)}


def lane_name(lane: Lane | int) -> str:
    try:
        return LANE_NAMES[Lane(lane)]
    except ValueError:
        return "Unknown"
