"""Core topology model: resources, edges, attachments and visibility."""

from astrolabe.core.attachments import (
    AttachmentSet,
    compute_all_attachments,
    compute_attachments,
    find_all_owners,
    find_owner,
)
from astrolabe.core.edges import Edge, EdgeSet, validate_edges
from astrolabe.core.index import ResourceIndex
from astrolabe.core.priority import OWNER_PRIORITY, find_highest_owner, owner_rank
from astrolabe.core.resolver import EdgeResolver, resolve_edges, resolve_edges_by_scan
from astrolabe.core.schema import EdgeType, Kind, Resource, ResourceStatus, ViewScope, parse_resource
from astrolabe.core.simplify import simplify_edges
from astrolabe.core.visibility import ExpansionState, FilterState, apply_filters, filter_visible

__all__ = [
    "OWNER_PRIORITY",
    "AttachmentSet",
    "Edge",
    "EdgeResolver",
    "EdgeSet",
    "EdgeType",
    "ExpansionState",
    "FilterState",
    "Kind",
    "Resource",
    "ResourceIndex",
    "ResourceStatus",
    "ViewScope",
    "apply_filters",
    "compute_all_attachments",
    "compute_attachments",
    "filter_visible",
    "find_all_owners",
    "find_highest_owner",
    "find_owner",
    "owner_rank",
    "parse_resource",
    "resolve_edges",
    "resolve_edges_by_scan",
    "simplify_edges",
    "validate_edges",
]
