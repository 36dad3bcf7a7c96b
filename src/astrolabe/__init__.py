"""
Astrolabe - Kubernetes resource topology engine.

This package turns a resource snapshot into a laid-out graph:
- Inferring typed edges between resources from their reference fields
- Grouping collapsible descendants (ReplicaSets, Pods, ConfigMaps, ...)
  under their owners
- Filtering by user filters and per-resource expansion state
- Collapsing redundant fan-in edges
- Lane-based layout with side-band attachments
- Generating diagrams (Mermaid, Graphviz)
"""

__version__ = "0.1.0"

from astrolabe.core.edges import Edge, EdgeSet
from astrolabe.core.resolver import EdgeResolver
from astrolabe.core.visibility import ExpansionState, FilterState
from astrolabe.layout.engine import LayoutEngine
from astrolabe.pipeline import Topology
from astrolabe.snapshot import Snapshot

__all__ = [
    "__version__",
    "Edge",
    "EdgeResolver",
    "EdgeSet",
    "ExpansionState",
    "FilterState",
    "LayoutEngine",
    "Snapshot",
    "Topology",
]
