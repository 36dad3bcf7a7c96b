"""Mermaid diagram generation."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from astrolabe.core.schema import EdgeType

if TYPE_CHECKING:
    from astrolabe.layout.model import LayoutNode, LayoutResult

CLUSTER_SCOPED = "cluster-scoped"

ARROWS = {
    EdgeType.OWNS: "==>",
    EdgeType.SELECTS: "-->",
    EdgeType.BACKS: "-->",
    EdgeType.REF: "-.->",
    EdgeType.MOUNTS: "-.->",
    EdgeType.USES: "-.->",
    EdgeType.SCALES: "-.->",
}


def node_ids(result: LayoutResult) -> dict[str, str]:
    """Stable diagram identifiers, since uids may contain any character."""
    return {node.uid: f"n{i}" for i, node in enumerate(result.nodes)}


def _label(node: LayoutNode) -> str:
    label = f"{node.resource.kind.value}: {node.resource.name}"
    if node.attachments:
        hidden = sum(node.attachments.values())
        label += f" (+{hidden})"
    return label.replace('"', "'")


def generate_mermaid(result: LayoutResult) -> str:
    """
    Generate Mermaid flowchart diagram.

    Returns Markdown with embedded Mermaid diagram.
    """
    ids = node_ids(result)
    lines = ["# Resource Topology", "", "```mermaid", "flowchart LR"]

    # Group nodes by namespace
    groups: dict[str, list[LayoutNode]] = defaultdict(list)
    for node in result.nodes:
        groups[node.resource.namespace or CLUSTER_SCOPED].append(node)

    for i, (group, group_nodes) in enumerate(sorted(groups.items())):
        lines.append(f'    subgraph ns{i}["{group}"]')
        for node in sorted(group_nodes, key=lambda n: (n.y, n.x, n.uid)):
            lines.append(f'        {ids[node.uid]}["{_label(node)}"]')
        lines.append("    end")

    lines.append("")
    lines.append("    %% Relationships")

    seen_edges: set[tuple[str, str, EdgeType]] = set()
    for edge in result.edges:
        edge_key = (edge.source, edge.target, edge.type)
        if edge_key in seen_edges:
            continue
        seen_edges.add(edge_key)
        if edge.source not in ids or edge.target not in ids:
            continue
        arrow = ARROWS.get(edge.type, "-->")
        lines.append(f"    {ids[edge.source]} {arrow}|{edge.type.value}| {ids[edge.target]}")

    lines.append("```")
    lines.append("")
    lines.append("## Legend")
    lines.append("")
    lines.append("- `==>` Ownership")
    lines.append("- `-->` Traffic (backs, selects)")
    lines.append("- `-.->` Reference (uses, mounts, ref, scales)")

    return "\n".join(lines)
