"""Graphviz DOT diagram generation."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from astrolabe.core.schema import EdgeType, ResourceStatus
from astrolabe.generators.mermaid import CLUSTER_SCOPED, node_ids

if TYPE_CHECKING:
    from astrolabe.layout.model import LayoutNode, LayoutResult

FILL_COLORS = {
    ResourceStatus.READY: "lightblue",
    ResourceStatus.PENDING: "lightyellow",
    ResourceStatus.ERROR: "lightpink",
    ResourceStatus.UNKNOWN: "lightgray",
}


def _pos(node: LayoutNode) -> str:
    # Graphviz y grows upwards
    x = node.x + node.width / 2
    y = -(node.y + node.height / 2)
    return f"{x:g},{y:g}!"


def generate_dot(result: LayoutResult) -> str:
    """
    Generate Graphviz DOT diagram.

    Node positions come from the layout, so render with
    ``neato -n2 -Tpng topology.dot -o topology.png`` to keep them.
    """
    ids = node_ids(result)
    lines = [
        "digraph Topology {",
        "    rankdir=LR;",
        "    node [shape=box, style=filled, fillcolor=lightblue];",
        "    edge [fontsize=10];",
        "",
    ]

    groups: dict[str, list[LayoutNode]] = defaultdict(list)
    for node in result.nodes:
        groups[node.resource.namespace or CLUSTER_SCOPED].append(node)

    for i, (group, group_nodes) in enumerate(sorted(groups.items())):
        lines.append(f"    subgraph cluster_{i} {{")
        lines.append(f'        label="{group}";')
        lines.append("        style=dashed;")
        lines.append("        color=gray;")
        lines.append("")

        for node in sorted(group_nodes, key=lambda n: (n.x, n.y, n.uid)):
            resource = node.resource
            label = f"{resource.kind.value}\\n{resource.name}".replace('"', "'")
            fillcolor = FILL_COLORS.get(resource.status, "lightgray")
            lines.append(
                f'        {ids[node.uid]} [label="{label}", fillcolor={fillcolor}, pos="{_pos(node)}"];'
            )

        lines.append("    }")
        lines.append("")

    lines.append("    // Relationships")
    seen_edges: set[tuple[str, str, EdgeType]] = set()
    for edge in result.edges:
        edge_key = (edge.source, edge.target, edge.type)
        if edge_key in seen_edges:
            continue
        seen_edges.add(edge_key)
        if edge.source not in ids or edge.target not in ids:
            continue

        if edge.type == EdgeType.OWNS:
            style = "color=black, penwidth=2"
        elif edge.type in (EdgeType.SELECTS, EdgeType.BACKS):
            style = "color=blue"
        else:
            style = "color=gray, style=dashed"

        lines.append(f'    {ids[edge.source]} -> {ids[edge.target]} [label="{edge.type.value}", {style}];')

    lines.append("}")

    return "\n".join(lines)
