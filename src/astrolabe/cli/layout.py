"""Layout CLI command."""

from __future__ import annotations

import json

import click
from rich.console import Console

from astrolabe.cli.main import Context, pass_context
from astrolabe.cli.options import build_view, view_options

console = Console()


@click.command()
@view_options
@click.option("--json", "as_json", is_flag=True, help="Print the layout as JSON")
@pass_context
def layout(
    ctx: Context,
    expand: tuple[str, ...],
    expand_all: bool,
    status: str,
    kind_filter: str,
    search: str,
    problems_only: bool,
    hide_cluster_scoped: bool,
    as_json: bool,
) -> None:
    """
    Compute node positions for the visible topology.

    Examples:

        # Top-level resources only
        astrolabe layout

        # Show the ReplicaSets of a Deployment
        astrolabe layout --expand d-1234:ReplicaSet

        # Everything, as JSON
        astrolabe layout --expand-all --json
    """
    from rich.table import Table

    from astrolabe.layout.lanes import lane_for_kind, lane_name

    try:
        topology = ctx.topology
        engine = ctx.engine()
    except click.ClickException as e:
        console.print(f"[red]Error:[/red] {e.format_message()}")
        raise SystemExit(1)

    filters, expansion = build_view(
        topology, expand, expand_all, status, kind_filter, search, problems_only, hide_cluster_scoped
    )
    result = topology.render(filters, expansion, engine)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if not result.nodes:
        console.print("[yellow]No resources match filter criteria[/yellow]")
        return

    table = Table(title="Layout")
    table.add_column("Lane")
    table.add_column("Resource", style="cyan")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    table.add_column("Attachments")

    for node in sorted(result.nodes, key=lambda n: (n.x, n.y, n.uid)):
        summary = ", ".join(f"{kind}: {count}" for kind, count in node.attachments.items())
        table.add_row(
            lane_name(lane_for_kind(node.resource.kind)),
            node.resource.display_name,
            f"{node.x:.0f}",
            f"{node.y:.0f}",
            summary or "-",
        )

    console.print(table)

    diag = result.diagnostics
    console.print(f"  Edges: {len(result.edges)}  Dropped: {diag.dropped_edges}  Orphans: {diag.orphan_attachments}")
    if diag.solver_failed:
        console.print(f"  [yellow]![/yellow] Solver failed, grid fallback used: {diag.solver_error}")
