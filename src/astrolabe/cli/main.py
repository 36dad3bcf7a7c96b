"""Main CLI entry point for astrolabe."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
from rich.console import Console

from astrolabe import __version__

console = Console()

# Default paths (can be overridden)
DEFAULT_SNAPSHOT = "examples/snapshot.yaml"
DEFAULT_CONFIG = "astrolabe.yaml"


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.snapshot_path: Path | None = None
        self.config_path: Path | None = None
        self.verbose: bool = False
        self._snapshot: Any = None
        self._config: Any = None
        self._topology: Any = None

    @property
    def config(self) -> Any:
        """Lazy-load config."""
        if self._config is None:
            from astrolabe.config import ConfigError, load_config

            try:
                self._config = load_config(self.config_path)
            except ConfigError as e:
                raise click.ClickException(str(e)) from e
        return self._config

    @property
    def snapshot(self) -> Any:
        """Lazy-load snapshot."""
        if self._snapshot is None:
            from astrolabe.snapshot import Snapshot, SnapshotError

            if not (self.snapshot_path and self.snapshot_path.exists()):
                raise click.ClickException(f"Snapshot not found: {self.snapshot_path}")
            try:
                self._snapshot = Snapshot.load(self.snapshot_path)
            except SnapshotError as e:
                raise click.ClickException(str(e)) from e
        return self._snapshot

    @property
    def topology(self) -> Any:
        """Lazy-build topology from the snapshot."""
        if self._topology is None:
            from astrolabe.pipeline import Topology

            self._topology = Topology.from_snapshot(self.snapshot)
        return self._topology

    def engine(self) -> Any:
        from astrolabe.layout.engine import LayoutEngine

        return LayoutEngine(self.config.layout)


pass_context = click.make_pass_decorator(Context, ensure=True)


@click.group()
@click.version_option(version=__version__, prog_name="astrolabe")
@click.option(
    "-s",
    "--snapshot",
    type=click.Path(exists=False, path_type=Path),
    default=DEFAULT_SNAPSHOT,
    help="Path to snapshot JSON or YAML file",
)
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=False, path_type=Path),
    default=DEFAULT_CONFIG,
    help="Path to config YAML file",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@pass_context
def cli(ctx: Context, snapshot: Path, config: Path, verbose: bool) -> None:
    """
    Astrolabe - Kubernetes resource topology.

    Resolve relationships between resources in a snapshot, collapse
    descendants under their owners, and lay the result out in lanes.
    """
    from astrolabe.observability.logging import setup_logging

    ctx.snapshot_path = snapshot
    ctx.config_path = config
    ctx.verbose = verbose

    try:
        level = "debug" if verbose else ctx.config.log_level
    except click.ClickException as e:
        console.print(f"[red]Error:[/red] {e.format_message()}")
        raise SystemExit(1)
    setup_logging(level)


# Import and register subcommands
from astrolabe.cli.diagram import diagram
from astrolabe.cli.layout import layout
from astrolabe.cli.validate import validate

cli.add_command(diagram)
cli.add_command(layout)
cli.add_command(validate)


@cli.command()
@pass_context
def info(ctx: Context) -> None:
    """Show snapshot, edge and attachment summary."""
    from rich.table import Table

    from astrolabe.core.schema import EdgeType

    try:
        snapshot = ctx.snapshot
        topology = ctx.topology
    except click.ClickException as e:
        console.print(f"[red]Error:[/red] {e.format_message()}")
        raise SystemExit(1)

    console.print(f"\n[bold]Astrolabe v{__version__}[/bold]\n")

    console.print("[bold cyan]Snapshot Summary[/bold cyan]")
    console.print(f"  Path: {ctx.snapshot_path}")
    console.print(f"  Scope: {snapshot.scope.value}")
    if snapshot.rv:
        console.print(f"  Resource version: {snapshot.rv}")
    console.print(f"  Resources: {len(topology)}")
    console.print(f"  Skipped resources: {snapshot.skipped}")

    console.print("\n[bold cyan]Edge Summary[/bold cyan]")
    console.print(f"  Source: {'snapshot' if topology.edges_supplied else 'resolved'}")
    console.print(f"  Total edges: {len(topology.edges)}")
    console.print(f"  Dropped edges: {topology.dropped_edges}")
    console.print(f"  Resources with attachments: {len(topology.attachments)}")

    if len(topology) > 0:
        table = Table(title="Resources by Kind")
        table.add_column("Kind", style="cyan")
        table.add_column("Count", justify="right")
        for kind in topology.kind_options():
            count = sum(1 for r in topology.resources if r.kind.value == kind)
            table.add_row(kind, str(count))
        console.print(table)

    if topology.edges:
        table = Table(title="Edges by Type")
        table.add_column("Type", style="cyan")
        table.add_column("Count", justify="right")
        for etype in EdgeType:
            count = sum(1 for e in topology.edges if e.type == etype)
            if count > 0:
                table.add_row(etype.value, str(count))
        console.print(table)


@cli.command()
@click.option(
    "--type",
    "-t",
    "edge_type",
    type=click.Choice(["owns", "selects", "backs", "ref", "mounts", "uses", "scales"]),
    help="Only show edges of this type",
)
@pass_context
def edges(ctx: Context, edge_type: str | None) -> None:
    """List resolved (or supplied) edges."""
    from rich.table import Table

    try:
        topology = ctx.topology
    except click.ClickException as e:
        console.print(f"[red]Error:[/red] {e.format_message()}")
        raise SystemExit(1)

    shown = [e for e in topology.edges if edge_type is None or e.type.value == edge_type]
    if not shown:
        console.print("[yellow]No edges[/yellow]")
        return

    table = Table(title="Resource Edges")
    table.add_column("From", style="cyan")
    table.add_column("Type")
    table.add_column("To", style="cyan")

    for edge in shown:
        source = topology.get(edge.source)
        target = topology.get(edge.target)
        table.add_row(
            source.display_name if source else edge.source,
            edge.type.value,
            target.display_name if target else edge.target,
        )

    console.print(table)


@cli.command()
@click.argument("uid", required=False)
@pass_context
def attachments(ctx: Context, uid: str | None) -> None:
    """
    Show collapsible descendants grouped under their owners.

    Without UID, lists every resource that has attachments.
    """
    from rich.table import Table

    try:
        topology = ctx.topology
    except click.ClickException as e:
        console.print(f"[red]Error:[/red] {e.format_message()}")
        raise SystemExit(1)

    if uid is not None:
        resource = topology.get(uid)
        if resource is None:
            console.print(f"[red]Error:[/red] Resource not found: {uid}")
            raise SystemExit(1)

        owner = topology.owner_of(uid)
        console.print(f"\n[bold]{resource.display_name}[/bold]")
        console.print(f"  Owner: {owner.display_name if owner else '-'}")

        attachment_set = topology.attachments.get(uid)
        if not attachment_set:
            console.print("[yellow]No attachments[/yellow]")
            return

        table = Table(title="Attachments")
        table.add_column("Kind", style="cyan")
        table.add_column("Count", justify="right")
        table.add_column("Names")
        for kind, members in attachment_set.items():
            table.add_row(kind.value, str(len(members)), ", ".join(r.name for r in members))
        console.print(table)
        return

    if not topology.attachments:
        console.print("[yellow]No attachments[/yellow]")
        return

    table = Table(title="Attachments by Resource")
    table.add_column("Resource", style="cyan")
    table.add_column("UID", style="dim")
    table.add_column("Attachments")
    for resource in topology.resources:
        attachment_set = topology.attachments.get(resource.uid)
        if attachment_set:
            summary = ", ".join(f"{kind}: {count}" for kind, count in attachment_set.summary().items())
            table.add_row(resource.display_name, resource.uid, summary)
    console.print(table)


if __name__ == "__main__":
    cli()
