"""Validation CLI command."""

from __future__ import annotations

import click
from rich.console import Console

from astrolabe.cli.main import Context, pass_context

console = Console()


@click.command()
@click.option(
    "--strict",
    is_flag=True,
    help="Fail on warnings",
)
@pass_context
def validate(ctx: Context, strict: bool) -> None:
    """
    Validate a snapshot.

    Reports skipped resources, edges dropped for referencing unknown
    resources, and references that match nothing in the snapshot.

    Examples:

        # Basic validation
        astrolabe validate

        # Fail on any warning
        astrolabe -s snapshot.json validate --strict
    """
    from astrolabe.core.resolver import EdgeResolver

    errors: list[str] = []
    warnings: list[str] = []

    console.print("[bold]Validating snapshot...[/bold]")
    try:
        snapshot = ctx.snapshot
        topology = ctx.topology
    except click.ClickException as e:
        errors.append(f"Snapshot validation failed: {e.format_message()}")
        console.print(f"  [red]✗[/red] Snapshot validation failed: {e.format_message()}")
        snapshot = topology = None

    if snapshot is not None:
        console.print(f"  [green]✓[/green] Snapshot loaded: {len(snapshot.nodes)} resources")
        if snapshot.skipped:
            warnings.append(f"{snapshot.skipped} invalid resource(s) skipped")
            console.print(f"  [yellow]![/yellow] {snapshot.skipped} invalid resource(s) skipped")
        if snapshot.skipped_edges:
            warnings.append(f"{snapshot.skipped_edges} invalid edge(s) skipped")
            console.print(f"  [yellow]![/yellow] {snapshot.skipped_edges} invalid edge(s) skipped")

    if topology is not None:
        console.print("[bold]Checking edges...[/bold]")
        if topology.dropped_edges:
            warnings.append(f"{topology.dropped_edges} edge(s) reference unknown resources")
            console.print(f"  [yellow]![/yellow] {topology.dropped_edges} edge(s) reference unknown resources")
        else:
            console.print(f"  [green]✓[/green] All {len(topology.edges)} edges reference known resources")

        console.print("[bold]Checking references...[/bold]")
        unresolved = EdgeResolver(topology.index).unresolved()
        for resource, kind, name in unresolved:
            warnings.append(f"{resource.display_name}: unresolved {kind} '{name}'")
            console.print(f"  [yellow]![/yellow] {resource.display_name}: unresolved {kind} '{name}'")
        if not unresolved:
            console.print("  [green]✓[/green] All references resolved")

    # Summary
    console.print("\n[bold]Validation Summary[/bold]")
    console.print(f"  Errors: {len(errors)}")
    console.print(f"  Warnings: {len(warnings)}")

    if errors:
        console.print("\n[red bold]Validation failed[/red bold]")
        for err in errors:
            console.print(f"  [red]•[/red] {err}")
        raise SystemExit(1)

    if warnings and strict:
        console.print("\n[yellow bold]Validation failed (strict mode)[/yellow bold]")
        for warn in warnings:
            console.print(f"  [yellow]•[/yellow] {warn}")
        raise SystemExit(1)

    console.print("\n[green bold]Validation passed[/green bold]")
