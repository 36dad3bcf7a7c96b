"""Diagram generation CLI command."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from astrolabe.cli.main import Context, pass_context
from astrolabe.cli.options import build_view, view_options

console = Console()


@click.command()
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["mermaid", "dot", "all"]),
    default="mermaid",
    help="Output format",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=Path("docs/diagrams"),
    help="Output directory",
)
@click.option(
    "--stdout",
    is_flag=True,
    help="Print to stdout instead of file",
)
@view_options
@pass_context
def diagram(
    ctx: Context,
    output_format: str,
    output: Path,
    stdout: bool,
    expand: tuple[str, ...],
    expand_all: bool,
    status: str,
    kind_filter: str,
    search: str,
    problems_only: bool,
    hide_cluster_scoped: bool,
) -> None:
    """
    Generate topology diagrams.

    Renders the visible, simplified graph with layout positions.

    Examples:

        # Generate Mermaid diagram
        astrolabe diagram

        # Generate DOT diagram to stdout, fully expanded
        astrolabe diagram --format dot --stdout --expand-all

        # Generate all formats for one namespace
        astrolabe diagram --format all --search shop
    """
    from astrolabe.generators.dot import generate_dot
    from astrolabe.generators.mermaid import generate_mermaid

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

    if not result.nodes:
        console.print("[yellow]No resources match filter criteria[/yellow]")
        return

    generators = {
        "mermaid": (generate_mermaid, "topology.md"),
        "dot": (generate_dot, "topology.dot"),
    }

    formats_to_generate = list(generators.keys()) if output_format == "all" else [output_format]

    for fmt in formats_to_generate:
        generator, filename = generators[fmt]
        content = generator(result)

        if stdout:
            click.echo(f"\n--- {fmt.upper()} ---")
            click.echo(content)
        else:
            output.mkdir(parents=True, exist_ok=True)
            output_file = output / filename
            output_file.write_text(content)
            console.print(f"[green]Generated:[/green] {output_file}")

    if not stdout:
        console.print(f"\n[bold]Diagrams written to:[/bold] {output}")
