"""Filter and expansion options shared by the layout and diagram commands."""

from __future__ import annotations

from typing import Any, Callable

import click

from astrolabe.core.schema import Kind
from astrolabe.core.visibility import ALL, ExpansionState, FilterState


def view_options(f: Callable[..., Any]) -> Callable[..., Any]:
    """Add the filter and expansion options to a command."""
    options = [
        click.option(
            "--expand",
            "-x",
            "expand",
            multiple=True,
            metavar="UID:KIND",
            help="Expand KIND under resource UID (repeatable)",
        ),
        click.option("--expand-all", is_flag=True, help="Expand every collapsible resource"),
        click.option("--status", default=ALL, show_default=True, help="Only resources with this status"),
        click.option("--kind", "kind_filter", default=ALL, show_default=True, help="Only resources of this kind"),
        click.option("--search", default="", help="Case-insensitive match on name, kind or namespace"),
        click.option("--problems-only", is_flag=True, help="Only resources with errors, restarts or missing replicas"),
        click.option("--hide-cluster-scoped", is_flag=True, help="Hide cluster-scoped resources in scoped views"),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def parse_expansion(values: tuple[str, ...]) -> ExpansionState:
    """Parse ``UID:Kind`` pairs into an expansion state."""
    entries: dict[str, set[Kind]] = {}
    for value in values:
        uid, sep, kind_name = value.rpartition(":")
        if not sep or not uid:
            raise click.BadParameter(f"expected UID:KIND, got {value!r}", param_hint="--expand")
        try:
            kind = Kind(kind_name)
        except ValueError:
            raise click.BadParameter(f"unknown kind {kind_name!r}", param_hint="--expand") from None
        entries.setdefault(uid, set()).add(kind)
    return ExpansionState(entries)


def build_view(
    topology: Any,
    expand: tuple[str, ...],
    expand_all: bool,
    status: str,
    kind_filter: str,
    search: str,
    problems_only: bool,
    hide_cluster_scoped: bool,
) -> tuple[FilterState, ExpansionState]:
    """Filter and expansion state from command options."""
    filters = FilterState(
        status=status,
        kind=kind_filter,
        search=search,
        problems_only=problems_only,
        show_cluster_scoped=not hide_cluster_scoped,
    )
    expansion = topology.expand_all() if expand_all else ExpansionState()
    for uid, kinds in parse_expansion(expand).items():
        expansion = expansion.expand(uid, *kinds)
    return filters, expansion
