"""``wasmforge deps`` — inspect a rustc dep-info file."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from wasmforge.console import printable_path
from wasmforge.core.dep_info import parse_dep_info, select_deps
from wasmforge.errors import MalformedDepInfoError

console = Console()


def deps_cmd(
    dep_file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="Path to the .d file."
    ),
    target: str = typer.Option(
        None,
        "--target",
        "-t",
        help="Print only the dependencies of this target (falls back to the first).",
    ),
) -> None:
    """Parse a dep-info file and print its targets and dependencies."""
    try:
        dep_info = parse_dep_info(
            dep_file.read_text(encoding="utf-8", errors="surrogateescape")
        )
    except MalformedDepInfoError as exc:
        console.print(f"[red]Malformed dep-info:[/red] {exc}")
        raise typer.Exit(code=1)

    if target:
        for dep in select_deps(dep_info, target):
            console.print(printable_path(dep), markup=False, highlight=False, soft_wrap=True)
        return

    if not dep_info:
        console.print("[dim]No records found.[/dim]")
        return

    table = Table(title=str(dep_file))
    table.add_column("Target", style="cyan", overflow="fold")
    table.add_column("Deps", justify="right", style="green")
    table.add_column("Dependencies", overflow="fold")
    for name, deps in dep_info.items():
        table.add_row(
            printable_path(name), str(len(deps)), "\n".join(map(printable_path, deps))
        )
    console.print(table)
