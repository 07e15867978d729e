"""``wasmforge build`` — run wasm-pack once and print the watch set."""

from __future__ import annotations

import asyncio

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from wasmforge.console import BuildConsole, printable_path
from wasmforge.models.options import WasmPackOptions
from wasmforge.plugin import WasmPackPlugin

console = Console()


def build_cmd(
    path: str = typer.Argument(None, help="Path to the Rust crate."),
    profile: str = typer.Option(None, "--profile", help="dev, profiling or release."),
    target: str = typer.Option(
        None, "--target", "-t", help="bundler, nodejs, web or no-modules."
    ),
    out_dir: str = typer.Option(None, "--out-dir", "-d", help="Output directory."),
    out_name: str = typer.Option(None, "--out-name", help="Output file names."),
    scope: str = typer.Option(None, "--scope", help="npm scope for package.json."),
    mode: str = typer.Option(None, "--mode", help="no-install, normal or force."),
    log_level: str = typer.Option(None, "--log-level", help="info, warn or error."),
    no_typescript: bool = typer.Option(
        False, "--no-typescript", help="Skip generating the .d.ts file."
    ),
    cargo_arg: list[str] = typer.Option(
        [], "--cargo-arg", help="Extra argument passed to cargo (repeatable)."
    ),
    wasm_pack_path: str = typer.Option(
        None, "--wasm-pack", help="wasm-pack executable (overridden by $WASM_PACK_PATH)."
    ),
    show_watch: bool = typer.Option(
        True, "--show-watch/--no-show-watch", help="Print the resolved watch set."
    ),
) -> None:
    """Run ``wasm-pack build`` and report the files to watch.

    Exits with status 1 when the build reports errors.
    """
    try:
        options = WasmPackOptions(
            path=path,
            profile=profile,
            target=target,
            out_dir=out_dir,
            out_name=out_name,
            scope=scope,
            mode=mode,
            log_level=log_level,
            no_typescript=no_typescript,
            extra_options=cargo_arg,
            wasm_pack_path=wasm_pack_path,
        )
    except ValidationError as exc:
        console.print(f"[red]Invalid options:[/red] {exc}")
        raise typer.Exit(code=2)

    plugin = WasmPackPlugin(options, console=BuildConsole(log_level, console=console))
    report = asyncio.run(plugin.run_build())

    if show_watch and report.watch_files:
        table = Table(title=f"Watch set ({len(report.watch_files)} files)")
        table.add_column("Path", style="cyan", overflow="fold")
        for watch_file in report.watch_files:
            table.add_row(printable_path(watch_file))
        console.print(table)

    for warning in report.warnings:
        console.print(f"[yellow]warning:[/yellow] {warning.text}")

    if report.errors:
        raise typer.Exit(code=1)
