"""Main Typer application — imports and registers all CLI commands.

Entry point: ``wasmforge`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from wasmforge.cli.commands.build import build_cmd
from wasmforge.cli.commands.deps import deps_cmd
from wasmforge.cli.commands.scan import scan_cmd
from wasmforge.config import settings

app = typer.Typer(
    name="wasmforge",
    help="wasmforge: supervised wasm-pack builds with precise watch sets.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="build", help="Run wasm-pack build and print the watch set.")(build_cmd)
app.command(name="deps", help="Inspect a rustc dep-info file.")(deps_cmd)
app.command(name="scan", help="List the fallback watch set for a crate.")(scan_cmd)


@app.callback()
def root_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Configure logging before any command runs."""
    logging.basicConfig(
        level="DEBUG" if verbose else settings.log_level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
