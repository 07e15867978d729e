"""``wasmforge scan`` — list the fallback watch set for a crate."""

from __future__ import annotations

import re
from pathlib import Path

import typer
from rich.console import Console

from wasmforge.config import settings
from wasmforge.console import printable_path
from wasmforge.core.scanner import extensions_pattern, scan_directory

console = Console()


def scan_cmd(
    root: Path = typer.Argument(
        Path("."), exists=True, file_okay=False, help="Crate root to scan."
    ),
    ext: list[str] = typer.Option(
        [], "--ext", "-e", help="File extension to include (repeatable)."
    ),
) -> None:
    """Print every file the directory scanner would watch."""
    files = scan_directory(
        root,
        file_pattern=extensions_pattern(ext or settings.watch_extensions),
        skip_dirs_pattern=re.compile(settings.skip_dirs_pattern),
    )
    for path in files:
        console.print(printable_path(path), markup=False, highlight=False, soft_wrap=True)
    console.print(f"[dim]{len(files)} files[/dim]")
