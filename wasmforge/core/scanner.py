"""Fallback watch-set discovery by walking the crate directory.

Used when no dep-info file is available: the build failed, was canceled,
or never reported a finished artifact.  Collects every source file under
the crate root, skipping dot directories and ``node_modules``.  Symbolic
links are neither followed nor reported.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = (".rs",)
DEFAULT_SKIP_DIRS = re.compile(r"^\.|^node_modules$")


def extensions_pattern(extensions: Iterable[str]) -> re.Pattern[str]:
    """Compile a filename filter matching any of *extensions*."""
    alternatives = "|".join(re.escape(ext) for ext in extensions)
    if not alternatives:
        raise ValueError("at least one watch extension is required")
    return re.compile(rf"(?:{alternatives})$")


def scan_directory(
    root: str | Path,
    *,
    file_pattern: re.Pattern[str] | None = None,
    skip_dirs_pattern: re.Pattern[str] | None = None,
) -> list[str]:
    """Recursively list files under *root* whose names match *file_pattern*.

    Entries are visited in sorted name order so the result is
    deterministic.  Paths are returned joined onto *root* as given, so a
    relative root yields relative paths.
    """
    file_pattern = file_pattern or extensions_pattern(DEFAULT_EXTENSIONS)
    skip_dirs_pattern = skip_dirs_pattern or DEFAULT_SKIP_DIRS

    found: list[str] = []
    pending = [os.fspath(root)]
    while pending:
        current = pending.pop()
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            logger.warning("Cannot scan %s: %s", current, exc)
            continue

        subdirs: list[str] = []
        for entry in entries:
            if entry.is_symlink():
                continue
            if entry.is_dir(follow_symlinks=False):
                if not skip_dirs_pattern.search(entry.name):
                    subdirs.append(entry.path)
            elif entry.is_file(follow_symlinks=False):
                if file_pattern.search(entry.name):
                    found.append(entry.path)
        # Depth-first, preserving name order among siblings.
        pending.extend(reversed(subdirs))
    return found


async def load_from_scan(
    root: str | Path,
    *,
    file_pattern: re.Pattern[str] | None = None,
    skip_dirs_pattern: re.Pattern[str] | None = None,
) -> list[str]:
    """Run ``scan_directory`` off the event loop."""
    files = await asyncio.to_thread(
        scan_directory,
        root,
        file_pattern=file_pattern,
        skip_dirs_pattern=skip_dirs_pattern,
    )
    logger.info("Scanned %s: %d watch files", root, len(files))
    return files
