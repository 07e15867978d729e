"""Watch-set resolution for one wasm-pack run.

The dep-info file is loaded as soon as the correlator knows which artifact
matters, instead of after wasm-pack exits; ``get_watch_files`` only awaits
the result once the process has closed.  When no dep-info load was started
the crate directory is scanned instead.
"""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path

from wasmforge.config import WasmForgeSettings, settings as default_settings
from wasmforge.core.dep_info import load_from_dep_info
from wasmforge.core.scanner import extensions_pattern, load_from_scan
from wasmforge.errors import MalformedDepInfoError

logger = logging.getLogger(__name__)


class WatchFilesLoader:
    """Resolves the files to watch for the next incremental build.

    Parameters
    ----------
    crate_root:
        Directory scanned when no dep-info file is available.  Defaults to
        the current working directory.
    settings:
        Supplies the dep-info extension and the scanner filters.
    """

    def __init__(
        self,
        crate_root: str | Path | None = None,
        settings: WasmForgeSettings | None = None,
    ) -> None:
        self._settings = settings or default_settings
        self._crate_root = Path(crate_root) if crate_root else Path.cwd()
        self._dep_info_task: asyncio.Task[list[str]] | None = None

    @property
    def crate_root(self) -> Path:
        return self._crate_root

    @property
    def dep_info_pending(self) -> bool:
        """Whether a dep-info load has been started for this run."""
        return self._dep_info_task is not None

    def load_dep_info(self, artifact_path: str) -> None:
        """Start loading the dep-info file for *artifact_path*.

        Returns immediately.  Only the most recent load is ever awaited; a
        previous load that is still running is cancelled.
        """
        stale = self._dep_info_task
        if stale is not None and not stale.done():
            logger.warning("Replacing in-flight dep-info load with %s", artifact_path)
            stale.cancel()

        task = asyncio.get_running_loop().create_task(
            load_from_dep_info(artifact_path, self._settings.dep_info_extension),
            name=f"dep-info:{artifact_path}",
        )
        task.add_done_callback(_report_dep_info_failure)
        self._dep_info_task = task

    async def get_watch_files(self) -> list[str]:
        """Return the watch set for this run.

        The dep-info result when a load was started, otherwise a scan of
        the crate root.  An unreadable dep-info file also falls back to
        the scan.  ``MalformedDepInfoError`` propagates to the caller.
        """
        task = self._dep_info_task
        if task is not None:
            try:
                return await task
            except OSError as exc:
                logger.warning(
                    "Dep-info file unavailable (%s); scanning %s instead",
                    exc,
                    self._crate_root,
                )
        return await self.scan()

    async def scan(self) -> list[str]:
        """Scan the crate root with the configured filters."""
        return await load_from_scan(
            self._crate_root,
            file_pattern=extensions_pattern(self._settings.watch_extensions),
            skip_dirs_pattern=re.compile(self._settings.skip_dirs_pattern),
        )


def _report_dep_info_failure(task: asyncio.Task[list[str]]) -> None:
    # Surfaces parse errors even if the process never closes.
    if task.cancelled():
        return
    exc = task.exception()
    if isinstance(exc, MalformedDepInfoError):
        logger.error("%s: %s", task.get_name(), exc)
    elif exc is not None:
        logger.debug("%s failed: %s", task.get_name(), exc)
