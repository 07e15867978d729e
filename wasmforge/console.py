"""Rich console output for build status, gated by the wasm-pack log level.

Color scheme
------------
- bold blue : progress / success
- bold red  : errors, warnings and cancellation
"""

from __future__ import annotations

from rich.console import Console

LOG_LEVELS: tuple[str, ...] = ("info", "warn", "error")


class BuildConsole:
    """Prints build status lines.

    Parameters
    ----------
    log_level:
        One of ``info``, ``warn``, ``error`` (case-insensitive).  Unknown
        values print everything.
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, log_level: str | None = None, console: Console | None = None) -> None:
        self.console = console or Console()
        level = (log_level or "info").lower()
        self._level = LOG_LEVELS.index(level) if level in LOG_LEVELS else -1

    def info(self, message: str) -> None:
        if self._level <= 1:
            self.console.print(message, style="bold blue", markup=False, highlight=False)

    def error(self, message: str) -> None:
        self.console.print(message, style="bold red", markup=False, highlight=False)


def printable_path(path: str) -> str:
    """Render *path* for a terminal.

    Bytes that were not valid UTF-8 in the file system name are shown as
    ``\\xNN`` escapes instead of failing the write.
    """
    return path.encode("utf-8", "surrogateescape").decode("utf-8", "backslashreplace")
