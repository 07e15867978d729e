"""Build-tool plugin that runs wasm-pack when a build starts.

The host's plugin API is not defined here; ``PluginBuild`` only names the
two hooks the plugin registers.  Any host object offering ``on_start`` and
``on_resolve`` callbacks can drive it.

On every build start the plugin cancels the previous wasm-pack run (and
waits for it to close), starts a new one, and turns the resulting
``ExitState`` into a ``BuildReport``: errors, warnings and the files the
host should watch for the next rebuild.
"""

from __future__ import annotations

import asyncio
import logging
import traceback
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from wasmforge.config import WasmForgeSettings, settings as default_settings
from wasmforge.console import BuildConsole
from wasmforge.core.process import WasmPackProcess
from wasmforge.errors import CancelError
from wasmforge.models.exit_state import ExitState
from wasmforge.models.options import WasmPackOptions

logger = logging.getLogger(__name__)


@runtime_checkable
class PluginBuild(Protocol):
    """The hooks a host build exposes to plugins."""

    def on_start(self, callback: Callable[[], Awaitable[Any]]) -> None:
        """Register *callback* to run whenever a build starts."""
        ...

    def on_resolve(self, callback: Callable[..., Awaitable[Any]]) -> None:
        """Register *callback* to run before each module resolution."""
        ...


class BuildMessage(BaseModel):
    """One error or warning handed back to the host."""

    model_config = ConfigDict(frozen=True)

    text: str
    detail: str | None = None


class BuildReport(BaseModel):
    """What the host receives for one build start."""

    model_config = ConfigDict(frozen=True)

    errors: list[BuildMessage] = []
    warnings: list[BuildMessage] = []
    watch_files: list[str] = []
    exit_state: ExitState | None = None

    @property
    def ok(self) -> bool:
        return not self.errors and not self.warnings


class WasmPackPlugin:
    """Runs wasm-pack on build start and reports the watch set.

    Parameters
    ----------
    options:
        wasm-pack options; ``options.log_level`` also gates console output.
    settings:
        Runtime settings.  Defaults to the module-level singleton.
    console:
        Console for status lines.
    cwd:
        Directory wasm-pack runs in.  Defaults to the current directory at
        each build start.
    """

    name = "wasm-pack"

    def __init__(
        self,
        options: WasmPackOptions | None = None,
        *,
        settings: WasmForgeSettings | None = None,
        console: BuildConsole | None = None,
        cwd: str | Path | None = None,
    ) -> None:
        self.options = options or WasmPackOptions()
        self._settings = settings or default_settings
        self._console = console or BuildConsole(self.options.log_level)
        self._cwd = Path(cwd) if cwd else None
        self._process: WasmPackProcess | None = None
        self._replace_lock = asyncio.Lock()

    @property
    def active(self) -> WasmPackProcess | None:
        """The run currently in progress, if any."""
        return self._process

    def setup(self, build: PluginBuild) -> None:
        """Register the start and resolve hooks with the host."""
        build.on_start(self.run_build)
        build.on_resolve(self._on_resolve)

    async def _on_resolve(self, *args: Any, **kwargs: Any) -> None:
        # Resolution waits for wasm-pack so generated bindings exist.
        await self.wait_idle()
        return None

    async def wait_idle(self) -> None:
        """Wait until the current run, if any, has closed."""
        process = self._process
        if process is not None:
            await process.wait_for_close()

    async def run_build(self) -> BuildReport:
        """Cancel any previous run, run wasm-pack and report the result."""
        self._console.info(
            f"\nℹ️  Compiling your crate in {self.options.profile or '<default>'} mode...\n"
        )

        async with self._replace_lock:
            previous = self._process
            if previous is not None:
                logger.info("Canceling previous wasm-pack run")
                await previous.cancel()
            process = WasmPackProcess.from_options(
                self.options, cwd=self._cwd, settings=self._settings
            )
            self._process = process

        result = await process.wait_for_close()
        if self._process is process:
            self._process = None
        return self.report(result)

    def report(self, result: ExitState) -> BuildReport:
        """Translate an ExitState into host errors and warnings."""
        base: dict[str, Any] = {"watch_files": result.watch_files, "exit_state": result}

        if result.error is not None:
            action = "canceling" if isinstance(result.error, CancelError) else "running"
            self._console.error(f"\n⚠️  Error {action} wasm-pack: {result.error}\n")
            return BuildReport(
                errors=[
                    BuildMessage(text=str(result.error), detail=_format_detail(result.error))
                ],
                **base,
            )

        if result.canceled:
            self._console.error("\n⚠️  Build was canceled\n")
            return BuildReport(warnings=[BuildMessage(text="Build was canceled")], **base)

        if result.signal:
            text = (
                f"Error running wasm-pack: process was killed with signal '{result.signal}'."
            )
            self._console.error(f"\n⚠️  {text}\n")
            return BuildReport(errors=[BuildMessage(text=text)], **base)

        if result.code:
            self._console.error("\n⚠️  Rust compilation failed.\n")
            return BuildReport(errors=[BuildMessage(text="Rust compilation failed.")], **base)

        self._console.info("\n✅  Your crate was successfully compiled\n")
        return BuildReport(**base)


def _format_detail(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


def wasm_pack(options: WasmPackOptions | None = None, **kwargs: Any) -> WasmPackPlugin:
    """Create the wasm-pack plugin."""
    return WasmPackPlugin(options, **kwargs)
