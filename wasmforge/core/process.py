"""Supervises one wasm-pack process from spawn to close.

Lifecycle of a run::

    spawn -> read JSON lines from stdout (in order) -> stdout EOF
        -> reap exit status -> resolve watch set -> ExitState

The ExitState future is completed exactly once, only after stdout has been
drained and the exit status collected, so no buffered message is lost.
Spawn and signal failures never raise to the caller; they are attached to
the ExitState instead.

Runs are not serialized here.  A caller that starts a new build while a
previous one is active must ``await previous.cancel()`` first, otherwise
two processes race over the same output directory.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Awaitable, Mapping, Sequence
from pathlib import Path

from wasmforge.config import WasmForgeSettings, settings as default_settings
from wasmforge.core.correlator import MessageCorrelator
from wasmforge.core.watch import WatchFilesLoader
from wasmforge.errors import CancelError, MalformedDepInfoError, SpawnError
from wasmforge.models.exit_state import ExitState
from wasmforge.models.messages import parse_message
from wasmforge.models.options import WasmPackOptions

logger = logging.getLogger(__name__)


class WasmPackProcess:
    """A single supervised run.  Use ``start`` or ``from_options``.

    Must be created inside a running event loop; spawning happens in a
    background task.

    Parameters
    ----------
    command:
        Executable to run.
    args:
        Argument list, not including the executable.
    cwd:
        Working directory.  Defaults to the current directory.
    env:
        Environment for the child.  ``None`` inherits the parent's.
    crate_root:
        Directory scanned when no dep-info is available.  Defaults to *cwd*.
    settings:
        Kill escalation, message line limit and watch-set filters.
    """

    def __init__(
        self,
        command: str,
        args: Sequence[str],
        *,
        cwd: str | Path | None = None,
        env: Mapping[str, str] | None = None,
        crate_root: str | Path | None = None,
        settings: WasmForgeSettings | None = None,
    ) -> None:
        loop = asyncio.get_running_loop()
        self._command = command
        self._args = list(args)
        self._cwd = Path(cwd) if cwd else Path.cwd()
        self._env = dict(env) if env is not None else None
        self._settings = settings or default_settings

        self._loader = WatchFilesLoader(crate_root or self._cwd, self._settings)
        self._correlator = MessageCorrelator(self._loader)

        self._process: asyncio.subprocess.Process | None = None
        self._canceled = False
        self._error: BaseException | None = None
        self._kill_handle: asyncio.TimerHandle | None = None

        self._closed: asyncio.Future[ExitState] = loop.create_future()
        self._task = loop.create_task(self._run(), name=f"wasm-pack:{command}")
        self._task.add_done_callback(self._on_task_done)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def start(
        cls,
        command: str,
        args: Sequence[str],
        *,
        cwd: str | Path | None = None,
        env: Mapping[str, str] | None = None,
        crate_root: str | Path | None = None,
        settings: WasmForgeSettings | None = None,
    ) -> WasmPackProcess:
        """Spawn *command* and return the handle for the run."""
        return cls(
            command, args, cwd=cwd, env=env, crate_root=crate_root, settings=settings
        )

    @classmethod
    def from_options(
        cls,
        options: WasmPackOptions,
        *,
        cwd: str | Path | None = None,
        settings: WasmForgeSettings | None = None,
    ) -> WasmPackProcess:
        """Start ``wasm-pack build`` configured by *options*."""
        settings = settings or default_settings
        cwd = Path(cwd) if cwd else Path.cwd()
        crate_root = cwd / options.path if options.path else cwd
        return cls.start(
            options.resolve_executable(settings.wasm_pack_path),
            options.build_args(),
            cwd=cwd,
            crate_root=crate_root,
            settings=settings,
        )

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------

    @property
    def command(self) -> str:
        return self._command

    @property
    def args(self) -> list[str]:
        return list(self._args)

    @property
    def canceled(self) -> bool:
        return self._canceled

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    @property
    def returncode(self) -> int | None:
        return self._process.returncode if self._process is not None else None

    @property
    def closed(self) -> bool:
        return self._closed.done()

    @property
    def correlator(self) -> MessageCorrelator:
        return self._correlator

    @property
    def watch_loader(self) -> WatchFilesLoader:
        return self._loader

    def wait_for_close(self) -> Awaitable[ExitState]:
        """Wait for the run to close.

        Every caller receives the same ``ExitState``.  Cancelling one
        awaiter does not affect the others.
        """
        return asyncio.shield(self._closed)

    def cancel(self) -> Awaitable[ExitState]:
        """Send SIGTERM and wait for the run to close.

        Idempotent: only the first call signals the process.  When the
        process has not been spawned yet it is signalled as soon as it is.
        """
        if not self._canceled:
            self._canceled = True
            logger.info("Canceling %s", self._command)
            if self._process is not None:
                self._terminate()
        return self.wait_for_close()

    # ------------------------------------------------------------------
    # Run task
    # ------------------------------------------------------------------

    async def _run(self) -> None:
        code: int | None = None
        signal_name: str | None = None
        try:
            try:
                self._process = await asyncio.create_subprocess_exec(
                    self._command,
                    *self._args,
                    cwd=self._cwd,
                    env=self._env,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=None,
                    limit=self._settings.message_line_limit,
                )
            except OSError as exc:
                error = SpawnError(f"Failed to spawn {self._command!r}: {exc}")
                error.__cause__ = exc
                self._error = error
                logger.error("%s", error)
            else:
                logger.info("Spawned %s (pid %d)", self._command, self._process.pid)
                if self._canceled:
                    self._terminate()
                await self._consume_messages()
                returncode = await self._process.wait()
                code, signal_name = _split_returncode(returncode)
                logger.info(
                    "%s closed (code=%s, signal=%s)", self._command, code, signal_name
                )

            watch_files = await self._resolve_watch_files()
        finally:
            if self._kill_handle is not None:
                self._kill_handle.cancel()
                self._kill_handle = None
            # Reached with a live child only when this task was cancelled.
            process = self._process
            if process is not None and process.returncode is None:
                logger.warning("Run task for %s cancelled; terminating it", self._command)
                self._send(process, signal.SIGTERM)

        self._closed.set_result(
            ExitState(
                error=self._error,
                canceled=self._canceled,
                code=code,
                signal=signal_name,
                watch_files=watch_files,
            )
        )

    async def _consume_messages(self) -> None:
        assert self._process is not None and self._process.stdout is not None
        stdout = self._process.stdout
        while True:
            try:
                line = await stdout.readline()
            except ValueError as exc:
                logger.warning("Dropping oversized message line: %s", exc)
                continue
            if not line:
                break
            message = parse_message(line)
            if message is not None:
                self._correlator.consume(message)

    async def _resolve_watch_files(self) -> list[str]:
        try:
            return await self._loader.get_watch_files()
        except MalformedDepInfoError as exc:
            logger.error("Cannot use dep-info, falling back to a scan: %s", exc)
            if self._error is None:
                self._error = exc
            return await self._loader.scan()

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        # Only reached without a result if the run task itself failed.
        if self._closed.done():
            return
        if task.cancelled():
            self._closed.cancel()
        else:
            self._closed.set_exception(task.exception())

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------

    def _terminate(self) -> None:
        process = self._process
        if process is None or process.returncode is not None:
            return
        if not self._send(process, signal.SIGTERM):
            return
        timeout = self._settings.kill_timeout_seconds
        if timeout is not None:
            self._kill_handle = asyncio.get_running_loop().call_later(
                timeout, self._escalate
            )

    def _escalate(self) -> None:
        self._kill_handle = None
        process = self._process
        if process is None or process.returncode is not None:
            return
        logger.warning(
            "%s still running %ss after SIGTERM; sending SIGKILL",
            self._command,
            self._settings.kill_timeout_seconds,
        )
        self._send(process, signal.SIGKILL)

    def _send(self, process: asyncio.subprocess.Process, sig: signal.Signals) -> bool:
        try:
            if sig == signal.SIGTERM:
                process.terminate()
            else:
                process.kill()
        except ProcessLookupError:
            logger.debug("%s already exited before %s", self._command, sig.name)
            return False
        except OSError as exc:
            error = CancelError(f"Failed to send {sig.name} to {self._command!r}: {exc}")
            error.__cause__ = exc
            if self._error is None:
                self._error = error
            logger.error("%s", error)
            return False
        return True


def _split_returncode(returncode: int) -> tuple[int | None, str | None]:
    """asyncio reports death by signal N as returncode -N."""
    if returncode >= 0:
        return returncode, None
    try:
        return None, signal.Signals(-returncode).name
    except ValueError:
        return None, str(-returncode)
