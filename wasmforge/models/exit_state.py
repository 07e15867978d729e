"""Result record for one supervised wasm-pack run."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from wasmforge.errors import CancelError, MalformedDepInfoError, SpawnError


class BuildOutcome(str, Enum):
    """How a run ended, in the order the host checks for it."""

    CANCEL_FAILED = "cancel_failed"
    MANIFEST_ERROR = "manifest_error"
    SPAWN_FAILED = "spawn_failed"
    ERRORED = "errored"
    CANCELED = "canceled"
    SIGNALED = "signaled"
    FAILED = "failed"
    SUCCESS = "success"


class ExitState(BaseModel):
    """Produced exactly once per run, after the process has fully closed.

    ``code`` is ``None`` when the process never started or was killed by a
    signal; ``signal`` then carries the signal name (e.g. ``"SIGTERM"``).
    ``watch_files`` is either entirely derived from the dep-info file or
    entirely from the directory scan.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    error: BaseException | None = None
    canceled: bool = False
    code: int | None = None
    signal: str | None = None
    watch_files: list[str] = []

    @property
    def outcome(self) -> BuildOutcome:
        """Classify the run using the host's precedence rules."""
        if self.error is not None:
            if isinstance(self.error, CancelError):
                return BuildOutcome.CANCEL_FAILED
            if isinstance(self.error, MalformedDepInfoError):
                return BuildOutcome.MANIFEST_ERROR
            if isinstance(self.error, SpawnError):
                return BuildOutcome.SPAWN_FAILED
            return BuildOutcome.ERRORED
        if self.canceled:
            return BuildOutcome.CANCELED
        if self.signal:
            return BuildOutcome.SIGNALED
        if self.code:
            return BuildOutcome.FAILED
        return BuildOutcome.SUCCESS

    @property
    def ok(self) -> bool:
        return self.outcome == BuildOutcome.SUCCESS
