"""Errors attached to an ExitState when a run fails.

None of these escape a supervised run; the supervisor records them on the
ExitState and the host translates them into build errors.
"""

from __future__ import annotations

__all__ = [
    "CancelError",
    "MalformedDepInfoError",
    "SpawnError",
]


class SpawnError(RuntimeError):
    """The wasm-pack process could not be started."""


class CancelError(RuntimeError):
    """A termination signal could not be delivered."""


class MalformedDepInfoError(ValueError):
    """A dep-info record ends in an unescaped trailing backslash."""
