"""wasmforge data models — all Pydantic v2, all frozen (immutable)."""

from wasmforge.models.exit_state import BuildOutcome, ExitState
from wasmforge.models.messages import (
    MESSAGE_TYPE_MAP,
    BuildFinished,
    CargoMessage,
    CompilerArtifact,
    MessageReason,
    OtherMessage,
    parse_message,
)
from wasmforge.models.options import WasmPackOptions

__all__ = [
    # results
    "BuildOutcome",
    "ExitState",
    # messages
    "MessageReason",
    "CargoMessage",
    "CompilerArtifact",
    "BuildFinished",
    "OtherMessage",
    "MESSAGE_TYPE_MAP",
    "parse_message",
    # options
    "WasmPackOptions",
]
