"""Structured cargo messages read from the wasm-pack stdout channel.

cargo emits one JSON object per line when invoked with
``--message-format=json``.  Every record carries a ``reason`` field; only
two reasons matter for watch-set correlation:

* ``compiler-artifact`` — names the files produced for one package.
* ``build-finished`` — overall success or failure of the invocation.

Every other reason is decoded as ``OtherMessage`` and ignored downstream.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)


class MessageReason(str, Enum):
    """The cargo message reasons the correlator understands."""

    COMPILER_ARTIFACT = "compiler-artifact"
    BUILD_FINISHED = "build-finished"


class MessageBase(BaseModel):
    """Fields shared by every decoded cargo message."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    reason: str


class CompilerArtifact(MessageBase):
    """A package was compiled and produced ``filenames``."""

    reason: str = MessageReason.COMPILER_ARTIFACT.value
    package_id: str = ""
    filenames: list[str] = []
    fresh: bool = False


class BuildFinished(MessageBase):
    """The cargo invocation finished."""

    reason: str = MessageReason.BUILD_FINISHED.value
    success: bool


class OtherMessage(MessageBase):
    """Any record whose reason is not recognized."""


CargoMessage = Union[CompilerArtifact, BuildFinished, OtherMessage]

# Registry for deserialization by reason
MESSAGE_TYPE_MAP: dict[str, type[MessageBase]] = {
    MessageReason.COMPILER_ARTIFACT.value: CompilerArtifact,
    MessageReason.BUILD_FINISHED.value: BuildFinished,
}


def decode_message(data: dict[str, Any]) -> CargoMessage:
    """Validate an already-parsed JSON record into its message type.

    Raises ``pydantic.ValidationError`` when a recognized reason carries
    fields of the wrong shape.
    """
    reason = data.get("reason")
    if not isinstance(reason, str):
        return OtherMessage(reason="")
    model = MESSAGE_TYPE_MAP.get(reason, OtherMessage)
    return model.model_validate(data)  # type: ignore[return-value]


def parse_message(line: str | bytes) -> CargoMessage | None:
    """Decode one line of the message channel.

    Returns ``None`` for blank lines, text that is not a JSON object, and
    records that fail validation.  Such lines are logged and skipped.
    """
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    text = line.strip()
    if not text:
        return None

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        logger.debug("Skipping non-JSON output line: %.120s", text)
        return None

    if not isinstance(data, dict):
        logger.debug("Skipping non-object JSON line: %.120s", text)
        return None

    try:
        return decode_message(data)
    except ValidationError as exc:
        logger.warning(
            "Ignoring malformed %r message: %s", data.get("reason"), exc
        )
        return None
