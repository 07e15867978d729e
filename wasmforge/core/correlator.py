"""Correlates cargo messages to the artifact whose dep-info matters.

cargo does not say which package is the primary one, so the last
``compiler-artifact`` before a successful ``build-finished`` is assumed to
be the crate being packed, and its first output file names the dep-info.

States::

    NO_ARTIFACT --compiler-artifact--> HAS_ARTIFACT --compiler-artifact--> HAS_ARTIFACT
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from wasmforge.models.messages import BuildFinished, CargoMessage, CompilerArtifact

if TYPE_CHECKING:
    from wasmforge.core.watch import WatchFilesLoader

logger = logging.getLogger(__name__)


class CorrelatorState(str, Enum):
    NO_ARTIFACT = "no_artifact"
    HAS_ARTIFACT = "has_artifact"


class MessageCorrelator:
    """Per-run consumer of the structured message stream.

    Parameters
    ----------
    loader:
        Receives ``load_dep_info`` once a successful build names its
        artifact.
    """

    def __init__(self, loader: WatchFilesLoader) -> None:
        self._loader = loader
        self._last_filenames: list[str] | None = None

    @property
    def state(self) -> CorrelatorState:
        if self._last_filenames is None:
            return CorrelatorState.NO_ARTIFACT
        return CorrelatorState.HAS_ARTIFACT

    @property
    def last_artifact_filenames(self) -> list[str] | None:
        return None if self._last_filenames is None else list(self._last_filenames)

    def consume(self, message: CargoMessage) -> None:
        """Process one message.  Must be called in emission order."""
        if isinstance(message, CompilerArtifact):
            self._last_filenames = list(message.filenames)
            logger.debug("compiler-artifact %s: %s", message.package_id, message.filenames)
            return

        if isinstance(message, BuildFinished):
            logger.debug("build-finished success=%s", message.success)
            if not message.success or not self._last_filenames:
                return
            artifact_path = self._last_filenames[0]
            logger.info("Loading dep-info for %s", artifact_path)
            self._loader.load_dep_info(artifact_path)
