"""rustc dep-info (``.d``) parsing.

rustc writes a make-rule style file next to every artifact::

    /abs/target/foo.wasm: /abs/src/lib.rs /abs/src/with\\ space.rs

    /abs/src/lib.rs:
    /abs/src/with\\ space.rs:

There is no published grammar for this format; the rules below follow
cargo's own reader:

* Records are newline separated; a line without ``": "`` is skipped.
* Dependency paths are whitespace separated.
* A path ending in ``\\`` continues with an escaped space and the next
  token.  A trailing ``\\`` with nothing after it is malformed.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from wasmforge.errors import MalformedDepInfoError

logger = logging.getLogger(__name__)

DEP_INFO_EXTENSION = ".d"


def parse_dep_info(data: str) -> dict[str, list[str]]:
    """Parse dep-info text into ``{target: [dependency, ...]}``.

    Later records for the same target replace earlier ones.
    """
    dep_info: dict[str, list[str]] = {}
    for line in data.split("\n"):
        target, sep, rest = line.partition(": ")
        if not sep:
            continue

        tokens = rest.split()
        deps: list[str] = []
        i = 0
        while i < len(tokens):
            path = tokens[i]
            i += 1
            while path.endswith("\\"):
                if i >= len(tokens):
                    raise MalformedDepInfoError(
                        f"malformed dep-info format, trailing \\ in record for {target!r}"
                    )
                path = path[:-1] + " " + tokens[i]
                i += 1
            deps.append(path)
        dep_info[target] = deps
    return dep_info


def dep_info_path(artifact_path: str, extension: str = DEP_INFO_EXTENSION) -> Path:
    """Return the dep-info file rustc writes for *artifact_path*.

    Same directory, same base name, *extension* in place of the artifact's
    own suffix.
    """
    artifact = Path(artifact_path)
    return artifact.with_name(artifact.stem + extension)


def select_deps(dep_info: dict[str, list[str]], artifact_path: str) -> list[str]:
    """Pick the dependency list for *artifact_path*.

    Falls back to the first record when the artifact is not a key (cargo
    and rustc sometimes disagree on path spelling), then to ``[]``.
    """
    if artifact_path in dep_info:
        return dep_info[artifact_path]
    return next(iter(dep_info.values()), [])


async def load_from_dep_info(
    artifact_path: str, extension: str = DEP_INFO_EXTENSION
) -> list[str]:
    """Read and parse the dep-info file for *artifact_path*.

    Raises ``OSError`` if the file cannot be read and
    ``MalformedDepInfoError`` if it cannot be parsed.
    """
    path = dep_info_path(artifact_path, extension)
    # Paths are raw bytes on POSIX; undecodable ones round-trip via os.fsencode.
    text = await asyncio.to_thread(
        path.read_text, encoding="utf-8", errors="surrogateescape"
    )
    deps = select_deps(parse_dep_info(text), artifact_path)
    logger.info("Loaded %d watch files from %s", len(deps), path)
    return deps
