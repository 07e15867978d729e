"""wasmforge: supervised wasm-pack builds for host build tools.

Runs ``wasm-pack build`` on behalf of a host bundler, reads cargo's JSON
progress messages to find the crate's artifact, and derives the exact set
of source files to watch from rustc's dep-info output, scanning the crate
directory when no dep-info is available.
"""

__version__ = "0.1.0"

from wasmforge.core.process import WasmPackProcess
from wasmforge.core.watch import WatchFilesLoader
from wasmforge.errors import CancelError, MalformedDepInfoError, SpawnError
from wasmforge.models.exit_state import BuildOutcome, ExitState
from wasmforge.models.options import WasmPackOptions
from wasmforge.plugin import BuildReport, WasmPackPlugin, wasm_pack

__all__ = [
    "WasmPackProcess",
    "WatchFilesLoader",
    "WasmPackOptions",
    "WasmPackPlugin",
    "BuildReport",
    "BuildOutcome",
    "ExitState",
    "SpawnError",
    "CancelError",
    "MalformedDepInfoError",
    "wasm_pack",
    "__version__",
]
