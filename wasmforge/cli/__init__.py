"""wasmforge CLI — Typer-based command-line interface.

Provides the ``wasmforge`` command with subcommands for running a
supervised wasm-pack build, inspecting dep-info files, and previewing the
fallback watch set.

All output uses Rich for formatted terminal display.
"""
