"""Options passed through to ``wasm-pack build``."""

from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel, ConfigDict


class WasmPackOptions(BaseModel):
    """Per-plugin wasm-pack configuration.

    Every field is optional; unset fields are simply not passed to
    wasm-pack, which then applies its own defaults.

    Examples
    --------
    >>> WasmPackOptions(profile="release", out_dir="pkg").build_args()
    ['build', '--release', '--out-dir', 'pkg', '--', '--message-format=json']
    """

    model_config = ConfigDict(frozen=True)

    log_level: Literal["info", "warn", "error"] | None = None
    profile: Literal["dev", "profiling", "release"] | None = None
    no_typescript: bool = False
    mode: Literal["no-install", "normal", "force"] | None = None
    out_dir: str | None = None
    out_name: str | None = None
    scope: str | None = None
    target: Literal["bundler", "nodejs", "web", "no-modules"] | None = None
    path: str | None = None  # crate root; wasm-pack searches upward when unset
    extra_options: list[str] = []  # passed to cargo after ``--``
    extra_pack_options: list[str] = []  # passed to wasm-pack itself
    wasm_pack_path: str | None = None

    def build_args(self) -> list[str]:
        """Assemble the wasm-pack argument list.

        cargo is always asked for ``--message-format=json`` so that the
        supervisor can read structured progress messages from stdout.
        """
        args: list[str] = ["build"]
        if self.log_level:
            args += ["--log-level", self.log_level]
        if self.profile:
            args.append(f"--{self.profile}")
        if self.no_typescript:
            args.append("--no-typescript")
        if self.mode:
            args += ["--mode", self.mode]
        if self.out_dir:
            args += ["--out-dir", self.out_dir]
        if self.out_name:
            args += ["--out-name", self.out_name]
        if self.scope:
            args += ["--scope", self.scope]
        if self.target:
            args += ["--target", self.target]
        args += self.extra_pack_options
        if self.path:
            args.append(self.path)
        args += ["--", *self.extra_options, "--message-format=json"]
        return args

    def resolve_executable(self, default: str = "wasm-pack") -> str:
        """Return the wasm-pack executable.

        Precedence: ``$WASM_PACK_PATH``, then ``wasm_pack_path``, then
        *default*.
        """
        return os.environ.get("WASM_PACK_PATH") or self.wasm_pack_path or default
