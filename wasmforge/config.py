"""Runtime configuration — env-driven.

Centralized settings using pydantic-settings.  Reads from a .env file and
WASMFORGE_* environment variables.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class WasmForgeSettings(BaseSettings):
    """Settings shared by the supervisor, the watch-set resolver and the CLI.

    Examples
    --------
    Override via environment::

        export WASMFORGE_LOG_LEVEL=DEBUG
        export WASMFORGE_KILL_TIMEOUT_SECONDS=10
        export WASMFORGE_WATCH_EXTENSIONS='[".rs", ".toml"]'

    The wasm-pack executable itself is also honoured through the
    ``WASM_PACK_PATH`` variable (see ``WasmPackOptions.resolve_executable``).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="WASMFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    wasm_pack_path: str = "wasm-pack"

    # Directory scanner fallback
    watch_extensions: list[str] = [".rs"]
    skip_dirs_pattern: str = r"^\.|^node_modules$"

    # rustc writes <artifact stem>.d next to the artifact
    dep_info_extension: str = ".d"

    # Seconds between SIGTERM and SIGKILL on cancel; None never escalates.
    kill_timeout_seconds: float | None = None

    # Upper bound for one JSON line on the message channel
    message_line_limit: int = 16 * 1024 * 1024


# Module-level singleton: import as `from wasmforge.config import settings`
settings = WasmForgeSettings()
