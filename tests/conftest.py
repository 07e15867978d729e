"""Shared test fixtures for wasmforge."""

from __future__ import annotations

import json
import stat
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

from wasmforge.config import WasmForgeSettings

FAKE_WASM_PACK = '''\
#!{python}
import signal
import sys
import time

if {ignore_term!r}:
    signal.signal(signal.SIGTERM, signal.SIG_IGN)
for path, content in {files!r}.items():
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
for line in {lines!r}:
    sys.stdout.write(line + "\\n")
    sys.stdout.flush()
time.sleep({sleep!r})
sys.exit({exit_code!r})
'''


@dataclass
class FakeWasmPack:
    """A stand-in wasm-pack: an executable Python script."""

    path: Path

    @property
    def command(self) -> str:
        return sys.executable

    @property
    def args(self) -> list[str]:
        return [str(self.path)]


@pytest.fixture(autouse=True)
def _no_wasm_pack_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's $WASM_PACK_PATH out of the tests."""
    monkeypatch.delenv("WASM_PACK_PATH", raising=False)


@pytest.fixture
def test_settings() -> WasmForgeSettings:
    """Settings with defaults only (no escalation)."""
    return WasmForgeSettings(kill_timeout_seconds=None)


@pytest.fixture
def crate_dir(tmp_path: Path) -> Path:
    """A small crate tree with files the scanner must include and skip."""
    root = tmp_path / "crate"
    files = {
        "Cargo.toml": "[package]\nname = 'demo'\n",
        "src/lib.rs": "pub fn f() {}\n",
        "src/util.rs": "\n",
        "src/nested/deep/er/mod.rs": "\n",
        "src/notes.md": "notes\n",
        ".git/hooks/hook.rs": "\n",
        ".cargo/config.rs": "\n",
        "node_modules/pkg/index.rs": "\n",
        "pkg/node_modules/inner.rs": "\n",
    }
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def artifact_message() -> Callable[..., str]:
    """Factory fixture: a ``compiler-artifact`` JSON line."""

    def _factory(*filenames: str, package_id: str = "demo 0.1.0", **extra: Any) -> str:
        data = {
            "reason": "compiler-artifact",
            "package_id": package_id,
            "filenames": list(filenames),
            "fresh": False,
        }
        data.update(extra)
        return json.dumps(data)

    return _factory


@pytest.fixture
def finished_message() -> Callable[[bool], str]:
    """Factory fixture: a ``build-finished`` JSON line."""

    def _factory(success: bool = True) -> str:
        return json.dumps({"reason": "build-finished", "success": success})

    return _factory


@pytest.fixture
def make_fake_wasm_pack(tmp_path: Path) -> Callable[..., FakeWasmPack]:
    """Factory fixture: write an executable fake wasm-pack.

    The script writes *files*, prints *lines* to stdout, sleeps *sleep*
    seconds and exits with *exit_code*.  With *ignore_term* it ignores
    SIGTERM (installed before any line is printed).
    """
    counter = iter(range(1_000_000))

    def _factory(
        lines: list[str] | None = None,
        *,
        exit_code: int = 0,
        sleep: float = 0.0,
        ignore_term: bool = False,
        files: dict[str, str] | None = None,
    ) -> FakeWasmPack:
        path = tmp_path / f"fake-wasm-pack-{next(counter)}"
        path.write_text(
            FAKE_WASM_PACK.format(
                python=sys.executable,
                ignore_term=ignore_term,
                files=dict(files or {}),
                lines=list(lines or []),
                sleep=sleep,
                exit_code=exit_code,
            ),
            encoding="utf-8",
        )
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return FakeWasmPack(path=path)

    return _factory
