"""Tests for dep-info parsing, path derivation and target selection."""

from __future__ import annotations

from pathlib import Path

import pytest

from wasmforge.core.dep_info import (
    MalformedDepInfoError,
    dep_info_path,
    load_from_dep_info,
    parse_dep_info,
    select_deps,
)


class TestParseDepInfo:
    def test_simple_record(self):
        dep_info = parse_dep_info("out/app.wasm: src/a.rs src/b.rs\n")
        assert dep_info["out/app.wasm"] == ["src/a.rs", "src/b.rs"]

    def test_escaped_space(self):
        dep_info = parse_dep_info("out/app.wasm: src/with\\ space.rs\n")
        assert dep_info["out/app.wasm"] == ["src/with space.rs"]

    def test_multiple_escaped_spaces_in_one_path(self):
        dep_info = parse_dep_info("out: a\\ b\\ c.rs d.rs\n")
        assert dep_info["out"] == ["a b c.rs", "d.rs"]

    def test_trailing_backslash_is_malformed(self):
        with pytest.raises(MalformedDepInfoError, match="trailing"):
            parse_dep_info("out: src/\\\n")

    def test_malformed_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_dep_info("out: a.rs b\\")

    def test_lines_without_separator_are_skipped(self):
        text = (
            "/t/app.wasm: /s/lib.rs /s/util.rs\n"
            "\n"
            "/s/lib.rs:\n"
            "/s/util.rs:\n"
        )
        dep_info = parse_dep_info(text)
        assert list(dep_info) == ["/t/app.wasm"]

    def test_record_with_no_dependencies(self):
        dep_info = parse_dep_info("out: \n")
        assert dep_info == {"out": []}

    def test_multiple_records_keep_order(self):
        dep_info = parse_dep_info("a.d: x.rs\nb.wasm: y.rs z.rs\n")
        assert list(dep_info) == ["a.d", "b.wasm"]
        assert dep_info["b.wasm"] == ["y.rs", "z.rs"]

    def test_later_record_overwrites_earlier(self):
        dep_info = parse_dep_info("out: old.rs\nout: new.rs\n")
        assert dep_info == {"out": ["new.rs"]}

    def test_empty_input(self):
        assert parse_dep_info("") == {}

    def test_crlf_line_endings(self):
        dep_info = parse_dep_info("out: a.rs b.rs\r\n")
        assert dep_info["out"] == ["a.rs", "b.rs"]


class TestDepInfoPath:
    def test_replaces_extension(self):
        assert dep_info_path("/t/wasm32/release/demo.wasm") == Path(
            "/t/wasm32/release/demo.d"
        )

    def test_only_last_suffix_replaced(self):
        assert dep_info_path("/t/libdemo.so.1").name == "libdemo.so.d"

    def test_custom_extension(self):
        assert dep_info_path("out/app.wasm", ".deps").name == "app.deps"


class TestSelectDeps:
    def test_matching_target(self):
        dep_info = {"first": ["a"], "out/app.wasm": ["b"]}
        assert select_deps(dep_info, "out/app.wasm") == ["b"]

    def test_falls_back_to_first_record(self):
        dep_info = {"first": ["a"], "second": ["b"]}
        assert select_deps(dep_info, "missing") == ["a"]

    def test_empty_manifest(self):
        assert select_deps({}, "anything") == []


class TestLoadFromDepInfo:
    @pytest.mark.asyncio
    async def test_reads_sibling_file(self, tmp_path: Path):
        artifact = tmp_path / "demo.wasm"
        (tmp_path / "demo.d").write_text(
            f"{artifact}: /src/lib.rs /src/my\\ mod.rs\n\n/src/lib.rs:\n",
            encoding="utf-8",
        )
        deps = await load_from_dep_info(str(artifact))
        assert deps == ["/src/lib.rs", "/src/my mod.rs"]

    @pytest.mark.asyncio
    async def test_missing_file_raises_os_error(self, tmp_path: Path):
        with pytest.raises(OSError):
            await load_from_dep_info(str(tmp_path / "nothing.wasm"))

    @pytest.mark.asyncio
    async def test_malformed_file_raises(self, tmp_path: Path):
        (tmp_path / "bad.d").write_text("x: y\\\n", encoding="utf-8")
        with pytest.raises(MalformedDepInfoError):
            await load_from_dep_info(str(tmp_path / "bad.wasm"))
