"""Tests for loader wrapping and checksums."""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from modbuild.descriptor.types import ModuleDescriptor
from modbuild.packaging.bundle import BundlePackager, compute_checksum
from modbuild.packaging.template import render_loader

FIXED = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def descriptor() -> ModuleDescriptor:
    return ModuleDescriptor(id=7, name="X", slug="x")


@pytest.fixture
def packager() -> BundlePackager:
    return BundlePackager(runtime_path=None, clock=lambda: FIXED)


class TestRenderLoader:
    def test_substitutes_placeholders(self) -> None:
        text = render_loader(7, "/* polyfill */", "module.exports = f;")
        assert "global.__module_7 = {" in text
        assert "/* polyfill */" in text
        assert "module.exports = f;" in text
        assert "${" not in text

    def test_runtime_contract(self) -> None:
        text = render_loader(1, "", "")
        assert "exported['default']" in text
        assert "No valid factory function found in module exports" in text
        assert "typeof result.Component !== 'function'" in text
        assert "typeof window !== 'undefined' ? window : globalThis" in text

    def test_code_with_dollar_signs_is_kept(self) -> None:
        code = "const price = `${amount}$`;"
        assert code in render_loader(1, "", code)


class TestChecksum:
    def test_sha256_hex(self) -> None:
        assert compute_checksum("abc") == hashlib.sha256(b"abc").hexdigest()

    def test_packaging_is_deterministic(self, packager: BundlePackager, descriptor: ModuleDescriptor) -> None:
        first = packager.package("var a = 1;", descriptor)
        second = packager.package("var a = 1;", descriptor)
        assert first.checksum == second.checksum
        assert first.text == second.text

    def test_single_byte_change_changes_checksum(
        self, packager: BundlePackager, descriptor: ModuleDescriptor
    ) -> None:
        first = packager.package("var a = 1;", descriptor)
        second = packager.package("var a = 2;", descriptor)
        assert first.checksum != second.checksum

    def test_checksum_covers_wrapped_text(self, packager: BundlePackager, descriptor: ModuleDescriptor) -> None:
        bundle = packager.package("var a = 1;", descriptor)
        assert bundle.checksum == compute_checksum(bundle.text)
        assert bundle.size == len(bundle.text.encode("utf-8"))


class TestBundlePackager:
    def test_stamps_descriptor(self, packager: BundlePackager, descriptor: ModuleDescriptor) -> None:
        bundle = packager.package("var a = 1;", descriptor)
        assert bundle.descriptor.checksum == bundle.checksum
        assert bundle.descriptor.timestamp == "2024-05-01T12:00:00+00:00"
        assert descriptor.checksum is None

    def test_polyfill_is_embedded(self, tmp_path: Path, descriptor: ModuleDescriptor) -> None:
        runtime = tmp_path / "runtime.js"
        runtime.write_text("var __runtime = true;")
        bundle = BundlePackager(runtime, clock=lambda: FIXED).package("var a = 1;", descriptor)
        assert "var __runtime = true;" in bundle.text

    def test_missing_polyfill_warns(
        self, tmp_path: Path, descriptor: ModuleDescriptor, caplog: pytest.LogCaptureFixture
    ) -> None:
        packager = BundlePackager(tmp_path / "absent.js", clock=lambda: FIXED)
        with caplog.at_level(logging.WARNING, logger="modbuild.packaging.bundle"):
            assert packager.load_polyfill() == ""
        assert "Runtime polyfill not found" in caplog.text

    def test_explicit_polyfill_overrides_file(self, tmp_path: Path) -> None:
        packager = BundlePackager(tmp_path / "absent.js")
        assert "/* given */" in packager.wrap("x", 3, polyfill="/* given */")
