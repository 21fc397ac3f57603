"""Tests for export naming, SVG and PNG files, clipboard copy and verification."""

from __future__ import annotations

import sys
from types import ModuleType, SimpleNamespace

import pyperclip
import pytest
from PIL import Image

from qreate import export
from qreate.export import (
    ClipboardError,
    VerifyResult,
    copy_svg_to_clipboard,
    export_filename,
    rasterize,
    save_png,
    save_svg,
)
from qreate.pipeline import generate


@pytest.fixture(scope="module")
def render():
    return generate("https://example.com/a b!c", corner_radius=10)


class TestExportFilename:
    def test_url_with_disallowed_chars(self):
        assert export_filename("https://example.com/a b!c") == "qr-example.com-a-b-c.svg"

    def test_http_prefix(self):
        assert export_filename("http://example.com") == "qr-example.com.svg"

    def test_collapses_and_trims_separators(self):
        assert export_filename("  hello   world!! ") == "qr-hello-world.svg"

    def test_extension(self):
        assert export_filename("abc", "png") == "qr-abc.png"


class TestSaveSvg:
    def test_writes_standalone_document(self, render, tmp_path):
        out = tmp_path / "nested" / "code.svg"
        assert save_svg(render, str(out)) == str(out)
        content = out.read_text(encoding="utf-8")
        assert content.startswith('<?xml version="1.0" standalone="no"?>')
        assert "<!DOCTYPE svg" in content
        assert render.module_path in content

    def test_default_name(self, render, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert save_svg(render) == "qr-example.com-a-b-c.svg"
        assert (tmp_path / "qr-example.com-a-b-c.svg").exists()

    def test_nothing_to_export(self, tmp_path):
        assert save_svg(None, str(tmp_path / "x.svg")) is None
        assert not (tmp_path / "x.svg").exists()

    def test_png_nothing_to_export(self, tmp_path):
        assert save_png(None, str(tmp_path / "x.png")) is None


class TestPng:
    @pytest.fixture
    def small_render(self):
        pytest.importorskip("cairosvg")
        return generate("abc", corner_radius=10)

    def test_rasterize_adds_white_quiet_zone(self, small_render):
        assert small_render.module_count == 21
        img = rasterize(small_render, size=210)
        # 4 modules of 10 px on each side
        assert img.size == (290, 290)
        assert img.mode == "RGB"
        assert img.getpixel((0, 0)) == (255, 255, 255)
        assert img.getpixel((289, 289)) == (255, 255, 255)
        assert min(channel[0] for channel in img.getextrema()) < 128

    def test_transparent_background_is_flattened_to_white(self, small_render):
        img = rasterize(small_render, size=210, border=0)
        assert img.size == (210, 210)
        # Centre of module (row 7, col 3), in the always-light finder separator
        assert img.getpixel((35, 75)) == (255, 255, 255)

    def test_save_png(self, small_render, tmp_path):
        out = tmp_path / "out" / "code.png"
        assert save_png(small_render, str(out), size=105) == str(out)
        with Image.open(out) as img:
            assert img.format == "PNG"
            assert img.size == (145, 145)


class TestClipboard:
    def test_copies_standalone_document(self, render, monkeypatch):
        copied = []
        monkeypatch.setattr(pyperclip, "copy", copied.append)
        assert copy_svg_to_clipboard(render)
        assert copied == [render.to_standalone_svg()]

    def test_failure_is_reported(self, render, monkeypatch):
        def fail(text):
            raise pyperclip.PyperclipException("no clipboard mechanism")

        monkeypatch.setattr(pyperclip, "copy", fail)
        with pytest.raises(ClipboardError, match="Failed to copy SVG"):
            copy_svg_to_clipboard(render)

    def test_nothing_to_copy(self):
        assert copy_svg_to_clipboard(None) is False


class TestVerify:
    def test_skipped_without_pyzbar(self, monkeypatch, tmp_path):
        import builtins

        real_import = builtins.__import__

        def fake_import(name, *args, **kwargs):
            if name.startswith("pyzbar"):
                raise ImportError(name)
            return real_import(name, *args, **kwargs)

        monkeypatch.setattr(builtins, "__import__", fake_import)
        assert export.verify_qr_scannable(str(tmp_path / "any.png")) == (VerifyResult.SKIPPED, None)

    @pytest.mark.parametrize(
        "symbols, expected",
        [
            ([SimpleNamespace(data=b"abc")], (VerifyResult.SCANNABLE, "abc")),
            ([], (VerifyResult.NOT_SCANNABLE, None)),
        ],
    )
    def test_decoder_result(self, symbols, expected, monkeypatch, tmp_path):
        decoder = ModuleType("pyzbar.pyzbar")
        decoder.decode = lambda image: symbols
        package = ModuleType("pyzbar")
        package.pyzbar = decoder
        monkeypatch.setitem(sys.modules, "pyzbar", package)
        monkeypatch.setitem(sys.modules, "pyzbar.pyzbar", decoder)

        image_path = tmp_path / "code.png"
        Image.new("RGB", (10, 10), "white").save(image_path)
        assert export.verify_qr_scannable(str(image_path)) == expected
