"""Tests for the full render pipeline and the superseding render session."""

from __future__ import annotations

import asyncio
import time

import pytest

from qreate.paths import GeometryContext
from qreate.pipeline import (
    QrRender,
    QrRenderSession,
    RenderOptions,
    RenderState,
    build_render,
    generate,
    generate_from_options,
)
from qreate.qr_generator import BaseEncoder, QrcodeEncoder, generate_module_grid, mask_finder_patterns
from qreate.svg import SVG_PROLOG
from tests.conftest import covered_cells


class SlowEncoder(BaseEncoder):
    """Encoder that takes a while for the text "slow"."""

    def name(self) -> str:
        return "slow"

    def encode(self, data: str):
        if data == "slow":
            time.sleep(0.3)
        return QrcodeEncoder().encode(data)


class TestGenerate:
    def test_render_fields(self):
        render = generate("https://example.com", corner_radius=10)
        assert isinstance(render, QrRender)
        assert render.module_count == 29
        assert render.module_size == pytest.approx(500 / 29)
        assert render.finder_pattern_size == pytest.approx(120.69, abs=1e-3)
        assert len(render.corners) == 3
        assert render.module_path.startswith("M")
        assert "A10,10" in render.module_path

    def test_identical_input_gives_identical_output(self):
        first = generate("https://example.com", corner_radius=10)
        second = generate("https://example.com", corner_radius=10)
        assert first.module_path == second.module_path
        assert first.to_standalone_svg() == second.to_standalone_svg()

    def test_radius_zero_has_no_arcs(self):
        render = generate("https://example.com", corner_radius=0)
        assert "A" not in render.module_path

    def test_rects_cover_data_modules(self):
        grid = generate_module_grid("hello world")
        render = build_render(grid, 0, GeometryContext())
        masked = mask_finder_patterns(grid)
        n = len(grid)
        expected = {(r, c) for r in range(n) for c in range(n) if masked[r][c]}
        cells = covered_cells(render.rects, render.module_size)
        assert len(cells) == len(set(cells))
        assert set(cells) == expected

    def test_from_options(self):
        render = generate_from_options(RenderOptions(text="abc", corner_radius=0, encoder="segno"))
        assert render.text == "abc"
        assert render.corner_radius == 0

    def test_encoding_error_propagates(self):
        with pytest.raises(ValueError):
            generate("")


class TestBuildRender:
    def test_all_light_grid(self):
        grid = [[False] * 21 for _ in range(21)]
        render = build_render(grid, 10, GeometryContext())
        assert render.rects == ()
        assert render.module_path == ""
        assert len(render.corners) == 3

    def test_empty_grid_rejected(self):
        with pytest.raises(ValueError):
            build_render([], 10, GeometryContext())

    def test_without_context_uses_plain_rectangles(self):
        grid = generate_module_grid("abc")
        render = build_render(grid, 10, context=None)
        assert "A" not in render.module_path
        assert render.module_path.count("M") == len(render.rects)


class TestSvgDocument:
    def test_document_structure(self):
        svg = generate("https://example.com").to_svg()
        assert svg.startswith('<svg xmlns="http://www.w3.org/2000/svg"')
        assert 'xmlns:xlink="http://www.w3.org/1999/xlink"' in svg
        assert 'viewBox="0 0 500 500"' in svg
        assert 'fill-rule="evenodd"' in svg
        assert svg.count("<g ") == 3
        assert 'class="corner top-left"' in svg
        assert svg.count("<path ") == 7

    def test_display_size(self):
        svg = generate("abc").to_svg(display_size=250)
        assert 'width="250" height="250"' in svg
        assert 'viewBox="0 0 500 500"' in svg

    def test_standalone_prolog(self):
        doc = generate("abc").to_standalone_svg()
        assert doc.startswith('<?xml version="1.0" standalone="no"?>\n<!DOCTYPE svg PUBLIC')
        assert doc.startswith(SVG_PROLOG + "\n<svg")


class TestQrRenderSession:
    def test_update_makes_ready(self):
        session = QrRenderSession()
        assert session.state == RenderState.NOT_READY
        render = asyncio.run(session.update("https://example.com", 10))
        assert session.is_ready
        assert session.current is render
        assert render.text == "https://example.com"

    def test_failure_clears_result(self):
        session = QrRenderSession()

        async def run():
            await session.update("abc")
            return await session.update("")

        assert asyncio.run(run()) is None
        assert session.state == RenderState.NOT_READY
        assert session.render is None
        assert session.current is None

    def test_stale_result_is_discarded(self):
        session = QrRenderSession(SlowEncoder())

        async def run():
            return await asyncio.gather(session.update("slow"), session.update("fast"))

        slow, fast = asyncio.run(run())
        assert slow is None
        assert fast is not None
        assert session.current.text == "fast"

    def test_repeated_updates_are_identical(self):
        session = QrRenderSession()

        async def run():
            first = await session.update("https://example.com", 10)
            second = await session.update("https://example.com", 10)
            return first, second

        first, second = asyncio.run(run())
        assert first.module_path == second.module_path
