"""Text to rendered QR code: encoding, geometry and corner placement."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

from qreate import DEFAULT_CORNER_RADIUS, VIEWBOX_SIZE
from qreate.corners import CornerPlacement, finder_pattern_size, place_corners
from qreate.geometry import Rect, find_optimized_rectangles, round_coord
from qreate.paths import GeometryContext, unite_rectangles
from qreate.qr_generator import (
    BaseEncoder,
    ModuleGrid,
    generate_module_grid,
    get_encoder,
    mask_finder_patterns,
)
from qreate.svg import render_svg, to_standalone_svg

logger = logging.getLogger(__name__)


@dataclass
class RenderOptions:
    """Parameters for one QR render."""

    text: str
    corner_radius: float = DEFAULT_CORNER_RADIUS
    encoder: str = "qrcode"
    display_size: int = VIEWBOX_SIZE


@dataclass(frozen=True)
class QrRender:
    """Result of one generation pass. Never modified after creation."""

    text: str
    corner_radius: float
    module_count: int
    module_size: float
    finder_pattern_size: float
    rects: tuple[Rect, ...]
    module_path: str
    corners: tuple[CornerPlacement, ...]

    def to_svg(self, display_size: int = VIEWBOX_SIZE) -> str:
        return render_svg(self.module_path, list(self.corners), display_size=display_size)

    def to_standalone_svg(self, display_size: int = VIEWBOX_SIZE) -> str:
        return to_standalone_svg(self.to_svg(display_size))


class RenderState(Enum):
    NOT_READY = "not_ready"
    READY = "ready"


def build_render(
    grid: ModuleGrid,
    corner_radius: float = DEFAULT_CORNER_RADIUS,
    context: GeometryContext | None = None,
    text: str = "",
) -> QrRender:
    """Turn an encoded module grid into the module path and corner placements.

    Args:
        grid: Square module grid from the encoder, finder patterns included.
        corner_radius: Fillet radius for the merged module outlines.
        context: Geometry scratch context. Without one the modules are
            emitted as plain, unrounded rectangles.
        text: The encoded text, kept for export naming.

    Raises:
        ValueError: If the grid is empty.
    """
    module_count = len(grid)
    if module_count == 0:
        raise ValueError("Module grid is empty.")

    module_size = VIEWBOX_SIZE / module_count
    rects = find_optimized_rectangles(mask_finder_patterns(grid), module_size)
    module_path = unite_rectangles(rects, corner_radius, context)
    logger.debug("%d modules per side, %d rectangles", module_count, len(rects))

    return QrRender(
        text=text,
        corner_radius=corner_radius,
        module_count=module_count,
        module_size=module_size,
        finder_pattern_size=round_coord(finder_pattern_size(module_count)),
        rects=tuple(rects),
        module_path=module_path,
        corners=tuple(place_corners(module_count)),
    )


def generate(
    text: str,
    corner_radius: float = DEFAULT_CORNER_RADIUS,
    encoder: BaseEncoder | None = None,
) -> QrRender:
    """Render text as a QR code in one synchronous pass.

    Raises:
        ValueError: If the text cannot be encoded at error correction level H.
    """
    grid = generate_module_grid(text, encoder)
    return build_render(grid, corner_radius, GeometryContext(), text)


def generate_from_options(options: RenderOptions) -> QrRender:
    return generate(options.text, options.corner_radius, get_encoder(options.encoder))


class QrRenderSession:
    """Re-renders on every input change, keeping only the latest result.

    Encoding runs in the default executor; everything after it runs on the
    event loop. Each update takes a generation number and a result whose
    number is no longer current is dropped, so a slow earlier update never
    overwrites a newer one.
    """

    def __init__(self, encoder: BaseEncoder | None = None) -> None:
        self._encoder = encoder or get_encoder()
        self._context = GeometryContext()
        self._generation = 0
        self.state = RenderState.NOT_READY
        self.render: QrRender | None = None

    @property
    def is_ready(self) -> bool:
        return self.state == RenderState.READY

    @property
    def current(self) -> QrRender | None:
        """The latest render, or None while an update is pending or failed."""
        return self.render if self.is_ready else None

    async def update(
        self, text: str, corner_radius: float = DEFAULT_CORNER_RADIUS
    ) -> QrRender | None:
        """Render new input.

        Returns:
            The new render, or None if encoding failed or a newer update
            superseded this one.
        """
        self._generation += 1
        generation = self._generation
        self.state = RenderState.NOT_READY

        loop = asyncio.get_running_loop()
        try:
            grid = await loop.run_in_executor(None, generate_module_grid, text, self._encoder)
        except ValueError as e:
            if generation == self._generation:
                logger.error("Error generating QR code: %s", e)
                self.render = None
            return None

        if generation != self._generation:
            logger.debug("Discarding stale render for %r", text)
            return None

        render = build_render(grid, corner_radius, self._context, text)
        self.render = render
        self.state = RenderState.READY
        return render
