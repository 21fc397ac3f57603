"""Placement of the decorative glyphs that replace the three finder patterns."""

from dataclasses import dataclass
from enum import Enum

from qreate import CORNER_DESIGN_WIDTH, FINDER_PATTERN_MODULES, VIEWBOX_SIZE
from qreate.geometry import format_coord, round_coord


class Corner(Enum):
    """Finder pattern corners of a QR symbol."""
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"


# Rotation (degrees) that turns the glyph's notch towards the symbol center
CORNER_ROTATIONS = {
    Corner.TOP_LEFT: 90,
    Corner.TOP_RIGHT: 180,
    Corner.BOTTOM_LEFT: 0,
}

# Glyph artwork, drawn in a CORNER_DESIGN_WIDTH x CORNER_DESIGN_WIDTH box
CORNER_GLYPH_PATHS = (
    "M0,65c0,99.4,80.6,180,180,180h25c22.1,0,40-17.9,40-40V40c0-22.1-17.9-40-40-40H40"
    "C17.9,0,0,17.9,0,40v25ZM198.2,36.8c5.5,0,10,4.5,10,10v151.5c0,5.5-4.5,10-10,10"
    "h-12.5c-82.3,0-149-66.7-149-149v-12.5c0-5.5,4.5-10,10-10h151.5Z",
    "M165,70h-85c-5.5,0-10,4.5-9.5,10,4.7,50,44.5,89.8,94.5,94.5,5.5.5,10-4,10-9.5"
    "v-85c0-5.5-4.5-10-10-10Z",
)

CORNER_GLYPHS = {corner: CORNER_GLYPH_PATHS for corner in Corner}


@dataclass(frozen=True)
class CornerPosition:
    x: float
    y: float


@dataclass(frozen=True)
class CornerPlacement:
    """Where and how one corner glyph is drawn."""

    corner: Corner
    position: CornerPosition
    rotation: int
    scale: float

    @property
    def transform(self) -> str:
        """SVG transform attribute centering the glyph on its anchor."""
        half = round_coord(CORNER_DESIGN_WIDTH / 2)
        return (
            f"translate({format_coord(self.position.x)}, {format_coord(self.position.y)}) "
            f"rotate({self.rotation}) scale({format_coord(self.scale)}) "
            f"translate(-{format_coord(half)}, -{format_coord(half)})"
        )

    @property
    def paths(self) -> tuple[str, ...]:
        return CORNER_GLYPHS[self.corner]


def finder_pattern_size(module_count: int, viewbox_size: float = VIEWBOX_SIZE) -> float:
    """Size of a 7x7 finder pattern in viewbox units."""
    return viewbox_size / module_count * FINDER_PATTERN_MODULES


def corner_positions(
    finder_size: float, viewbox_size: float = VIEWBOX_SIZE
) -> dict[Corner, CornerPosition]:
    """Center points of the three finder patterns."""
    half = finder_size / 2
    return {
        Corner.TOP_LEFT: CornerPosition(round_coord(half), round_coord(half)),
        Corner.TOP_RIGHT: CornerPosition(round_coord(viewbox_size - half), round_coord(half)),
        Corner.BOTTOM_LEFT: CornerPosition(round_coord(half), round_coord(viewbox_size - half)),
    }


def corner_scale(finder_size: float) -> float:
    """Uniform scale mapping the glyph artwork onto a finder pattern."""
    if finder_size <= 0:
        return 1.0
    return round_coord(finder_size / CORNER_DESIGN_WIDTH)


def place_corners(module_count: int, viewbox_size: float = VIEWBOX_SIZE) -> list[CornerPlacement]:
    """Compute the placement of all three corner glyphs for a symbol size.

    Args:
        module_count: Modules per side of the QR symbol.
        viewbox_size: Side of the square SVG coordinate space.

    Returns:
        Placements in top-left, top-right, bottom-left order.
    """
    if module_count <= 0:
        raise ValueError(f"Module count must be positive, got {module_count}")

    finder_size = finder_pattern_size(module_count, viewbox_size)
    positions = corner_positions(finder_size, viewbox_size)
    scale = corner_scale(finder_size)

    return [
        CornerPlacement(
            corner=corner,
            position=positions[corner],
            rotation=CORNER_ROTATIONS[corner],
            scale=scale,
        )
        for corner in Corner
    ]
