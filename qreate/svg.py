"""Assemble the module path and corner glyphs into an SVG document."""

from qreate import VIEWBOX_SIZE
from qreate.corners import CornerPlacement

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"

# Prolog for standalone files, so the SVG opens in any viewer
SVG_PROLOG = (
    '<?xml version="1.0" standalone="no"?>\n'
    '<!DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.1//EN" '
    '"http://www.w3.org/Graphics/SVG/1.1/DTD/svg11.dtd">'
)


def render_svg(
    module_path: str,
    placements: list[CornerPlacement],
    display_size: int = VIEWBOX_SIZE,
    fill: str = "#000000",
) -> str:
    """Build the SVG markup for a rendered QR code.

    Args:
        module_path: Combined path data of all data modules.
        placements: The three corner glyph placements.
        display_size: Width and height attributes of the root element.
        fill: Fill color of the modules and glyphs.

    Returns:
        SVG markup without XML prolog.
    """
    parts = [
        f'<svg xmlns="{SVG_NAMESPACE}" xmlns:xlink="{XLINK_NAMESPACE}" '
        f'width="{display_size}" height="{display_size}" '
        f'viewBox="0 0 {VIEWBOX_SIZE} {VIEWBOX_SIZE}" class="custom-qr-svg">',
        f'<path class="qr-modules-path" d="{module_path}" fill="{fill}" '
        f'fill-rule="evenodd" shape-rendering="auto"/>',
    ]
    for placement in placements:
        parts.append(
            f'<g transform="{placement.transform}" class="corner {placement.corner.value}" '
            f'fill="{fill}">'
        )
        parts.extend(f'<path d="{d}"/>' for d in placement.paths)
        parts.append("</g>")
    parts.append("</svg>")
    return "".join(parts)


def to_standalone_svg(svg: str) -> str:
    """Prefix SVG markup with the XML declaration and SVG 1.1 DOCTYPE."""
    return f"{SVG_PROLOG}\n{svg}"
