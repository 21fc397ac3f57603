"""Export surfaces for a rendered QR code: SVG file, clipboard, PNG."""

import io
import logging
import os
import re
from enum import Enum

import pyperclip
from PIL import Image, ImageOps

from qreate import VIEWBOX_SIZE
from qreate.pipeline import QrRender

logger = logging.getLogger(__name__)

_PROTOCOL_RE = re.compile(r"^https?://")
_DISALLOWED_RE = re.compile(r"[^a-zA-Z0-9.-]")
_REPEATED_DASH_RE = re.compile(r"-+")


class VerifyResult(Enum):
    """Result of QR scannability verification."""
    SCANNABLE = "scannable"
    NOT_SCANNABLE = "not_scannable"
    SKIPPED = "skipped"  # pyzbar not installed


class ClipboardError(RuntimeError):
    """The rendered SVG could not be placed on the clipboard."""


def export_filename(text: str, extension: str = "svg") -> str:
    """Derive a filesystem-safe file name from the encoded text.

    >>> export_filename("https://example.com/a b!c")
    'qr-example.com-a-b-c.svg'
    """
    name = _PROTOCOL_RE.sub("", text)
    name = _DISALLOWED_RE.sub("-", name)
    name = _REPEATED_DASH_RE.sub("-", name)
    name = name.strip("-")
    return f"qr-{name}.{extension}"


def save_svg(
    render: QrRender | None,
    output_path: str | None = None,
    display_size: int = VIEWBOX_SIZE,
) -> str | None:
    """Write the render as a standalone SVG file.

    Args:
        render: The render to export. None means nothing is ready yet.
        output_path: Destination path. Defaults to a name derived from the
            encoded text in the current directory.
        display_size: Width and height attributes of the SVG.

    Returns:
        The path written, or None when there was nothing to export.
    """
    if render is None:
        return None

    output_path = output_path or export_filename(render.text)
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(render.to_standalone_svg(display_size))

    logger.info("Saved SVG to %s", output_path)
    return output_path


def copy_svg_to_clipboard(render: QrRender | None, display_size: int = VIEWBOX_SIZE) -> bool:
    """Place the standalone SVG document on the system clipboard as text.

    Returns:
        True if copied, False when there was nothing to copy.

    Raises:
        ClipboardError: If the clipboard is not available.
    """
    if render is None:
        return False

    try:
        pyperclip.copy(render.to_standalone_svg(display_size))
    except pyperclip.PyperclipException as e:
        raise ClipboardError(f"Failed to copy SVG. {e}") from e
    return True


def rasterize(render: QrRender, size: int = 1000, border: int = 4) -> Image.Image:
    """Render to a white-backed RGB image with a quiet zone.

    Args:
        render: The render to rasterize.
        size: Width and height of the symbol in pixels, quiet zone excluded.
        border: Quiet zone width in modules.
    """
    import cairosvg

    png_bytes = cairosvg.svg2png(
        bytestring=render.to_svg(VIEWBOX_SIZE).encode("utf-8"),
        output_width=size,
        output_height=size,
    )
    img = Image.open(io.BytesIO(png_bytes)).convert("RGBA")

    flat = Image.new("RGB", img.size, "white")
    flat.paste(img, mask=img.split()[3])

    margin = round(size / render.module_count * border)
    return ImageOps.expand(flat, border=margin, fill="white")


def save_png(
    render: QrRender | None,
    output_path: str | None = None,
    size: int = 1000,
) -> str | None:
    """Rasterize the render and save it as PNG. None when nothing is ready."""
    if render is None:
        return None

    output_path = output_path or export_filename(render.text, "png")
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    rasterize(render, size).save(output_path, "PNG")

    logger.info("Saved PNG to %s", output_path)
    return output_path


def verify_qr_scannable(image_path: str) -> tuple[VerifyResult, str | None]:
    """Attempt to decode a QR code from an exported image.

    Uses pyzbar if available, otherwise returns SKIPPED.

    Args:
        image_path: Path to the image to verify.

    Returns:
        Tuple of (VerifyResult, decoded_data: str | None).
    """
    try:
        from pyzbar.pyzbar import decode as pyzbar_decode
    except ImportError:
        return VerifyResult.SKIPPED, None

    with Image.open(image_path) as img:
        results = pyzbar_decode(img)
    if results:
        return VerifyResult.SCANNABLE, results[0].data.decode("utf-8")
    return VerifyResult.NOT_SCANNABLE, None
