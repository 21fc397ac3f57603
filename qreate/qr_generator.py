"""Encode text into a boolean module grid at error correction level H."""

import logging
from abc import ABC, abstractmethod

import qrcode
from qrcode.exceptions import DataOverflowError

from qreate import FINDER_PATTERN_MODULES, MAX_QR_DATA_LENGTH

logger = logging.getLogger(__name__)

# Square grid of modules, True = dark
ModuleGrid = list[list[bool]]


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class BaseEncoder(ABC):
    """Abstract base class for QR symbol encoders."""

    @abstractmethod
    def encode(self, data: str) -> ModuleGrid:
        """Encode data into a module grid without quiet zone.

        Raises:
            ValueError: If the data does not fit any QR version at level H.
        """
        ...

    @abstractmethod
    def name(self) -> str:
        ...


# ---------------------------------------------------------------------------
# python-qrcode encoder
# ---------------------------------------------------------------------------

class QrcodeEncoder(BaseEncoder):
    """Encoder backed by python-qrcode."""

    def name(self) -> str:
        return "qrcode"

    def encode(self, data: str) -> ModuleGrid:
        qr = qrcode.QRCode(
            error_correction=qrcode.constants.ERROR_CORRECT_H,
            border=0,
        )
        qr.add_data(data)
        try:
            qr.make(fit=True)
        except (DataOverflowError, ValueError) as e:
            # qrcode 8 reports overflow as an invalid version ValueError
            raise ValueError(
                f"QR data too long for error correction level H: {e}"
            ) from e

        return [[bool(cell) for cell in row] for row in qr.modules]


# ---------------------------------------------------------------------------
# segno encoder
# ---------------------------------------------------------------------------

class SegnoEncoder(BaseEncoder):
    """Encoder backed by segno. Always produces a full QR symbol, never Micro QR."""

    def name(self) -> str:
        return "segno"

    def encode(self, data: str) -> ModuleGrid:
        import segno

        try:
            qr = segno.make_qr(data, error="h", boost_error=False)
        except segno.DataOverflowError as e:
            raise ValueError(
                f"QR data too long for error correction level H: {e}"
            ) from e

        return [[bool(cell) for cell in row] for row in qr.matrix]


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

ENCODERS = {
    "qrcode": QrcodeEncoder,
    "segno": SegnoEncoder,
}


def get_encoder(backend: str = "qrcode") -> BaseEncoder:
    """Factory function to get the encoder for a backend name.

    Args:
        backend: One of "qrcode" or "segno".

    Returns:
        An encoder instance.
    """
    if backend not in ENCODERS:
        raise ValueError(
            f"Unknown encoder '{backend}'. Choose from: {', '.join(ENCODERS.keys())}"
        )

    return ENCODERS[backend]()


def generate_module_grid(data: str, encoder: BaseEncoder | None = None) -> ModuleGrid:
    """Encode text into a QR module grid at error correction level H.

    Level H (30% redundancy) is fixed so that the decorative corners and
    rounded modules never cost scannability.

    Args:
        data: The text or URL to encode.
        encoder: Encoder to use. Defaults to python-qrcode.

    Returns:
        Square grid of booleans, True for dark modules, no quiet zone.

    Raises:
        ValueError: If the data is empty or exceeds QR code capacity.
    """
    if not data:
        raise ValueError("QR data cannot be empty.")

    if len(data) > MAX_QR_DATA_LENGTH:
        raise ValueError(
            f"QR data too long ({len(data)} chars). "
            f"Maximum is {MAX_QR_DATA_LENGTH} characters with error correction level H."
        )

    encoder = encoder or QrcodeEncoder()
    grid = encoder.encode(data)
    logger.debug("Encoded %d chars with %s into %dx%d modules",
                  len(data), encoder.name(), len(grid), len(grid))
    return grid


def is_in_finder_pattern(row: int, col: int, module_count: int) -> bool:
    """Whether a module lies in one of the three 7x7 finder pattern corners."""
    far = module_count - FINDER_PATTERN_MODULES
    if row < FINDER_PATTERN_MODULES and col < FINDER_PATTERN_MODULES:
        return True
    if row < FINDER_PATTERN_MODULES and col >= far:
        return True
    if row >= far and col < FINDER_PATTERN_MODULES:
        return True
    return False


def mask_finder_patterns(grid: ModuleGrid) -> ModuleGrid:
    """Return a copy of the grid with the finder pattern regions cleared.

    The finder patterns are drawn as decorative corner glyphs instead.
    """
    n = len(grid)
    return [
        [dark and not is_in_finder_pattern(r, c, n) for c, dark in enumerate(row)]
        for r, row in enumerate(grid)
    ]
