"""QReate — QR codes rendered as a single rounded vector path."""

__version__ = "1.0.0"

# Shared constants
VIEWBOX_SIZE = 500  # Logical SVG coordinate space (square)
FINDER_PATTERN_MODULES = 7  # Finder patterns are 7x7 modules
CORNER_DESIGN_WIDTH = 245  # Natural width of the corner glyph artwork
DEFAULT_CORNER_RADIUS = 10
COORD_PRECISION = 3  # Decimal places kept on every emitted coordinate
MAX_QR_DATA_LENGTH = 3057  # Max numeric chars at QR version 40, EC level H
