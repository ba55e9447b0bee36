"""
Constants and configuration values for Pixel Voxel.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the asset core.
"""

# Asset size limits (pixels, inclusive)
MIN_DIMENSION = 16
MAX_DIMENSION = 32

# Palette size limits (inclusive)
MIN_PALETTE_SIZE = 2
MAX_PALETTE_SIZE = 15

# Pixels with alpha below this value count as transparent
ALPHA_OPAQUE_THRESHOLD = 128
OPAQUE_ALPHA = 255

# Color analysis
DEFAULT_QUANTIZE_THRESHOLD = 30.0
QUANTIZE_TRIGGER_COUNT = 15
SIMILAR_COLOR_DISTANCE = 20.0

# Palette match classification (percent)
EXACT_MATCH_SCORE = 100
SIMILAR_MATCH_MIN_SCORE = 70
MATCH_EXACT = "exact"
MATCH_SIMILAR = "similar"
MATCH_DIFFERENT = "different"

# Hard-edge downscale detection, largest scale first
DOWNSCALE_CANDIDATES = (10, 8, 4, 2)
SCALE_SUFFIX_PATTERN = r"_x\d+"

# Editor
MAX_HISTORY = 50
TRANSPARENT = "TRANSPARENT"
DEFAULT_PRIMARY_COLOR = "#000000"
DEFAULT_SECONDARY_COLOR = "#FFFFFF"
LAYER_NAME_TEMPLATE = "Layer {number}"

# An asset is ready for development when every color count is a multiple of this
READY_PIXEL_MULTIPLE = 10

# Tool names
TOOL_PENCIL = "pencil"
TOOL_ERASER = "eraser"
TOOL_LINE = "line"
TOOL_RECTANGLE = "rectangle"
TOOL_CIRCLE = "circle"
TOOL_FILL = "fill"
TOOL_PICKER = "picker"
TOOL_LASSO = "lasso"
TOOL_CROP = "crop"

# Keyboard shortcuts (lowercase key -> tool)
TOOL_SHORTCUTS = {
    "b": TOOL_PENCIL,
    "e": TOOL_ERASER,
    "i": TOOL_PICKER,
    "g": TOOL_FILL,
    "l": TOOL_LINE,
    "r": TOOL_RECTANGLE,
    "o": TOOL_CIRCLE,
    "c": TOOL_CROP,
}
UNDO_KEY = "z"
REDO_KEY = "y"

# Crop handles, clockwise from the top-left corner
CROP_HANDLES = ("nw", "n", "ne", "e", "se", "s", "sw", "w")

# File formats
DEFAULT_OUTPUT_FORMAT = "PNG"
PNG_MIME_TYPE = "image/png"
SUPPORTED_IMPORT_EXTENSIONS = {".png"}

# Image record field names
FIELD_NAME = "name"
FIELD_WIDTH = "width"
FIELD_HEIGHT = "height"
FIELD_DATA_URL = "dataUrl"
FIELD_COLORS = "colors"
FIELD_COLOR_MAP = "colorMap"
FIELD_ORIGINAL_COLOR_COUNT = "originalColorCount"
FIELD_FOLDER = "folder"
FIELD_SCALE = "scale"
