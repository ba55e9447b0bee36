"""
Color encoding helpers for Pixel Voxel.

Colors are stored as canonical uppercase `#RRGGBB` strings. The sentinel
`TRANSPARENT` stands for "no color" and is accepted wherever a working color
is expected.

Functions:
    hex_to_rgb: Parse a 6-digit hex string into an RGB triple
    rgb_to_hex: Format an RGB triple as `#RRGGBB`
    normalize_hex: Canonicalize a hex string (or the transparent sentinel)
    color_distance: Euclidean distance between two RGB triples
    hex_distance: Euclidean distance between two hex strings
    colors_equal: Case-insensitive color comparison
    color_to_rgba: Convert a working color to the RGBA value written to a surface
"""

import math
import re
from typing import Tuple

from PV_Libs.constants import OPAQUE_ALPHA, TRANSPARENT
from PV_Libs.errors import InvalidColorFormat

RgbColor = Tuple[int, int, int]
RgbaColor = Tuple[int, int, int, int]

TRANSPARENT_RGBA: RgbaColor = (0, 0, 0, 0)

HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")


def hex_to_rgb(hex_color: str) -> RgbColor:
    """
    Parse a hex color string.

    Args:
        hex_color: Six hex digits with an optional leading '#', any case

    Returns:
        (r, g, b) tuple of ints in 0-255

    Raises:
        InvalidColorFormat: If the string is not a strict 6-digit hex color
    """
    if not isinstance(hex_color, str):
        raise InvalidColorFormat(hex_color)

    match = HEX_PATTERN.match(hex_color.strip())
    if match is None:
        raise InvalidColorFormat(hex_color)

    return tuple(int(group, 16) for group in match.groups())


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Format channel values as an uppercase, zero-padded `#RRGGBB` string."""
    for channel in (r, g, b):
        if not 0 <= int(channel) <= 255:
            raise InvalidColorFormat((r, g, b))
    return f"#{int(r):02X}{int(g):02X}{int(b):02X}"


def is_transparent(color: str) -> bool:
    return isinstance(color, str) and color.strip().upper() == TRANSPARENT


def normalize_hex(color: str) -> str:
    """
    Return the canonical form of a working color.

    `#abc123`, `ABC123` and `#ABC123` all normalize to `#ABC123`. The
    transparent sentinel normalizes to `TRANSPARENT` regardless of case.
    """
    if is_transparent(color):
        return TRANSPARENT
    return rgb_to_hex(*hex_to_rgb(color))


def color_distance(a: RgbColor, b: RgbColor) -> float:
    """Euclidean distance in RGB space: sqrt(dr^2 + dg^2 + db^2)."""
    dr = a[0] - b[0]
    dg = a[1] - b[1]
    db = a[2] - b[2]
    return math.sqrt(dr * dr + dg * dg + db * db)


def hex_distance(a: str, b: str) -> float:
    return color_distance(hex_to_rgb(a), hex_to_rgb(b))


def colors_equal(a: str, b: str) -> bool:
    return normalize_hex(a) == normalize_hex(b)


def color_to_rgba(color: str) -> RgbaColor:
    """
    Convert a working color to the pixel value drawn onto a surface.

    Returns:
        (0, 0, 0, 0) for the transparent sentinel, otherwise the opaque RGBA value
    """
    if is_transparent(color):
        return TRANSPARENT_RGBA
    r, g, b = hex_to_rgb(color)
    return (r, g, b, OPAQUE_ALPHA)
