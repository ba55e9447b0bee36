"""
Rasterization primitives for the pixel editor.

Shape functions yield integer (x, y) points and never look at a surface, so
the same routine renders both the live preview and the final commit. Points
may fall off-canvas; `plot_points` relies on the surface to clip them.

Functions:
    line_points: Bresenham line, both endpoints included
    rectangle_points: Outline or filled axis-aligned rectangle
    circle_points: Midpoint circle (outline) or scanline-filled disc
    plot_points: Write a color to every point on a surface
    flood_fill: 4-connected, exact-RGBA, stack-based fill
    point_in_polygon: Ray-casting containment test
"""

import logging
from typing import Iterator, List, Sequence, Tuple

from PV_Libs.ColorLib.color_codec import RgbaColor
from PV_Libs.constants import ALPHA_OPAQUE_THRESHOLD

logger = logging.getLogger(__name__)

Point = Tuple[int, int]


def line_points(x0: int, y0: int, x1: int, y1: int) -> Iterator[Point]:
    """Integer-only Bresenham line from (x0, y0) to (x1, y1)."""
    dx = abs(x1 - x0)
    dy = abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy

    while True:
        yield x0, y0
        if x0 == x1 and y0 == y1:
            break

        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x0 += sx
        if e2 < dx:
            err += dx
            y0 += sy


def rectangle_points(x0: int, y0: int, x1: int, y1: int, filled: bool = False) -> Iterator[Point]:
    """Rectangle spanned by two corners (inclusive), outline unless `filled`."""
    min_x, max_x = min(x0, x1), max(x0, x1)
    min_y, max_y = min(y0, y1), max(y0, y1)

    if filled:
        for y in range(min_y, max_y + 1):
            for x in range(min_x, max_x + 1):
                yield x, y
        return

    for x in range(min_x, max_x + 1):
        yield x, min_y
        yield x, max_y
    for y in range(min_y, max_y + 1):
        yield min_x, y
        yield max_x, y


def circle_radius(cx: int, cy: int, x1: int, y1: int) -> int:
    """Rounded Euclidean distance from the center to the release point."""
    return int(((x1 - cx) ** 2 + (y1 - cy) ** 2) ** 0.5 + 0.5)


def circle_points(cx: int, cy: int, x1: int, y1: int, filled: bool = False) -> Iterator[Point]:
    """
    Midpoint circle centered on (cx, cy) passing near (x1, y1).

    The outline uses 8-way symmetric plotting; a filled circle draws a
    horizontal span for each symmetric row pair instead.
    """
    radius = circle_radius(cx, cy, x1, y1)
    x = radius
    y = 0
    err = 0

    while x >= y:
        if filled:
            for i in range(-x, x + 1):
                yield cx + i, cy + y
                yield cx + i, cy - y
            for i in range(-y, y + 1):
                yield cx + i, cy + x
                yield cx + i, cy - x
        else:
            yield cx + x, cy + y
            yield cx + y, cy + x
            yield cx - y, cy + x
            yield cx - x, cy + y
            yield cx - x, cy - y
            yield cx - y, cy - x
            yield cx + y, cy - x
            yield cx + x, cy - y

        if err <= 0:
            y += 1
            err += 2 * y + 1
        if err > 0:
            x -= 1
            err -= 2 * x + 1


def plot_points(surface, points, rgba: RgbaColor) -> int:
    """Write `rgba` at each in-bounds point. Returns how many writes landed."""
    written = 0
    for x, y in points:
        if surface.set(x, y, rgba):
            written += 1
    return written


def flood_fill(surface, x: int, y: int, rgba: RgbaColor) -> int:
    """
    Fill the 4-connected region of pixels whose RGBA equals the start pixel's.

    Uses an explicit stack. Filling with an opaque color that already matches
    the start pixel, or erasing (alpha 0) from a start pixel that already counts as
    transparent, does nothing.

    Args:
        surface: RasterSurface to modify in place
        x, y: Start pixel; out-of-bounds starts are ignored
        rgba: Replacement value, (0, 0, 0, 0) for an erase fill

    Returns:
        Number of pixels changed
    """
    if not surface.in_bounds(x, y):
        return 0

    pixels = surface.pixels
    target = tuple(int(v) for v in pixels[y, x])
    erase = rgba[3] == 0

    if erase:
        if target[3] < ALPHA_OPAQUE_THRESHOLD:
            return 0
    elif target == tuple(rgba):
        return 0

    width, height = surface.width, surface.height
    visited = set()
    stack: List[Point] = [(x, y)]
    filled = 0

    while stack:
        cx, cy = stack.pop()
        if (cx, cy) in visited:
            continue
        if cx < 0 or cy < 0 or cx >= width or cy >= height:
            continue
        if tuple(int(v) for v in pixels[cy, cx]) != target:
            continue

        visited.add((cx, cy))
        pixels[cy, cx] = rgba
        filled += 1

        stack.append((cx + 1, cy))
        stack.append((cx - 1, cy))
        stack.append((cx, cy + 1))
        stack.append((cx, cy - 1))

    logger.debug(f"Flood fill from ({x}, {y}) changed {filled} pixels")
    return filled


def point_in_polygon(px: float, py: float, points: Sequence[Point]) -> bool:
    """Even-odd ray-casting test; polygons with fewer than 3 points contain nothing."""
    if len(points) < 3:
        return False

    inside = False
    j = len(points) - 1
    for i in range(len(points)):
        xi, yi = points[i]
        xj, yj = points[j]
        if (yi > py) != (yj > py) and px < (xj - xi) * (py - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside
