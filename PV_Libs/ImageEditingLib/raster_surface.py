"""
RasterSurface: an addressable RGBA pixel buffer.

The buffer is a (height, width, 4) uint8 numpy array owned exclusively by the
surface. Every coordinate operation clips to the surface bounds instead of
raising.

Transparency is binary: blits copy a source pixel only when its alpha is at
least 128 and never blend.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple

import numpy as np

from PV_Libs.ColorLib.color_analyzer import as_rgba_array, build_color_map
from PV_Libs.ColorLib.color_codec import TRANSPARENT_RGBA, RgbaColor
from PV_Libs.ColorLib.color_map import ColorMap
from PV_Libs.constants import ALPHA_OPAQUE_THRESHOLD
from PV_Libs.pillow_compat import Image


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in surface coordinates."""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.right and self.y <= y < self.bottom


class RasterSurface:
    """Fixed-size RGBA pixel buffer with clipped, non-throwing accessors."""

    def __init__(self, width: int, height: int, pixels: Optional[np.ndarray] = None):
        if width < 1 or height < 1:
            raise ValueError(f"Surface size must be at least 1x1, got {width}x{height}")

        if pixels is None:
            pixels = np.zeros((height, width, 4), dtype=np.uint8)
        elif pixels.shape != (height, width, 4):
            raise ValueError(f"Pixel buffer shape {pixels.shape} does not match {width}x{height}")

        self._width = int(width)
        self._height = int(height)
        self._pixels = np.ascontiguousarray(pixels, dtype=np.uint8)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "RasterSurface":
        """Create a surface owning a copy of an RGBA array."""
        array = np.array(array, dtype=np.uint8, copy=True)
        height, width = array.shape[:2]
        return cls(width, height, array)

    @classmethod
    def from_image(cls, image: Any) -> "RasterSurface":
        """Create a surface from a PIL Image (converted to RGBA)."""
        return cls.from_array(as_rgba_array(image))

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> Tuple[int, int]:
        return self._width, self._height

    @property
    def pixels(self) -> np.ndarray:
        """The live buffer. Callers that keep it must copy it."""
        return self._pixels

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def get(self, x: int, y: int) -> RgbaColor:
        """Pixel at (x, y); fully transparent when out of bounds."""
        if not self.in_bounds(x, y):
            return TRANSPARENT_RGBA
        r, g, b, a = self._pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def set(self, x: int, y: int, rgba: RgbaColor) -> bool:
        """Write one pixel. Returns False (and does nothing) when out of bounds."""
        if not self.in_bounds(x, y):
            return False
        self._pixels[y, x] = rgba
        return True

    def _clip(self, x: int, y: int, width: int, height: int) -> Optional[Tuple[int, int, int, int]]:
        x0 = max(0, x)
        y0 = max(0, y)
        x1 = min(self._width, x + width)
        y1 = min(self._height, y + height)
        if x1 <= x0 or y1 <= y0:
            return None
        return x0, y0, x1, y1

    def fill_rect(self, x: int, y: int, width: int, height: int, rgba: RgbaColor) -> None:
        clipped = self._clip(x, y, width, height)
        if clipped is None:
            return
        x0, y0, x1, y1 = clipped
        self._pixels[y0:y1, x0:x1] = rgba

    def clear_rect(self, x: int, y: int, width: int, height: int) -> None:
        self.fill_rect(x, y, width, height, TRANSPARENT_RGBA)

    def clear(self) -> None:
        self._pixels[:] = 0

    def draw_from(
        self,
        source: "RasterSurface",
        src_rect: Optional[Rect] = None,
        dst_origin: Tuple[int, int] = (0, 0),
    ) -> None:
        """
        Blit a region of another surface onto this one.

        Source pixels with alpha below 128 leave the destination untouched;
        every other source pixel overwrites the destination. Parts that fall outside either
        surface are clipped.

        Args:
            source: Surface to copy from
            src_rect: Region of the source to copy (whole source when None)
            dst_origin: Destination position of the region's top-left corner
        """
        if src_rect is None:
            src_rect = Rect(0, 0, source.width, source.height)

        src_clip = source._clip(src_rect.x, src_rect.y, src_rect.width, src_rect.height)
        if src_clip is None:
            return
        sx0, sy0, sx1, sy1 = src_clip

        # Destination position of the clipped source corner
        dx = dst_origin[0] + (sx0 - src_rect.x)
        dy = dst_origin[1] + (sy0 - src_rect.y)

        dst_clip = self._clip(dx, dy, sx1 - sx0, sy1 - sy0)
        if dst_clip is None:
            return
        dx0, dy0, dx1, dy1 = dst_clip

        # Shift the source window by however much the destination was clipped
        sx0 += dx0 - dx
        sy0 += dy0 - dy
        region = source.pixels[sy0:sy0 + (dy1 - dy0), sx0:sx0 + (dx1 - dx0)]
        target = self._pixels[dy0:dy1, dx0:dx1]

        visible = region[:, :, 3] >= ALPHA_OPAQUE_THRESHOLD
        target[visible] = region[visible]

    def crop(self, rect: Rect) -> "RasterSurface":
        """New surface of rect's size holding this surface's pixels under rect."""
        cropped = RasterSurface(rect.width, rect.height)
        clipped = self._clip(rect.x, rect.y, rect.width, rect.height)
        if clipped is not None:
            x0, y0, x1, y1 = clipped
            cropped.pixels[y0 - rect.y:y1 - rect.y, x0 - rect.x:x1 - rect.x] = self._pixels[y0:y1, x0:x1]
        return cropped

    def copy(self) -> "RasterSurface":
        return RasterSurface(self._width, self._height, self._pixels.copy())

    def to_color_map(self) -> ColorMap:
        return build_color_map(self._pixels)

    def to_image(self) -> Any:
        """PIL Image (RGBA) copy of this surface."""
        return Image.fromarray(self._pixels.copy())

    def tobytes(self) -> bytes:
        """Raw RGBA bytes, row-major; length is width * height * 4."""
        return self._pixels.tobytes()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterSurface):
            return NotImplemented
        return self.size == other.size and np.array_equal(self._pixels, other._pixels)

    __hash__ = None

    def __repr__(self) -> str:
        return f"RasterSurface({self._width}x{self._height})"
