"""
Selections used by the crop and lasso tools.

Classes:
    CropSelection: Adjustable crop rectangle kept inside the canvas
    LassoSelection: Polygon traced by the lasso tool
    LassoContent: Floating pixels lifted out of a layer by a lasso

Functions:
    extract_lasso_content: Lift the pixels inside a lasso polygon off a surface
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from PV_Libs.ImageEditingLib.raster_ops import Point, point_in_polygon
from PV_Libs.ImageEditingLib.raster_surface import RasterSurface, Rect
from PV_Libs.constants import CROP_HANDLES


class CropSelection:
    """
    Crop rectangle for the crop tool's modal state.

    Starts as the full canvas. A drag either moves the rectangle (no handle)
    or resizes it from one of the eight handles; deltas are measured in canvas
    pixels from where the drag began. The rectangle never leaves the canvas
    and never shrinks below 1x1.
    """

    def __init__(self, canvas_width: int, canvas_height: int):
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.rect = Rect(0, 0, canvas_width, canvas_height)
        self._start_rect: Optional[Rect] = None
        self._handle: Optional[str] = None

    @property
    def dragging(self) -> bool:
        return self._start_rect is not None

    def begin_drag(self, handle: Optional[str] = None) -> None:
        if handle is not None and handle not in CROP_HANDLES:
            raise ValueError(f"Unknown crop handle: {handle}")
        self._start_rect = self.rect
        self._handle = handle

    def update_drag(self, dx: int, dy: int) -> Rect:
        if self._start_rect is None:
            return self.rect
        if self._handle is None:
            self._move(dx, dy)
        else:
            self._resize(self._handle, dx, dy)
        return self.rect

    def end_drag(self) -> None:
        self._start_rect = None
        self._handle = None

    def _move(self, dx: int, dy: int) -> None:
        start = self._start_rect
        new_x = max(0, min(start.x + dx, self.canvas_width - start.width))
        new_y = max(0, min(start.y + dy, self.canvas_height - start.height))
        self.rect = Rect(new_x, new_y, start.width, start.height)

    def _resize(self, handle: str, dx: int, dy: int) -> None:
        start = self._start_rect
        new_x, new_y = start.x, start.y
        new_width, new_height = start.width, start.height

        if "w" in handle:
            new_x = max(0, start.x + dx)
            new_width = start.width - (new_x - start.x)
        if "e" in handle:
            new_width = min(self.canvas_width - start.x, start.width + dx)
        if "n" in handle:
            new_y = max(0, start.y + dy)
            new_height = start.height - (new_y - start.y)
        if "s" in handle:
            new_height = min(self.canvas_height - start.y, start.height + dy)

        if new_width >= 1 and new_height >= 1:
            self.rect = Rect(new_x, new_y, new_width, new_height)

    def set_rect(self, x: int, y: int, width: int, height: int) -> Rect:
        """Place the rectangle directly, clamped into the canvas."""
        x = max(0, min(x, self.canvas_width - 1))
        y = max(0, min(y, self.canvas_height - 1))
        width = max(1, min(width, self.canvas_width - x))
        height = max(1, min(height, self.canvas_height - y))
        self.rect = Rect(x, y, width, height)
        return self.rect


@dataclass
class LassoSelection:
    points: List[Point] = field(default_factory=list)

    def add_point(self, x: int, y: int) -> None:
        self.points.append((x, y))

    @property
    def is_closable(self) -> bool:
        return len(self.points) >= 3

    def contains(self, x: int, y: int) -> bool:
        return point_in_polygon(x, y, self.points)

    def bounding_box(self, canvas_width: int, canvas_height: int) -> Optional[Rect]:
        """Integer bounding box of the polygon clipped to the canvas, or None."""
        if not self.points:
            return None
        xs = [p[0] for p in self.points]
        ys = [p[1] for p in self.points]
        min_x = max(0, min(xs))
        min_y = max(0, min(ys))
        max_x = min(canvas_width - 1, max(xs))
        max_y = min(canvas_height - 1, max(ys))
        if max_x < min_x or max_y < min_y:
            return None
        return Rect(min_x, min_y, max_x - min_x + 1, max_y - min_y + 1)


@dataclass
class LassoContent:
    """Floating clipboard: extracted pixels and their current canvas offset."""
    surface: RasterSurface
    x: int
    y: int

    @property
    def width(self) -> int:
        return self.surface.width

    @property
    def height(self) -> int:
        return self.surface.height

    @property
    def origin(self) -> Tuple[int, int]:
        return self.x, self.y

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height

    def move_to(self, x: int, y: int) -> None:
        self.x = x
        self.y = y

    def translate(self, dx: int, dy: int) -> None:
        self.x += dx
        self.y += dy


def extract_lasso_content(surface: RasterSurface, lasso: LassoSelection) -> Optional[LassoContent]:
    """
    Lift the pixels inside the lasso polygon off `surface`.

    Every pixel of the polygon's bounding box that passes the point-in-polygon
    test is copied into the content buffer and cleared on the source surface.
    The source is modified even if the content is later discarded.

    Returns:
        The floating content positioned at the bounding box origin, or None
        when the lasso has fewer than 3 points or lies entirely off-canvas
    """
    if not lasso.is_closable:
        return None

    box = lasso.bounding_box(surface.width, surface.height)
    if box is None:
        return None

    content = RasterSurface(box.width, box.height)
    for y in range(box.y, box.bottom):
        for x in range(box.x, box.right):
            if lasso.contains(x, y):
                content.set(x - box.x, y - box.y, surface.get(x, y))
                surface.clear_rect(x, y, 1, 1)

    return LassoContent(surface=content, x=box.x, y=box.y)
