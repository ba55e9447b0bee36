"""
Image data models for Pixel Voxel.

This module defines the records passed between the import pipeline, the
editor session and storage.

Classes:
    ImageRecord: An imported (or saved) pixel-art asset with its palette
    SaveResult: What an editor session emits when it saves

Type Aliases:
    RgbaColor: A tuple of 4 integers representing RGBA color values (0-255)
"""

import base64
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from PV_Libs.ColorLib.color_codec import RgbaColor, normalize_hex
from PV_Libs.ColorLib.color_map import ColorMap
from PV_Libs.ImageEditingLib.image_editing_ops import decode_png
from PV_Libs.ImageEditingLib.raster_surface import RasterSurface
from PV_Libs.constants import (
    FIELD_COLOR_MAP,
    FIELD_COLORS,
    FIELD_DATA_URL,
    FIELD_FOLDER,
    FIELD_HEIGHT,
    FIELD_NAME,
    FIELD_ORIGINAL_COLOR_COUNT,
    FIELD_SCALE,
    FIELD_WIDTH,
    PNG_MIME_TYPE,
)

__all__ = ["ImageRecord", "SaveResult", "RgbaColor", "data_url_from_png", "png_from_data_url"]

_DATA_URL_PREFIX = f"data:{PNG_MIME_TYPE};base64,"


def data_url_from_png(png_bytes: bytes) -> str:
    return _DATA_URL_PREFIX + base64.b64encode(png_bytes).decode("ascii")


def png_from_data_url(data_url: str) -> bytes:
    """Decode a `data:image/png;base64,` URL back to PNG bytes."""
    if not data_url.startswith(_DATA_URL_PREFIX):
        raise ValueError("Expected a base64 PNG data URL")
    return base64.b64decode(data_url[len(_DATA_URL_PREFIX):])


@dataclass
class ImageRecord:
    """
    A pixel-art asset as stored by the asset manager.

    Attributes:
        name: File name, with any `_xN` suffix stripped when downscaled
        width: Raster width in pixels
        height: Raster height in pixels
        png_bytes: Encoded PNG raster
        palette: Uppercase hex colors in scan order (frequency order when
            the import was quantized)
        color_map: Opaque pixel count per palette color
        original_color_count: Distinct colors before any quantization
        scale: Detected upscale factor at import, 1 when not upscaled
        folder: Optional folder the record is filed under
    """
    name: str
    width: int
    height: int
    png_bytes: bytes
    palette: List[str] = field(default_factory=list)
    color_map: ColorMap = field(default_factory=ColorMap)
    original_color_count: int = 0
    scale: int = 1
    folder: Optional[str] = None

    def __post_init__(self):
        self.palette = [normalize_hex(color) for color in self.palette]
        if not isinstance(self.color_map, ColorMap):
            self.color_map = ColorMap(self.color_map)
        if not self.original_color_count:
            self.original_color_count = len(self.palette)

    @property
    def color_count(self) -> int:
        return len(self.palette)

    @property
    def data_url(self) -> str:
        return data_url_from_png(self.png_bytes)

    def is_ready_to_dev(self) -> bool:
        return self.color_map.is_ready_to_dev()

    def to_surface(self) -> RasterSurface:
        """Decode the PNG raster into a RasterSurface."""
        return decode_png(self.png_bytes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            FIELD_NAME: self.name,
            FIELD_WIDTH: self.width,
            FIELD_HEIGHT: self.height,
            FIELD_DATA_URL: self.data_url,
            FIELD_COLORS: list(self.palette),
            FIELD_COLOR_MAP: self.color_map.to_dict(),
            FIELD_ORIGINAL_COLOR_COUNT: self.original_color_count,
            FIELD_SCALE: self.scale,
            FIELD_FOLDER: self.folder,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImageRecord":
        return cls(
            name=data[FIELD_NAME],
            width=int(data[FIELD_WIDTH]),
            height=int(data[FIELD_HEIGHT]),
            png_bytes=png_from_data_url(data[FIELD_DATA_URL]),
            palette=list(data.get(FIELD_COLORS, [])),
            color_map=ColorMap.from_dict(data.get(FIELD_COLOR_MAP, {})),
            original_color_count=int(data.get(FIELD_ORIGINAL_COLOR_COUNT, 0)),
            scale=int(data.get(FIELD_SCALE, 1)),
            folder=data.get(FIELD_FOLDER),
        )


@dataclass
class SaveResult:
    """
    Output of saving an editor session.

    Attributes:
        png_bytes: Composition of the visible layers, PNG encoded
        colors: Unique opaque colors in scan order
        color_map: Opaque pixel count per color
        width: Canvas width after any crop
        height: Canvas height after any crop
    """
    png_bytes: bytes
    colors: List[str]
    color_map: ColorMap
    width: int
    height: int

    @property
    def color_count(self) -> int:
        return len(self.colors)

    @property
    def data_url(self) -> str:
        return data_url_from_png(self.png_bytes)

    def to_record(self, name: str, folder: Optional[str] = None, original_color_count: int = 0) -> ImageRecord:
        """Build the ImageRecord that replaces the edited one."""
        return ImageRecord(
            name=name,
            width=self.width,
            height=self.height,
            png_bytes=self.png_bytes,
            palette=list(self.colors),
            color_map=self.color_map,
            original_color_count=original_color_count or len(self.colors),
            folder=folder,
        )
