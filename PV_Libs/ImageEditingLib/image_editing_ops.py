"""
Core image editing operations for Pixel Voxel.

This module provides the raster-level helpers shared by the editor session
and the import pipeline: PNG encode/decode, palette-wide color replacement
and nearest-neighbor export scaling.

Functions:
    encode_png: Encode a RasterSurface as PNG bytes
    decode_png: Decode PNG (or any Pillow-readable) bytes into a RasterSurface
    load_surface: Decode a raster file from disk
    replace_color: Replace one opaque color with another across a LayerStack
    update_palette: Apply a color replacement to a palette list
    export_scaled: Nearest-neighbor integer upscale of a surface
    scaled_export_name: File name for a scaled export
"""

import io
import logging
from pathlib import Path
from typing import List, Union

import numpy as np

from PV_Libs.ColorLib.color_codec import hex_to_rgb, normalize_hex
from PV_Libs.ImageEditingLib.layer_stack import LayerStack
from PV_Libs.ImageEditingLib.raster_surface import RasterSurface
from PV_Libs.constants import ALPHA_OPAQUE_THRESHOLD, DEFAULT_OUTPUT_FORMAT
from PV_Libs.errors import DecodeError
from PV_Libs.pillow_compat import NEAREST, Image

logger = logging.getLogger(__name__)


def encode_png(surface: RasterSurface) -> bytes:
    buffer = io.BytesIO()
    surface.to_image().save(buffer, format=DEFAULT_OUTPUT_FORMAT)
    return buffer.getvalue()


def decode_png(data: bytes) -> RasterSurface:
    """
    Decode encoded image bytes into an RGBA RasterSurface.

    Raises:
        DecodeError: If Pillow cannot read the bytes
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            return RasterSurface.from_image(image)
    except (OSError, ValueError) as e:
        raise DecodeError(f"Cannot decode image data: {e}") from e


def load_surface(path: Union[str, Path]) -> RasterSurface:
    """
    Decode a raster file from disk.

    Raises:
        DecodeError: If the file is missing or not a readable image
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise DecodeError(f"Cannot read {path}: {e}") from e
    return decode_png(data)


def replace_color(stack: LayerStack, old_color: str, new_color: str) -> int:
    """
    Replace every opaque pixel of `old_color` with `new_color` on all layers.

    Only pixels with alpha >= 128 whose RGB matches exactly are changed;
    their alpha is kept. Hidden layers are included.

    Returns:
        Number of pixels replaced
    """
    old_rgb = np.array(hex_to_rgb(old_color), dtype=np.uint8)
    new_rgb = np.array(hex_to_rgb(new_color), dtype=np.uint8)

    replaced = 0
    for layer in stack.layers:
        pixels = layer.surface.pixels
        mask = (pixels[:, :, 3] >= ALPHA_OPAQUE_THRESHOLD) & np.all(pixels[:, :, :3] == old_rgb, axis=2)
        count = int(mask.sum())
        if count:
            pixels[mask, :3] = new_rgb
            replaced += count

    logger.debug(f"Replaced {replaced} pixels of {normalize_hex(old_color)} with {normalize_hex(new_color)}")
    return replaced


def update_palette(palette: List[str], old_color: str, new_color: str) -> List[str]:
    """Drop `old_color` from the palette and append `new_color` if it is absent."""
    old_color = normalize_hex(old_color)
    new_color = normalize_hex(new_color)
    updated = [color for color in (normalize_hex(c) for c in palette) if color != old_color]
    if new_color not in updated:
        updated.append(new_color)
    return updated


def export_scaled(surface: RasterSurface, scale: int) -> RasterSurface:
    """
    Upscale a surface by an integer factor with nearest-neighbor sampling.

    Raises:
        ValueError: If scale is less than 1
    """
    if scale < 1:
        raise ValueError(f"Export scale must be >= 1, got {scale}")
    if scale == 1:
        return surface.copy()

    image = surface.to_image().resize((surface.width * scale, surface.height * scale), NEAREST)
    return RasterSurface.from_image(image)


def scaled_export_name(name: str, scale: int) -> str:
    return f"{Path(name).stem}_x{scale}.png"
