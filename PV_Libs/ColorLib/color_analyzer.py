"""
Color analysis for Pixel Voxel.

Scans a raster for its distinct opaque colors and their pixel counts, and
optionally reduces the palette of noisy rasters (for example ones that were
upscaled with smoothing) by greedy frequency-ordered clustering.

Pixels with alpha below 128 are ignored entirely: they are neither counted
nor added to the palette.

Classes:
    AnalysisResult: Palette, ColorMap and distinct-color count of a raster

Functions:
    as_rgba_array: Coerce a surface, PIL image or array into an RGBA ndarray
    build_color_map: Count opaque pixels per exact color
    quantize_colors: Pick up to 15 representative colors from a ColorMap
    analyze_image: Full analysis with optional quantization
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np

from PV_Libs.ColorLib.color_codec import color_distance, hex_to_rgb, rgb_to_hex
from PV_Libs.ColorLib.color_map import ColorMap
from PV_Libs.constants import (
    ALPHA_OPAQUE_THRESHOLD,
    DEFAULT_QUANTIZE_THRESHOLD,
    MAX_PALETTE_SIZE,
    QUANTIZE_TRIGGER_COUNT,
)

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Result of analyzing one raster.

    Attributes:
        width: Raster width in pixels
        height: Raster height in pixels
        colors: Output palette (scan order, or representatives when quantized)
        color_map: Exact per-color pixel counts; never rewritten by quantization
        original_color_count: Distinct opaque colors before quantization
    """
    width: int
    height: int
    colors: List[str] = field(default_factory=list)
    color_map: ColorMap = field(default_factory=ColorMap)
    original_color_count: int = 0

    @property
    def was_quantized(self) -> bool:
        return len(self.colors) < self.original_color_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "colors": list(self.colors),
            "colorMap": self.color_map.to_dict(),
            "originalColorCount": self.original_color_count,
        }


def as_rgba_array(source: Any) -> np.ndarray:
    """
    Coerce a raster source into a (height, width, 4) uint8 array.

    Args:
        source: A RasterSurface (anything with a `pixels` ndarray), a PIL Image,
                or an ndarray already shaped (height, width, 4)

    Returns:
        numpy array of RGBA values
    """
    pixels = getattr(source, "pixels", None)
    if isinstance(pixels, np.ndarray):
        return pixels

    if hasattr(source, "mode") and hasattr(source, "convert"):
        image = source if source.mode == "RGBA" else source.convert("RGBA")
        return np.asarray(image, dtype=np.uint8)

    array = np.asarray(source, dtype=np.uint8)
    if array.ndim != 3 or array.shape[2] != 4:
        raise ValueError(f"Expected an RGBA array of shape (h, w, 4), got {array.shape}")
    return array


def build_color_map(source: Any) -> ColorMap:
    """
    Count opaque pixels per exact color.

    Colors appear in the order they are first met scanning rows top to bottom,
    left to right.
    """
    array = as_rgba_array(source)
    flat = array.reshape(-1, 4)
    opaque = flat[flat[:, 3] >= ALPHA_OPAQUE_THRESHOLD]
    if opaque.size == 0:
        return ColorMap()

    packed = (
        (opaque[:, 0].astype(np.uint32) << 16)
        | (opaque[:, 1].astype(np.uint32) << 8)
        | opaque[:, 2].astype(np.uint32)
    )
    values, first_index, counts = np.unique(packed, return_index=True, return_counts=True)
    order = np.argsort(first_index, kind="stable")

    entries = []
    for idx in order:
        value = int(values[idx])
        hex_color = rgb_to_hex((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)
        entries.append((hex_color, int(counts[idx])))
    return ColorMap(entries)


def quantize_colors(color_map: ColorMap, threshold: float = DEFAULT_QUANTIZE_THRESHOLD) -> List[str]:
    """
    Pick representative colors by greedy frequency-ordered clustering.

    The most frequent unclustered color becomes a representative and absorbs
    every other unclustered color closer than `threshold`. Stops after 15
    representatives or when colors run out. The ColorMap is left untouched;
    only the palette is reduced.

    Args:
        color_map: Exact color counts to cluster
        threshold: Euclidean RGB distance below which colors merge

    Returns:
        Representative colors, most frequent first
    """
    ranked = color_map.most_common()
    rgb_values = {color: hex_to_rgb(color) for color, _ in ranked}

    palette: List[str] = []
    used = set()

    for color, _ in ranked:
        if color in used:
            continue

        rgb = rgb_values[color]
        for other, _ in ranked:
            if other in used or other == color:
                continue
            if color_distance(rgb, rgb_values[other]) < threshold:
                used.add(other)

        palette.append(color)
        used.add(color)

        if len(palette) >= MAX_PALETTE_SIZE:
            break

    return palette


def analyze_image(
    source: Any,
    quantize: bool = False,
    threshold: float = DEFAULT_QUANTIZE_THRESHOLD,
) -> AnalysisResult:
    """
    Analyze a raster's colors.

    Quantization only runs when `quantize` is set and the raster has more than
    15 distinct opaque colors. Range checks on the result are the caller's job.

    Args:
        source: Raster to scan (RasterSurface, PIL Image or RGBA ndarray)
        quantize: Whether to reduce a large palette
        threshold: Merge distance used by quantization

    Returns:
        AnalysisResult with palette, exact ColorMap and original color count
    """
    array = as_rgba_array(source)
    height, width = array.shape[:2]
    color_map = build_color_map(array)
    colors = list(color_map.keys())

    if quantize and len(colors) > QUANTIZE_TRIGGER_COUNT:
        colors = quantize_colors(color_map, threshold)
        logger.debug(f"Quantized {len(color_map)} colors down to {len(colors)} (threshold {threshold})")

    return AnalysisResult(
        width=width,
        height=height,
        colors=colors,
        color_map=color_map,
        original_color_count=len(color_map),
    )
