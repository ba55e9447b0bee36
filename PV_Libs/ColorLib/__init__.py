"""
ColorLib - Color encoding, analysis and palette matching

This module provides hex/RGB conversion, the canonical ColorMap type,
palette extraction with optional quantization, and reference palette
scoring for Pixel Voxel.
"""

from PV_Libs.ColorLib.color_codec import (
    RgbColor,
    RgbaColor,
    TRANSPARENT_RGBA,
    hex_to_rgb,
    rgb_to_hex,
    normalize_hex,
    is_transparent,
    color_distance,
    hex_distance,
    colors_equal,
    color_to_rgba,
)
from PV_Libs.ColorLib.color_map import ColorMap
from PV_Libs.ColorLib.color_analyzer import (
    AnalysisResult,
    analyze_image,
    build_color_map,
    quantize_colors,
)
from PV_Libs.ColorLib.palette_matcher import (
    PaletteMatch,
    PaletteMatcher,
    ReferencePalette,
    classify_score,
    score_palette,
)

__all__ = [
    "RgbColor",
    "RgbaColor",
    "TRANSPARENT_RGBA",
    "hex_to_rgb",
    "rgb_to_hex",
    "normalize_hex",
    "is_transparent",
    "color_distance",
    "hex_distance",
    "colors_equal",
    "color_to_rgba",
    "ColorMap",
    "AnalysisResult",
    "analyze_image",
    "build_color_map",
    "quantize_colors",
    "PaletteMatch",
    "PaletteMatcher",
    "ReferencePalette",
    "classify_score",
    "score_palette",
]
