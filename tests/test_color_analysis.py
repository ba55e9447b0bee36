"""
Unit tests for color_map and color_analyzer modules.

Tests cover:
- ColorMap normalization, ordering and readiness checks
- Opaque-pixel counting with the alpha threshold
- Greedy quantization limits
- Full analysis of a checkerboard
"""

import numpy as np
import pytest
from PIL import Image

from PV_Libs.ColorLib.color_analyzer import analyze_image, build_color_map, quantize_colors
from PV_Libs.ColorLib.color_map import ColorMap
from conftest import checkerboard_array


class TestColorMap:
    """Tests for the ColorMap mapping type."""

    def test_keys_are_canonical(self):
        """Should store keys as uppercase #RRGGBB and look up any case."""
        color_map = ColorMap({"ff0000": 3, "#00ff00": 2})

        assert list(color_map) == ["#FF0000", "#00FF00"]
        assert color_map["#ff0000"] == 3
        assert "00FF00" in color_map

    def test_duplicate_keys_are_summed(self):
        """Should merge keys that normalize to the same color."""
        color_map = ColorMap([("#abcdef", 1), ("ABCDEF", 4)])
        assert color_map.count("#ABCDEF") == 5

    def test_count_of_missing_color(self):
        """Should return 0 for absent or malformed colors."""
        color_map = ColorMap({"#000000": 1})
        assert color_map.count("#FFFFFF") == 0
        assert color_map.count("not a color") == 0
        assert "not a color" not in color_map

    def test_equality_with_plain_dict(self):
        """Should compare equal to a dict with the same counts."""
        assert ColorMap({"#000000": 2}) == {"000000": 2}

    def test_most_common_is_stable(self):
        """Should sort by count and keep scan order for ties."""
        color_map = ColorMap([("#111111", 1), ("#222222", 5), ("#333333", 1)])
        assert color_map.most_common() == [("#222222", 5), ("#111111", 1), ("#333333", 1)]

    def test_total_pixels(self):
        """Should sum all counts."""
        assert ColorMap({"#000000": 7, "#FFFFFF": 3}).total_pixels == 10

    def test_ready_to_dev(self):
        """Should require a non-empty map with every count a multiple of 10."""
        assert ColorMap({"#000000": 20, "#FFFFFF": 10}).is_ready_to_dev()
        assert not ColorMap({"#000000": 20, "#FFFFFF": 11}).is_ready_to_dev()
        assert not ColorMap().is_ready_to_dev()

    def test_dict_round_trip(self):
        """Should rebuild an equal map from to_dict output."""
        color_map = ColorMap({"#123456": 4})
        assert ColorMap.from_dict(color_map.to_dict()) == color_map
        assert ColorMap.from_dict(None) == ColorMap()


class TestBuildColorMap:
    """Tests for build_color_map function."""

    def test_ignores_pixels_below_alpha_threshold(self):
        """Should skip alpha < 128 and count alpha >= 128."""
        array = np.zeros((1, 4, 4), dtype=np.uint8)
        array[0, 0] = (255, 0, 0, 255)
        array[0, 1] = (255, 0, 0, 128)
        array[0, 2] = (0, 0, 255, 127)
        array[0, 3] = (0, 255, 0, 0)

        color_map = build_color_map(array)

        assert color_map == {"#FF0000": 2}

    def test_scan_order(self):
        """Should list colors in the order first met scanning rows."""
        array = np.zeros((2, 2, 4), dtype=np.uint8)
        array[0, 0] = (0, 0, 255, 255)
        array[0, 1] = (255, 0, 0, 255)
        array[1, 0] = (0, 0, 255, 255)
        array[1, 1] = (0, 255, 0, 255)

        assert list(build_color_map(array)) == ["#0000FF", "#FF0000", "#00FF00"]

    def test_accepts_pil_image(self):
        """Should convert non-RGBA PIL images before counting."""
        image = Image.new("RGB", (3, 2), (10, 20, 30))
        assert build_color_map(image) == {"#0A141E": 6}

    def test_empty_surface(self):
        """Should return an empty map when nothing is opaque."""
        assert len(build_color_map(np.zeros((4, 4, 4), dtype=np.uint8))) == 0

    def test_sum_equals_opaque_pixel_count(self):
        """Should count every opaque pixel exactly once."""
        rng = np.random.default_rng(7)
        array = rng.integers(0, 256, size=(16, 16, 4), dtype=np.uint8)
        opaque = int((array[:, :, 3] >= 128).sum())

        assert build_color_map(array).total_pixels == opaque


class TestQuantizeColors:
    """Tests for quantize_colors function."""

    def test_merges_near_colors_into_most_frequent(self):
        """Should keep the most frequent color of a tight cluster."""
        color_map = ColorMap([("#100000", 2), ("#000000", 9), ("#FFFFFF", 3)])
        assert quantize_colors(color_map, threshold=30) == ["#000000", "#FFFFFF"]

    def test_caps_at_fifteen(self):
        """Should never return more than 15 colors."""
        counts = [(f"#{i * 12:02X}0000", 20 - i) for i in range(20)]
        palette = quantize_colors(ColorMap(counts), threshold=1)
        assert len(palette) == 15

    def test_never_exceeds_original_count(self):
        """Should return at most the number of input colors."""
        color_map = ColorMap([("#000000", 1), ("#FFFFFF", 1), ("#FF0000", 1)])
        assert len(quantize_colors(color_map, threshold=1)) == 3

    def test_threshold_is_strict(self):
        """Should merge only colors strictly closer than the threshold."""
        color_map = ColorMap([("#000000", 5), ("#1E0000", 1)])  # distance 30
        assert quantize_colors(color_map, threshold=30) == ["#000000", "#1E0000"]
        assert quantize_colors(color_map, threshold=31) == ["#000000"]


class TestAnalyzeImage:
    """Tests for analyze_image function."""

    def test_checkerboard(self, checkerboard_surface):
        """Should count 200 black and 200 white pixels on a 20x20 board."""
        result = analyze_image(checkerboard_surface, quantize=False)

        assert result.width == 20
        assert result.height == 20
        assert result.color_map == {"#000000": 200, "#FFFFFF": 200}
        assert result.original_color_count == 2
        assert result.colors == ["#000000", "#FFFFFF"]
        assert not result.was_quantized

    def test_small_palette_not_quantized(self):
        """Should skip quantization at 15 colors or fewer even when asked."""
        colors = [(i * 10, 0, 0, 255) for i in range(15)]
        array = np.array([colors], dtype=np.uint8)

        result = analyze_image(array, quantize=True, threshold=30)

        assert len(result.colors) == 15

    def test_quantizes_large_palette(self):
        """Should reduce a noisy palette and keep exact counts in the map."""
        colors = [(i, 0, 0, 255) for i in range(20)] + [(255, 255, 255, 255)]
        array = np.array([colors], dtype=np.uint8)

        result = analyze_image(array, quantize=True, threshold=30)

        assert result.original_color_count == 21
        assert len(result.colors) == 2
        assert len(result.color_map) == 21
        assert result.was_quantized

    def test_to_dict_keys(self):
        """Should serialize with the record's camelCase keys."""
        result = analyze_image(checkerboard_array(4, 4))
        data = result.to_dict()

        assert data["colorMap"] == {"#000000": 8, "#FFFFFF": 8}
        assert data["originalColorCount"] == 2
