"""
Tests for the image import pipeline.

Tests cover:
- Scale detection and hard-edge downscaling
- Size and color-count validation
- Name cleanup for scaled exports
- Bulk import reporting
- ImportOptions configuration
"""

import unittest

import numpy as np
import pytest

from PV_Libs.ImportLib.import_pipeline import (
    BulkImportReport,
    ImportOptions,
    clean_scaled_name,
    detect_scale,
    downscale_hard_edge,
    import_files,
    import_image,
)
from PV_Libs.errors import ColorCountOutOfRange, SizeOutOfRange, ValidationError
from conftest import BLACK, RED, WHITE, checkerboard_array, striped_array


def distinct_colors(count):
    """`count` opaque colors at least 128 apart in RGB."""
    levels = (0, 128, 255)
    return [(r, g, b, 255) for r in levels for g in levels for b in levels][:count]


class TestImportOptions(unittest.TestCase):
    """Test ImportOptions dataclass."""

    def test_defaults(self):
        """Test the default limits."""
        options = ImportOptions()

        self.assertEqual(options.scale_candidates, (10, 8, 4, 2))
        self.assertEqual((options.min_dimension, options.max_dimension), (16, 32))
        self.assertEqual((options.min_colors, options.max_colors), (2, 15))
        self.assertEqual(options.quantize_threshold, 30.0)
        self.assertFalse(options.force_quantize)

    def test_from_dict_ignores_unknown_keys(self):
        """Test unknown keys are dropped and lists become tuples."""
        options = ImportOptions.from_dict({"scale_candidates": [4, 2], "volume": 11})

        self.assertEqual(options.scale_candidates, (4, 2))
        self.assertEqual(ImportOptions.from_dict(options.to_dict()), options)

    def test_invalid_values(self):
        """Test inconsistent limits are rejected."""
        with self.assertRaises(ValueError):
            ImportOptions(scale_candidates=(1,))
        with self.assertRaises(ValueError):
            ImportOptions(min_dimension=40)
        with self.assertRaises(ValueError):
            ImportOptions(min_colors=20)


class TestDetectScale:
    """Tests for detect_scale function."""

    @pytest.mark.parametrize(
        "size,scale",
        [
            ((40, 40), 2),
            ((48, 64), 2),
            ((64, 64), 4),
            ((160, 160), 10),
            ((320, 320), 10),
            ((256, 256), 8),
            ((20, 20), 1),
            ((33, 33), 1),
            ((40, 10), 1),
        ],
    )
    def test_largest_matching_candidate(self, size, scale):
        """Should pick the first candidate giving a 16-32px asset."""
        assert detect_scale(*size) == scale

    def test_custom_candidates(self):
        """Should honor the configured candidate order."""
        assert detect_scale(160, 160, ImportOptions(scale_candidates=(4,))) == 1


class TestDownscaleHardEdge:
    """Tests for downscale_hard_edge function."""

    def test_samples_block_centers(self):
        """Should keep the center pixel of each block, not an average."""
        array = np.zeros((64, 64, 4), dtype=np.uint8)
        array[:, :] = BLACK
        array[2::4, 2::4] = RED

        result = downscale_hard_edge(array, 4)

        assert result.size == (16, 16)
        assert result.to_color_map() == {"#FF0000": 256}

    def test_odd_scale_center(self):
        """Should sample floor(scale / 2) into each block for odd scales."""
        array = np.zeros((3, 6, 4), dtype=np.uint8)
        array[1, 1] = RED
        array[1, 4] = WHITE

        result = downscale_hard_edge(array, 3)

        assert result.size == (2, 1)
        assert result.get(0, 0) == RED
        assert result.get(1, 0) == WHITE


class TestImportImage:
    """Tests for import_image function."""

    def test_downscales_40_to_20(self):
        """Should import a 2x checkerboard as a 20x20 record."""
        array = checkerboard_array(40, 40, cell=2)

        record = import_image("tile_x2.png", array, folder="floors")

        assert (record.width, record.height) == (20, 20)
        assert record.scale == 2
        assert record.name == "tile.png"
        assert record.folder == "floors"
        assert record.palette == ["#000000", "#FFFFFF"]
        assert record.color_map == {"#000000": 200, "#FFFFFF": 200}
        assert record.to_surface().size == (20, 20)

    def test_unscaled_keeps_name(self):
        """Should keep `_xN` in the name when no downscale happened."""
        record = import_image("tile_x2.png", checkerboard_array(16, 16))

        assert record.name == "tile_x2.png"
        assert record.scale == 1

    def test_accepts_surface(self, checkerboard_surface):
        """Should accept a RasterSurface directly."""
        assert import_image("board.png", checkerboard_surface).original_color_count == 2

    def test_rejects_bad_size(self):
        """Should raise SizeOutOfRange when no scale fixes the size."""
        with pytest.raises(SizeOutOfRange) as exc_info:
            import_image("wide.png", checkerboard_array(40, 10))

        assert exc_info.value.width == 40
        assert exc_info.value.height == 10
        assert "Current: 40x10" in str(exc_info.value)

    def test_rejects_single_color(self):
        """Should raise ColorCountOutOfRange below two colors."""
        array = np.zeros((16, 16, 4), dtype=np.uint8)
        array[:, :] = RED

        with pytest.raises(ColorCountOutOfRange) as exc_info:
            import_image("flat.png", array)

        assert exc_info.value.count == 1

    def test_rejects_too_many_colors_without_downscale(self):
        """Should not quantize unscaled rasters, so 20 colors are rejected."""
        array = striped_array(20, 20, distinct_colors(20))

        with pytest.raises(ColorCountOutOfRange) as exc_info:
            import_image("busy.png", array)

        assert exc_info.value.count == 20
        assert exc_info.value.original_count == 20

    def test_quantizes_after_downscale(self):
        """Should merge near-duplicate colors when the raster was scaled."""
        base = checkerboard_array(20, 20)
        noise = np.arange(20, dtype=np.uint8).reshape(1, 20) % 10
        base[:, :, 0] = np.where(base[:, :, 0] == 0, noise, 255 - noise)
        upscaled = np.repeat(np.repeat(base, 2, axis=0), 2, axis=1)

        record = import_image("noisy_x2.png", upscaled)

        assert record.original_color_count == 20
        assert record.color_count == 2
        assert record.name == "noisy.png"

    def test_force_quantize(self):
        """Should quantize unscaled rasters when forced."""
        array = striped_array(20, 20, distinct_colors(20))

        record = import_image("busy.png", array, ImportOptions(force_quantize=True))

        assert record.color_count == 15
        assert record.original_color_count == 20

    def test_validation_errors_share_a_base(self):
        """Should be catchable as ValidationError and ValueError."""
        with pytest.raises(ValidationError):
            import_image("tiny.png", checkerboard_array(8, 8))
        with pytest.raises(ValueError):
            import_image("tiny.png", checkerboard_array(8, 8))


class TestCleanScaledName:
    """Tests for clean_scaled_name function."""

    def test_strips_suffixes(self):
        """Should strip every `_xN` suffix, any case."""
        assert clean_scaled_name("hero_x4.png") == "hero.png"
        assert clean_scaled_name("hero_X10_x2.png") == "hero.png"
        assert clean_scaled_name("box.png") == "box.png"


class TestImportFiles:
    """Tests for import_files function."""

    def test_reports_each_outcome(self, tmp_path, write_png):
        """Should import, reject and fail files independently."""
        good = write_png("good.png", checkerboard_array(16, 16))
        wide = write_png("wide.png", checkerboard_array(40, 10))
        broken = tmp_path / "broken.png"
        broken.write_bytes(b"not really a png")
        (tmp_path / "notes.txt").write_text("skip me")

        report = import_files([good, wide, broken, tmp_path / "notes.txt"], folder="batch")

        assert [record.name for record in report.imported] == ["good.png"]
        assert report.imported[0].folder == "batch"
        assert [path for path, _ in report.rejected] == [wide]
        assert isinstance(report.rejected[0][1], SizeOutOfRange)
        assert [path for path, _ in report.failed] == [broken]
        assert report.total == 3
        assert report.summary() == "1 imported, 1 rejected, 1 failed"

    def test_expands_directories_in_order(self, tmp_path, write_png):
        """Should import the PNGs of a directory sorted by name."""
        write_png("b_x2.png", checkerboard_array(40, 40, cell=2))
        write_png("a.png", checkerboard_array(16, 16))

        report = import_files([tmp_path])

        assert [record.name for record in report.imported] == ["a.png", "b.png"]

    def test_uppercase_extension(self, write_png):
        """Should accept .PNG regardless of case."""
        path = write_png("LOUD.PNG", checkerboard_array(16, 16))
        assert len(import_files([path]).imported) == 1

    def test_missing_file_is_failure(self, tmp_path):
        """Should record a missing file as failed and keep going."""
        report = import_files([tmp_path / "ghost.png"])
        assert len(report.failed) == 1
        assert report.imported == []

    def test_empty_report(self):
        """Should report nothing for no input."""
        report = import_files([])
        assert isinstance(report, BulkImportReport)
        assert report.total == 0
