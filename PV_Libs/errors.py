"""
Error types for Pixel Voxel.

Validation errors reject caller input (an import or save is aborted and no
partial state is kept). Decode errors are raised for a single unreadable
raster; bulk import logs them and moves on to the next file.
"""

from typing import Any


class PixelVoxelError(Exception):
    """Base exception for Pixel Voxel errors."""

    pass


class ValidationError(PixelVoxelError, ValueError):
    """Input rejected by a size, color-count or format check."""

    pass


class SizeOutOfRange(ValidationError):
    """Raster dimensions fall outside the accepted asset size."""

    def __init__(self, width: int, height: int, min_size: int, max_size: int):
        self.width = width
        self.height = height
        super().__init__(
            f"Image size must be between {min_size}x{min_size} and "
            f"{max_size}x{max_size} pixels. Current: {width}x{height}"
        )


class ColorCountOutOfRange(ValidationError):
    """Palette size falls outside the accepted color count."""

    def __init__(self, count: int, original_count: int, min_colors: int, max_colors: int):
        self.count = count
        self.original_count = original_count
        super().__init__(
            f"Image must have {min_colors}-{max_colors} colors. "
            f"Found: {count} (original: {original_count})"
        )


class InvalidColorFormat(ValidationError):
    """A color value is not a 6-digit hex string or a valid channel triple."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Invalid color format: {value!r}")


class DecodeError(PixelVoxelError, IOError):
    """Raised when encoded bytes or a file cannot be decoded into a raster."""

    pass
