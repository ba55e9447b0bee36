"""
Pytest configuration and shared fixtures for Pixel Voxel tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import numpy as np
import pytest
from PIL import Image

from PV_Libs.ImageEditingLib.drawing_engine import DrawingEngine
from PV_Libs.ImageEditingLib.layer_stack import LayerStack
from PV_Libs.ImageEditingLib.raster_surface import RasterSurface


BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)
RED = (255, 0, 0, 255)


def checkerboard_array(width, height, first=BLACK, second=WHITE, cell=1):
    """Build an RGBA checkerboard with square cells of `cell` pixels."""
    array = np.zeros((height, width, 4), dtype=np.uint8)
    for y in range(height):
        for x in range(width):
            array[y, x] = first if ((x // cell) + (y // cell)) % 2 == 0 else second
    return array


def striped_array(width, height, colors):
    """One vertical stripe per color, each as wide as possible."""
    array = np.zeros((height, width, 4), dtype=np.uint8)
    stripe = max(1, width // len(colors))
    for x in range(width):
        array[:, x] = colors[min(x // stripe, len(colors) - 1)]
    return array


@pytest.fixture
def checkerboard_surface():
    """
    Provide a 20x20 two-tone checkerboard surface.

    Returns:
        RasterSurface alternating black and white, 200 pixels of each
    """
    return RasterSurface.from_array(checkerboard_array(20, 20))


@pytest.fixture
def empty_stack():
    """Provide a 10x10 single-layer, fully transparent LayerStack."""
    return LayerStack(10, 10)


@pytest.fixture
def engine(empty_stack):
    """Provide a DrawingEngine over an empty 10x10 stack."""
    return DrawingEngine(empty_stack)


@pytest.fixture
def write_png(tmp_path):
    """
    Provide a helper that writes an RGBA array to a PNG file.

    Args:
        tmp_path: Pytest's built-in temporary directory fixture

    Returns:
        Callable (name, array) -> Path
    """
    def _write(name, array):
        path = tmp_path / name
        Image.fromarray(np.asarray(array, dtype=np.uint8)).save(path, format="PNG")
        return path

    return _write
