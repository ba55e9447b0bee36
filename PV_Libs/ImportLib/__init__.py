"""
ImportLib - Image import pipeline

This module provides scale detection, hard-edge downscaling and validated
import of pixel-art PNGs for Pixel Voxel.
"""

from PV_Libs.ImportLib.import_pipeline import (
    BulkImportReport,
    ImportOptions,
    clean_scaled_name,
    detect_scale,
    downscale_hard_edge,
    import_files,
    import_image,
)

__all__ = [
    "BulkImportReport",
    "ImportOptions",
    "clean_scaled_name",
    "detect_scale",
    "downscale_hard_edge",
    "import_files",
    "import_image",
]
