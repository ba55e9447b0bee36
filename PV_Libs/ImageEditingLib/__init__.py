"""
ImageEditingLib - Core pixel editing functionality

This module provides the raster surface, layer stack, undo history, drawing
tools and editor session for Pixel Voxel.
"""

from PV_Libs.ImageEditingLib.raster_surface import RasterSurface, Rect
from PV_Libs.ImageEditingLib.raster_ops import (
    circle_points,
    flood_fill,
    line_points,
    plot_points,
    point_in_polygon,
    rectangle_points,
)
from PV_Libs.ImageEditingLib.layer_stack import Layer, LayerStack
from PV_Libs.ImageEditingLib.history_manager import HistoryManager, HistorySnapshot
from PV_Libs.ImageEditingLib.selection import (
    CropSelection,
    LassoContent,
    LassoSelection,
    extract_lasso_content,
)
from PV_Libs.ImageEditingLib.drawing_engine import (
    Button,
    DrawingEngine,
    EditOutcome,
    EditorOptions,
    Phase,
    ToolState,
)
from PV_Libs.ImageEditingLib.image_models import ImageRecord, RgbaColor, SaveResult
from PV_Libs.ImageEditingLib.image_editing_ops import (
    decode_png,
    encode_png,
    export_scaled,
    load_surface,
    replace_color,
    scaled_export_name,
    update_palette,
)
from PV_Libs.ImageEditingLib.editor_session import EditorSession

__all__ = [
    "RasterSurface",
    "Rect",
    "circle_points",
    "flood_fill",
    "line_points",
    "plot_points",
    "point_in_polygon",
    "rectangle_points",
    "Layer",
    "LayerStack",
    "HistoryManager",
    "HistorySnapshot",
    "CropSelection",
    "LassoContent",
    "LassoSelection",
    "extract_lasso_content",
    "Button",
    "DrawingEngine",
    "EditOutcome",
    "EditorOptions",
    "Phase",
    "ToolState",
    "ImageRecord",
    "RgbaColor",
    "SaveResult",
    "decode_png",
    "encode_png",
    "export_scaled",
    "load_surface",
    "replace_color",
    "scaled_export_name",
    "update_palette",
    "EditorSession",
]
