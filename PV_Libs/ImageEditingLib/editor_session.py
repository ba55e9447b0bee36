"""
Editor session: one open ImageRecord being edited.

The session decodes a record into a single-layer LayerStack, drives it through
a DrawingEngine and turns the visible layers back into a SaveResult.
"""

import logging
from typing import List, Optional, Tuple

from PV_Libs.ImageEditingLib.drawing_engine import DrawingEngine, EditorOptions
from PV_Libs.ImageEditingLib.history_manager import HistoryManager
from PV_Libs.ImageEditingLib.image_editing_ops import (
    encode_png,
    export_scaled,
    replace_color,
    scaled_export_name,
    update_palette,
)
from PV_Libs.ImageEditingLib.image_models import ImageRecord, SaveResult
from PV_Libs.ImageEditingLib.layer_stack import LayerStack
from PV_Libs.constants import REDO_KEY, TOOL_SHORTCUTS, UNDO_KEY

logger = logging.getLogger(__name__)


class EditorSession:
    """
    Holds the editing context for at most one record at a time.

    Opening a record replaces whatever was open before; unsaved edits are
    discarded without confirmation.
    """

    def __init__(self, options: Optional[EditorOptions] = None):
        self._base_options = options if options is not None else EditorOptions()
        self.record: Optional[ImageRecord] = None
        self.engine: Optional[DrawingEngine] = None
        self.palette: List[str] = []

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    @property
    def stack(self) -> LayerStack:
        return self._require_engine().stack

    @property
    def history(self) -> HistoryManager:
        return self._require_engine().history

    def _require_engine(self) -> DrawingEngine:
        if self.engine is None:
            raise RuntimeError("No image is open in the editor")
        return self.engine

    def open(self, record: ImageRecord) -> DrawingEngine:
        """
        Start editing a record.

        The record's raster becomes the base layer. The first two palette
        entries, when present, become the primary and secondary colors.

        Raises:
            DecodeError: If the record's PNG bytes cannot be decoded
        """
        if self.engine is not None:
            logger.debug(f"Discarding open session for {self.record.name}")
            self.close()

        surface = record.to_surface()
        stack = LayerStack.from_surface(surface)

        options = EditorOptions.from_dict(self._base_options.to_dict())
        if len(record.palette) > 0:
            options.primary_color = record.palette[0]
        if len(record.palette) > 1:
            options.secondary_color = record.palette[1]

        self.record = record
        self.palette = list(record.palette)
        self.engine = DrawingEngine(stack, options, HistoryManager(options.history_limit))
        logger.info(f"Opened {record.name} ({stack.width}x{stack.height}, {len(self.palette)} colors)")
        return self.engine

    def replace_color(self, old_color: str, new_color: str) -> int:
        """
        Replace one opaque color with another on every layer.

        The working palette drops the old color and gains the new one. A
        history snapshot is recorded only when pixels changed.

        Returns:
            Number of pixels replaced
        """
        engine = self._require_engine()
        replaced = replace_color(engine.stack, old_color, new_color)
        self.palette = update_palette(self.palette, old_color, new_color)
        if replaced:
            engine.commit()
        return replaced

    def handle_shortcut(self, key: str, ctrl: bool = False) -> bool:
        """
        Apply a keyboard shortcut.

        Returns:
            True if the key was bound to an action
        """
        engine = self._require_engine()
        key = key.lower()

        if ctrl:
            if key == UNDO_KEY:
                engine.undo()
                return True
            if key == REDO_KEY:
                engine.redo()
                return True
            return False

        tool = TOOL_SHORTCUTS.get(key)
        if tool is None:
            return False
        engine.set_tool(tool)
        return True

    def save(self) -> SaveResult:
        """Compose the visible layers and report their colors."""
        engine = self._require_engine()
        composed = engine.stack.compose()
        color_map = composed.to_color_map()

        result = SaveResult(
            png_bytes=encode_png(composed),
            colors=list(color_map.keys()),
            color_map=color_map,
            width=composed.width,
            height=composed.height,
        )
        logger.info(f"Saved {self.record.name}: {result.width}x{result.height}, {result.color_count} colors")
        return result

    def save_record(self) -> ImageRecord:
        """Save and build the record that replaces the one being edited."""
        result = self.save()
        record = result.to_record(
            name=self.record.name,
            folder=self.record.folder,
            original_color_count=len(result.colors),
        )
        record.scale = self.record.scale
        return record

    def export_image(self, scale: int) -> Tuple[str, bytes]:
        """
        Nearest-neighbor upscale of the visible layers.

        Returns:
            (file name, PNG bytes), named `<name>_x<scale>.png`
        """
        engine = self._require_engine()
        scaled = export_scaled(engine.stack.compose(), scale)
        return scaled_export_name(self.record.name, scale), encode_png(scaled)

    def close(self) -> None:
        """Discard layers, history and floating selections."""
        if self.engine is not None:
            self.engine.cancel_lasso()
            self.engine.history.clear()
            logger.debug(f"Closed {self.record.name}")
        self.engine = None
        self.record = None
        self.palette = []
