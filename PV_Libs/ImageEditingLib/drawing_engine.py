"""
Drawing engine: the pixel editor's tool state machine.

The engine owns the editing context explicitly (a LayerStack, a
HistoryManager and EditorOptions) and is driven by three pointer events:
press, move and release. Each tool interprets those events through the same
phase machine:

    idle --press--> pressed --move--> dragging --release--> idle

Every committing operation (stroke end, shape commit, fill, crop confirm,
layer add/delete, lasso move/cut, color replace) records exactly one history
snapshot and recomposes the visible layers, refreshing the live ColorMap.

Classes:
    Phase: Pointer session phase
    Button: Which working color a press uses
    EditorOptions: Working colors and shape options
    ToolState: Current tool, phase, anchor and last stroke point
    EditOutcome: What an event did
    DrawingEngine: Tool dispatcher over a LayerStack
"""

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional

from PV_Libs.ColorLib.color_codec import TRANSPARENT_RGBA, color_to_rgba, normalize_hex, rgb_to_hex
from PV_Libs.ColorLib.color_map import ColorMap
from PV_Libs.ImageEditingLib.history_manager import HistoryManager
from PV_Libs.ImageEditingLib.layer_stack import Layer, LayerStack
from PV_Libs.ImageEditingLib.raster_ops import (
    Point,
    circle_points,
    flood_fill,
    line_points,
    plot_points,
    rectangle_points,
)
from PV_Libs.ImageEditingLib.raster_surface import RasterSurface, Rect
from PV_Libs.ImageEditingLib.selection import (
    CropSelection,
    LassoContent,
    LassoSelection,
    extract_lasso_content,
)
from PV_Libs.constants import (
    ALPHA_OPAQUE_THRESHOLD,
    DEFAULT_PRIMARY_COLOR,
    DEFAULT_SECONDARY_COLOR,
    MAX_HISTORY,
    TOOL_CIRCLE,
    TOOL_CROP,
    TOOL_ERASER,
    TOOL_FILL,
    TOOL_LASSO,
    TOOL_LINE,
    TOOL_PENCIL,
    TOOL_PICKER,
    TOOL_RECTANGLE,
    TRANSPARENT,
)

logger = logging.getLogger(__name__)

TOOLS = (
    TOOL_PENCIL,
    TOOL_ERASER,
    TOOL_LINE,
    TOOL_RECTANGLE,
    TOOL_CIRCLE,
    TOOL_FILL,
    TOOL_PICKER,
    TOOL_LASSO,
    TOOL_CROP,
)
STROKE_TOOLS = (TOOL_PENCIL, TOOL_ERASER)
SHAPE_TOOLS = (TOOL_LINE, TOOL_RECTANGLE, TOOL_CIRCLE)


class Phase(str, Enum):
    IDLE = "idle"
    PRESSED = "pressed"
    DRAGGING = "dragging"


class Button(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass
class EditorOptions:
    """Options for an editing session.

    Attributes:
        primary_color: Working color for primary-button presses
        secondary_color: Working color for secondary-button presses
        fill_shape: Draw rectangles and circles filled instead of outlined
        history_limit: Maximum number of undo snapshots kept
    """
    primary_color: str = DEFAULT_PRIMARY_COLOR
    secondary_color: str = DEFAULT_SECONDARY_COLOR
    fill_shape: bool = False
    history_limit: int = MAX_HISTORY

    def __post_init__(self):
        self.primary_color = normalize_hex(self.primary_color)
        self.secondary_color = normalize_hex(self.secondary_color)
        if self.history_limit < 1:
            raise ValueError(f"history_limit must be >= 1, got {self.history_limit}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditorOptions":
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)


@dataclass
class ToolState:
    tool: str = TOOL_PENCIL
    phase: Phase = Phase.IDLE
    button: Button = Button.PRIMARY
    anchor: Optional[Point] = None
    last_point: Optional[Point] = None

    def reset(self) -> None:
        self.phase = Phase.IDLE
        self.button = Button.PRIMARY
        self.anchor = None
        self.last_point = None


@dataclass
class EditOutcome:
    """Side effects of one engine call.

    Attributes:
        changed: Pixels on a layer or the preview overlay changed
        committed: A history snapshot was recorded
        picked_color: Color set by the picker, if any
    """
    changed: bool = False
    committed: bool = False
    picked_color: Optional[str] = None


class DrawingEngine:
    """Stateful tool dispatcher operating on the active layer of a LayerStack."""

    def __init__(
        self,
        stack: LayerStack,
        options: Optional[EditorOptions] = None,
        history: Optional[HistoryManager] = None,
    ):
        self.stack = stack
        self.options = options if options is not None else EditorOptions()
        self.history = history if history is not None else HistoryManager(self.options.history_limit)
        self.state = ToolState()
        self.overlay = RasterSurface(stack.width, stack.height)

        self.crop_selection: Optional[CropSelection] = None
        self.lasso: Optional[LassoSelection] = None
        self.lasso_content: Optional[LassoContent] = None
        self._lasso_drag_start: Optional[Point] = None
        self._lasso_drag_origin: Optional[Point] = None

        self.composed: RasterSurface = stack.compose()
        self.color_map: ColorMap = self.composed.to_color_map()

        if len(self.history) == 0:
            self.history.snapshot(self.stack)

    # ----- Working colors and tool selection -----

    @property
    def tool(self) -> str:
        return self.state.tool

    @property
    def primary_color(self) -> str:
        return self.options.primary_color

    @property
    def secondary_color(self) -> str:
        return self.options.secondary_color

    def set_primary_color(self, color: str) -> None:
        self.options.primary_color = normalize_hex(color)

    def set_secondary_color(self, color: str) -> None:
        self.options.secondary_color = normalize_hex(color)

    def set_fill_shape(self, fill_shape: bool) -> None:
        self.options.fill_shape = bool(fill_shape)

    def _color_for(self, button: Button) -> str:
        return self.secondary_color if button == Button.SECONDARY else self.primary_color

    def set_tool(self, tool: str) -> None:
        """
        Switch tools. Leaving crop drops the crop rectangle; leaving lasso
        drops any selection and floating content without restoring it.
        """
        if tool not in TOOLS:
            raise ValueError(f"Unknown tool: {tool}")

        if self.state.tool == TOOL_CROP and tool != TOOL_CROP:
            self.cancel_crop()
        if self.state.tool == TOOL_LASSO and tool != TOOL_LASSO:
            self.cancel_lasso()

        self.overlay.clear()
        self.state.reset()
        self.state.tool = tool

        if tool == TOOL_CROP:
            self.enter_crop()
        elif tool == TOOL_LASSO:
            self.lasso = None
            self.lasso_content = None

        logger.debug(f"Tool set to {tool}")

    # ----- Pointer events -----

    def on_press(self, x: int, y: int, button: Button = Button.PRIMARY, alt: bool = False) -> EditOutcome:
        # Crop is driven through the crop_* methods, never by pointer events
        if self.crop_selection is not None or self.state.tool == TOOL_CROP:
            return EditOutcome()

        if alt:
            return self.pick_color(x, y, secondary=button == Button.SECONDARY)

        tool = self.state.tool

        if tool == TOOL_LASSO:
            return self._lasso_press(x, y)

        if tool == TOOL_PICKER:
            return self.pick_color(x, y, secondary=button == Button.SECONDARY)

        if tool == TOOL_FILL:
            return self.fill(x, y, self._color_for(button))

        self.state.phase = Phase.PRESSED
        self.state.button = button
        self.state.anchor = (x, y)
        self.state.last_point = (x, y)

        if tool in STROKE_TOOLS:
            changed = self._plot_stroke([(x, y)])
            return EditOutcome(changed=changed)

        return EditOutcome()

    def on_move(self, x: int, y: int) -> EditOutcome:
        tool = self.state.tool

        if tool == TOOL_LASSO:
            return self._lasso_move(x, y)

        if self.state.phase == Phase.IDLE:
            return EditOutcome()

        self.state.phase = Phase.DRAGGING

        if tool in STROKE_TOOLS:
            x0, y0 = self.state.last_point
            changed = self._plot_stroke(line_points(x0, y0, x, y))
            self.state.last_point = (x, y)
            return EditOutcome(changed=changed)

        if tool in SHAPE_TOOLS:
            self.overlay.clear()
            rgba = color_to_rgba(self._color_for(self.state.button))
            plot_points(self.overlay, self._shape_points(x, y), rgba)
            return EditOutcome(changed=True)

        return EditOutcome()

    def on_release(self, x: int, y: int) -> EditOutcome:
        tool = self.state.tool

        if tool == TOOL_LASSO:
            return self._lasso_release()

        if self.state.phase == Phase.IDLE:
            return EditOutcome()

        if tool in SHAPE_TOOLS:
            rgba = color_to_rgba(self._color_for(self.state.button))
            plot_points(self.stack.active_surface, self._shape_points(x, y), rgba)
            self.overlay.clear()

        self.state.reset()
        self.commit()
        return EditOutcome(changed=True, committed=True)

    # ----- Tool operations -----

    def _plot_stroke(self, points) -> bool:
        if self.state.tool == TOOL_ERASER:
            rgba = TRANSPARENT_RGBA
        else:
            rgba = color_to_rgba(self._color_for(self.state.button))
        written = plot_points(self.stack.active_surface, points, rgba)
        if written:
            self.recompose()
        return written > 0

    def _shape_points(self, x: int, y: int):
        x0, y0 = self.state.anchor
        tool = self.state.tool
        if tool == TOOL_LINE:
            return line_points(x0, y0, x, y)
        if tool == TOOL_RECTANGLE:
            return rectangle_points(x0, y0, x, y, filled=self.options.fill_shape)
        return circle_points(x0, y0, x, y, filled=self.options.fill_shape)

    def fill(self, x: int, y: int, color: str) -> EditOutcome:
        """Flood fill the active layer; TRANSPARENT erases the region."""
        changed = flood_fill(self.stack.active_surface, x, y, color_to_rgba(color))
        if not changed:
            return EditOutcome()
        self.commit()
        return EditOutcome(changed=True, committed=True)

    def pick_color(self, x: int, y: int, secondary: bool = False) -> EditOutcome:
        """
        Sample the composed image (all visible layers) at (x, y).

        Pixels with alpha below 128 pick the TRANSPARENT sentinel.
        """
        if not self.composed.in_bounds(x, y):
            return EditOutcome()

        r, g, b, a = self.composed.get(x, y)
        color = TRANSPARENT if a < ALPHA_OPAQUE_THRESHOLD else rgb_to_hex(r, g, b)

        if secondary:
            self.set_secondary_color(color)
        else:
            self.set_primary_color(color)

        logger.debug(f"Picked {color} ({'secondary' if secondary else 'primary'})")
        return EditOutcome(picked_color=color)

    # ----- Crop mode -----

    @property
    def crop_active(self) -> bool:
        return self.crop_selection is not None

    def enter_crop(self) -> CropSelection:
        self.crop_selection = CropSelection(self.stack.width, self.stack.height)
        return self.crop_selection

    def begin_crop_drag(self, handle: Optional[str] = None) -> None:
        if self.crop_selection is not None:
            self.crop_selection.begin_drag(handle)

    def update_crop_drag(self, dx: int, dy: int) -> Optional[Rect]:
        if self.crop_selection is None:
            return None
        return self.crop_selection.update_drag(dx, dy)

    def end_crop_drag(self) -> None:
        if self.crop_selection is not None:
            self.crop_selection.end_drag()

    def confirm_crop(self) -> EditOutcome:
        """Crop every layer to the selection and leave crop mode."""
        if self.crop_selection is None:
            return EditOutcome()

        rect = self.crop_selection.rect
        self.crop_selection = None
        self.stack.crop(rect)
        self.overlay = RasterSurface(rect.width, rect.height)
        self.commit()
        return EditOutcome(changed=True, committed=True)

    def cancel_crop(self) -> None:
        self.crop_selection = None

    # ----- Lasso -----

    def _lasso_press(self, x: int, y: int) -> EditOutcome:
        if self.lasso_content is not None:
            if self.lasso_content.contains(x, y):
                self._lasso_drag_start = (x, y)
                self._lasso_drag_origin = self.lasso_content.origin
                self.state.phase = Phase.PRESSED
            return EditOutcome()

        self.lasso = LassoSelection()
        self.lasso.add_point(x, y)
        self.state.phase = Phase.PRESSED
        return EditOutcome()

    def _lasso_move(self, x: int, y: int) -> EditOutcome:
        if self.state.phase == Phase.IDLE:
            return EditOutcome()
        self.state.phase = Phase.DRAGGING

        if self._lasso_drag_start is not None:
            sx, sy = self._lasso_drag_start
            ox, oy = self._lasso_drag_origin
            self.lasso_content.move_to(ox + x - sx, oy + y - sy)
            return EditOutcome(changed=True)

        if self.lasso is not None:
            self.lasso.add_point(x, y)
        return EditOutcome()

    def _lasso_release(self) -> EditOutcome:
        if self.state.phase == Phase.IDLE:
            return EditOutcome()
        self.state.reset()

        if self._lasso_drag_start is not None:
            self._lasso_drag_start = None
            self._lasso_drag_origin = None
            return EditOutcome()

        if self.lasso is None or not self.lasso.is_closable:
            self.lasso = None
            return EditOutcome()

        self.lasso_content = extract_lasso_content(self.stack.active_surface, self.lasso)
        if self.lasso_content is None:
            return EditOutcome()

        self.recompose()
        return EditOutcome(changed=True)

    def drag_lasso_content(self, dx: int, dy: int) -> bool:
        """Translate the floating content by (dx, dy) without resampling."""
        if self.lasso_content is None:
            return False
        self.lasso_content.translate(dx, dy)
        return True

    def move_lasso_content(self) -> EditOutcome:
        """Paste the floating content onto the active layer at its offset."""
        if self.lasso_content is None:
            return EditOutcome()

        self.stack.active_surface.draw_from(self.lasso_content.surface, dst_origin=self.lasso_content.origin)
        self._clear_lasso()
        self.commit()
        return EditOutcome(changed=True, committed=True)

    def cut_lasso_content(self) -> EditOutcome:
        """Discard the floating content; its pixels are already off the layer."""
        if self.lasso_content is None:
            return EditOutcome()

        self._clear_lasso()
        self.commit()
        return EditOutcome(committed=True)

    def cancel_lasso(self) -> None:
        """Drop the selection and floating content. The extraction is not undone."""
        self._clear_lasso()

    def _clear_lasso(self) -> None:
        self.lasso = None
        self.lasso_content = None
        self._lasso_drag_start = None
        self._lasso_drag_origin = None
        if self.state.tool == TOOL_LASSO:
            self.state.reset()

    # ----- Layers -----

    def add_layer(self) -> Layer:
        layer = self.stack.add_layer()
        self.commit()
        return layer

    def delete_layer(self) -> bool:
        if not self.stack.delete_layer():
            return False
        self.commit()
        return True

    def select_layer(self, index: int) -> None:
        self.stack.select_layer(index)

    def set_layer_visibility(self, index: int, visible: bool) -> None:
        self.stack.set_visibility(index, visible)
        self.recompose()

    # ----- History and composition -----

    def commit(self) -> None:
        """Record one history snapshot and refresh the composed image."""
        self.history.snapshot(self.stack)
        self.recompose()

    def recompose(self) -> None:
        self.composed = self.stack.compose()
        self.color_map = self.composed.to_color_map()

    def undo(self) -> bool:
        """
        Step back one commit. With lasso content floating, only the
        uncommitted extraction is reverted.
        """
        if self.lasso_content is not None:
            if not self.history.revert(self.stack):
                return False
        elif not self.history.undo(self.stack):
            return False
        self._after_restore()
        return True

    def redo(self) -> bool:
        if not self.history.redo(self.stack):
            return False
        self._after_restore()
        return True

    def _after_restore(self) -> None:
        self._clear_lasso()
        self.state.reset()
        if self.overlay.size != (self.stack.width, self.stack.height):
            self.overlay = RasterSurface(self.stack.width, self.stack.height)
        else:
            self.overlay.clear()
        if self.crop_selection is not None:
            self.enter_crop()
        self.recompose()

    def preview_surface(self) -> RasterSurface:
        """Composed image with the shape overlay and floating lasso content on top."""
        preview = self.composed.copy()
        preview.draw_from(self.overlay)
        if self.lasso_content is not None:
            preview.draw_from(self.lasso_content.surface, dst_origin=self.lasso_content.origin)
        return preview
