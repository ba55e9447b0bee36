"""
Layer stack for the pixel editor.

Layers are kept bottom to top. The stack always holds at least one layer and
a current index naming the layer that drawing tools modify.

Classes:
    Layer: One named, optionally hidden RasterSurface
    LayerStack: Ordered layers plus the active index, with composition and crop
"""

import itertools
import logging
from dataclasses import dataclass
from typing import List, Optional

from PV_Libs.ImageEditingLib.raster_surface import RasterSurface, Rect
from PV_Libs.constants import LAYER_NAME_TEMPLATE

logger = logging.getLogger(__name__)


@dataclass
class Layer:
    """A layer owned by a LayerStack.

    Attributes:
        id: Stable identifier, unique within its stack
        name: Display name
        visible: Hidden layers keep their pixels but are skipped by compose()
        surface: The layer's pixels
    """
    id: int
    name: str
    visible: bool
    surface: RasterSurface

    def copy(self) -> "Layer":
        return Layer(id=self.id, name=self.name, visible=self.visible, surface=self.surface.copy())


class LayerStack:
    """Ordered layers (bottom to top) sharing one canvas size."""

    def __init__(self, width: int, height: int, base: Optional[RasterSurface] = None):
        self._width = width
        self._height = height
        self._ids = itertools.count(1)
        self.layers: List[Layer] = []
        self.current_index = 0

        if base is not None and base.size != (width, height):
            raise ValueError(f"Base surface {base.size} does not match canvas {width}x{height}")

        self.layers.append(self._new_layer(base.copy() if base is not None else None))

    @classmethod
    def from_surface(cls, surface: RasterSurface) -> "LayerStack":
        return cls(surface.width, surface.height, base=surface)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def __len__(self) -> int:
        return len(self.layers)

    @property
    def active_layer(self) -> Layer:
        return self.layers[self.current_index]

    @property
    def active_surface(self) -> RasterSurface:
        return self.active_layer.surface

    def _new_layer(self, surface: Optional[RasterSurface] = None) -> Layer:
        layer_id = next(self._ids)
        return Layer(
            id=layer_id,
            name=LAYER_NAME_TEMPLATE.format(number=len(self.layers) + 1),
            visible=True,
            surface=surface if surface is not None else RasterSurface(self._width, self._height),
        )

    def add_layer(self) -> Layer:
        """Append a transparent layer on top and make it active."""
        layer = self._new_layer()
        self.layers.append(layer)
        self.current_index = len(self.layers) - 1
        logger.debug(f"Added {layer.name} (id {layer.id})")
        return layer

    def delete_layer(self) -> bool:
        """Remove the active layer. Returns False when it is the only layer."""
        if len(self.layers) <= 1:
            return False

        removed = self.layers.pop(self.current_index)
        self.current_index = min(self.current_index, len(self.layers) - 1)
        logger.debug(f"Deleted {removed.name} (id {removed.id})")
        return True

    def select_layer(self, index: int) -> None:
        if not 0 <= index < len(self.layers):
            raise IndexError(f"Layer index {index} out of range (0-{len(self.layers) - 1})")
        self.current_index = index

    def set_visibility(self, index: int, visible: bool) -> None:
        if not 0 <= index < len(self.layers):
            raise IndexError(f"Layer index {index} out of range (0-{len(self.layers) - 1})")
        self.layers[index].visible = bool(visible)

    def toggle_visibility(self, index: int) -> bool:
        self.set_visibility(index, not self.layers[index].visible)
        return self.layers[index].visible

    def compose(self) -> RasterSurface:
        """Flatten visible layers bottom to top into a new surface."""
        composed = RasterSurface(self._width, self._height)
        for layer in self.layers:
            if layer.visible:
                composed.draw_from(layer.surface)
        return composed

    def crop(self, rect: Rect) -> None:
        """Crop every layer to the same rectangle and resize the canvas."""
        for layer in self.layers:
            layer.surface = layer.surface.crop(rect)
        self._width = rect.width
        self._height = rect.height
        logger.info(f"Cropped layers to {rect.width}x{rect.height} at ({rect.x}, {rect.y})")

    def replace_layers(self, layers: List[Layer], current_index: int, width: int, height: int) -> None:
        """Swap in a full layer set (used by history restore)."""
        if not layers:
            raise ValueError("A layer stack needs at least one layer")
        self.layers = layers
        self._width = width
        self._height = height
        self.current_index = max(0, min(current_index, len(layers) - 1))
        next_id = max(layer.id for layer in layers) + 1
        self._ids = itertools.count(next_id)
