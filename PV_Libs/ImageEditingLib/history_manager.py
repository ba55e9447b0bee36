"""
Snapshot-based undo/redo for a LayerStack.

Each snapshot is a full deep copy of every layer plus the active index and
canvas size.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from PV_Libs.ImageEditingLib.layer_stack import Layer, LayerStack
from PV_Libs.constants import MAX_HISTORY

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistorySnapshot:
    layers: Tuple[Layer, ...]
    current_index: int
    width: int
    height: int

    @classmethod
    def capture(cls, stack: LayerStack) -> "HistorySnapshot":
        return cls(
            layers=tuple(layer.copy() for layer in stack.layers),
            current_index=stack.current_index,
            width=stack.width,
            height=stack.height,
        )

    def restore_into(self, stack: LayerStack) -> None:
        # Copy again so edits after a restore never reach the stored snapshot
        stack.replace_layers(
            [layer.copy() for layer in self.layers],
            self.current_index,
            self.width,
            self.height,
        )


class HistoryManager:
    """
    Bounded list of snapshots with a cursor.

    Pushing discards any redo branch past the cursor. When the list is full the
    oldest snapshot is dropped, so old history ages out silently.
    """

    def __init__(self, capacity: int = MAX_HISTORY):
        if capacity < 1:
            raise ValueError(f"History capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._snapshots: List[HistorySnapshot] = []
        self._cursor = -1

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    def snapshot(self, stack: LayerStack) -> HistorySnapshot:
        """Record the stack's current state as the newest entry."""
        del self._snapshots[self._cursor + 1:]

        entry = HistorySnapshot.capture(stack)
        self._snapshots.append(entry)

        if len(self._snapshots) > self.capacity:
            self._snapshots.pop(0)
        else:
            self._cursor += 1

        logger.debug(f"History snapshot {self._cursor + 1}/{len(self._snapshots)}")
        return entry

    def undo(self, stack: LayerStack) -> bool:
        """Step back one snapshot. Returns False at the oldest entry."""
        if not self.can_undo:
            return False
        self._cursor -= 1
        self._snapshots[self._cursor].restore_into(stack)
        return True

    def redo(self, stack: LayerStack) -> bool:
        """Step forward one snapshot. Returns False at the newest entry."""
        if not self.can_redo:
            return False
        self._cursor += 1
        self._snapshots[self._cursor].restore_into(stack)
        return True

    def revert(self, stack: LayerStack) -> bool:
        """Restore the snapshot at the cursor without moving it. Returns False when empty."""
        entry = self.current()
        if entry is None:
            return False
        entry.restore_into(stack)
        return True

    def current(self) -> Optional[HistorySnapshot]:
        if self._cursor < 0:
            return None
        return self._snapshots[self._cursor]

    def clear(self) -> None:
        self._snapshots.clear()
        self._cursor = -1
