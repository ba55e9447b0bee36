"""
Tests for the layer stack and snapshot history.

Tests cover:
- Layer add/delete/select and visibility
- Composition order
- Cropping all layers
- Snapshot capacity, redo truncation and deep-copy isolation
"""

import unittest

import pytest

from PV_Libs.ImageEditingLib.history_manager import HistoryManager
from PV_Libs.ImageEditingLib.layer_stack import LayerStack
from PV_Libs.ImageEditingLib.raster_surface import RasterSurface, Rect

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


class TestLayerStack(unittest.TestCase):
    """Test LayerStack bookkeeping."""

    def setUp(self):
        self.stack = LayerStack(4, 4)

    def test_starts_with_one_layer(self):
        """Test a new stack holds one active transparent layer."""
        self.assertEqual(len(self.stack), 1)
        self.assertEqual(self.stack.current_index, 0)
        self.assertEqual(self.stack.active_layer.name, "Layer 1")
        self.assertFalse(self.stack.active_surface.pixels.any())

    def test_add_layer_becomes_active(self):
        """Test added layers go on top and become active."""
        layer = self.stack.add_layer()

        self.assertEqual(len(self.stack), 2)
        self.assertIs(self.stack.active_layer, layer)
        self.assertEqual(layer.name, "Layer 2")
        self.assertEqual(layer.surface.size, (4, 4))
        self.assertNotEqual(layer.id, self.stack.layers[0].id)

    def test_delete_last_layer_is_noop(self):
        """Test the only layer cannot be deleted."""
        self.assertFalse(self.stack.delete_layer())
        self.assertEqual(len(self.stack), 1)

    def test_delete_clamps_index(self):
        """Test deleting the top layer moves the index down."""
        self.stack.add_layer()
        self.stack.add_layer()

        self.assertTrue(self.stack.delete_layer())
        self.assertEqual(self.stack.current_index, 1)

    def test_select_layer_validates_index(self):
        """Test selecting a missing layer raises IndexError."""
        with self.assertRaises(IndexError):
            self.stack.select_layer(3)

    def test_visibility_keeps_pixels(self):
        """Test hiding a layer keeps its pixels but removes it from compose."""
        self.stack.active_surface.set(0, 0, RED)

        self.assertFalse(self.stack.toggle_visibility(0))
        self.assertEqual(self.stack.compose().get(0, 0), (0, 0, 0, 0))
        self.assertEqual(self.stack.active_surface.get(0, 0), RED)

        self.stack.set_visibility(0, True)
        self.assertEqual(self.stack.compose().get(0, 0), RED)

    def test_compose_order(self):
        """Test upper opaque pixels win and transparent ones show through."""
        self.stack.active_surface.fill_rect(0, 0, 4, 4, RED)
        self.stack.add_layer().surface.set(1, 1, BLUE)

        composed = self.stack.compose()

        self.assertEqual(composed.get(1, 1), BLUE)
        self.assertEqual(composed.get(2, 2), RED)
        self.assertEqual(composed.to_color_map().total_pixels, 16)

    def test_translucent_upper_pixel_shows_lower_layer(self):
        """Test an upper pixel with alpha below 128 lets the layer below show."""
        self.stack.active_surface.fill_rect(0, 0, 4, 4, RED)
        self.stack.add_layer().surface.set(1, 1, (0, 255, 0, 50))

        composed = self.stack.compose()

        self.assertEqual(composed.get(1, 1), RED)
        self.assertEqual(composed.to_color_map(), {"#FF0000": 16})

    def test_crop_resizes_every_layer(self):
        """Test crop applies the same rectangle to all layers."""
        self.stack.active_surface.set(2, 2, RED)
        self.stack.add_layer().surface.set(3, 3, BLUE)

        self.stack.crop(Rect(2, 2, 2, 2))

        self.assertEqual((self.stack.width, self.stack.height), (2, 2))
        self.assertEqual(self.stack.layers[0].surface.get(0, 0), RED)
        self.assertEqual(self.stack.layers[1].surface.get(1, 1), BLUE)
        self.assertTrue(all(layer.surface.size == (2, 2) for layer in self.stack.layers))

    def test_from_surface_copies_base(self):
        """Test the base surface is copied into the first layer."""
        base = RasterSurface(3, 2)
        stack = LayerStack.from_surface(base)
        stack.active_surface.set(0, 0, RED)

        self.assertEqual(base.get(0, 0), (0, 0, 0, 0))
        self.assertEqual((stack.width, stack.height), (3, 2))


class TestHistoryManager:
    """Tests for HistoryManager."""

    def test_undo_redo_inverse(self):
        """Should undo N commits back to the start and redo them all."""
        stack = LayerStack(4, 4)
        history = HistoryManager()
        history.snapshot(stack)
        initial = stack.compose()

        states = []
        for i in range(5):
            stack.active_surface.set(i % 4, i // 4, RED)
            history.snapshot(stack)
            states.append(stack.compose())

        for _ in range(5):
            assert history.undo(stack)
        assert stack.compose() == initial
        assert not history.undo(stack)

        for _ in range(5):
            assert history.redo(stack)
        assert stack.compose() == states[-1]
        assert not history.redo(stack)

    def test_snapshot_truncates_redo_branch(self):
        """Should drop redo snapshots when a new one is pushed."""
        stack = LayerStack(2, 2)
        history = HistoryManager()
        history.snapshot(stack)
        stack.active_surface.set(0, 0, RED)
        history.snapshot(stack)

        history.undo(stack)
        stack.active_surface.set(1, 1, BLUE)
        history.snapshot(stack)

        assert len(history) == 2
        assert not history.can_redo

    def test_capacity_drops_oldest(self):
        """Should keep at most `capacity` snapshots."""
        stack = LayerStack(2, 2)
        history = HistoryManager(capacity=3)
        for i in range(5):
            stack.active_surface.set(0, 0, (i, 0, 0, 255))
            history.snapshot(stack)

        assert len(history) == 3
        assert history.cursor == 2

        while history.undo(stack):
            pass
        assert stack.active_surface.get(0, 0) == (2, 0, 0, 255)

    def test_default_capacity_is_fifty(self):
        """Should cap history at 50 entries by default."""
        stack = LayerStack(2, 2)
        history = HistoryManager()
        for _ in range(60):
            history.snapshot(stack)
        assert len(history) == 50

    def test_snapshots_are_isolated(self):
        """Should never let live edits reach stored snapshots."""
        stack = LayerStack(2, 2)
        history = HistoryManager()
        history.snapshot(stack)
        stack.active_surface.set(0, 0, RED)
        history.snapshot(stack)

        history.undo(stack)
        stack.active_surface.set(1, 1, BLUE)
        history.redo(stack)

        assert stack.active_surface.get(1, 1) == (0, 0, 0, 0)
        history.undo(stack)
        assert stack.active_surface.get(1, 1) == (0, 0, 0, 0)

    def test_restore_layers_and_index(self):
        """Should restore layer count, active index and canvas size."""
        stack = LayerStack(4, 4)
        history = HistoryManager()
        history.snapshot(stack)
        stack.add_layer()
        stack.crop(Rect(0, 0, 2, 2))
        history.snapshot(stack)

        history.undo(stack)

        assert len(stack) == 1
        assert stack.current_index == 0
        assert (stack.width, stack.height) == (4, 4)

    def test_revert_keeps_cursor(self):
        """Should restore the current snapshot without moving the cursor."""
        stack = LayerStack(2, 2)
        history = HistoryManager()
        history.snapshot(stack)
        stack.active_surface.set(0, 0, RED)
        history.snapshot(stack)
        stack.active_surface.set(1, 1, BLUE)

        assert history.revert(stack)

        assert history.cursor == 1
        assert stack.active_surface.get(0, 0) == RED
        assert stack.active_surface.get(1, 1) == (0, 0, 0, 0)

    def test_clear(self):
        """Should drop every snapshot."""
        stack = LayerStack(2, 2)
        history = HistoryManager()
        history.snapshot(stack)
        history.snapshot(stack)

        history.clear()

        assert len(history) == 0
        assert history.cursor == -1
        assert not history.undo(stack)

    def test_empty_history(self):
        """Should report nothing to undo or redo when empty."""
        stack = LayerStack(2, 2)
        history = HistoryManager()
        assert history.current() is None
        assert not history.revert(stack)
        assert not history.undo(stack)
        assert not history.redo(stack)

    def test_invalid_capacity(self):
        """Should reject a capacity below one."""
        with pytest.raises(ValueError):
            HistoryManager(capacity=0)
