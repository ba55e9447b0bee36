"""
Compatibility wrapper to import Pillow (which provides the `PIL` namespace).

Every module that needs Pillow imports `Image` from here, so the dependency
is loaded and checked in one place. `NEAREST` is resolved once because Pillow
moved its resampling filters into `Image.Resampling` in 9.1.
"""
from importlib import import_module
from types import ModuleType


def _import(name: str) -> ModuleType:
    try:
        return import_module(name)
    except ImportError as exc:
        raise ImportError("pillow (PIL) is required: install with 'pip install Pillow'") from exc


Image = _import("PIL.Image")

_resampling = getattr(Image, "Resampling", Image)
NEAREST = _resampling.NEAREST
