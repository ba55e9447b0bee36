"""
ColorMap: per-color opaque pixel counts for a surface.

This is the single representation used at every boundary of the core. Keys
are canonical `#RRGGBB` strings kept in first-seen (scan) order, and lookups
accept any case or a missing '#'.
"""

from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from PV_Libs.ColorLib.color_codec import normalize_hex
from PV_Libs.constants import READY_PIXEL_MULTIPLE


class ColorMap(Mapping):
    """Read-only mapping of canonical hex color to pixel count."""

    def __init__(self, counts: Optional[Iterable[Tuple[str, int]]] = None):
        self._counts: Dict[str, int] = {}
        if counts is None:
            return

        items = counts.items() if isinstance(counts, Mapping) else counts
        for color, count in items:
            key = normalize_hex(color)
            self._counts[key] = self._counts.get(key, 0) + int(count)

    def __getitem__(self, color: str) -> int:
        return self._counts[normalize_hex(color)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, color: object) -> bool:
        if not isinstance(color, str):
            return False
        try:
            return normalize_hex(color) in self._counts
        except ValueError:
            return False

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ColorMap):
            return self._counts == other._counts
        if isinstance(other, Mapping):
            return self == ColorMap(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"ColorMap({self._counts!r})"

    def count(self, color: str) -> int:
        """Pixel count for a color, 0 when the color is absent."""
        try:
            return self._counts.get(normalize_hex(color), 0)
        except ValueError:
            return 0

    @property
    def total_pixels(self) -> int:
        return sum(self._counts.values())

    def most_common(self) -> List[Tuple[str, int]]:
        """Colors by descending count; ties keep scan order."""
        return sorted(self._counts.items(), key=lambda item: item[1], reverse=True)

    def is_ready_to_dev(self) -> bool:
        """True when non-empty and every count is a multiple of ten."""
        if not self._counts:
            return False
        return all(count % READY_PIXEL_MULTIPLE == 0 for count in self._counts.values())

    def to_dict(self) -> Dict[str, int]:
        return dict(self._counts)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, int]]) -> "ColorMap":
        return cls(data or {})
