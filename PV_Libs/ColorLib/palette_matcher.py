"""
Palette matching against a reference (master) palette.

An image color matches when the reference holds it exactly, or holds any color
closer than 20 in Euclidean RGB distance. The score is the rounded percentage
of matching image colors.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from PV_Libs.ColorLib.color_codec import color_distance, hex_to_rgb, normalize_hex
from PV_Libs.constants import (
    EXACT_MATCH_SCORE,
    MATCH_DIFFERENT,
    MATCH_EXACT,
    MATCH_SIMILAR,
    SIMILAR_COLOR_DISTANCE,
    SIMILAR_MATCH_MIN_SCORE,
)


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def score_palette(image_palette: Sequence[str], reference_palette: Sequence[str]) -> int:
    """
    Score how well an image palette fits a reference palette.

    Args:
        image_palette: Colors of the image, any hex case
        reference_palette: Reference colors, any hex case

    Returns:
        Percentage in [0, 100]; 0 when either palette is empty
    """
    if not reference_palette or not image_palette:
        return 0

    reference = [normalize_hex(color) for color in reference_palette]
    reference_set = set(reference)
    reference_rgb = [hex_to_rgb(color) for color in reference]

    matches = 0
    for color in image_palette:
        canonical = normalize_hex(color)
        if canonical in reference_set:
            matches += 1
            continue

        rgb = hex_to_rgb(canonical)
        if any(color_distance(rgb, other) < SIMILAR_COLOR_DISTANCE for other in reference_rgb):
            matches += 1

    return _round_half_up(100.0 * matches / len(image_palette))


def classify_score(score: int) -> str:
    """Map a score to 'exact' (100), 'similar' (70-99) or 'different' (<70)."""
    if score >= EXACT_MATCH_SCORE:
        return MATCH_EXACT
    if score >= SIMILAR_MATCH_MIN_SCORE:
        return MATCH_SIMILAR
    return MATCH_DIFFERENT


@dataclass(frozen=True)
class PaletteMatch:
    score: int
    level: str


@dataclass
class ReferencePalette:
    """Ordered reference colors with optional display names.

    Attributes:
        colors: Canonical hex colors in the order supplied
        names: Canonical hex color -> display name
    """
    colors: List[str] = field(default_factory=list)
    names: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Canonicalize colors and drop duplicates, keeping the first occurrence."""
        unique: List[str] = []
        for color in self.colors:
            canonical = normalize_hex(color)
            if canonical not in unique:
                unique.append(canonical)
        self.colors = unique
        self.names = {normalize_hex(color): str(name) for color, name in self.names.items()}

    @classmethod
    def from_named(cls, entries: Iterable[Tuple[str, str]]) -> "ReferencePalette":
        """Build from (name, hex) pairs."""
        colors: List[str] = []
        names: Dict[str, str] = {}
        for name, color in entries:
            colors.append(color)
            names[normalize_hex(color)] = name
        return cls(colors=colors, names=names)

    def name_for(self, color: str) -> str:
        canonical = normalize_hex(color)
        return self.names.get(canonical, canonical)

    def __len__(self) -> int:
        return len(self.colors)


class PaletteMatcher:
    """Scores image palettes against one reference palette."""

    def __init__(self, reference: Optional[ReferencePalette] = None):
        self.reference = reference if reference is not None else ReferencePalette()

    def score(self, image_palette: Sequence[str]) -> int:
        return score_palette(image_palette, self.reference.colors)

    def match(self, image_palette: Sequence[str]) -> PaletteMatch:
        score = self.score(image_palette)
        return PaletteMatch(score=score, level=classify_score(score))
