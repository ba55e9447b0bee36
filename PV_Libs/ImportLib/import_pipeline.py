"""
Image import pipeline for Pixel Voxel.

Turns a decoded raster into a validated ImageRecord:

1. Detect whether the raster is an integer upscale of a 16-32px asset and,
   if so, downscale it with hard edges by sampling each block's center pixel.
2. Reject rasters whose final size is outside 16-32px.
3. Analyze colors, quantizing when the raster was downscaled.
4. Reject palettes outside 2-15 colors.

Bulk import runs files one at a time. A rejected or undecodable file is
logged and recorded in the report; the batch always runs to the end.

Classes:
    ImportOptions: Limits and thresholds for one import run
    BulkImportReport: Outcome of importing several files

Functions:
    detect_scale: Largest candidate scale that yields a valid asset size
    downscale_hard_edge: Center-sample every scale x scale block
    clean_scaled_name: Strip `_xN` suffixes from a file name
    import_image: Import one decoded raster
    import_files: Import every PNG from a list of files and directories
"""

import logging
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import numpy as np

from PV_Libs.ColorLib.color_analyzer import analyze_image, as_rgba_array
from PV_Libs.ImageEditingLib.image_editing_ops import encode_png, load_surface
from PV_Libs.ImageEditingLib.image_models import ImageRecord
from PV_Libs.ImageEditingLib.raster_surface import RasterSurface
from PV_Libs.constants import (
    DEFAULT_QUANTIZE_THRESHOLD,
    DOWNSCALE_CANDIDATES,
    MAX_DIMENSION,
    MAX_PALETTE_SIZE,
    MIN_DIMENSION,
    MIN_PALETTE_SIZE,
    SCALE_SUFFIX_PATTERN,
    SUPPORTED_IMPORT_EXTENSIONS,
)
from PV_Libs.errors import ColorCountOutOfRange, DecodeError, SizeOutOfRange, ValidationError

logger = logging.getLogger(__name__)

_SCALE_SUFFIX = re.compile(SCALE_SUFFIX_PATTERN, re.IGNORECASE)


@dataclass
class ImportOptions:
    """Configuration for the import pipeline.

    Attributes:
        scale_candidates: Upscale factors to try, in order of preference
        min_dimension: Smallest accepted width/height
        max_dimension: Largest accepted width/height
        min_colors: Smallest accepted palette
        max_colors: Largest accepted palette
        quantize_threshold: Merge distance used when quantizing
        force_quantize: Quantize even when no downscale happened
    """
    scale_candidates: Tuple[int, ...] = DOWNSCALE_CANDIDATES
    min_dimension: int = MIN_DIMENSION
    max_dimension: int = MAX_DIMENSION
    min_colors: int = MIN_PALETTE_SIZE
    max_colors: int = MAX_PALETTE_SIZE
    quantize_threshold: float = DEFAULT_QUANTIZE_THRESHOLD
    force_quantize: bool = False

    def __post_init__(self):
        self.scale_candidates = tuple(int(scale) for scale in self.scale_candidates)
        if any(scale < 2 for scale in self.scale_candidates):
            raise ValueError(f"Scale candidates must be >= 2, got {self.scale_candidates}")
        if self.min_dimension > self.max_dimension:
            raise ValueError("min_dimension must not exceed max_dimension")
        if self.min_colors > self.max_colors:
            raise ValueError("min_colors must not exceed max_colors")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["scale_candidates"] = list(self.scale_candidates)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImportOptions":
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)

    def size_in_range(self, width: int, height: int) -> bool:
        return (
            self.min_dimension <= width <= self.max_dimension
            and self.min_dimension <= height <= self.max_dimension
        )


@dataclass
class BulkImportReport:
    imported: List[ImageRecord] = field(default_factory=list)
    rejected: List[Tuple[Path, ValidationError]] = field(default_factory=list)
    failed: List[Tuple[Path, DecodeError]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.imported) + len(self.rejected) + len(self.failed)

    def summary(self) -> str:
        return f"{len(self.imported)} imported, {len(self.rejected)} rejected, {len(self.failed)} failed"


def detect_scale(width: int, height: int, options: Optional[ImportOptions] = None) -> int:
    """
    Find the upscale factor of a raster.

    Returns:
        The first candidate that divides both sides evenly into an accepted
        asset size, or 1 when none does
    """
    options = options or ImportOptions()
    for scale in options.scale_candidates:
        if width % scale or height % scale:
            continue
        if options.size_in_range(width // scale, height // scale):
            return scale
    return 1


def downscale_hard_edge(source: Any, scale: int) -> RasterSurface:
    """
    Reduce a raster by `scale`, keeping the center pixel of each block.

    Output pixel (x, y) is source pixel (floor(x*scale + scale/2),
    floor(y*scale + scale/2)). No averaging is done.
    """
    array = as_rgba_array(source)
    height, width = array.shape[:2]
    out_width, out_height = width // scale, height // scale

    offset = scale // 2
    rows = np.arange(out_height) * scale + offset
    cols = np.arange(out_width) * scale + offset
    return RasterSurface.from_array(array[np.ix_(rows, cols)])


def clean_scaled_name(name: str) -> str:
    return _SCALE_SUFFIX.sub("", name)


def import_image(
    name: str,
    source: Any,
    options: Optional[ImportOptions] = None,
    folder: Optional[str] = None,
) -> ImageRecord:
    """
    Import one decoded raster.

    Args:
        name: File name of the raster
        source: RasterSurface, PIL Image or RGBA ndarray
        options: Import limits (defaults when None)
        folder: Folder to file the record under

    Returns:
        The validated ImageRecord

    Raises:
        SizeOutOfRange: If the size after scale detection is outside the limits
        ColorCountOutOfRange: If the resulting palette is outside the limits
    """
    options = options or ImportOptions()
    surface = source if isinstance(source, RasterSurface) else RasterSurface.from_array(as_rgba_array(source))

    scale = detect_scale(surface.width, surface.height, options)
    if scale > 1:
        surface = downscale_hard_edge(surface, scale)
        logger.debug(f"Detected x{scale} scaled image, hard-edge downscaled to {surface.width}x{surface.height}")

    if not options.size_in_range(surface.width, surface.height):
        raise SizeOutOfRange(surface.width, surface.height, options.min_dimension, options.max_dimension)

    analysis = analyze_image(
        surface,
        quantize=scale > 1 or options.force_quantize,
        threshold=options.quantize_threshold,
    )
    count = len(analysis.colors)
    if not options.min_colors <= count <= options.max_colors:
        raise ColorCountOutOfRange(count, analysis.original_color_count, options.min_colors, options.max_colors)

    record = ImageRecord(
        name=clean_scaled_name(name) if scale > 1 else name,
        width=analysis.width,
        height=analysis.height,
        png_bytes=encode_png(surface),
        palette=analysis.colors,
        color_map=analysis.color_map,
        original_color_count=analysis.original_color_count,
        scale=scale,
        folder=folder,
    )
    logger.info(f"Imported {record.name}: {record.width}x{record.height}, {record.color_count} colors")
    return record


def _collect_files(paths: Iterable[Union[str, Path]]) -> List[Path]:
    files: List[Path] = []
    for path in paths:
        path = Path(path)
        if path.is_dir():
            files.extend(sorted(p for p in path.iterdir() if p.is_file()))
        else:
            files.append(path)
    return files


def import_files(
    paths: Iterable[Union[str, Path]],
    options: Optional[ImportOptions] = None,
    folder: Optional[str] = None,
) -> BulkImportReport:
    """
    Import PNG files one after another.

    Directories are expanded to their files (not recursively). Files
    without a `.png` extension are skipped silently.

    Returns:
        BulkImportReport listing imported records, rejected files with their
        ValidationError and undecodable files with their DecodeError
    """
    options = options or ImportOptions()
    report = BulkImportReport()

    for path in _collect_files(paths):
        if path.suffix.lower() not in SUPPORTED_IMPORT_EXTENSIONS:
            continue

        try:
            surface = load_surface(path)
            record = import_image(path.name, surface, options, folder)
        except DecodeError as e:
            logger.warning(f"Skipping {path.name}: {e}")
            report.failed.append((path, e))
            continue
        except ValidationError as e:
            logger.warning(f"Rejected {path.name}: {e}")
            report.rejected.append((path, e))
            continue

        report.imported.append(record)

    logger.info(f"Bulk import finished: {report.summary()}")
    return report
