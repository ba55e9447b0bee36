"""Command-line interface for bulk pixel-art import."""

import argparse
import logging
import sys
from typing import List, Optional

from PV_Libs.ImportLib.import_pipeline import ImportOptions, import_files


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixel-voxel-import",
        description="Validate and import 16-32px pixel-art PNGs, downscaling upscaled exports",
    )
    parser.add_argument("paths", nargs="+", help="PNG files or directories of PNG files")
    parser.add_argument("--folder", help="Folder name to file imported records under")
    parser.add_argument("--force-quantize", action="store_true", help="Quantize palettes even when no downscale happened")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print the summary line")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    report = import_files(args.paths, ImportOptions(force_quantize=args.force_quantize), folder=args.folder)

    if not args.quiet:
        for record in report.imported:
            scale = f" (from x{record.scale})" if record.scale > 1 else ""
            print(f"OK       {record.name}: {record.width}x{record.height}, {record.color_count} colors{scale}")
        for path, error in report.rejected:
            print(f"REJECTED {path.name}: {error}")
        for path, error in report.failed:
            print(f"FAILED   {path.name}: {error}")
    print(report.summary())

    return 0 if report.imported or report.total == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
