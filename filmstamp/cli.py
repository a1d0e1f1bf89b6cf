"""Command-line entry points for filmstamp.

Usage:
    filmstamp photo.jpg -o stamped.jpg
    filmstamp-inspect photo.jpg
"""

from __future__ import annotations

import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from filmstamp.config import PipelineConfig, get_settings
from filmstamp.errors import FilmstampError
from filmstamp.pipeline.stamp import StampPipeline


def _version() -> str:
    try:
        return version("filmstamp")
    except PackageNotFoundError:
        return "unknown"


def _build_parser(annotate: bool) -> argparse.ArgumentParser:
    if annotate:
        parser = argparse.ArgumentParser(
            prog="filmstamp",
            description="Add film-like timestamps to photos using Exif data.",
        )
    else:
        parser = argparse.ArgumentParser(
            prog="filmstamp-inspect",
            description="Print the Exif capture timestamp of a photo as it would be stamped.",
        )
    parser.add_argument("input", type=Path, help="Path to the source image.")
    if annotate:
        parser.add_argument("-o", "--output", type=Path, required=True, help="Output file path.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    return parser


def _configure_logging(verbose: bool) -> int:
    settings = get_settings()
    level = "DEBUG" if verbose else settings.log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    return settings.jpeg_quality


def _run(argv: Optional[Sequence[str]], annotate: bool) -> int:
    args = _build_parser(annotate).parse_args(argv)

    try:
        quality = _configure_logging(args.verbose)
        config = PipelineConfig(
            input_path=args.input,
            output_path=args.output if annotate else None,
            annotate=annotate,
            quality=quality,
        )
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    if annotate:
        print(f"Processing file: {config.input_path}")

    try:
        result = StampPipeline(config).run()
    except FilmstampError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if annotate:
        print(f"Image saved to: {result.output_path}")
    else:
        print(result.text)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Stamp the capture time onto an image and save it."""
    return _run(argv, annotate=True)


def inspect_main(argv: Optional[Sequence[str]] = None) -> int:
    """Print the formatted capture time without writing an image."""
    return _run(argv, annotate=False)


if __name__ == "__main__":
    sys.exit(main())
