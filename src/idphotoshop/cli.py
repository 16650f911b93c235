#!/usr/bin/env python3
"""
Generate an ID photo at a physical print size, plus an optional print sheet.

- Detects the face and eyes (MediaPipe Face Mesh)
- Straightens a tilted head and re-detects
- Frames the face per ID-photo conventions (face ~58% of height, 12% headroom)
- Renders at 300 DPI and tiles copies on a 10x15 cm sheet

Usage:
  idphoto --input in.jpg --output photo.jpg
  idphoto -i in.jpg -o photo.jpg --size "3.5x4.5" --sheet sheet.jpg
  idphoto -i in.jpg -o photo.png --width-mm 33 --height-mm 48 --no-tilt
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from typing import Optional

from idphotoshop.app.export import load_image, save_image
from idphotoshop.app.pipeline import IdPhotoPipeline
from idphotoshop.core.config import DEFAULT_GAP_MM, PHOTO_SIZES, EngineConfig, ProcessingParams, find_size
from idphotoshop.core.errors import IdPhotoError
from idphotoshop.core.models import PhysicalSize


def _build_arg_parser() -> argparse.ArgumentParser:
    names = ", ".join(f'"{s.name}"' for s in PHOTO_SIZES)
    p = argparse.ArgumentParser(description="Generate an ID photo and a printable sheet from a portrait.")
    p.add_argument("--input", "-i", required=True, help="Path to input image")
    p.add_argument("--output", "-o", required=True, help="Path to output photo (jpg/png)")
    p.add_argument("--sheet", help="Also write a 10x15 cm print sheet to this path")
    p.add_argument("--size", default=PHOTO_SIZES[0].name, help=f"Catalog size, one of: {names}")
    p.add_argument("--width-mm", type=float, help="Custom photo width in mm (with --height-mm)")
    p.add_argument("--height-mm", type=float, help="Custom photo height in mm (with --width-mm)")
    p.add_argument("--gap-mm", type=float, default=DEFAULT_GAP_MM, help="Gap between copies on the sheet")
    p.add_argument("--background", default="#ffffff", help="Padding color for areas outside the photo")
    p.add_argument("--no-tilt", action="store_true", help="Disable head-tilt correction")
    p.add_argument("--no-detect", action="store_true", help="Skip face detection (center crop)")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return p


def _resolve_size(args: argparse.Namespace) -> PhysicalSize:
    if args.width_mm is not None or args.height_mm is not None:
        if args.width_mm is None or args.height_mm is None:
            raise ValueError("--width-mm and --height-mm must be given together")
        return PhysicalSize(args.width_mm, args.height_mm, f"{args.width_mm:g}x{args.height_mm:g} mm")
    size = find_size(args.size)
    if size is None:
        raise ValueError(f"Unknown size {args.size!r}")
    return size


def _build_detector():
    # MediaPipe is slow to import; only load it when detection is requested.
    from idphotoshop.detection.face_mesh import FaceMeshDetector

    return FaceMeshDetector()


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        size = _resolve_size(args)
        params = replace(
            ProcessingParams(),
            size=size,
            gap_mm=args.gap_mm,
            correct_tilt=not args.no_tilt,
            fill=args.background,
        )
        config = EngineConfig()
        detector = None if args.no_detect else _build_detector()
        pipeline = IdPhotoPipeline(detector=detector, config=config)

        result = pipeline.run(load_image(args.input), params)
        save_image(result.photo, args.output, quality=config.jpeg_quality)
        if args.sheet:
            save_image(result.sheet, args.sheet, quality=config.jpeg_quality)
    except (IdPhotoError, ValueError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    print(f"Saved: {args.output}")
    if args.sheet:
        print(f"Saved: {args.sheet}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
