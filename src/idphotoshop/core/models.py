from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:  # avoid importing Pillow at module import time
    from PIL import Image


def _finite(*values: float) -> bool:
    return all(isinstance(v, (int, float)) and math.isfinite(v) for v in values)


@dataclass(frozen=True)
class NormalizedBox:
    """
    Face bounding box in normalized [0, 1] image coordinates.

    Produced by the face detector; only ever read by the engine.
    """
    xmin: float
    ymin: float
    xmax: float
    ymax: float

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    @property
    def center_x(self) -> float:
        return (self.xmin + self.xmax) / 2.0

    def is_valid(self) -> bool:
        """Finite, inside [0, 1] and properly ordered."""
        if not _finite(self.xmin, self.ymin, self.xmax, self.ymax):
            return False
        inside = all(0.0 <= v <= 1.0 for v in (self.xmin, self.ymin, self.xmax, self.ymax))
        return inside and self.xmax > self.xmin and self.ymax > self.ymin


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def is_finite(self) -> bool:
        return _finite(self.x, self.y)


@dataclass(frozen=True)
class EyePair:
    """Eye centers in normalized coordinates, left/right from the viewer's perspective."""
    left: Point
    right: Point

    def is_finite(self) -> bool:
        return self.left.is_finite() and self.right.is_finite()


@dataclass(frozen=True)
class FaceDetection:
    box: NormalizedBox
    eyes: Optional[EyePair] = None


@dataclass(frozen=True)
class NormalizedRect:
    """
    Crop region relative to the source image size.

    May extend outside [0, 1]; the rasterizer pads the uncovered area.
    """
    x: float
    y: float
    width: float
    height: float

    def is_usable(self) -> bool:
        return _finite(self.x, self.y, self.width, self.height) and self.width > 0 and self.height > 0

    def to_pixels(self, src_w: int, src_h: int) -> Tuple[float, float, float, float]:
        """Return (x, y, w, h) in source pixel units."""
        return self.x * src_w, self.y * src_h, self.width * src_w, self.height * src_h


@dataclass(frozen=True)
class PhysicalSize:
    """
    Printed photo (or sheet) size in millimeters.

    name:
        Display label used by the size catalog, e.g. "3x4 cm".
    """
    width_mm: float
    height_mm: float
    name: str = ""

    @property
    def aspect_ratio(self) -> float:
        return self.width_mm / self.height_mm

    def is_valid(self) -> bool:
        return _finite(self.width_mm, self.height_mm) and self.width_mm > 0 and self.height_mm > 0

    def to_pixels(self, px_per_mm: float) -> Tuple[int, int]:
        return mm_to_px(self.width_mm, px_per_mm), mm_to_px(self.height_mm, px_per_mm)


def mm_to_px(mm: float, px_per_mm: float) -> int:
    """Millimeters to whole pixels, rounding halves up."""
    return int(math.floor(mm * px_per_mm + 0.5))


@dataclass(frozen=True)
class SheetLayout:
    """Grid of photo copies on a print sheet, all values in pixels."""
    cols: int
    rows: int
    photo_px: Tuple[int, int]
    gap_px: int
    sheet_px: Tuple[int, int]
    origin_px: Tuple[int, int]

    @property
    def count(self) -> int:
        return self.cols * self.rows

    @property
    def grid_px(self) -> Tuple[int, int]:
        if self.count == 0:
            return 0, 0
        pw, ph = self.photo_px
        return (
            self.cols * pw + (self.cols - 1) * self.gap_px,
            self.rows * ph + (self.rows - 1) * self.gap_px,
        )

    def positions(self) -> Iterator[Tuple[int, int]]:
        """Top-left corner of each copy, row by row."""
        pw, ph = self.photo_px
        ox, oy = self.origin_px
        for r in range(self.rows):
            for c in range(self.cols):
                yield ox + c * (pw + self.gap_px), oy + r * (ph + self.gap_px)


@dataclass(frozen=True)
class TiltResult:
    """
    Outcome of tilt correction.

    When ``rotated`` is False, ``image`` is the very object that was passed in.
    """
    image: "Image.Image"
    angle_deg: float
    rotated: bool
