"""Manual adjustments of a planned crop box, in normalized source coordinates."""

from __future__ import annotations

from typing import Literal

from idphotoshop.core.errors import InvalidGeometry
from idphotoshop.core.models import NormalizedRect

Corner = Literal["nw", "ne", "sw", "se"]

MIN_CROP_WIDTH = 0.05
# Largest crop, as a multiple of the source's longer side.
MAX_CROP_FACTOR = 2.0


def _clip(v: float, lo: float, hi: float) -> float:
    return max(lo, min(v, hi))


def move_crop(rect: NormalizedRect, dx: float, dy: float, min_overlap: float = 0.02) -> NormalizedRect:
    """
    Shift ``rect`` by (dx, dy), keeping at least ``min_overlap`` of it on the source.

    The box may hang off the image (the rasterizer pads it) but can't be dragged away.
    """
    x = _clip(rect.x + dx, -rect.width + min_overlap, 1.0 - min_overlap)
    y = _clip(rect.y + dy, -rect.height + min_overlap, 1.0 - min_overlap)
    return NormalizedRect(x=x, y=y, width=rect.width, height=rect.height)


def resize_crop(
    rect: NormalizedRect,
    corner: Corner,
    delta_w: float,
    src_w: int,
    src_h: int,
    target_ar: float,
) -> NormalizedRect:
    """
    Resize ``rect`` by dragging ``corner`` horizontally by ``delta_w``.

    The opposite corner stays put and the pixel aspect ratio stays ``target_ar``.
    """
    if corner not in ("nw", "ne", "sw", "se"):
        raise ValueError(f"Unknown corner: {corner!r}")
    if src_w <= 0 or src_h <= 0 or not target_ar > 0:
        raise InvalidGeometry(f"Cannot resize against a {src_w}x{src_h} source at ratio {target_ar}")

    # Dragging a west corner to the left grows the box.
    grow = -delta_w if corner in ("nw", "sw") else delta_w

    max_w_px = max(src_w, src_h) * MAX_CROP_FACTOR
    w_px = _clip((rect.width + grow) * src_w, MIN_CROP_WIDTH * src_w, max_w_px)
    h_px = w_px / target_ar
    w = w_px / src_w
    h = h_px / src_h

    x, y = rect.x, rect.y
    if corner in ("nw", "sw"):
        x = rect.x + rect.width - w
    if corner in ("nw", "ne"):
        y = rect.y + rect.height - h
    return NormalizedRect(x=x, y=y, width=w, height=h)
