from __future__ import annotations

import logging
import math
from typing import Optional

from idphotoshop.core.models import NormalizedBox, NormalizedRect

logger = logging.getLogger(__name__)

# Detections smaller than this (either axis, normalized) are treated as noise.
MIN_FACE_FRACTION = 0.05
# Face height as a fraction of crop height.
FACE_HEIGHT_RATIO = 0.58
# Top of the face box sits this far below the crop's top edge (fraction of crop height).
HEADROOM_RATIO = 0.12
# Center-fit fallback fills this much of the constraining source axis.
CENTER_FIT_FRACTION = 0.8
# Width of the last-resort rectangle.
MIN_CROP_WIDTH = 0.1


def _is_positive(*values: float) -> bool:
    return all(math.isfinite(v) and v > 0 for v in values)


def _image_aspect(src_w: float, src_h: float) -> float:
    try:
        aspect = float(src_w) / float(src_h)
    except (ZeroDivisionError, TypeError, ValueError):
        return math.nan
    return aspect if _is_positive(aspect) else math.nan


def _centered(w: float, h: float) -> NormalizedRect:
    return NormalizedRect(x=0.5 - w / 2.0, y=0.5 - h / 2.0, width=w, height=h)


def _face_crop(face: NormalizedBox, img_aspect: float, target_ar: float) -> Optional[NormalizedRect]:
    if not face.is_valid():
        logger.debug("Ignoring malformed face box %s", face)
        return None
    if face.width <= MIN_FACE_FRACTION or face.height <= MIN_FACE_FRACTION:
        logger.debug("Face box %.3fx%.3f below noise floor", face.width, face.height)
        return None

    h = face.height / FACE_HEIGHT_RATIO
    # Normalized widths are relative to src width, heights to src height.
    w = h * (1.0 / img_aspect) * target_ar
    x = face.center_x - w / 2.0
    y = face.ymin - h * HEADROOM_RATIO

    if not (_is_positive(w, h) and math.isfinite(x) and math.isfinite(y)):
        return None
    return NormalizedRect(x=x, y=y, width=w, height=h)


def _center_fit(img_aspect: float, target_ar: float) -> Optional[NormalizedRect]:
    if img_aspect > target_ar:
        # Source is wider than the target: fit height.
        h = CENTER_FIT_FRACTION
        w = h * (1.0 / img_aspect) * target_ar
    else:
        w = CENTER_FIT_FRACTION
        h = w * img_aspect / target_ar
    if not _is_positive(w, h):
        return None
    return _centered(w, h)


def _clamp(rect: NormalizedRect) -> NormalizedRect:
    """Uniformly shrink a crop wider or taller than the source, re-centering it."""
    x, y, w, h = rect.x, rect.y, rect.width, rect.height
    if w > 1:
        scale = 1.0 / w
        w *= scale
        h *= scale
        x, y = 0.5 - w / 2.0, 0.5 - h / 2.0
    if h > 1:
        scale = 1.0 / h
        w *= scale
        h *= scale
        x, y = 0.5 - w / 2.0, 0.5 - h / 2.0
    return NormalizedRect(x=x, y=y, width=w, height=h)


def _minimal(img_aspect: float, target_ar: float) -> NormalizedRect:
    w = h = MIN_CROP_WIDTH
    if _is_positive(img_aspect, target_ar):
        keep_aspect = w * img_aspect / target_ar
        if _is_positive(keep_aspect) and keep_aspect <= 1:
            h = keep_aspect
    return _centered(w, h)


def plan_crop(
    face: Optional[NormalizedBox],
    src_w: float,
    src_h: float,
    target_ar: float,
) -> NormalizedRect:
    """
    Compute an ID-photo crop (normalized to the source) for a target width/height ratio.

    With a usable face box the face fills 58% of the crop height and its top edge
    sits 12% below the crop's top. Without one, a centered crop covering 80% of
    the constraining axis is used. Degenerate inputs always resolve to a finite,
    positive rectangle; this function never raises.
    """
    img_aspect = _image_aspect(src_w, src_h)
    try:
        target_ar = float(target_ar)
    except (TypeError, ValueError):
        target_ar = math.nan

    rect: Optional[NormalizedRect] = None
    if _is_positive(img_aspect, target_ar):
        if face is not None:
            rect = _face_crop(face, img_aspect, target_ar)
        if rect is None:
            rect = _center_fit(img_aspect, target_ar)
        if rect is not None:
            rect = _clamp(rect)

    if rect is None or not rect.is_usable():
        logger.warning(
            "Crop planning degenerate (src=%sx%s, target_ar=%s); using minimal centered crop",
            src_w, src_h, target_ar,
        )
        rect = _minimal(img_aspect, target_ar)

    logger.debug("Planned crop %s", rect)
    return rect
