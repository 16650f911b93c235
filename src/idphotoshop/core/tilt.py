from __future__ import annotations

import logging
import math

import cv2
from PIL import Image

from idphotoshop.core.imaging import ColorLike, bgr_np_to_pil, pil_to_bgr_np, to_bgr
from idphotoshop.core.models import EyePair, TiltResult

logger = logging.getLogger(__name__)

# ~1 degree
DEFAULT_THRESHOLD_RAD = 0.017


def tilt_angle(eyes: EyePair, width: int, height: int) -> float:
    """Angle (radians) of the eye line in pixel space; 0 for coincident or non-finite eyes."""
    if not eyes.is_finite():
        return 0.0
    dx = (eyes.right.x - eyes.left.x) * width
    dy = (eyes.right.y - eyes.left.y) * height
    return math.atan2(dy, dx)


def correct_tilt(
    src: Image.Image,
    eyes: EyePair,
    fill: ColorLike = "#ffffff",
    threshold_rad: float = DEFAULT_THRESHOLD_RAD,
) -> TiltResult:
    """
    Rotate ``src`` so the line between the eyes becomes horizontal.

    The canvas keeps the source dimensions; rotated corners that fall outside are
    lost and uncovered areas take ``fill``. Face boxes detected on ``src`` are no
    longer valid for the rotated image, so callers must detect again.
    """
    angle = tilt_angle(eyes, src.width, src.height)
    angle_deg = math.degrees(angle)
    if abs(angle) < threshold_rad:
        logger.debug("Tilt %.2f deg below threshold; leaving image unchanged", angle_deg)
        return TiltResult(image=src, angle_deg=angle_deg, rotated=False)

    bgr = pil_to_bgr_np(src, background=fill)
    h, w = bgr.shape[:2]
    # OpenCV treats positive angles as counter-clockwise on screen, which undoes
    # a positive (clockwise, y-down) eye-line tilt.
    M = cv2.getRotationMatrix2D(((w - 1) / 2.0, (h - 1) / 2.0), angle_deg, 1.0)
    rotated = cv2.warpAffine(
        bgr,
        M,
        (w, h),
        flags=cv2.INTER_CUBIC,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=to_bgr(fill),
    )
    logger.info("Corrected head tilt of %.2f deg", angle_deg)
    return TiltResult(image=bgr_np_to_pil(rotated), angle_deg=angle_deg, rotated=True)
