from __future__ import annotations

import logging
import math
from typing import Optional

import cv2
import numpy as np
from PIL import Image

from idphotoshop.core.config import EngineConfig
from idphotoshop.core.errors import InvalidCrop, InvalidGeometry
from idphotoshop.core.imaging import ColorLike, bgr_np_to_pil, pil_to_bgr_np, to_bgr
from idphotoshop.core.models import NormalizedRect, PhysicalSize

logger = logging.getLogger(__name__)

# Relative scale_x/scale_y mismatch above which the output is visibly distorted.
SCALE_MISMATCH_TOLERANCE = 0.02


class Rasterizer:
    """Renders a normalized crop of a source image at a physical print size."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def rasterize(
        self,
        src: Image.Image,
        crop: NormalizedRect,
        target: PhysicalSize,
        fill: Optional[ColorLike] = None,
    ) -> Image.Image:
        """
        Return a new image of exactly ``target`` at the configured density.

        The whole source is placed with a scale+translate transform so that the
        crop region covers the output; anything outside the source keeps ``fill``.

        Raises:
          InvalidCrop: the crop (or its source-pixel mapping) has no area.
          InvalidGeometry: the target size is not positive.
        """
        if not crop.is_usable():
            raise InvalidCrop(f"Crop has no usable area: {crop}")
        if not target.is_valid():
            raise InvalidGeometry(f"Target size must be positive: {target}")

        out_w, out_h = target.to_pixels(self.config.px_per_mm)
        if out_w <= 0 or out_h <= 0:
            raise InvalidGeometry(f"Target size {target} is below one pixel")

        sx, sy, sw, sh = crop.to_pixels(src.width, src.height)
        if sw <= 0 or sh <= 0 or not (math.isfinite(sw) and math.isfinite(sh)):
            raise InvalidCrop(f"Crop maps to an empty source region ({sw}x{sh}px)")

        scale_x = out_w / sw
        scale_y = out_h / sh
        if abs(scale_x - scale_y) > SCALE_MISMATCH_TOLERANCE * max(scale_x, scale_y):
            logger.warning(
                "Crop aspect does not match target (scale_x=%.4f, scale_y=%.4f); output will be stretched",
                scale_x, scale_y,
            )

        fill = fill if fill is not None else self.config.fill
        fill_bgr = to_bgr(fill)
        # Pixel-center convention: output pixel i covers source x in
        # [sx + i/scale, sx + (i+1)/scale).
        M = np.array(
            [
                [scale_x, 0.0, 0.5 * scale_x - sx * scale_x - 0.5],
                [0.0, scale_y, 0.5 * scale_y - sy * scale_y - 0.5],
            ],
            dtype=np.float64,
        )
        bgr = pil_to_bgr_np(src, background=fill)
        out = cv2.warpAffine(
            bgr,
            M,
            (out_w, out_h),
            flags=cv2.INTER_LANCZOS4,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=fill_bgr,
        )
        logger.debug(
            "Rasterized %dx%d source crop %s -> %dx%d px",
            src.width, src.height, crop, out_w, out_h,
        )
        return bgr_np_to_pil(out)


def rasterize(
    src: Image.Image,
    crop: NormalizedRect,
    target: PhysicalSize,
    fill: ColorLike = "#ffffff",
    config: Optional[EngineConfig] = None,
) -> Image.Image:
    return Rasterizer(config).rasterize(src, crop, target, fill)
