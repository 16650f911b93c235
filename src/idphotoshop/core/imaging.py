from __future__ import annotations

from typing import Tuple, Union

import cv2
import numpy as np
from PIL import Image, ImageColor

ColorLike = Union[str, Tuple[int, int, int]]


def to_rgb(color: ColorLike) -> Tuple[int, int, int]:
    """Parse "#rrggbb", a CSS color name or an (r, g, b) tuple."""
    if isinstance(color, str):
        rgb = ImageColor.getrgb(color)
    else:
        rgb = tuple(color)
    return int(rgb[0]), int(rgb[1]), int(rgb[2])


def to_bgr(color: ColorLike) -> Tuple[int, int, int]:
    r, g, b = to_rgb(color)
    return b, g, r


def _has_alpha(img: Image.Image) -> bool:
    return img.mode in ("RGBA", "LA", "PA", "RGBa", "La") or (
        img.mode == "P" and "transparency" in img.info
    )


def ensure_rgb(img: Image.Image, background: ColorLike = "#ffffff") -> Image.Image:
    """Convert to RGB; transparent pixels are composited over ``background``."""
    if img.mode == "RGB":
        return img
    if _has_alpha(img):
        base = Image.new("RGBA", img.size, to_rgb(background) + (255,))
        return Image.alpha_composite(base, img.convert("RGBA")).convert("RGB")
    return img.convert("RGB")


def pil_to_bgr_np(img: Image.Image, background: ColorLike = "#ffffff") -> np.ndarray:
    """PIL image -> OpenCV BGR numpy array, flattening alpha onto ``background``."""
    arr = np.array(ensure_rgb(img, background))  # RGB
    return cv2.cvtColor(arr, cv2.COLOR_RGB2BGR)


def bgr_np_to_pil(img_bgr: np.ndarray) -> Image.Image:
    """OpenCV BGR numpy array -> PIL RGB."""
    rgb = cv2.cvtColor(img_bgr, cv2.COLOR_BGR2RGB)
    return Image.fromarray(rgb)
