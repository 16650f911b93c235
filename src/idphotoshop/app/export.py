from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from PIL import Image, ImageOps, UnidentifiedImageError

from idphotoshop.core.errors import BufferLoadFailure

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_image(path: PathLike) -> Image.Image:
    """Load an image, apply EXIF orientation, return RGB PIL Image."""
    try:
        img = Image.open(path)
        img = ImageOps.exif_transpose(img)
        if img.mode != "RGB":
            img = img.convert("RGB")
    except (OSError, UnidentifiedImageError) as e:
        raise BufferLoadFailure(f"Could not read image {path}: {e}") from e
    logger.debug("Loaded %s (%dx%d)", path, img.width, img.height)
    return img


def save_image(img: Image.Image, path: PathLike, quality: int = 95, dpi: int = 300) -> None:
    """JPEG at ``quality`` for .jpg/.jpeg paths, the format's lossless default otherwise."""
    out_lower = str(path).lower()
    if out_lower.endswith((".jpg", ".jpeg")):
        img.convert("RGB").save(path, format="JPEG", quality=quality, optimize=True, dpi=(dpi, dpi))
    else:
        img.save(path, dpi=(dpi, dpi))
    logger.info("Saved %s", path)
