from __future__ import annotations

import logging
import math
from typing import Optional

from PIL import Image, ImageDraw

from idphotoshop.core.config import DEFAULT_GAP_MM, DEFAULT_SHEET, EngineConfig
from idphotoshop.core.errors import InvalidGeometry
from idphotoshop.core.imaging import ensure_rgb, to_rgb
from idphotoshop.core.models import PhysicalSize, SheetLayout, mm_to_px

logger = logging.getLogger(__name__)


class SheetCompositor:
    """Tiles copies of one finished photo onto a print sheet."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def compute_layout(
        self,
        photo_size: PhysicalSize,
        sheet_size: PhysicalSize = DEFAULT_SHEET,
        gap_mm: float = DEFAULT_GAP_MM,
    ) -> SheetLayout:
        """
        Fit as many whole copies as possible, with ``gap_mm`` between (not around)
        neighbours, and center the grid on the sheet.
        """
        if not photo_size.is_valid():
            raise InvalidGeometry(f"Photo size must be positive: {photo_size}")
        if not sheet_size.is_valid():
            raise InvalidGeometry(f"Sheet size must be positive: {sheet_size}")
        if not math.isfinite(gap_mm) or gap_mm < 0:
            raise InvalidGeometry(f"Gap must be a non-negative number of mm, got {gap_mm}")

        ppm = self.config.px_per_mm
        sheet_w, sheet_h = sheet_size.to_pixels(ppm)
        photo_w, photo_h = photo_size.to_pixels(ppm)
        gap = mm_to_px(gap_mm, ppm)
        if photo_w <= 0 or photo_h <= 0 or sheet_w <= 0 or sheet_h <= 0:
            raise InvalidGeometry("Photo and sheet must each be at least one pixel")

        cols = (sheet_w + gap) // (photo_w + gap)
        rows = (sheet_h + gap) // (photo_h + gap)
        if cols == 0 or rows == 0:
            cols = rows = 0
            grid_w = grid_h = 0
        else:
            grid_w = cols * photo_w + (cols - 1) * gap
            grid_h = rows * photo_h + (rows - 1) * gap

        return SheetLayout(
            cols=cols,
            rows=rows,
            photo_px=(photo_w, photo_h),
            gap_px=gap,
            sheet_px=(sheet_w, sheet_h),
            origin_px=((sheet_w - grid_w) // 2, (sheet_h - grid_h) // 2),
        )

    def compose(
        self,
        photo: Image.Image,
        photo_size: PhysicalSize,
        sheet_size: PhysicalSize = DEFAULT_SHEET,
        gap_mm: float = DEFAULT_GAP_MM,
    ) -> Image.Image:
        """
        Return a new white sheet with the photo tiled at its declared physical size.

        The photo is resized to ``photo_size`` whatever its pixel dimensions are.
        Each copy gets a thin cut guide drawn just outside its bounds. A photo
        larger than the sheet yields an empty sheet.
        """
        layout = self.compute_layout(photo_size, sheet_size, gap_mm)
        sheet = Image.new("RGB", layout.sheet_px, "white")
        if layout.count == 0:
            logger.warning("Photo %s does not fit on sheet %s; sheet is empty", photo_size, sheet_size)
            return sheet

        pw, ph = layout.photo_px
        tile = ensure_rgb(photo, background="white")
        if tile.size != (pw, ph):
            tile = tile.resize((pw, ph), Image.LANCZOS)

        # Guides first: with a zero gap they would otherwise cover a neighbour's edge.
        draw = ImageDraw.Draw(sheet)
        stroke = to_rgb(self.config.separator)
        for x, y in layout.positions():
            draw.rectangle((x - 1, y - 1, x + pw, y + ph), outline=stroke, width=1)
        for x, y in layout.positions():
            sheet.paste(tile, (x, y))

        logger.debug("Composed %dx%d sheet with %d copies", layout.cols, layout.rows, layout.count)
        return sheet


def compose_sheet(
    photo: Image.Image,
    photo_size: PhysicalSize,
    sheet_size: PhysicalSize = DEFAULT_SHEET,
    gap_mm: float = DEFAULT_GAP_MM,
    config: Optional[EngineConfig] = None,
) -> Image.Image:
    return SheetCompositor(config).compose(photo, photo_size, sheet_size, gap_mm)
