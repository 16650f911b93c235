import unittest

import numpy as np
from PIL import Image

from tests._test_path import SRC  # noqa: F401

from idphotoshop.core.config import DEFAULT_SHEET, EngineConfig
from idphotoshop.core.errors import InvalidGeometry
from idphotoshop.core.models import PhysicalSize
from idphotoshop.core.sheet import SheetCompositor, compose_sheet

PHOTO = PhysicalSize(30, 40, "3x4 cm")


class TestSheetLayout(unittest.TestCase):
    def setUp(self):
        self.compositor = SheetCompositor()

    def test_default_sheet_3x4_grid(self):
        layout = self.compositor.compute_layout(PHOTO, DEFAULT_SHEET, 2.0)
        self.assertEqual(layout.sheet_px, (1181, 1772))
        self.assertEqual(layout.photo_px, (354, 472))
        self.assertEqual(layout.gap_px, 24)
        self.assertEqual((layout.cols, layout.rows), (3, 3))
        self.assertEqual(layout.count, 9)

    def test_grid_is_centered(self):
        layout = self.compositor.compute_layout(PHOTO, DEFAULT_SHEET, 2.0)
        sheet_w, sheet_h = layout.sheet_px
        grid_w, grid_h = layout.grid_px
        ox, oy = layout.origin_px
        self.assertLessEqual(abs(ox - (sheet_w - grid_w - ox)), 1)
        self.assertLessEqual(abs(oy - (sheet_h - grid_h - oy)), 1)

    def test_positions_have_uniform_gaps(self):
        layout = self.compositor.compute_layout(PHOTO, DEFAULT_SHEET, 2.0)
        positions = list(layout.positions())
        self.assertEqual(len(positions), 9)
        xs = sorted({x for x, _ in positions})
        ys = sorted({y for _, y in positions})
        self.assertEqual([b - a for a, b in zip(xs, xs[1:])], [354 + 24] * 2)
        self.assertEqual([b - a for a, b in zip(ys, ys[1:])], [472 + 24] * 2)

    def test_photo_larger_than_sheet(self):
        layout = self.compositor.compute_layout(PhysicalSize(200, 200), DEFAULT_SHEET, 2.0)
        self.assertEqual(layout.count, 0)
        self.assertEqual(list(layout.positions()), [])

    def test_invalid_sizes_raise(self):
        with self.assertRaises(InvalidGeometry):
            self.compositor.compute_layout(PhysicalSize(0, 40), DEFAULT_SHEET, 2.0)
        with self.assertRaises(InvalidGeometry):
            self.compositor.compute_layout(PHOTO, PhysicalSize(100, float("nan")), 2.0)
        with self.assertRaises(InvalidGeometry):
            self.compositor.compute_layout(PHOTO, DEFAULT_SHEET, -1.0)

    def test_zero_gap(self):
        compositor = SheetCompositor(EngineConfig(px_per_mm=1.0))
        layout = compositor.compute_layout(PhysicalSize(50, 50), PhysicalSize(100, 100), 0.0)
        self.assertEqual((layout.cols, layout.rows), (2, 2))
        self.assertEqual(layout.origin_px, (0, 0))


class TestComposeSheet(unittest.TestCase):
    def test_copies_are_drawn_with_cut_guides(self):
        # Photo pixels don't match the declared size; it's resized.
        photo = Image.fromarray(np.full((100, 75, 3), (20, 40, 160), dtype=np.uint8), "RGB")
        sheet = compose_sheet(photo, PHOTO)
        self.assertEqual(sheet.size, (1181, 1772))

        layout = SheetCompositor().compute_layout(PHOTO)
        arr = np.asarray(sheet)
        for x, y in layout.positions():
            cx, cy = x + 177, y + 236
            self.assertTrue((np.abs(arr[cy, cx].astype(int) - [20, 40, 160]) <= 2).all())
            # Guide sits one pixel outside the photo.
            self.assertEqual(tuple(arr[cy, x - 1]), (0xE2, 0xE8, 0xF0))
            self.assertEqual(tuple(arr[y - 1, cx]), (0xE2, 0xE8, 0xF0))

        # Margins and gaps stay white.
        self.assertEqual(tuple(arr[5, 5]), (255, 255, 255))
        x0, y0 = layout.origin_px
        self.assertEqual(tuple(arr[y0 + 100, x0 + 354 + 12]), (255, 255, 255))

    def test_zero_gap_guides_do_not_cover_photos(self):
        compositor = SheetCompositor(EngineConfig(px_per_mm=1.0))
        photo = Image.new("RGB", (50, 50), (0, 0, 0))
        arr = np.asarray(compositor.compose(photo, PhysicalSize(50, 50), PhysicalSize(100, 100), 0.0))
        # Adjacent copies meet at x=50 and y=50; both edges stay photo.
        self.assertEqual(tuple(arr[25, 49]), (0, 0, 0))
        self.assertEqual(tuple(arr[25, 50]), (0, 0, 0))
        self.assertEqual(tuple(arr[49, 75]), (0, 0, 0))
        self.assertEqual(tuple(arr[50, 75]), (0, 0, 0))
        self.assertEqual(arr.max(), 0)

    def test_transparent_photo_is_flattened_on_white(self):
        photo = Image.new("RGBA", (354, 472), (0, 0, 0, 0))
        sheet = compose_sheet(photo, PHOTO)
        layout = SheetCompositor().compute_layout(PHOTO)
        x, y = next(layout.positions())
        self.assertEqual(tuple(np.asarray(sheet)[y + 236, x + 177]), (255, 255, 255))

    def test_photo_is_not_modified(self):
        photo = Image.new("RGB", (354, 472), (1, 2, 3))
        before = photo.tobytes()
        compose_sheet(photo, PHOTO)
        self.assertEqual(photo.tobytes(), before)

    def test_oversized_photo_gives_blank_sheet(self):
        photo = Image.new("RGB", (10, 10), (0, 0, 0))
        sheet = compose_sheet(photo, PhysicalSize(200, 200))
        self.assertEqual(np.asarray(sheet).min(), 255)

    def test_custom_density(self):
        photo = Image.new("RGB", (10, 10), (0, 0, 0))
        sheet = compose_sheet(photo, PHOTO, config=EngineConfig(px_per_mm=1.0))
        self.assertEqual(sheet.size, (100, 150))


if __name__ == "__main__":
    unittest.main()
