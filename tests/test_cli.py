import io
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from PIL import Image

from tests._test_path import SRC  # noqa: F401

from idphotoshop import cli


class TestCli(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.input = self.tmp / "in.png"
        Image.new("RGB", (200, 250), (128, 128, 128)).save(self.input)

    def tearDown(self):
        self._tmp.cleanup()

    def _run(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = cli.main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_photo_and_sheet(self):
        photo, sheet = self.tmp / "out.jpg", self.tmp / "sheet.jpg"
        code, out, _ = self._run(
            "-i", str(self.input), "-o", str(photo), "--sheet", str(sheet), "--size", "3.5x4.5", "--no-detect"
        )
        self.assertEqual(code, 0)
        self.assertIn("Saved:", out)
        with Image.open(photo) as img:
            self.assertEqual(img.size, (413, 531))
        with Image.open(sheet) as img:
            self.assertEqual(img.size, (1181, 1772))

    def test_custom_size(self):
        photo = self.tmp / "out.png"
        code, _, _ = self._run(
            "-i", str(self.input), "-o", str(photo), "--width-mm", "20", "--height-mm", "30", "--no-detect"
        )
        self.assertEqual(code, 0)
        with Image.open(photo) as img:
            self.assertEqual(img.size, (236, 354))

    def test_unknown_size(self):
        code, _, err = self._run("-i", str(self.input), "-o", str(self.tmp / "o.jpg"), "--size", "9x9", "--no-detect")
        self.assertEqual(code, 2)
        self.assertIn("ERROR:", err)

    def test_unreadable_input(self):
        code, _, err = self._run("-i", str(self.tmp / "missing.jpg"), "-o", str(self.tmp / "o.jpg"), "--no-detect")
        self.assertEqual(code, 2)
        self.assertIn("Could not read image", err)

    def test_half_custom_size(self):
        code, _, err = self._run("-i", str(self.input), "-o", str(self.tmp / "o.jpg"), "--width-mm", "20", "--no-detect")
        self.assertEqual(code, 2)
        self.assertIn("--height-mm", err)

    def test_unwritable_output(self):
        out = self.tmp / "missing_dir" / "o.jpg"
        code, stdout, err = self._run("-i", str(self.input), "-o", str(out), "--no-detect")
        self.assertEqual(code, 2)
        self.assertIn("ERROR:", err)
        self.assertNotIn("Saved:", stdout)
