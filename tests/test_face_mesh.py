import unittest
from unittest import skipIf

from tests._test_path import SRC  # noqa: F401


def _can_import_face_mesh() -> bool:
    try:
        import idphotoshop.detection.face_mesh  # noqa: F401
        return True
    except Exception:
        return False


def _mesh(n: int = 478):
    # Spread landmarks over a box from (0.3, 0.2) to (0.7, 0.6).
    pts = [(0.3 + 0.4 * (i % 20) / 19, 0.2 + 0.4 * (i // 20) / 23) for i in range(n)]
    return pts


@skipIf(not _can_import_face_mesh(), "mediapipe not available")
class TestDetectionFromLandmarks(unittest.TestCase):
    def setUp(self):
        from idphotoshop.detection import face_mesh
        self.fm = face_mesh

    def test_box_is_landmark_extent(self):
        det = self.fm.detection_from_landmarks(_mesh())
        self.assertAlmostEqual(det.box.xmin, 0.3)
        self.assertAlmostEqual(det.box.xmax, 0.7)
        self.assertAlmostEqual(det.box.ymin, 0.2)
        self.assertLessEqual(det.box.ymax, 0.6 + 1e-9)

    def test_eyes_ordered_left_to_right(self):
        pts = _mesh()
        pts[33], pts[133] = (0.62, 0.4), (0.58, 0.4)
        pts[362], pts[263] = (0.42, 0.42), (0.38, 0.42)
        det = self.fm.detection_from_landmarks(pts)
        self.assertAlmostEqual(det.eyes.left.x, 0.40)
        self.assertAlmostEqual(det.eyes.left.y, 0.42)
        self.assertAlmostEqual(det.eyes.right.x, 0.60)

    def test_out_of_frame_landmarks_are_clamped(self):
        pts = _mesh()
        pts[0] = (-0.05, 1.2)
        det = self.fm.detection_from_landmarks(pts)
        self.assertEqual(det.box.xmin, 0.0)
        self.assertEqual(det.box.ymax, 1.0)

    def test_too_few_landmarks(self):
        self.assertIsNone(self.fm.detection_from_landmarks([(0.5, 0.5)] * 10))


if __name__ == "__main__":
    unittest.main()
