"""
Face detector backed by MediaPipe Face Mesh.

Returns the face box (landmark extents) and both eye centers, all normalized to
the image size, or None when no face is found.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

import numpy as np
from PIL import Image

# MediaPipe for face landmarks
import mediapipe as mp

from idphotoshop.core.imaging import ensure_rgb
from idphotoshop.core.models import EyePair, FaceDetection, NormalizedBox, Point

logger = logging.getLogger(__name__)

# Eye-corner landmark pairs (outer, inner) for each eye.
EYE_A = (33, 133)
EYE_B = (362, 263)


def _clamp01(v: float) -> float:
    return min(1.0, max(0.0, v))


def _mean(points: Sequence[Tuple[float, float]], idx: Tuple[int, int]) -> Point:
    a, b = points[idx[0]], points[idx[1]]
    return Point((a[0] + b[0]) / 2.0, (a[1] + b[1]) / 2.0)


def detection_from_landmarks(points: Sequence[Tuple[float, float]]) -> Optional[FaceDetection]:
    """
    Build a FaceDetection from normalized (x, y) mesh landmarks.

    Landmarks can land slightly outside the frame; the box is clamped to [0, 1].
    """
    if len(points) <= max(EYE_A + EYE_B):
        return None
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    box = NormalizedBox(_clamp01(min(xs)), _clamp01(min(ys)), _clamp01(max(xs)), _clamp01(max(ys)))
    if not box.is_valid():
        return None

    a, b = _mean(points, EYE_A), _mean(points, EYE_B)
    left, right = (a, b) if a.x <= b.x else (b, a)
    return FaceDetection(box=box, eyes=EyePair(left=left, right=right))


class FaceMeshDetector:
    """Callable detector: ``detector(image) -> Optional[FaceDetection]``."""

    def __init__(self, min_detection_confidence: float = 0.5):
        self.min_detection_confidence = min_detection_confidence

    def detect(self, img: Image.Image) -> Optional[FaceDetection]:
        mp_face_mesh = mp.solutions.face_mesh

        # MediaPipe expects RGB numpy array
        rgb = np.array(ensure_rgb(img))

        with mp_face_mesh.FaceMesh(
            static_image_mode=True,
            refine_landmarks=True,
            max_num_faces=1,
            min_detection_confidence=self.min_detection_confidence,
        ) as face_mesh:
            results = face_mesh.process(rgb)

        if not results.multi_face_landmarks:
            logger.info("No face detected")
            return None

        lm = results.multi_face_landmarks[0].landmark
        detection = detection_from_landmarks([(p.x, p.y) for p in lm])
        logger.debug("Face detected: %s", detection)
        return detection

    __call__ = detect
