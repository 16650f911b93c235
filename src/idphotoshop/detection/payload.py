from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Mapping, Optional, Union, TYPE_CHECKING

from idphotoshop.core.models import EyePair, FaceDetection, NormalizedBox, Point

if TYPE_CHECKING:
    from PIL import Image

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


def _extract_json(text: str) -> Optional[Any]:
    m = _FENCE_RE.search(text)
    if m:
        candidate = m.group(1)
    else:
        first, last = text.find("{"), text.rfind("}")
        candidate = text[first : last + 1] if first != -1 and last > first else text
    try:
        return json.loads(candidate)
    except ValueError:
        return None


def _number(obj: Mapping[str, Any], key: str) -> Optional[float]:
    v = obj.get(key)
    # bool is an int subclass; reject it explicitly
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    return float(v)


def _point(obj: Any) -> Optional[Point]:
    if not isinstance(obj, Mapping):
        return None
    x, y = _number(obj, "x"), _number(obj, "y")
    if x is None or y is None:
        return None
    p = Point(x, y)
    return p if p.is_finite() else None


def _eyes(obj: Any) -> Optional[EyePair]:
    if not isinstance(obj, Mapping):
        return None
    left = _point(obj.get("leftEye", obj.get("left_eye")))
    right = _point(obj.get("rightEye", obj.get("right_eye")))
    if left is None or right is None:
        return None
    return EyePair(left=left, right=right)


def parse_detection(payload: Union[None, str, Mapping[str, Any]]) -> Optional[FaceDetection]:
    """
    Validate a face-detector response.

    Accepts a mapping like ``{"box": {xmin, ymin, xmax, ymax}, "landmarks":
    {"leftEye": {x, y}, "rightEye": {x, y}}}`` or JSON text carrying one (fenced or
    wrapped in prose). Malformed boxes give None; malformed landmarks are dropped.
    """
    if payload is None:
        return None
    data: Any = _extract_json(payload) if isinstance(payload, str) else payload
    if not isinstance(data, Mapping):
        logger.warning("Face detection payload is not an object; ignoring")
        return None

    raw_box = data.get("box")
    if not isinstance(raw_box, Mapping):
        return None
    coords = [_number(raw_box, k) for k in ("xmin", "ymin", "xmax", "ymax")]
    if any(c is None for c in coords):
        logger.warning("Face box is missing numeric fields: %s", raw_box)
        return None
    box = NormalizedBox(*coords)  # type: ignore[arg-type]
    if not box.is_valid():
        logger.warning("Invalid face detection box: %s", raw_box)
        return None

    return FaceDetection(box=box, eyes=_eyes(data.get("landmarks")))


class JsonDetector:
    """
    Adapts a detector that answers with JSON (e.g. a hosted vision model) to the
    pipeline's ``image -> Optional[FaceDetection]`` contract.

    ``query`` receives the image and returns the raw payload (text or mapping).
    """

    def __init__(self, query: Callable[["Image.Image"], Union[None, str, Mapping[str, Any]]]):
        self.query = query

    def __call__(self, img: "Image.Image") -> Optional[FaceDetection]:
        return parse_detection(self.query(img))
