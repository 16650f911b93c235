from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, TYPE_CHECKING

from idphotoshop.core.config import ProcessingParams
from idphotoshop.core.models import NormalizedBox, NormalizedRect
from idphotoshop.editing.options import EditOptions

if TYPE_CHECKING:  # avoid importing Pillow at module import time
    from PIL import Image


class Step(str, Enum):
    UPLOAD = "upload"
    CUSTOMIZE = "customize"  # size, auto-crop and edit options
    RESULT = "result"


@dataclass
class AppState:
    """
    Mutable state for a single session.

    The front end reads/writes this state, while the pipeline is responsible for
    producing each stage's images (upload -> crop -> edit -> sheet).
    """
    step: Step = Step.UPLOAD

    # Input (after tilt correction, if any)
    input_path: Optional[str] = None
    original_pil: Optional["Image.Image"] = None
    face_box: Optional[NormalizedBox] = None

    # Crop stage
    crop: Optional[NormalizedRect] = None
    cropped_pil: Optional["Image.Image"] = None

    # Result stage
    result_pil: Optional["Image.Image"] = None
    sheet_pil: Optional["Image.Image"] = None

    # User choices
    params: ProcessingParams = field(default_factory=ProcessingParams)
    options: EditOptions = field(default_factory=EditOptions)

    def discard_results(self) -> None:
        """Drop everything derived from the crop, e.g. before a retry."""
        self.crop = None
        self.cropped_pil = None
        self.result_pil = None
        self.sheet_pil = None

    def reset(self) -> None:
        """Clear all session state (used by a Reset button)."""
        self.step = Step.UPLOAD
        self.input_path = None
        self.original_pil = None
        self.face_box = None
        self.discard_results()
        self.params = ProcessingParams()  # restore defaults
        self.options = EditOptions()
