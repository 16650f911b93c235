"""
Orchestrates one ID photo run:

  detect -> straighten (if tilted) -> re-detect -> plan crop -> rasterize
  -> [editor] -> print sheet

The detector and editor are plain callables so any backend (local model,
hosted API, test stub) can be plugged in. A detector that answers with JSON
text or a mapping is wrapped in ``idphotoshop.detection.payload.JsonDetector``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from PIL import Image

from idphotoshop.app.state import AppState, Step
from idphotoshop.core.config import DEFAULT_GAP_MM, DEFAULT_SHEET, EngineConfig, ProcessingParams
from idphotoshop.core.crop import plan_crop
from idphotoshop.core.errors import NoOutputProduced
from idphotoshop.core.models import FaceDetection, NormalizedRect, PhysicalSize
from idphotoshop.core.raster import Rasterizer
from idphotoshop.core.sheet import SheetCompositor
from idphotoshop.core.tilt import correct_tilt, tilt_angle
from idphotoshop.editing.options import EditOptions
from idphotoshop.editing.prompt import build_edit_prompt

logger = logging.getLogger(__name__)

Detector = Callable[[Image.Image], Optional[FaceDetection]]
Editor = Callable[[Image.Image, EditOptions, str], Optional[Image.Image]]


@dataclass(frozen=True)
class PreparedImage:
    image: Image.Image
    detection: Optional[FaceDetection]
    tilt_deg: float = 0.0
    rotated: bool = False


@dataclass(frozen=True)
class CroppedPhoto:
    crop: NormalizedRect
    image: Image.Image


@dataclass(frozen=True)
class PipelineResult:
    prepared: PreparedImage
    cropped: CroppedPhoto
    photo: Image.Image
    sheet: Image.Image


class IdPhotoPipeline:
    def __init__(
        self,
        detector: Optional[Detector] = None,
        editor: Optional[Editor] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.detector = detector
        self.editor = editor
        self.config = config or EngineConfig()
        self.rasterizer = Rasterizer(self.config)
        self.compositor = SheetCompositor(self.config)

    # ---------- stages ----------

    def _detect(self, image: Image.Image) -> Optional[FaceDetection]:
        if self.detector is None:
            return None
        try:
            return self.detector(image)
        except Exception:
            # A failed detection falls back to the center crop instead of aborting.
            logger.exception("Face detection failed; continuing without a face box")
            return None

    def prepare(self, image: Image.Image, straighten: bool = True, fill: str = "#ffffff") -> PreparedImage:
        """Detect the face and, if the head is visibly tilted, straighten and detect again."""
        detection = self._detect(image)
        if not straighten or detection is None or detection.eyes is None:
            return PreparedImage(image=image, detection=detection)

        angle_deg = math.degrees(tilt_angle(detection.eyes, image.width, image.height))
        if abs(angle_deg) <= self.config.redetect_threshold_deg:
            return PreparedImage(image=image, detection=detection, tilt_deg=angle_deg)

        result = correct_tilt(image, detection.eyes, fill=fill, threshold_rad=self.config.tilt_threshold_rad)
        if not result.rotated:
            return PreparedImage(image=image, detection=detection, tilt_deg=angle_deg)

        # The old box is in pre-rotation coordinates and must not be reused.
        redetected = self._detect(result.image)
        if redetected is None:
            logger.info("No face found after straightening; using center crop")
        return PreparedImage(image=result.image, detection=redetected, tilt_deg=result.angle_deg, rotated=True)

    def auto_crop(self, prepared: PreparedImage, size: PhysicalSize, fill: str = "#ffffff") -> CroppedPhoto:
        box = prepared.detection.box if prepared.detection is not None else None
        crop = plan_crop(box, prepared.image.width, prepared.image.height, size.aspect_ratio)
        return self.crop_to(prepared.image, crop, size, fill)

    def crop_to(self, image: Image.Image, crop: NormalizedRect, size: PhysicalSize, fill: str = "#ffffff") -> CroppedPhoto:
        """Rasterize a (possibly manually adjusted) crop."""
        return CroppedPhoto(crop=crop, image=self.rasterizer.rasterize(image, crop, size, fill))

    def edit(self, cropped: Image.Image, options: EditOptions) -> Image.Image:
        if self.editor is None:
            return cropped
        prompt = build_edit_prompt(options)
        logger.debug("Editor prompt: %s", prompt)
        out = self.editor(cropped, options, prompt)
        if out is None:
            raise NoOutputProduced("The photo editor returned no image.")
        return out

    def finalize(
        self,
        cropped: Image.Image,
        size: PhysicalSize,
        options: Optional[EditOptions] = None,
        sheet_size: PhysicalSize = DEFAULT_SHEET,
        gap_mm: float = DEFAULT_GAP_MM,
    ) -> Tuple[Image.Image, Image.Image]:
        """Run the editor (if any) and lay the result out on a print sheet."""
        photo = self.edit(cropped, options or EditOptions())
        sheet = self.compositor.compose(photo, size, sheet_size, gap_mm)
        return photo, sheet

    def run(
        self,
        image: Image.Image,
        params: Optional[ProcessingParams] = None,
        options: Optional[EditOptions] = None,
    ) -> PipelineResult:
        params = params or ProcessingParams()
        prepared = self.prepare(image, straighten=params.correct_tilt, fill=params.fill)
        cropped = self.auto_crop(prepared, params.size, fill=params.fill)
        photo, sheet = self.finalize(cropped.image, params.size, options, params.sheet, params.gap_mm)
        return PipelineResult(prepared=prepared, cropped=cropped, photo=photo, sheet=sheet)

    # ---------- session helpers ----------

    def load_into(self, state: AppState, image: Image.Image, input_path: Optional[str] = None) -> None:
        """Upload step: straighten and detect, then move the session to CUSTOMIZE."""
        state.discard_results()
        prepared = self.prepare(image, straighten=state.params.correct_tilt, fill=state.params.fill)
        state.input_path = input_path
        state.original_pil = prepared.image
        state.face_box = prepared.detection.box if prepared.detection is not None else None
        state.step = Step.CUSTOMIZE

    def crop_session(self, state: AppState, crop: Optional[NormalizedRect] = None) -> None:
        """(Re)compute the cropped preview, using ``crop`` if the user adjusted it."""
        if state.original_pil is None:
            raise ValueError("No image loaded")
        img = state.original_pil
        if crop is None:
            crop = plan_crop(state.face_box, img.width, img.height, state.params.size.aspect_ratio)
        state.discard_results()
        result = self.crop_to(img, crop, state.params.size, state.params.fill)
        state.crop = result.crop
        state.cropped_pil = result.image

    def generate(self, state: AppState) -> None:
        """Edit + sheet; on failure nothing partial is kept."""
        if state.cropped_pil is None:
            self.crop_session(state)
        try:
            photo, sheet = self.finalize(
                state.cropped_pil, state.params.size, state.options, state.params.sheet, state.params.gap_mm
            )
        except Exception:
            state.discard_results()
            raise
        state.result_pil = photo
        state.sheet_pil = sheet
        state.step = Step.RESULT
