from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from idphotoshop.core.models import PhysicalSize

# ~300 DPI
PX_PER_MM = 11.81

PHOTO_SIZES: Tuple[PhysicalSize, ...] = (
    PhysicalSize(30, 40, "3x4 cm"),
    PhysicalSize(40, 60, "4x6 cm"),
    PhysicalSize(20, 30, "2x3 cm"),
    PhysicalSize(35, 45, "3.5x4.5 cm (Passport)"),
    PhysicalSize(50, 50, "5x5 cm (US Visa)"),
)

DEFAULT_SHEET = PhysicalSize(100, 150, "10x15 cm")
DEFAULT_GAP_MM = 2.0


def find_size(name: str) -> Optional[PhysicalSize]:
    """Look up a catalog size by name; also accepts the short form, e.g. "3.5x4.5"."""
    wanted = name.strip().lower()
    for size in PHOTO_SIZES:
        label = size.name.lower()
        if wanted == label or wanted == label.split(" ")[0]:
            return size
    return None


@dataclass(frozen=True)
class EngineConfig:
    """
    Process-wide, read-only settings injected into the rasterizer and sheet compositor.

    px_per_mm:
        Print density. Must be the same for every stage of one pipeline run.
    tilt_threshold_rad:
        Below this eye-line angle the tilt corrector leaves the image untouched.
    redetect_threshold_deg:
        The pipeline only straightens (and re-detects) above this angle.
    """
    px_per_mm: float = PX_PER_MM
    tilt_threshold_rad: float = 0.017
    redetect_threshold_deg: float = 1.5
    fill: str = "#ffffff"
    separator: str = "#e2e8f0"
    jpeg_quality: int = 95


@dataclass(frozen=True)
class ProcessingParams:
    """
    Parameters the user picks for one session.

    size:
        Target photo size. Any PhysicalSize is accepted, not only catalog entries.
    sheet / gap_mm:
        Print sheet and the gap between adjacent copies.
    correct_tilt:
        If True, straighten the head using the detected eye line.
    fill:
        Padding color for crop areas outside the source image.
    """
    size: PhysicalSize = PHOTO_SIZES[0]
    sheet: PhysicalSize = DEFAULT_SHEET
    gap_mm: float = DEFAULT_GAP_MM
    correct_tilt: bool = True
    fill: str = "#ffffff"
    engine: EngineConfig = field(default_factory=EngineConfig)
