from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    UNSPECIFIED = "unspecified"


@dataclass(frozen=True)
class OutfitColor:
    id: str
    label: str
    hex: str
    prompt: str


@dataclass(frozen=True)
class OutfitType:
    id: str
    label: str
    prompt_template: str
    allowed_colors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Background:
    id: str
    label: str
    color: Optional[str]
    prompt: str


@dataclass(frozen=True)
class Hairstyle:
    id: str
    label: str
    prompt: str


ORIGINAL = "original"

OUTFIT_COLORS: Dict[str, OutfitColor] = {
    c.id: c
    for c in (
        OutfitColor("white", "White", "#ffffff", "white"),
        OutfitColor("black", "Black", "#1a1a1a", "black"),
        OutfitColor("navy", "Navy", "#1e293b", "navy blue"),
        OutfitColor("gray", "Gray", "#64748b", "gray"),
        OutfitColor("blue", "Blue", "#3b82f6", "light blue"),
        OutfitColor("red", "Red", "#ef4444", "red"),
        OutfitColor("pink", "Pink", "#ec4899", "pink"),
        OutfitColor("yellow", "Yellow", "#eab308", "yellow"),
        OutfitColor("purple", "Purple", "#a855f7", "purple"),
        OutfitColor("dark_red", "Dark red", "#7f1d1d", "dark red"),
    )
}

OUTFIT_TYPES: Tuple[OutfitType, ...] = (
    OutfitType(ORIGINAL, "Keep original", ""),
    OutfitType(
        "suit", "Suit (tie)",
        "wearing a formal {color} business suit with a white shirt and a tie",
        ("black", "navy", "gray", "dark_red"),
    ),
    OutfitType(
        "suit_no_tie", "Suit (no tie)",
        "wearing a formal {color} business suit with a white shirt, no tie",
        ("black", "navy", "gray"),
    ),
    OutfitType(
        "shirt", "Shirt",
        "wearing a crisp {color} formal button-down shirt",
        ("white", "blue", "black", "gray", "pink"),
    ),
    OutfitType(
        "ao_dai", "Ao dai",
        "wearing a traditional Vietnamese {color} Ao Dai dress",
        ("white", "red", "pink", "blue", "yellow", "purple"),
    ),
    OutfitType(
        "tshirt", "T-shirt",
        "wearing a plain solid {color} t-shirt",
        ("white", "black", "gray", "navy", "red"),
    ),
)

BACKGROUNDS: Tuple[Background, ...] = (
    Background(ORIGINAL, "Keep original", None, ""),
    Background("white", "White", "#ffffff", "solid white background"),
    Background("blue", "Blue", "#4287f5", "solid ID photo blue background"),
    Background("gray", "Gray", "#a0a0a0", "solid neutral gray background"),
    Background("red", "Red", "#d91b1b", "solid red background"),
    Background("green", "Green", "#4caf50", "solid green chroma key background"),
    Background("cyan", "Cyan", "#00bcd4", "solid cyan background"),
)

HAIRSTYLES: Tuple[Hairstyle, ...] = (
    Hairstyle(ORIGINAL, "Keep original", ""),
    Hairstyle("neat", "Neat", "neatly styled professional hair"),
    Hairstyle("short", "Short", "short professional haircut"),
    Hairstyle("long_straight", "Long straight", "long straight neatly styled hair"),
    Hairstyle("bun", "Bun", "hair tied in a neat bun"),
)


def find_outfit_type(type_id: str) -> Optional[OutfitType]:
    return next((o for o in OUTFIT_TYPES if o.id == type_id), None)


def find_background(bg_id: str) -> Optional[Background]:
    return next((b for b in BACKGROUNDS if b.id == bg_id), None)


def find_hairstyle(hair_id: str) -> Optional[Hairstyle]:
    return next((h for h in HAIRSTYLES if h.id == hair_id), None)


@dataclass(frozen=True)
class EditOptions:
    """
    What the generative editor should change in the cropped photo.

    outfit_color:
        Key into OUTFIT_COLORS; empty while the outfit is kept as is.
    lighting:
        If True, the editor may adjust facial pixels to even out the lighting.
    """
    background: str = ORIGINAL
    outfit_type: str = ORIGINAL
    outfit_color: str = ""
    hairstyle: str = ORIGINAL
    gender: Gender = Gender.UNSPECIFIED
    beautify: bool = False
    lighting: bool = False

    def with_outfit_type(self, type_id: str) -> "EditOptions":
        """
        Switch outfit type, picking its first allowed color if the current one
        doesn't apply. Unknown ids leave the options unchanged.
        """
        outfit = find_outfit_type(type_id)
        if outfit is None:
            return self
        color = self.outfit_color
        if outfit.id == ORIGINAL:
            color = ""
        elif outfit.allowed_colors and color not in outfit.allowed_colors:
            color = outfit.allowed_colors[0]
        return replace(self, outfit_type=outfit.id, outfit_color=color)
