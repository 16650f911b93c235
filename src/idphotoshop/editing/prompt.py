from __future__ import annotations

from typing import List

from idphotoshop.editing.options import (
    ORIGINAL,
    OUTFIT_COLORS,
    EditOptions,
    find_background,
    find_hairstyle,
    find_outfit_type,
)


def build_edit_prompt(options: EditOptions) -> str:
    """Instruction text for a generative editor finishing an already-cropped ID photo."""
    parts: List[str] = [
        "Task: Finalize this ID Photo.",
        "INPUT ANALYSIS: The input image is already cropped to the target aspect ratio. "
        "It may contain solid color margins (padding) or the person's body might be cut off "
        "at the bottom/sides.",
        "PRIMARY GOAL: FILL THE FRAME.",
        "1. GENERATE missing body parts (shoulders, chest, arms) to extend the person to the edges of the frame.",
        "2. DO NOT change the aspect ratio or crop the image further.",
        "3. If there is empty/solid colored space around the person, fill it with the requested "
        "background and body parts.",
    ]

    if options.lighting:
        parts.append(
            "CRITICAL: Preserve the person's identity and facial features intact. However, YOU MUST "
            "correct the lighting on the face to be even and balanced, removing dark shadows or "
            "uneven brightness."
        )
    else:
        parts.append(
            "CRITICAL: Preserve the face, eyes, nose, and mouth EXACTLY as they are. Only modify the "
            "surrounding elements (body, hair, background) to blend seamlessly."
        )

    bg = find_background(options.background)
    if bg is not None and bg.id != ORIGINAL:
        parts.append(f"ACTION: Change the background to a {bg.prompt}.")
    else:
        parts.append("ACTION: Extend the existing background naturally to fill any empty space.")

    outfit = find_outfit_type(options.outfit_type)
    if outfit is not None and outfit.id != ORIGINAL:
        text = outfit.prompt_template
        if "{color}" in text:
            color = OUTFIT_COLORS.get(options.outfit_color)
            text = text.replace("{color}", color.prompt if color else "white")
        parts.append(
            f"ACTION: Change the person's clothing to {text}. The clothes must fit the generated "
            "body shape and fill the bottom of the frame."
        )
    else:
        parts.append("ACTION: Extend the person's current clothing naturally to fill the generated body parts.")

    hair = find_hairstyle(options.hairstyle)
    if hair is not None and hair.id != ORIGINAL:
        parts.append(f"ACTION: Change the hairstyle to {hair.prompt}.")

    if options.beautify:
        parts.append("ACTION: Apply subtle professional skin retouching.")
    if options.lighting:
        parts.append(
            "ACTION: Fix uneven lighting (e.g., side shadows). Normalize the illumination to create a "
            "flat, professional studio lighting effect where the skin tone is even across the entire face."
        )

    parts.append("OUTPUT: High-quality, photorealistic ID portrait.")
    return " ".join(parts)
