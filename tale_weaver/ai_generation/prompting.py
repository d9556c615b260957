"""
Prompt construction utilities for storybook illustration generation.
"""

from __future__ import annotations

ILLUSTRATION_STYLE_TEMPLATE = (
    "A beautiful watercolor children's book illustration: {scene}. "
    "Soft colors, whimsical style, storybook quality. No text in the image."
)


def build_illustration_prompt(scene_description: str) -> str:
    """
    Wrap a page's illustration description in the house watercolor style.
    """
    if not scene_description or not scene_description.strip():
        raise ValueError("scene_description must be a non-empty string.")

    return ILLUSTRATION_STYLE_TEMPLATE.format(scene=scene_description.strip())
