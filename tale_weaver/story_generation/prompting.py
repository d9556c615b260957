"""
Prompt construction utilities for turning lyrics into a storybook outline.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PAGE_GUIDANCE = "4-5 pages"

STORY_SYSTEM_PROMPT = """You are a creative children's storybook author. Given song lyrics, create an illustrated storybook with {page_guidance}. Each page should have evocative narrative text (2-3 sentences) inspired by the lyrics' themes and emotions. Also provide a short image description for each page that would make a beautiful watercolor illustration.

Return ONLY valid JSON in this exact format:
{{
  "title": "Story title",
  "pages": [
    {{ "text": "Story text for this page", "imagePrompt": "Detailed illustration description" }}
  ]
}}"""


@dataclass(frozen=True)
class StoryPrompt:
    """
    Container for the system and user prompts passed to the text model.
    """

    system: str
    user: str


def build_story_prompt(
    lyrics: str,
    *,
    title: str | None = None,
    page_guidance: str = DEFAULT_PAGE_GUIDANCE,
) -> StoryPrompt:
    """
    Build the prompt pair used to solicit a paginated story from the lyrics.
    """
    if not lyrics or not lyrics.strip():
        raise ValueError("lyrics must be a non-empty string.")

    system_prompt = STORY_SYSTEM_PROMPT.format(page_guidance=page_guidance)

    if title and title.strip():
        user_prompt = f'Song: "{title.strip()}"\n\nLyrics:\n{lyrics}'
    else:
        user_prompt = f"Lyrics:\n{lyrics}"

    return StoryPrompt(system=system_prompt, user=user_prompt)
