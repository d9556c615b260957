"""
Story generation utilities for turning song lyrics into page drafts.
"""

from .prompting import StoryPrompt, build_story_prompt
from .request import StoryRequest
from .story_service import (
    StoryDraft,
    StoryPageDraft,
    StoryTextGenerator,
    parse_story_payload,
    strip_code_fence,
)

__all__ = [
    "StoryRequest",
    "StoryPrompt",
    "build_story_prompt",
    "StoryDraft",
    "StoryPageDraft",
    "StoryTextGenerator",
    "parse_story_payload",
    "strip_code_fence",
]
