"""
Tale Weaver package turning song lyrics into illustrated storybooks.
"""

from .common import TaleWeaverSettings
from .pdf_generation import StorybookPDFBuilder
from .pipeline import (
    ProgressEvent,
    StoryAssemblyPipeline,
    StoryPage,
    StoryResult,
)
from .story_generation import StoryRequest

__all__ = [
    "ProgressEvent",
    "StoryAssemblyPipeline",
    "StoryPage",
    "StoryRequest",
    "StoryResult",
    "StorybookPDFBuilder",
    "TaleWeaverSettings",
]
