"""
End-to-end orchestration for Tale Weaver story and illustration generation.
"""

from .pipeline import (
    IllustrationOutcome,
    ProgressCallback,
    ProgressEvent,
    StoryAssemblyPipeline,
    StoryPage,
    StoryResult,
)

__all__ = [
    "IllustrationOutcome",
    "ProgressCallback",
    "ProgressEvent",
    "StoryAssemblyPipeline",
    "StoryPage",
    "StoryResult",
]
