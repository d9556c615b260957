"""
Common utilities shared across Tale Weaver modules.
"""

from .errors import (
    ConfigurationError,
    InvalidImageFormatError,
    InvalidInputError,
    NoImageGeneratedError,
    QuotaExhaustedError,
    RateLimitedError,
    StorageError,
    StoryParseError,
    TaleWeaverError,
    UpstreamError,
)
from .llm import ChatResult, CompletionCallable, acall_chat_completion, call_chat_completion
from .settings import DEFAULT_PLACEHOLDER_IMAGE_URL, TaleWeaverSettings

__all__ = [
    "ChatResult",
    "CompletionCallable",
    "acall_chat_completion",
    "call_chat_completion",
    "DEFAULT_PLACEHOLDER_IMAGE_URL",
    "TaleWeaverSettings",
    "TaleWeaverError",
    "InvalidInputError",
    "ConfigurationError",
    "StoryParseError",
    "UpstreamError",
    "RateLimitedError",
    "QuotaExhaustedError",
    "NoImageGeneratedError",
    "InvalidImageFormatError",
    "StorageError",
]
