"""
Error taxonomy shared by the story, illustration, and storage layers.
"""

from __future__ import annotations


class TaleWeaverError(Exception):
    """Base class for every error raised by Tale Weaver."""


class InvalidInputError(TaleWeaverError, ValueError):
    """Caller supplied empty lyrics or an empty illustration prompt."""


class ConfigurationError(TaleWeaverError, ValueError):
    """Settings failed validation at startup."""


class StoryParseError(TaleWeaverError, ValueError):
    """The story response was not JSON matching the expected schema."""


class UpstreamError(TaleWeaverError):
    """
    A generation service call failed.

    ``status_code`` is the HTTP status reported by the provider, or ``None`` when
    the request never produced a response (connection error, timeout).
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitedError(UpstreamError):
    """Upstream answered 429. The caller may try again later."""


class QuotaExhaustedError(UpstreamError):
    """Upstream answered 402. Credits must be topped up by an operator."""


class NoImageGeneratedError(TaleWeaverError):
    """The image model answered without an embedded image."""


class InvalidImageFormatError(TaleWeaverError):
    """The embedded image was not a base64 ``data:image/...`` URI."""


class StorageError(TaleWeaverError):
    """Writing an illustration to the blob store failed."""
