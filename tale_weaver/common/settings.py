"""
Explicit runtime configuration for the Tale Weaver clients and pipeline.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

DEFAULT_PLACEHOLDER_IMAGE_URL = (
    "https://images.unsplash.com/photo-1472396961693-142e6e269027?w=800"
)
DEFAULT_STORY_MODEL = "openrouter/google/gemini-2.5-flash"
DEFAULT_IMAGE_MODEL = "openrouter/google/gemini-2.5-flash-image"

STORAGE_BACKENDS = ("local", "s3")


class TaleWeaverSettings(BaseSettings):
    """
    Configuration passed to each client's constructor.

    Settings are resolved once, usually via :meth:`from_env`, and never re-read
    from the process environment while generating a story.
    """

    model_config = SettingsConfigDict(
        env_prefix="TALE_WEAVER_",
        env_ignore_empty=True,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("TALE_WEAVER_API_KEY", "OPENROUTER_API_KEY", "LITELLM_API_KEY"),
    )
    api_base: str | None = None
    story_model: str = Field(
        default=DEFAULT_STORY_MODEL,
        validation_alias=AliasChoices("TALE_WEAVER_STORY_MODEL", "LITELLM_STORY_MODEL"),
    )
    image_model: str = Field(
        default=DEFAULT_IMAGE_MODEL,
        validation_alias=AliasChoices("TALE_WEAVER_IMAGE_MODEL", "LITELLM_IMAGE_MODEL"),
    )
    request_timeout: float = Field(default=60.0, gt=0)
    illustration_timeout: float = Field(default=120.0, gt=0)
    max_concurrent_illustrations: int = Field(default=4, ge=1)
    placeholder_image_url: str = DEFAULT_PLACEHOLDER_IMAGE_URL
    storage_backend: str = "local"
    storage_bucket: str = "story-images"
    storage_prefix: str = ""
    storage_public_base_url: str | None = None
    storage_endpoint_url: str | None = None
    storage_region: str = Field(
        default="us-east-1",
        validation_alias=AliasChoices("TALE_WEAVER_STORAGE_REGION", "AWS_DEFAULT_REGION"),
    )
    local_storage_dir: str = "story-images"

    @field_validator("placeholder_image_url")
    @classmethod
    def _require_placeholder(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("placeholder_image_url must be a non-empty URL.")
        return value.strip()

    @field_validator("storage_backend", mode="before")
    @classmethod
    def _normalise_backend(cls, value: str) -> str:
        backend = str(value).strip().lower()
        if backend not in STORAGE_BACKENDS:
            supported = ", ".join(STORAGE_BACKENDS)
            raise ValueError(f"Unknown storage backend '{value}'. Supported backends: {supported}.")
        return backend

    @model_validator(mode="after")
    def _require_bucket_for_s3(self) -> "TaleWeaverSettings":
        if self.storage_backend == "s3" and not self.storage_bucket.strip():
            raise ValueError("storage_bucket is required for the s3 backend.")
        return self

    @classmethod
    def from_env(cls, **overrides) -> "TaleWeaverSettings":
        """
        Build validated settings from environment variables.

        Raises
        ------
        ConfigurationError
            If any variable fails coercion or validation.
        """
        try:
            return cls(**overrides)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid Tale Weaver configuration: {exc}") from exc
