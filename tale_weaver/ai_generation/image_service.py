"""
Illustration generation through a LiteLLM image-capable chat model.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import re
import uuid
from dataclasses import dataclass
from typing import Any

from tale_weaver.common import (
    ChatResult,
    CompletionCallable,
    InvalidImageFormatError,
    InvalidInputError,
    NoImageGeneratedError,
    TaleWeaverSettings,
    acall_chat_completion,
)

from .prompting import build_illustration_prompt
from .storage import BlobStore, build_blob_store

logger = logging.getLogger(__name__)

_DATA_URI = re.compile(r"^data:image/(\w+);base64,(.+)$", re.DOTALL)


@dataclass(frozen=True)
class DecodedImage:
    """Raw bytes and file extension recovered from a data URI."""

    extension: str
    data: bytes

    @property
    def content_type(self) -> str:
        return f"image/{self.extension}"


def _field(container: Any, name: str) -> Any:
    try:
        return container[name]
    except (KeyError, IndexError, TypeError, AttributeError):
        return getattr(container, name, None)


def extract_image_data_url(raw_response: Any) -> str | None:
    """
    Pull the first embedded image out of a chat completion response.

    Handles ``images: [{"image_url": {"url": ...}}]``, ``images: [{"image_url": "..."}]``
    and a message content that is itself a data URI.
    """
    choices = _field(raw_response, "choices")
    if not choices:
        return None
    message = _field(choices[0], "message")
    if message is None:
        return None

    images = _field(message, "images")
    if images:
        image_url = _field(images[0], "image_url")
        if isinstance(image_url, str):
            return image_url
        if image_url is not None:
            url = _field(image_url, "url")
            if isinstance(url, str):
                return url

    content = _field(message, "content")
    if isinstance(content, str) and content.startswith("data:image/"):
        return content

    return None


def decode_image_data_url(data_url: str) -> DecodedImage:
    """
    Decode a ``data:image/<ext>;base64,<payload>`` URI.
    """
    match = _DATA_URI.match(data_url.strip())
    if not match:
        raise InvalidImageFormatError("Invalid image data format")

    extension = match.group(1).lower()
    payload = "".join(match.group(2).split())
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidImageFormatError("Invalid image data format") from exc

    if not data:
        raise InvalidImageFormatError("Invalid image data format")
    return DecodedImage(extension=extension, data=data)


def build_storage_key(page_index: int, extension: str) -> str:
    """Unique object key for one page's illustration."""
    return f"{uuid.uuid4()}-page{page_index}.{extension}"


class IllustrationGenerator:
    """
    Generates one storybook illustration per call and publishes it to a blob store.

    Parameters
    ----------
    settings:
        Model, credentials, and timeout configuration.
    blob_store:
        Destination for decoded images. Defaults to the backend named in ``settings``.
    completion_fn:
        Optional async chat completion callable. Mainly useful for testing.
    """

    def __init__(
        self,
        *,
        settings: TaleWeaverSettings | None = None,
        blob_store: BlobStore | None = None,
        completion_fn: CompletionCallable | None = None,
    ) -> None:
        self._settings = settings or TaleWeaverSettings()
        self._blob_store = blob_store or build_blob_store(self._settings)
        self._completion_fn: CompletionCallable = completion_fn or acall_chat_completion

    @property
    def model(self) -> str:
        """Return the model identifier in use."""
        return self._settings.image_model

    async def generate_image(self, prompt: str, page_index: int, **model_kwargs: Any) -> str:
        """
        Render ``prompt`` in the watercolor house style, store it, and return its public URL.

        Raises
        ------
        InvalidInputError
            ``prompt`` is empty.
        UpstreamError
            The provider call failed (``RateLimitedError`` / ``QuotaExhaustedError`` for 429 / 402).
        NoImageGeneratedError
            The response carried no image.
        InvalidImageFormatError
            The image was not a base64 data URI.
        StorageError
            The blob store rejected the upload.
        """
        if not prompt or not prompt.strip():
            raise InvalidInputError("imagePrompt is required")

        result: ChatResult = await self._completion_fn(
            model=self._settings.image_model,
            messages=[{"role": "user", "content": build_illustration_prompt(prompt)}],
            modalities=["image", "text"],
            api_key=self._settings.api_key,
            api_base=self._settings.api_base,
            timeout=self._settings.request_timeout,
            **model_kwargs,
        )

        data_url = extract_image_data_url(result.raw)
        if not data_url:
            logger.error("No image in response for page %s: %s", page_index, str(result.raw)[:500])
            raise NoImageGeneratedError("No image generated")

        image = decode_image_data_url(data_url)
        key = build_storage_key(page_index, image.extension)

        await asyncio.to_thread(self._blob_store.upload, key, image.data, image.content_type)
        url = self._blob_store.get_public_url(key)
        logger.debug("Stored illustration for page %s at %s", page_index, url)
        return url
