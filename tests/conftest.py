from __future__ import annotations

import json
from typing import Any, Callable

import pytest

from tale_weaver.common import ChatResult, StorageError

SETTINGS_ENV_VARS = (
    "TALE_WEAVER_API_KEY",
    "OPENROUTER_API_KEY",
    "LITELLM_API_KEY",
    "TALE_WEAVER_API_BASE",
    "TALE_WEAVER_STORY_MODEL",
    "LITELLM_STORY_MODEL",
    "TALE_WEAVER_IMAGE_MODEL",
    "LITELLM_IMAGE_MODEL",
    "TALE_WEAVER_REQUEST_TIMEOUT",
    "TALE_WEAVER_ILLUSTRATION_TIMEOUT",
    "TALE_WEAVER_MAX_CONCURRENT_ILLUSTRATIONS",
    "TALE_WEAVER_PLACEHOLDER_IMAGE_URL",
    "TALE_WEAVER_STORAGE_BACKEND",
    "TALE_WEAVER_STORAGE_BUCKET",
    "TALE_WEAVER_STORAGE_PREFIX",
    "TALE_WEAVER_STORAGE_PUBLIC_BASE_URL",
    "TALE_WEAVER_STORAGE_ENDPOINT_URL",
    "TALE_WEAVER_STORAGE_REGION",
    "AWS_DEFAULT_REGION",
    "TALE_WEAVER_LOCAL_STORAGE_DIR",
)

# 1x1 transparent PNG.
PNG_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


class FakeBlobStore:
    """In-memory blob store recording every upload."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.objects: dict[str, tuple[bytes, str]] = {}

    def upload(self, key: str, data: bytes, content_type: str) -> None:
        if self.fail:
            raise StorageError("Failed to upload image")
        self.objects[key] = (data, content_type)

    def get_public_url(self, key: str) -> str:
        return f"https://cdn.example.com/story-images/{key}"


class RecordingCompletion:
    """Async stand-in for ``acall_chat_completion`` that replays canned results."""

    def __init__(self, responder: Callable[[dict[str, Any]], ChatResult]) -> None:
        self._responder = responder
        self.calls: list[dict[str, Any]] = []

    async def __call__(self, **kwargs: Any) -> ChatResult:
        self.calls.append(kwargs)
        return self._responder(kwargs)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the runner's own provider and storage variables out of every test."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def png_base64() -> str:
    return PNG_BASE64


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def failing_blob_store() -> FakeBlobStore:
    return FakeBlobStore(fail=True)


@pytest.fixture
def story_payload() -> dict[str, Any]:
    return {
        "title": "Sunrise",
        "pages": [
            {"text": "The sky blushed pink over the sleepy hills.", "imagePrompt": "Pink dawn over hills"},
            {"text": "A little fox stretched and yawned.", "imagePrompt": "A fox yawning in grass"},
            {"text": "Together they chased the first light.", "imagePrompt": "Fox running toward the sun"},
            {"text": "And the whole valley sang along.", "imagePrompt": "A valley glowing in sunlight"},
        ],
    }


@pytest.fixture
def story_completion(story_payload: dict[str, Any]) -> RecordingCompletion:
    text = "```json\n" + json.dumps(story_payload) + "\n```"
    return RecordingCompletion(lambda _: ChatResult(text=text, raw=None))


@pytest.fixture
def image_completion(png_base64: str) -> RecordingCompletion:
    raw = {
        "choices": [
            {
                "message": {
                    "content": "",
                    "images": [{"image_url": {"url": f"data:image/png;base64,{png_base64}"}}],
                }
            }
        ]
    }
    return RecordingCompletion(lambda _: ChatResult(text="", raw=raw))


@pytest.fixture
def make_completion() -> Callable[[Callable[[dict[str, Any]], ChatResult]], RecordingCompletion]:
    return RecordingCompletion
