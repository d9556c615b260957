from __future__ import annotations

import asyncio
from typing import Any

import openai
import pytest

from tale_weaver.common import (
    QuotaExhaustedError,
    RateLimitedError,
    UpstreamError,
    acall_chat_completion,
    call_chat_completion,
)
from tale_weaver.common import llm as llm_module
from tale_weaver.common.llm import translate_upstream_error


class ProviderError(openai.OpenAIError):
    def __init__(self, status_code: int | None) -> None:
        super().__init__("provider failure")
        self.status_code = status_code


@pytest.mark.parametrize(
    ("status_code", "expected_type"),
    [
        (429, RateLimitedError),
        (402, QuotaExhaustedError),
        (500, UpstreamError),
        (None, UpstreamError),
    ],
)
def test_translate_upstream_error_maps_status_codes(status_code, expected_type):
    error = translate_upstream_error(ProviderError(status_code))

    assert type(error) is expected_type
    assert error.status_code == status_code


def test_acall_chat_completion_forwards_only_set_options(monkeypatch):
    captured: dict[str, Any] = {}

    async def fake_acompletion(**kwargs: Any) -> dict[str, Any]:
        captured.update(kwargs)
        return {"choices": [{"message": {"content": "  hello there  "}}]}

    monkeypatch.setattr(llm_module, "acompletion", fake_acompletion)

    result = asyncio.run(
        acall_chat_completion(
            model="openrouter/test-model",
            messages=[{"role": "user", "content": "hi"}],
            api_key="secret",
            timeout=12.0,
            modalities=["image", "text"],
        )
    )

    assert result.text == "hello there"
    assert captured["model"] == "openrouter/test-model"
    assert captured["api_key"] == "secret"
    assert captured["timeout"] == 12.0
    assert captured["modalities"] == ["image", "text"]
    assert "temperature" not in captured
    assert "api_base" not in captured


def test_acall_chat_completion_treats_missing_content_as_empty(monkeypatch):
    async def fake_acompletion(**kwargs: Any) -> dict[str, Any]:
        return {"choices": [{"message": {"content": None, "images": []}}]}

    monkeypatch.setattr(llm_module, "acompletion", fake_acompletion)

    result = asyncio.run(acall_chat_completion(model="m", messages=[]))

    assert result.text == ""


def test_acall_chat_completion_translates_provider_errors(monkeypatch):
    async def fake_acompletion(**kwargs: Any) -> dict[str, Any]:
        raise ProviderError(429)

    monkeypatch.setattr(llm_module, "acompletion", fake_acompletion)

    with pytest.raises(RateLimitedError) as excinfo:
        asyncio.run(acall_chat_completion(model="m", messages=[]))

    assert isinstance(excinfo.value.__cause__, ProviderError)


def test_acall_chat_completion_rejects_unexpected_response_shape(monkeypatch):
    async def fake_acompletion(**kwargs: Any) -> dict[str, Any]:
        return {"choices": []}

    monkeypatch.setattr(llm_module, "acompletion", fake_acompletion)

    with pytest.raises(UpstreamError):
        asyncio.run(acall_chat_completion(model="m", messages=[]))


def test_call_chat_completion_forwards_only_set_options(monkeypatch):
    captured: dict[str, Any] = {}

    def fake_completion(**kwargs: Any) -> dict[str, Any]:
        captured.update(kwargs)
        return {"choices": [{"message": {"content": " once upon a time "}}]}

    monkeypatch.setattr(llm_module, "completion", fake_completion)

    result = call_chat_completion(
        model="openrouter/test-model",
        messages=[{"role": "user", "content": "hi"}],
        temperature=0.2,
    )

    assert result.text == "once upon a time"
    assert captured["temperature"] == 0.2
    assert "api_key" not in captured
    assert "timeout" not in captured


def test_call_chat_completion_translates_provider_errors(monkeypatch):
    def fake_completion(**kwargs: Any) -> dict[str, Any]:
        raise ProviderError(402)

    monkeypatch.setattr(llm_module, "completion", fake_completion)

    with pytest.raises(QuotaExhaustedError) as excinfo:
        call_chat_completion(model="m", messages=[])

    assert isinstance(excinfo.value.__cause__, ProviderError)
