"""
LiteLLM-powered chat completion helper utilities.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, MutableMapping, Sequence

import openai
from litellm import acompletion, completion

from .errors import QuotaExhaustedError, RateLimitedError, UpstreamError

ChatMessage = Mapping[str, Any]


@dataclass
class ChatResult:
    """
    Structured response returned from an LLM chat completion.
    """

    text: str
    raw: Any


CompletionCallable = Callable[..., Awaitable[ChatResult]]


def translate_upstream_error(exc: Exception) -> UpstreamError:
    """
    Map a provider exception onto the Tale Weaver upstream error hierarchy.

    LiteLLM re-raises provider failures as subclasses of the OpenAI SDK exceptions,
    which expose the HTTP status as ``status_code`` when a response was received.
    """
    status_code = getattr(exc, "status_code", None)
    if not isinstance(status_code, int):
        status_code = None

    if status_code == 429:
        return RateLimitedError(
            "Rate limit exceeded. Please try again in a moment.", status_code=429
        )
    if status_code == 402:
        return QuotaExhaustedError("AI credits exhausted. Please add credits.", status_code=402)
    if status_code is None:
        return UpstreamError(f"AI gateway request failed: {exc}")
    return UpstreamError(f"AI gateway error: {status_code}", status_code=status_code)


def _extract_text(response: Any) -> str:
    try:
        message = response["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise UpstreamError("Unexpected LiteLLM response format.") from exc

    if message is None:
        return ""
    return str(message).strip()


def _build_payload(
    *,
    model: str,
    messages: Sequence[ChatMessage],
    temperature: float | None,
    max_tokens: int | None,
    api_key: str | None,
    api_base: str | None,
    timeout: float | None,
    extra_kwargs: Mapping[str, Any],
) -> MutableMapping[str, Any]:
    payload: MutableMapping[str, Any] = {
        "model": model,
        "messages": list(messages),
    }

    if temperature is not None:
        payload["temperature"] = temperature

    if max_tokens is not None:
        payload["max_tokens"] = max_tokens

    if api_key is not None:
        payload["api_key"] = api_key

    if api_base is not None:
        payload["api_base"] = api_base

    if timeout is not None:
        payload["timeout"] = timeout

    payload.update(extra_kwargs)
    return payload


def call_chat_completion(
    *,
    model: str,
    messages: Sequence[ChatMessage],
    temperature: float | None = None,
    max_tokens: int | None = None,
    api_key: str | None = None,
    api_base: str | None = None,
    timeout: float | None = None,
    **extra_kwargs: Any,
) -> ChatResult:
    """
    Invoke LiteLLM's `completion` API and return the consolidated text.
    """
    payload = _build_payload(
        model=model,
        messages=messages,
        temperature=temperature,
        max_tokens=max_tokens,
        api_key=api_key,
        api_base=api_base,
        timeout=timeout,
        extra_kwargs=extra_kwargs,
    )

    try:
        response = completion(**payload)
    except openai.OpenAIError as exc:
        raise translate_upstream_error(exc) from exc

    return ChatResult(text=_extract_text(response), raw=response)


async def acall_chat_completion(
    *,
    model: str,
    messages: Sequence[ChatMessage],
    temperature: float | None = None,
    max_tokens: int | None = None,
    api_key: str | None = None,
    api_base: str | None = None,
    timeout: float | None = None,
    **extra_kwargs: Any,
) -> ChatResult:
    """
    Async counterpart of :func:`call_chat_completion` built on `acompletion`.
    """
    payload = _build_payload(
        model=model,
        messages=messages,
        temperature=temperature,
        max_tokens=max_tokens,
        api_key=api_key,
        api_base=api_base,
        timeout=timeout,
        extra_kwargs=extra_kwargs,
    )

    try:
        response = await acompletion(**payload)
    except openai.OpenAIError as exc:
        raise translate_upstream_error(exc) from exc

    return ChatResult(text=_extract_text(response), raw=response)
