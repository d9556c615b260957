"""
Service layer for producing paginated story drafts from song lyrics.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from tale_weaver.common import (
    ChatResult,
    CompletionCallable,
    InvalidInputError,
    StoryParseError,
    TaleWeaverSettings,
    acall_chat_completion,
)

from .prompting import StoryPrompt, build_story_prompt

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 500

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


@dataclass(frozen=True)
class StoryPageDraft:
    """
    A single page of narrative text and its illustration description, before the
    illustration has been generated.
    """

    text: str
    image_prompt: str


@dataclass(frozen=True)
class StoryDraft:
    """Titled, ordered page drafts returned by the text model."""

    title: str
    pages: tuple[StoryPageDraft, ...]


def strip_code_fence(content: str) -> str:
    """
    Return the body of the first fenced code block in ``content``, or the whole
    content when no fence is present.
    """
    match = _FENCED_BLOCK.search(content)
    if match:
        return match.group(1).strip()
    return content.strip()


def _parse_failure(message: str, content: str) -> StoryParseError:
    logger.error("%s (response preview: %r)", message, content[:PREVIEW_CHARS])
    return StoryParseError(message)


def parse_story_payload(content: str, *, fallback_title: str | None = None) -> StoryDraft:
    """
    Parse the text model's completion into a :class:`StoryDraft`.

    Every rejection is logged at ``error`` with a truncated preview of the raw completion.
    """
    try:
        parsed = json.loads(strip_code_fence(content))
    except json.JSONDecodeError as exc:
        raise _parse_failure("Failed to parse AI response", content) from exc

    if not isinstance(parsed, Mapping):
        raise _parse_failure("Story JSON must be an object with 'title' and 'pages'.", content)

    pages_data = parsed.get("pages")
    if not isinstance(pages_data, list) or not pages_data:
        raise _parse_failure("Story JSON must contain a non-empty 'pages' list.", content)

    title = str(parsed.get("title") or "").strip() or (fallback_title or "").strip()
    if not title:
        raise _parse_failure("Story JSON is missing a 'title'.", content)

    try:
        pages = _convert_to_pages(pages_data)
    except StoryParseError as exc:
        raise _parse_failure(str(exc), content) from exc

    return StoryDraft(title=title, pages=tuple(pages))


def _convert_to_pages(pages_data: Iterable[Any]) -> list[StoryPageDraft]:
    pages: list[StoryPageDraft] = []
    for index, item in enumerate(pages_data):
        if not isinstance(item, Mapping):
            raise StoryParseError(f"Invalid page payload at index {index}: {item!r}")

        text = str(item.get("text") or "").strip()
        image_prompt = str(item.get("imagePrompt") or "").strip()
        if not text or not image_prompt:
            raise StoryParseError(f"Page {index + 1} is missing 'text' or 'imagePrompt' content.")

        pages.append(StoryPageDraft(text=text, image_prompt=image_prompt))
    return pages


class StoryTextGenerator:
    """
    Turns song lyrics into a titled list of page drafts via a LiteLLM-compatible model.
    """

    def __init__(
        self,
        *,
        settings: TaleWeaverSettings | None = None,
        completion_fn: CompletionCallable | None = None,
    ) -> None:
        self._settings = settings or TaleWeaverSettings()
        self._completion_fn: CompletionCallable = completion_fn or acall_chat_completion

    @property
    def model(self) -> str:
        """Return the model identifier in use."""
        return self._settings.story_model

    async def generate_story(
        self,
        lyrics: str,
        title: str | None = None,
        *,
        temperature: float | None = None,
        **response_kwargs: Any,
    ) -> StoryDraft:
        """
        Invoke the configured model once and parse its JSON story outline.

        Raises :class:`InvalidInputError` for empty lyrics, :class:`StoryParseError`
        for a malformed response, and an :class:`UpstreamError` subclass when the
        provider call fails. Nothing is retried.
        """
        if not lyrics or not lyrics.strip():
            raise InvalidInputError("Lyrics are required")

        prompt: StoryPrompt = build_story_prompt(lyrics, title=title)

        result: ChatResult = await self._completion_fn(
            model=self._settings.story_model,
            messages=[
                {"role": "system", "content": prompt.system},
                {"role": "user", "content": prompt.user},
            ],
            temperature=temperature,
            api_key=self._settings.api_key,
            api_base=self._settings.api_base,
            timeout=self._settings.request_timeout,
            **response_kwargs,
        )

        if not result.text:
            raise StoryParseError("AI response did not contain any text content.")

        draft = parse_story_payload(result.text, fallback_title=title)
        logger.info("Drafted '%s' with %d pages.", draft.title, len(draft.pages))
        return draft
