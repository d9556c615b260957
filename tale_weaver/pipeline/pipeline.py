"""
Orchestrates the full Tale Weaver pipeline from lyrics to an illustrated storybook.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Sequence

import yaml

from tale_weaver.ai_generation import IllustrationGenerator
from tale_weaver.common import InvalidInputError, TaleWeaverSettings
from tale_weaver.story_generation import (
    StoryDraft,
    StoryPageDraft,
    StoryRequest,
    StoryTextGenerator,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    """A named milestone and how far along the pipeline is, from 0 to 100."""

    stage: str
    percent: float


ProgressCallback = Callable[[ProgressEvent], None]


@dataclass(frozen=True)
class StoryPage:
    """Represents all data for a single illustrated page."""

    text: str
    image_url: str
    image_prompt: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "image_url": self.image_url,
            "image_prompt": self.image_prompt,
        }


@dataclass(frozen=True)
class StoryResult:
    """Aggregated output of the Tale Weaver pipeline."""

    title: str
    pages: tuple[StoryPage, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "pages": [page.to_dict() for page in self.pages],
        }

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, allow_unicode=True)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "StoryResult":
        if "title" not in payload:
            raise ValueError("Story package payload must include 'title'.")
        if "pages" not in payload:
            raise ValueError("Story package payload must include 'pages'.")

        pages: list[StoryPage] = []
        for entry in payload.get("pages") or []:
            try:
                text = str(entry["text"]).strip()
                image_url = str(entry["image_url"]).strip()
            except (KeyError, TypeError) as exc:
                raise ValueError(f"Invalid page entry: {entry}") from exc

            if not image_url:
                raise ValueError(f"Page entry is missing an image_url: {entry}")

            prompt = entry.get("image_prompt")
            pages.append(
                StoryPage(
                    text=text,
                    image_url=image_url,
                    image_prompt=str(prompt).strip() if prompt else None,
                )
            )

        return cls(title=str(payload["title"]).strip(), pages=tuple(pages))

    @classmethod
    def from_yaml(cls, source: str | Path) -> "StoryResult":
        path = Path(source)
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        if not isinstance(data, Mapping):
            raise ValueError("Story package YAML must deserialize to a mapping.")
        return cls.from_dict(data)


@dataclass(frozen=True)
class IllustrationOutcome:
    """Settled result of one page's illustration call: a URL or the error that replaced it."""

    page_index: int
    image_url: str | None = None
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        return self.image_url is not None

    def resolve(self, placeholder_url: str) -> str:
        return self.image_url if self.image_url else placeholder_url


class StoryAssemblyPipeline:
    """
    High-level coordinator that chains story drafting and parallel illustration.
    """

    def __init__(
        self,
        *,
        settings: TaleWeaverSettings | None = None,
        story_generator: StoryTextGenerator | None = None,
        image_generator: IllustrationGenerator | None = None,
    ) -> None:
        self._settings = settings or TaleWeaverSettings()
        self._story_generator = story_generator or StoryTextGenerator(settings=self._settings)
        self._image_generator = image_generator or IllustrationGenerator(settings=self._settings)

    @property
    def placeholder_image_url(self) -> str:
        return self._settings.placeholder_image_url

    def run(
        self,
        request: StoryRequest,
        progress_callback: ProgressCallback | None = None,
    ) -> StoryResult:
        """
        Blocking wrapper around :meth:`assemble_story` for synchronous callers.
        """
        return asyncio.run(self.assemble_story(request, progress_callback))

    async def assemble_story(
        self,
        request: StoryRequest,
        progress_callback: ProgressCallback | None = None,
    ) -> StoryResult:
        """
        Draft the story, illustrate every page concurrently, and merge the results.

        A failure while drafting aborts the run and propagates unchanged. Illustration
        failures never abort: the affected page gets the placeholder image instead.
        """
        if not request.has_lyrics:
            raise InvalidInputError("Lyrics are required")

        self._notify(progress_callback, "generating story", 10)
        draft = await self._story_generator.generate_story(request.lyrics, request.title)
        self._notify(progress_callback, "story complete, generating illustrations", 30)

        outcomes = await self._illustrate_pages(draft.pages, progress_callback)
        result = self._merge(draft, outcomes)

        failures = sum(1 for outcome in outcomes if not outcome.succeeded)
        logger.info(
            "Storybook '%s' ready: %d pages, %d placeholder illustrations.",
            result.title,
            len(result.pages),
            failures,
        )
        self._notify(progress_callback, "storybook ready", 100)
        return result

    async def _illustrate_pages(
        self,
        pages: Sequence[StoryPageDraft],
        progress_callback: ProgressCallback | None,
    ) -> list[IllustrationOutcome]:
        total = len(pages)
        completed = 0
        semaphore = asyncio.Semaphore(self._settings.max_concurrent_illustrations)

        async def _illustrate(index: int, page: StoryPageDraft) -> IllustrationOutcome:
            nonlocal completed
            async with semaphore:
                outcome = await self._illustrate_page(index, page)
            # No await between the increment and the event, so completions are
            # counted and reported one at a time on the loop thread.
            completed += 1
            self._notify(
                progress_callback,
                f"illustrating page {completed} of {total}",
                30 + (completed / total) * 60,
            )
            return outcome

        return list(
            await asyncio.gather(*(_illustrate(index, page) for index, page in enumerate(pages)))
        )

    async def _illustrate_page(self, index: int, page: StoryPageDraft) -> IllustrationOutcome:
        try:
            image_url = await asyncio.wait_for(
                self._image_generator.generate_image(page.image_prompt, index),
                timeout=self._settings.illustration_timeout,
            )
        except Exception as exc:
            logger.warning(
                "Image generation failed for page %d; using placeholder.", index, exc_info=True
            )
            return IllustrationOutcome(page_index=index, error=exc)

        if not image_url:
            logger.warning("Image generation returned no URL for page %d; using placeholder.", index)
            return IllustrationOutcome(page_index=index)
        return IllustrationOutcome(page_index=index, image_url=image_url)

    def _merge(self, draft: StoryDraft, outcomes: Sequence[IllustrationOutcome]) -> StoryResult:
        by_index = {outcome.page_index: outcome for outcome in outcomes}
        pages = tuple(
            StoryPage(
                text=page.text,
                image_url=by_index[index].resolve(self._settings.placeholder_image_url),
                image_prompt=page.image_prompt,
            )
            for index, page in enumerate(draft.pages)
        )
        return StoryResult(title=draft.title, pages=pages)

    @staticmethod
    def _notify(
        callback: ProgressCallback | None,
        stage: str,
        percent: float,
    ) -> None:
        if callback is not None:
            callback(ProgressEvent(stage=stage, percent=percent))
