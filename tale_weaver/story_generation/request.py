"""
Structured representation of the song submitted by the user.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


def _coerce_optional_str(value: Any) -> str | None:
    if value is None:
        return None

    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class StoryRequest:
    """
    Lyrics (and an optional song title) to weave into a storybook.
    """

    lyrics: str
    title: str | None = None

    @property
    def has_lyrics(self) -> bool:
        return bool(self.lyrics and self.lyrics.strip())

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "StoryRequest":
        """
        Build a request from form-style data. ``content`` is accepted as an alias of ``lyrics``.
        """
        lyrics = data.get("lyrics")
        if lyrics is None:
            lyrics = data.get("content")
        return cls(
            lyrics="" if lyrics is None else str(lyrics),
            title=_coerce_optional_str(data.get("title")),
        )
