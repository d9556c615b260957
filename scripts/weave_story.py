"""
CLI to turn song lyrics into an illustrated storybook end-to-end.

Usage:
    python scripts/weave_story.py \
        --lyrics-file lyrics.txt \
        --title "Sunrise" \
        --output story.yaml \
        --pdf story.pdf

Environment variables (a local .env file is loaded automatically):
    TALE_WEAVER_API_KEY          - provider key (falls back to OPENROUTER_API_KEY)
    TALE_WEAVER_STORAGE_BACKEND  - "local" (default) or "s3"
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from tqdm.auto import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

# Ensure project root is on the Python path when running as a script.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tale_weaver import (  # noqa: E402
    ProgressEvent,
    StoryAssemblyPipeline,
    StorybookPDFBuilder,
    StoryRequest,
    TaleWeaverSettings,
)
from tale_weaver.common import TaleWeaverError  # noqa: E402


class ProgressTracker:
    """
    Mirrors pipeline progress events onto a single percentage bar.
    """

    def __init__(self) -> None:
        self._bar = tqdm(total=100, desc="Weaving", unit="%", bar_format="{l_bar}{bar}| {n:.0f}%")

    def __call__(self, event: ProgressEvent) -> None:
        self._bar.set_description(event.stage.capitalize())
        self._bar.update(event.percent - self._bar.n)
        if event.percent >= 100:
            self.close()

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Weave song lyrics into an illustrated storybook.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--lyrics", help="Lyrics text.")
    source.add_argument("--lyrics-file", help="Path to a UTF-8 text file holding the lyrics.")
    parser.add_argument("--title", default=None, help="Optional song title.")
    parser.add_argument(
        "--output",
        default="story.yaml",
        help="Output YAML file storing the story package (default: story.yaml).",
    )
    parser.add_argument(
        "--pdf",
        default=None,
        help="Optionally render the storybook to this PDF path.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )
    return parser.parse_args(argv)


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )
    load_dotenv()

    lyrics = args.lyrics
    if args.lyrics_file:
        try:
            lyrics = Path(args.lyrics_file).read_text(encoding="utf-8")
        except OSError as exc:
            print(f"Error: could not read lyrics file: {exc}", file=sys.stderr)
            return 1
    request = StoryRequest(lyrics=lyrics, title=args.title)

    try:
        settings = TaleWeaverSettings.from_env()
        pipeline = StoryAssemblyPipeline(settings=settings)
        tracker = ProgressTracker()
        try:
            with logging_redirect_tqdm():
                result = pipeline.run(request, progress_callback=tracker)
        finally:
            tracker.close()
    except TaleWeaverError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    output_path = Path(args.output)
    output_path.write_text(result.to_yaml(), encoding="utf-8")
    print(f"Saved '{result.title}' ({len(result.pages)} pages) to {output_path}")

    if args.pdf:
        StorybookPDFBuilder().build(result, args.pdf)
        print(f"Rendered storybook PDF to {args.pdf}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
