"""
Utility script to exercise the illustration backend with a single prompt.

Usage:
    python scripts/illustrate_page.py \
        --prompt "A fox watching the sun rise over a misty valley"

Environment variables (a local .env file is loaded automatically):
    TALE_WEAVER_API_KEY      - provider key (falls back to OPENROUTER_API_KEY)
    TALE_WEAVER_IMAGE_MODEL  - optional image model override
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tale_weaver import TaleWeaverSettings  # noqa: E402
from tale_weaver.ai_generation import IllustrationGenerator  # noqa: E402
from tale_weaver.common import TaleWeaverError  # noqa: E402


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate one watercolor storybook illustration and print its URL."
    )
    parser.add_argument("--prompt", required=True, help="Scene to illustrate.")
    parser.add_argument(
        "--page-index",
        type=int,
        default=0,
        help="Page index embedded in the storage key (default: 0).",
    )
    return parser.parse_args(argv)


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    load_dotenv()

    try:
        settings = TaleWeaverSettings.from_env()
        generator = IllustrationGenerator(settings=settings)

        print("Running generation with the following parameters:")
        print(f"  Prompt : {args.prompt}")
        print(f"  Model  : {generator.model}")
        print(f"  Storage: {settings.storage_backend}")

        url = asyncio.run(generator.generate_image(args.prompt, args.page_index))
    except TaleWeaverError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"\nIllustration URL:\n  {url}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
