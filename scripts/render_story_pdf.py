"""
Render a Tale Weaver story package YAML into a downloadable PDF.

Usage:
    python scripts/render_story_pdf.py \
        --package story.yaml \
        --output Sunrise.pdf
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure project root is on the Python path.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tale_weaver import StoryResult, StorybookPDFBuilder  # noqa: E402
from tale_weaver.pdf_generation import default_pdf_filename  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Convert a Tale Weaver story package YAML into a storybook PDF."
    )
    parser.add_argument(
        "--package",
        required=True,
        help="Path to the story package YAML (output of weave_story.py).",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Destination PDF file path. Defaults to the story title.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Timeout in seconds for downloading illustration assets (default: 30).",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()

    result = StoryResult.from_yaml(args.package)
    output = args.output or default_pdf_filename(result.title)

    builder = StorybookPDFBuilder(request_timeout=args.timeout)
    builder.build(result, output)

    print(f"Rendered storybook PDF to {output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
