"""
Render finished Tale Weaver storybooks into downloadable PDFs.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

import requests
from reportlab.lib import colors
from reportlab.lib.enums import TA_LEFT
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from reportlab.platypus import Frame, Paragraph

from tale_weaver.pipeline import StoryPage, StoryResult

logger = logging.getLogger(__name__)

TAGLINE = "A Lyrical Tale Weaver Story"


@dataclass(frozen=True)
class PageLayoutConfig:
    placeholder_fill: colors.Color
    text_color: colors.Color
    caption_color: colors.Color


DEFAULT_LAYOUT = PageLayoutConfig(
    placeholder_fill=colors.Color(200 / 255, 200 / 255, 220 / 255),
    text_color=colors.HexColor("#2F2A40"),
    caption_color=colors.HexColor("#4B506D"),
)


def default_pdf_filename(title: str) -> str:
    """File name for a storybook: the title with non-alphanumerics replaced by ``_``."""
    return f"{re.sub(r'[^a-zA-Z0-9]', '_', title)}.pdf"


class StorybookPDFBuilder:
    """
    Render a :class:`StoryResult` into a landscape A4 PDF.

    Every page shows its illustration on the left half and its text on the right half.
    The first page also carries the story title and tagline. Illustrations that cannot
    be fetched are replaced by a flat placeholder panel.
    """

    def __init__(
        self,
        *,
        page_size: tuple[float, float] = landscape(A4),
        margin_mm: float = 10.0,
        layout: PageLayoutConfig = DEFAULT_LAYOUT,
        request_timeout: float = 30.0,
    ) -> None:
        self.page_size = page_size
        self.margin = margin_mm * mm
        self.layout = layout
        self.request_timeout = request_timeout

        self.title_style = ParagraphStyle(
            name="StoryTitle",
            fontName="Helvetica-Bold",
            fontSize=20,
            leading=24,
            alignment=TA_LEFT,
            textColor=self.layout.text_color,
            spaceAfter=6,
        )
        self.tagline_style = ParagraphStyle(
            name="StoryTagline",
            fontName="Helvetica-Oblique",
            fontSize=10,
            leading=12,
            alignment=TA_LEFT,
            textColor=self.layout.caption_color,
            spaceAfter=14,
        )
        self.body_style = ParagraphStyle(
            name="Body",
            fontName="Helvetica",
            fontSize=12,
            leading=17,
            alignment=TA_LEFT,
            textColor=self.layout.text_color,
        )
        self.footer_style = ParagraphStyle(
            name="Footer",
            fontName="Helvetica",
            fontSize=8,
            leading=10,
            textColor=self.layout.caption_color,
        )

    def build_from_yaml(self, package_path: Path | str, output_path: Path | str) -> None:
        result = StoryResult.from_yaml(package_path)
        self.build(result, output_path)

    def build(self, result: StoryResult, output_path: Path | str) -> None:
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        pdf = canvas.Canvas(str(output_file), pagesize=self.page_size)
        pdf.setTitle(result.title)
        width, height = self.page_size
        total = len(result.pages)

        for index, page in enumerate(result.pages):
            self._draw_illustration(pdf, page, width, height)
            self._draw_text(pdf, result.title if index == 0 else None, page, width, height)
            self._draw_footer(pdf, f"Page {index + 1} of {total}", width)
            pdf.showPage()

        pdf.save()

    def _draw_illustration(
        self,
        pdf: canvas.Canvas,
        page: StoryPage,
        width: float,
        height: float,
    ) -> None:
        panel_width = width / 2
        image_reader = self._fetch_image(page.image_url)

        if image_reader is None:
            pdf.setFillColor(self.layout.placeholder_fill)
            pdf.rect(0, 0, panel_width, height, stroke=0, fill=1)
            return

        pdf.drawImage(image_reader, 0, 0, panel_width, height, mask="auto")

    def _draw_text(
        self,
        pdf: canvas.Canvas,
        title: str | None,
        page: StoryPage,
        width: float,
        height: float,
    ) -> None:
        frame = Frame(
            width / 2 + self.margin,
            self.margin * 2,
            width / 2 - 2 * self.margin,
            height - 3 * self.margin,
            showBoundary=0,
        )

        flowables = []
        if title:
            flowables.append(Paragraph(title, self.title_style))
            flowables.append(Paragraph(TAGLINE, self.tagline_style))
        flowables.append(Paragraph(page.text.replace("\n", "<br/>"), self.body_style))

        frame.addFromList(flowables, pdf)

    def _draw_footer(self, pdf: canvas.Canvas, text: str, width: float) -> None:
        footer_frame = Frame(
            width - 40 * mm,
            4 * mm,
            36 * mm,
            8 * mm,
            showBoundary=0,
        )
        footer_frame.addFromList([Paragraph(text, self.footer_style)], pdf)

    def _fetch_image(self, url: str) -> Optional[ImageReader]:
        parsed = urlparse(url)
        try:
            if parsed.scheme == "file":
                content = Path(url2pathname(parsed.path)).read_bytes()
            else:
                response = requests.get(url, timeout=self.request_timeout)
                response.raise_for_status()
                content = response.content
            return ImageReader(BytesIO(content))
        except (requests.RequestException, OSError) as exc:
            logger.warning("Could not load illustration %s: %s", url, exc)
            return None
