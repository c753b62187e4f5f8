# reinvent/adapters/export/pptx_renderer.py
"""
Slide deck writer built on python-pptx.

Deck layout (16:9, dark theme):
  1. Title slide
  2. One slide per DeckSection, pathway slides with feasibility, breakthroughs
     and an optional illustration on the right
  3. Closing "Alternate History Insights" slide
"""

import io
from typing import Dict, List, Optional

import structlog
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.util import Inches, Pt

from reinvent.core.domain.models import DeckSection
from reinvent.core.ports.exporter import IDeckRenderer

logger = structlog.get_logger()

BACKGROUND = RGBColor.from_string("1A1A2E")
TITLE_COLOR = RGBColor.from_string("64B5F6")
TEXT_COLOR = RGBColor.from_string("FFFFFF")
MUTED_COLOR = RGBColor.from_string("B0BEC5")
ACCENT_COLOR = RGBColor.from_string("FFA726")

SLIDE_WIDTH = Inches(13.333)
SLIDE_HEIGHT = Inches(7.5)
BLANK_LAYOUT = 6

DECK_AUTHOR = "AI Reverse-Invention Generator"

INSIGHTS = [
    "Technology emerges from the intersection of need, knowledge, and materials",
    "Historical timing shapes how inventions develop and spread",
    "Alternate pathways reveal missed opportunities and inspire new innovations",
    "Understanding the past helps us imagine better futures",
]


class PptxDeckRenderer(IDeckRenderer):
    def render(self, title: str, sections: List[DeckSection], images: Dict[str, bytes]) -> bytes:
        prs = Presentation()
        prs.slide_width = SLIDE_WIDTH
        prs.slide_height = SLIDE_HEIGHT
        prs.core_properties.author = DECK_AUTHOR
        prs.core_properties.title = title
        prs.core_properties.subject = f"Alternate History: {title}"

        self._title_slide(prs, title)
        for section in sections:
            image = images.get(section.image_key) if section.image_key else None
            self._section_slide(prs, section, image)
        self._insights_slide(prs)

        buffer = io.BytesIO()
        prs.save(buffer)
        return buffer.getvalue()

    # --- Slides ---

    def _new_slide(self, prs):
        slide = prs.slides.add_slide(prs.slide_layouts[BLANK_LAYOUT])
        fill = slide.background.fill
        fill.solid()
        fill.fore_color.rgb = BACKGROUND
        return slide

    def _title_slide(self, prs, title: str) -> None:
        slide = self._new_slide(prs)
        self._text(slide, DECK_AUTHOR, 1, 1.5, 11.333, 1, size=36, color=TEXT_COLOR, bold=True, align=PP_ALIGN.CENTER)
        self._text(slide, title, 1, 3, 11.333, 1.5, size=28, color=TITLE_COLOR, align=PP_ALIGN.CENTER)
        self._text(
            slide,
            "Reimagining History Through AI",
            1,
            5,
            11.333,
            0.5,
            size=18,
            color=MUTED_COLOR,
            align=PP_ALIGN.CENTER,
        )

    def _section_slide(self, prs, section: DeckSection, image: Optional[bytes]) -> None:
        slide = self._new_slide(prs)
        self._text(slide, section.title, 0.5, 0.3, 12.333, 0.8, size=24, color=TITLE_COLOR, bold=True)

        has_image = image is not None and self._picture(slide, image, section)
        if section.content:
            width = 7.8 if has_image else 12.333
            self._text(slide, section.content, 0.5, 1.2, width, 4.4, size=14, color=TEXT_COLOR)

        if section.kind != "pathway":
            return

        if section.feasibility_score is not None:
            self._text(
                slide,
                f"Feasibility: {section.feasibility_score:g}/10",
                0.5,
                5.9,
                3,
                0.5,
                size=12,
                color=ACCENT_COLOR,
                bold=True,
            )
        if section.required_breakthroughs:
            self._text(slide, "Key Breakthroughs:", 4, 5.9, 3, 0.3, size=12, color=ACCENT_COLOR, bold=True)
            self._text(
                slide,
                " • ".join(section.required_breakthroughs),
                4,
                6.2,
                8.833,
                0.9,
                size=10,
                color=TEXT_COLOR,
            )

    def _insights_slide(self, prs) -> None:
        slide = self._new_slide(prs)
        self._text(
            slide,
            "Alternate History Insights",
            1,
            1,
            11.333,
            1,
            size=28,
            color=TITLE_COLOR,
            bold=True,
            align=PP_ALIGN.CENTER,
        )
        self._text(slide, "\n".join(f"• {line}" for line in INSIGHTS), 1.5, 2.5, 10.333, 3.5, size=16, color=TEXT_COLOR)

    # --- Shapes ---

    @staticmethod
    def _text(slide, text, left, top, width, height, size, color, bold=False, align=None):
        box = slide.shapes.add_textbox(Inches(left), Inches(top), Inches(width), Inches(height))
        frame = box.text_frame
        frame.word_wrap = True
        frame.vertical_anchor = MSO_ANCHOR.TOP

        for index, line in enumerate(str(text).split("\n")):
            paragraph = frame.paragraphs[0] if index == 0 else frame.add_paragraph()
            paragraph.text = line
            if align is not None:
                paragraph.alignment = align
            font = paragraph.font
            font.size = Pt(size)
            font.bold = bold
            font.color.rgb = color
        return box

    @staticmethod
    def _picture(slide, image: bytes, section: DeckSection) -> bool:
        try:
            slide.shapes.add_picture(io.BytesIO(image), Inches(8.8), Inches(1.2), width=Inches(4))
        except Exception as e:
            # python-pptx raises a range of errors for unsupported or corrupt images
            logger.warning("export_image_unreadable", image_key=section.image_key, error=str(e))
            return False
        return True
