import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import PP_ALIGN
from pptx.exc import PythonPptxError
from pptx.oxml.ns import qn
from pptx.util import Inches, Pt

from .assets import ImageAsset
from .config import DECK_TITLE
from .errors import PersistenceError, SlideCompositionError
from .roster import UserProfile

logger = logging.getLogger(__name__)

# 16:9 at 10in wide.
SLIDE_SIZE = (Inches(10), Inches(5.625))
BLANK_LAYOUT = 6

FONT_FACE = "Arial"
HEADING_COLOR = RGBColor(0x36, 0x36, 0x36)
BODY_COLOR = RGBColor(0x66, 0x66, 0x66)

Box = Tuple[float, float, float, float]

TITLE_BOX: Box = (1.0, 2.0, 8.0, 1.5)
NAME_BOX: Box = (0.5, 0.5, 9.0, 1.0)
PHOTO_BOX: Box = (0.5, 1.7, 3.0, 3.0)
FACTS_BOX: Box = (4.0, 1.7, 5.5, 3.0)


@dataclass
class Slide:
    title: str
    image_path: Optional[Path] = None
    facts: List[str] = field(default_factory=list)


def build_facts(profile: UserProfile) -> List[str]:
    labelled = [
        ("Title", profile.title),
        ("Email", profile.email),
        ("Phone", profile.phone),
        ("Timezone", profile.timezone),
    ]
    return [f"{label}: {value}" for label, value in labelled if value]


def build_slide(profile: UserProfile, asset: Optional[ImageAsset] = None) -> Slide:
    title = profile.display_name
    if not title:
        raise SlideCompositionError("profile has no display name", user_id=profile.user_id)
    if not isinstance(title, str):
        raise SlideCompositionError(
            f"display name is {type(title).__name__}, expected str", user_id=profile.user_id
        )
    return Slide(
        title=title,
        image_path=asset.path if asset is not None else None,
        facts=build_facts(profile),
    )


class DocumentComposer:
    """
    Accumulates slides in roster order and saves them as one .pptx deck.

    The title slide is added on construction, so a fresh composer already
    holds one slide.
    """

    def __init__(self, deck_title: str = DECK_TITLE) -> None:
        self.presentation = Presentation()
        self.presentation.slide_width, self.presentation.slide_height = SLIDE_SIZE
        self.skipped: List[SlideCompositionError] = []
        self._add_title_slide(deck_title)

    @property
    def slide_count(self) -> int:
        return len(self.presentation.slides)

    def add_profile(self, profile: UserProfile, asset: Optional[ImageAsset] = None) -> bool:
        """Append one slide for `profile`; returns False if it had to be skipped."""
        try:
            spec = build_slide(profile, asset)
            self._render(spec)
        except SlideCompositionError as err:
            self._skip(profile, err)
            return False
        except (OSError, ValueError, TypeError, KeyError, PythonPptxError) as exc:
            self._skip(profile, SlideCompositionError(str(exc), user_id=profile.user_id))
            return False

        logger.info("Created slide for %s", spec.title)
        return True

    def save(self, path: Path) -> Path:
        path = Path(path)
        try:
            self.presentation.save(str(path))
        except OSError as exc:
            raise PersistenceError(f"Failed to save presentation to {path}: {exc}") from exc
        logger.info("PowerPoint saved to %s", path)
        return path

    def _skip(self, profile: UserProfile, err: SlideCompositionError) -> None:
        logger.error("Error creating slide for user %s: %s", profile.user_id, err)
        self.skipped.append(err)

    def _add_title_slide(self, deck_title: str) -> None:
        slide = self._new_slide()
        _add_text(
            slide,
            TITLE_BOX,
            [deck_title],
            size=44,
            color=HEADING_COLOR,
            bold=True,
            align=PP_ALIGN.CENTER,
        )

    def _render(self, spec: Slide) -> None:
        # A slide that fails half-way is taken back out of the deck.
        count_before = self.slide_count
        slide = self._new_slide()
        try:
            _add_text(slide, NAME_BOX, [spec.title], size=36, color=HEADING_COLOR, bold=True)
            if spec.image_path is not None:
                left, top, width, height = PHOTO_BOX
                slide.shapes.add_picture(
                    str(spec.image_path),
                    Inches(left),
                    Inches(top),
                    width=Inches(width),
                    height=Inches(height),
                )
            if spec.facts:
                _add_text(
                    slide,
                    FACTS_BOX,
                    spec.facts,
                    size=18,
                    color=BODY_COLOR,
                    bullet=True,
                    line_spacing=30,
                )
        except Exception:
            if self.slide_count > count_before:
                self._remove_last_slide()
            raise

    def _new_slide(self):
        return self.presentation.slides.add_slide(self.presentation.slide_layouts[BLANK_LAYOUT])

    def _remove_last_slide(self) -> None:
        slide_ids = self.presentation.slides._sldIdLst
        last = slide_ids[-1]
        slide_ids.remove(last)
        self.presentation.part.drop_rel(last.rId)


def _add_text(
    slide,
    box: Box,
    lines: List[str],
    size: int,
    color: RGBColor,
    bold: bool = False,
    align=PP_ALIGN.LEFT,
    bullet: bool = False,
    line_spacing: Optional[int] = None,
):
    left, top, width, height = box
    shape = slide.shapes.add_textbox(Inches(left), Inches(top), Inches(width), Inches(height))
    frame = shape.text_frame
    frame.word_wrap = True

    for idx, line in enumerate(lines):
        paragraph = frame.paragraphs[0] if idx == 0 else frame.add_paragraph()
        paragraph.alignment = align
        if line_spacing is not None:
            paragraph.line_spacing = Pt(line_spacing)
        if bullet:
            _set_bullet(paragraph)
        run = paragraph.add_run()
        run.text = line
        run.font.name = FONT_FACE
        run.font.size = Pt(size)
        run.font.bold = bold
        run.font.color.rgb = color
    return shape


def _set_bullet(paragraph) -> None:
    p_pr = paragraph._p.get_or_add_pPr()
    p_pr.set("marL", str(Inches(0.3)))
    p_pr.set("indent", str(-Inches(0.3)))
    bullet = p_pr.makeelement(qn("a:buChar"), {"char": "•"})
    p_pr.append(bullet)
