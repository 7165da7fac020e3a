from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import LayoutOverflow, RowTooLarge
from ..types import Document, StyleProfile
from .canvas import BLACK, Canvas, LayoutBlock, Page
from .metrics import GlyphMetrics, bold_variant
from .text_fit import TextFitter


logger = logging.getLogger(__name__)

# Offsets below the top margin, in points.
HEADER_META_BASELINE = 9.0
HEADER_TITLE_BASELINE = 31.0
HEADER_PAGE_BASELINE = 47.0
HEADER_RULE_Y = 55.0
HEADER_HEIGHT = 67.0
FOOTER_RESERVE = 16.0
FOOTER_BASELINE_INSET = 4.0

HEADER_META_FONT_SIZE = 9.0
HEADER_TITLE_FONT_SIZE = 14.0
HEADER_PAGE_FONT_SIZE = 10.0
FOOTER_FONT_SIZE = 8.0
RULE_COLOR = '#000000'
FOOTER_COLOR = '#4B5563'

PAGE_NUMBER_PLACEHOLDER = 'Page _ of _'
DATE_FORMAT = '%m/%d/%Y'
SPACE_EPSILON = 1e-6


def page_number_label(number: int, total: int) -> str:
    return f'Page {number} of {total}'


@dataclass(frozen=True)
class PageGeometry:
    width: float
    height: float
    margin: float
    header_height: float = HEADER_HEIGHT
    footer_reserve: float = FOOTER_RESERVE

    @classmethod
    def from_document(cls, document: Document) -> PageGeometry:
        width, height = document.page_size.dimensions()
        geometry = cls(width=float(width), height=float(height), margin=float(document.margin))
        if geometry.margin < 0 or geometry.content_width <= 0:
            raise LayoutOverflow(
                f'margin {geometry.margin:.2f} leaves no content width on a {width:.2f} wide page'
            )
        if geometry.content_height <= 0:
            raise LayoutOverflow(
                f'margin {geometry.margin:.2f} and page header leave no content height on a '
                f'{height:.2f} high page'
            )
        return geometry

    @property
    def content_left(self) -> float:
        return self.margin

    @property
    def content_right(self) -> float:
        return self.width - self.margin

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def content_top(self) -> float:
        return self.margin + self.header_height

    @property
    def content_bottom(self) -> float:
        return self.height - self.margin - self.footer_reserve

    @property
    def content_height(self) -> float:
        return self.content_bottom - self.content_top


class PageFlow:
    """Owns page creation and is the only writer of the layout cursor.

    Every page starts with the repeated document header, whose page-number
    text is a placeholder recorded as the page's ``page_number_slot``; the
    real numbers are patched in once the page count is known.
    """

    def __init__(
        self,
        document: Document,
        *,
        geometry: PageGeometry,
        style: StyleProfile,
        fitter: TextFitter,
    ):
        self.document = document
        self.geometry = geometry
        self.style = style
        self.fitter = fitter
        self.metrics: GlyphMetrics = fitter.metrics
        self.font = style.font_family
        self.bold_font = bold_variant(style.font_family)
        self.pages: list[Page] = []

    @property
    def current(self) -> Page:
        if not self.pages:
            raise RuntimeError('page flow has not been started')
        return self.pages[-1]

    @property
    def canvas(self) -> Canvas:
        return self.current.canvas

    @property
    def cursor_y(self) -> float:
        return self.canvas.cursor_y

    def start(self) -> Page:
        if self.pages:
            raise RuntimeError('page flow already started')
        return self._open_page()

    def fits(self, height: float) -> bool:
        return self.cursor_y + height <= self.geometry.content_bottom + SPACE_EPSILON

    def ensure_space(self, height: float) -> bool:
        """Make room for an atomic unit; returns True when a page break happened."""
        if height > self.geometry.content_height + SPACE_EPSILON:
            raise RowTooLarge(
                f'a unit of height {height:.2f} cannot fit the content area '
                f'({self.geometry.content_height:.2f}) of an empty page'
            )
        if self.fits(height):
            return False
        self.break_page()
        return True

    def break_page(self) -> Page:
        self._close_current()
        page = self._open_page()
        logger.debug('Page break: started page %d of %r', page.number, self.document.title)
        return page

    def place(self, kind: str, height: float, key: tuple = ()) -> float:
        page = self.current
        top = page.canvas.cursor_y
        page.blocks.append(LayoutBlock(kind=kind, top=top, height=height, key=key))
        page.canvas.cursor_y = top + height
        return top

    def advance(self, dy: float) -> None:
        canvas = self.canvas
        canvas.cursor_y = min(canvas.cursor_y + dy, self.geometry.content_bottom)

    def close(self) -> list[Page]:
        if self.pages and not self.current.content_closed:
            self._close_current()
        return self.pages

    def _open_page(self) -> Page:
        geometry = self.geometry
        canvas = Canvas(
            geometry.width,
            geometry.height,
            font=self.font,
            size=self.style.base_font_size,
        )
        page = Page(index=len(self.pages), canvas=canvas)
        self.pages.append(page)
        page.page_number_slot = self._draw_header(canvas)
        canvas.cursor_y = geometry.content_top
        return page

    def _draw_header(self, canvas: Canvas) -> int:
        geometry = self.geometry
        top = geometry.margin
        center_x = geometry.width / 2.0

        canvas.set_text_color(BLACK)
        canvas.set_font(self.font, HEADER_META_FONT_SIZE)
        if self.document.form_code:
            canvas.text(self.document.form_code, geometry.content_left, top + HEADER_META_BASELINE)
        generated_on = self.document.metadata.generated_at.strftime(DATE_FORMAT)
        canvas.text(generated_on, geometry.content_right, top + HEADER_META_BASELINE, align='right')

        canvas.set_font(self.bold_font, HEADER_TITLE_FONT_SIZE)
        title = self.fitter.truncate_exact(
            self.document.title,
            geometry.content_width,
            self.bold_font,
            HEADER_TITLE_FONT_SIZE,
        )
        canvas.text(title, center_x, top + HEADER_TITLE_BASELINE, align='center')

        canvas.set_font(self.font, HEADER_PAGE_FONT_SIZE)
        slot = canvas.text(PAGE_NUMBER_PLACEHOLDER, center_x, top + HEADER_PAGE_BASELINE, align='center')

        canvas.set_stroke(RULE_COLOR, 0.5)
        canvas.line(geometry.content_left, top + HEADER_RULE_Y, geometry.content_right, top + HEADER_RULE_Y)
        return slot

    def _close_current(self) -> None:
        page = self.current
        geometry = self.geometry
        canvas = page.canvas
        baseline = geometry.height - geometry.margin - FOOTER_BASELINE_INSET

        canvas.set_text_color(FOOTER_COLOR)
        canvas.set_font(self.font, FOOTER_FONT_SIZE)
        if self.style.footer_text:
            canvas.text(self.style.footer_text, geometry.content_left, baseline)
        generated_by = self.document.metadata.generated_by
        if generated_by:
            canvas.text(f'Generated by {generated_by}', geometry.content_right, baseline, align='right')
        canvas.set_text_color(BLACK)
        page.content_closed = True
