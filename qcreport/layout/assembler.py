from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from ..config import get_settings
from ..types import Document, StyleProfile
from .canvas import Page
from .flow import (
    FOOTER_FONT_SIZE,
    HEADER_META_FONT_SIZE,
    HEADER_PAGE_FONT_SIZE,
    HEADER_TITLE_FONT_SIZE,
    PageFlow,
    PageGeometry,
    page_number_label,
)
from .metrics import GlyphMetrics, bold_variant, register_font
from .sections import LayoutUnit, RenderContext, renderer_for
from .text_fit import TextFitter


logger = logging.getLogger(__name__)


def finalize_pages(pages: list[Page]) -> list[Page]:
    """Second pass: patch every page-number placeholder, then seal the page.

    Only the reserved text op changes; its font and position are kept, so
    nothing else on the page moves.
    """
    total = len(pages)
    for page in pages:
        if page.finalized:
            raise RuntimeError(f'page {page.number} is already finalized')
        if page.page_number_slot is None:
            raise RuntimeError(f'page {page.number} has no page number slot')
        page.canvas.replace_text(page.page_number_slot, page_number_label(page.number, total))
        page.canvas.seal()
    logger.debug('Finalized %d pages', total)
    return pages


@dataclass
class AssemblyState:
    section_index: int = 0
    unit_index: int = 0
    aborted: bool = False
    finished: bool = False


class AssemblyRun:
    """Resumable first pass over one document.

    The iteration state lives in ``state`` rather than on a call stack, so a
    host can lay out a unit or a page at a time and come back later.
    """

    def __init__(self, document: Document, *, geometry: PageGeometry, style: StyleProfile, fitter: TextFitter):
        self.document = document
        self.geometry = geometry
        self.style = style
        self.fitter = fitter
        self.state = AssemblyState()
        self.flow = PageFlow(document, geometry=geometry, style=style, fitter=fitter)
        self._units: list[LayoutUnit] | None = None
        self.flow.start()

    @property
    def pages(self) -> list[Page]:
        return self.flow.pages

    @property
    def done(self) -> bool:
        return self.state.section_index >= len(self.document.sections)

    def step(self) -> bool:
        """Lay out one atomic unit; returns False once every section is consumed."""
        self._ensure_usable()
        while not self.done:
            units = self._current_units()
            if self.state.unit_index < len(units):
                unit = units[self.state.unit_index]
                self._guarded(unit)
                self.state.unit_index += 1
                return True
            self.state.section_index += 1
            self.state.unit_index = 0
            self._units = None
        return False

    def iter_pages(self) -> Iterator[Page]:
        """Yield each page as soon as its content is complete.

        Yielded pages still carry the page-number placeholder; numbers are
        patched by ``finish``.
        """
        emitted = 0
        while self.step():
            while emitted < len(self.pages) - 1:
                yield self.pages[emitted]
                emitted += 1
        self.flow.close()
        while emitted < len(self.pages):
            yield self.pages[emitted]
            emitted += 1

    def finish(self) -> list[Page]:
        self._ensure_usable()
        while self.step():
            pass
        pages = self.flow.close()
        self._guarded(lambda _flow: finalize_pages(pages))
        self.state.finished = True
        logger.info(
            'Rendered %r: %d sections into %d pages',
            self.document.title,
            len(self.document.sections),
            len(pages),
        )
        return list(pages)

    def _current_units(self) -> list[LayoutUnit]:
        if self._units is None:
            index = self.state.section_index
            section = self.document.sections[index]
            ctx = RenderContext(geometry=self.geometry, style=self.style, fitter=self.fitter, section_index=index)
            self._units = renderer_for(section).layout(section, ctx)
        return self._units

    def _guarded(self, unit: LayoutUnit) -> None:
        try:
            unit(self.flow)
        except Exception:
            # never hand out a partially rendered page set
            self.state.aborted = True
            self.flow.pages.clear()
            self._units = None
            raise

    def _ensure_usable(self) -> None:
        if self.state.aborted:
            raise RuntimeError('assembly run was aborted; start a new run')
        if self.state.finished:
            raise RuntimeError('assembly run is already finished')


class DocumentAssembler:
    def __init__(
        self,
        *,
        style: StyleProfile | None = None,
        metrics: GlyphMetrics | None = None,
        exact_truncation: bool | None = None,
    ):
        settings = get_settings()
        if settings.pdf_font_path is not None:
            register_font(settings.pdf_font_name, settings.pdf_font_path)
        self.style = style or settings.style_profile()
        if exact_truncation is None:
            exact_truncation = settings.exact_truncation
        self.fitter = TextFitter(metrics or GlyphMetrics(), exact_truncation=exact_truncation)

    @property
    def metrics(self) -> GlyphMetrics:
        return self.fitter.metrics

    def validate(self, document: Document) -> PageGeometry:
        geometry = PageGeometry.from_document(document)
        font = self.style.font_family
        bold = bold_variant(font)
        self.metrics.require(font, self.style.base_font_size)
        self.metrics.require(font, HEADER_META_FONT_SIZE)
        self.metrics.require(font, HEADER_PAGE_FONT_SIZE)
        self.metrics.require(font, FOOTER_FONT_SIZE)
        self.metrics.require(bold, HEADER_TITLE_FONT_SIZE)
        for index, section in enumerate(document.sections):
            ctx = RenderContext(geometry=geometry, style=self.style, fitter=self.fitter, section_index=index)
            renderer_for(section).check(section, ctx)
        return geometry

    def start(self, document: Document) -> AssemblyRun:
        geometry = self.validate(document)
        return AssemblyRun(document, geometry=geometry, style=self.style, fitter=self.fitter)

    def render(self, document: Document) -> list[Page]:
        return self.start(document).finish()
