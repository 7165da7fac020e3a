"""
Shared pytest fixtures.

Documents built with ``make_document`` get a page whose content area is
exactly ``content_height`` points tall, so pagination can be asserted in
whole rows.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from qcreport.config import get_settings
from qcreport.layout.assembler import DocumentAssembler
from qcreport.layout.flow import FOOTER_RESERVE, HEADER_HEIGHT
from qcreport.layout.metrics import GlyphMetrics
from qcreport.layout.text_fit import TextFitter
from qcreport.types import Document, DocumentMetadata, HeaderCell, PageSize, StyleProfile, Table


MARGIN = 10.0
PAGE_WIDTH = 400.0
FIXED_TIME = datetime(2025, 7, 28, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Each test sees default settings with output under tmp_path."""
    monkeypatch.setenv('OUTPUT_DIR', str(tmp_path / 'output'))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def metrics() -> GlyphMetrics:
    return GlyphMetrics()


@pytest.fixture
def fitter(metrics) -> TextFitter:
    return TextFitter(metrics)


@pytest.fixture
def style() -> StyleProfile:
    return StyleProfile(footer_text='QC copy')


@pytest.fixture
def assembler(style) -> DocumentAssembler:
    return DocumentAssembler(style=style, exact_truncation=False)


def make_document(
    sections,
    *,
    content_height: float = 180.0,
    title: str = 'Inspection',
    margin: float = MARGIN,
    **extra,
) -> Document:
    page_height = 2 * MARGIN + HEADER_HEIGHT + FOOTER_RESERVE + content_height
    return Document(
        title=title,
        page_size=PageSize(width=PAGE_WIDTH, height=page_height),
        margin=margin,
        sections=sections,
        metadata=DocumentMetadata(generated_by='inspector', generated_at=FIXED_TIME),
        **extra,
    )


def make_table(row_count: int, **extra) -> Table:
    return Table(
        headers=[HeaderCell.proportional('Joint'), HeaderCell.proportional('Value')],
        rows=[[f'J{i}', str(i)] for i in range(row_count)],
        row_height=10.0,
        header_height=16.0,
        **extra,
    )
