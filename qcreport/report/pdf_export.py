from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Sequence

from reportlab.lib import colors
from reportlab.pdfgen import canvas as pdf_canvas

from ..config import get_settings
from ..errors import ExportError
from ..layout.assembler import DocumentAssembler
from ..layout.canvas import FillOp, LineOp, Page, RectOp, TextOp
from ..storage import write_bytes_atomic
from ..types import Document, StyleProfile


logger = logging.getLogger(__name__)

PRODUCER = 'qcreport'


def _draw_text(pdf, op: TextOp, y: float) -> None:
    pdf.setFont(op.font, op.size)
    pdf.setFillColor(colors.HexColor(op.color))
    if op.align == 'center':
        pdf.drawCentredString(op.x, y, op.content)
    elif op.align == 'right':
        pdf.drawRightString(op.x, y, op.content)
    else:
        pdf.drawString(op.x, y, op.content)


def _replay_page(pdf, page: Page) -> None:
    canvas = page.canvas
    height = canvas.height
    pdf.setPageSize((canvas.width, height))
    for op in canvas.ops:
        if isinstance(op, FillOp):
            pdf.setFillColor(colors.HexColor(op.color))
            pdf.rect(op.x, height - op.y - op.height, op.width, op.height, stroke=0, fill=1)
        elif isinstance(op, RectOp):
            pdf.setStrokeColor(colors.HexColor(op.stroke_color))
            pdf.setLineWidth(op.line_width)
            bottom = height - op.y - op.height
            if op.radius > 0:
                pdf.roundRect(op.x, bottom, op.width, op.height, op.radius, stroke=1, fill=0)
            else:
                pdf.rect(op.x, bottom, op.width, op.height, stroke=1, fill=0)
        elif isinstance(op, LineOp):
            pdf.setStrokeColor(colors.HexColor(op.color))
            pdf.setLineWidth(op.line_width)
            pdf.line(op.x1, height - op.y1, op.x2, height - op.y2)
        elif isinstance(op, TextOp):
            _draw_text(pdf, op, height - op.y)
        else:
            raise ExportError(f'unsupported draw op: {type(op).__name__}')
    pdf.showPage()


def export_pdf(pages: Sequence[Page], *, title: str = '', author: str | None = None) -> bytes:
    """Serialize finalized pages into a PDF, one PDF page per ``Page``.

    The reportlab canvas runs in invariant mode, so the same pages always
    produce the same bytes.
    """
    if not pages:
        raise ExportError('no pages to export')
    pending = [page.number for page in pages if not page.finalized]
    if pending:
        raise ExportError(f'pages {pending} are not finalized')

    if author is None:
        author = get_settings().pdf_author
    first = pages[0].canvas
    buffer = BytesIO()
    pdf = pdf_canvas.Canvas(buffer, pagesize=(first.width, first.height), invariant=1)
    pdf.setProducer(PRODUCER)
    pdf.setTitle(title)
    pdf.setAuthor(author)
    for page in pages:
        _replay_page(pdf, page)
    pdf.save()
    data = buffer.getvalue()
    logger.info('Exported %d pages (%d bytes) for %r', len(pages), len(data), title)
    return data


def render_document_pdf(document: Document, *, style: StyleProfile | None = None) -> bytes:
    pages = DocumentAssembler(style=style).render(document)
    return export_pdf(pages, title=document.title, author=document.metadata.generated_by or None)


def write_document_pdf(document: Document, path: Path, *, style: StyleProfile | None = None) -> Path:
    data = render_document_pdf(document, style=style)
    write_bytes_atomic(path, data)
    logger.info('Wrote %s', path)
    return path
