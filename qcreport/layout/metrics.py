from __future__ import annotations

import logging
import math
from pathlib import Path

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont

from ..errors import MetricsUnavailable


logger = logging.getLogger(__name__)

_BOLD_FACES: dict[str, str] = {
    'Helvetica': 'Helvetica-Bold',
    'Helvetica-Oblique': 'Helvetica-BoldOblique',
    'Times-Roman': 'Times-Bold',
    'Times-Italic': 'Times-BoldItalic',
    'Courier': 'Courier-Bold',
    'Courier-Oblique': 'Courier-BoldOblique',
}
_AVAILABLE_FONTS: set[str] = set()


def font_available(font_name: str | None) -> bool:
    token = str(font_name or '').strip()
    if not token:
        return False
    # only hits are cached; a font may be registered with pdfmetrics later
    if token in _AVAILABLE_FONTS:
        return True
    try:
        pdfmetrics.getFont(token)
    except (KeyError, ValueError):
        return False
    _AVAILABLE_FONTS.add(token)
    return True


def register_font(font_name: str, font_path: Path) -> bool:
    if font_name in pdfmetrics.getRegisteredFontNames():
        return True

    try:
        pdfmetrics.registerFont(TTFont(font_name, str(font_path)))
    except (TTFError, OSError) as exc:
        logger.warning('Failed to register PDF font %s from %s: %s', font_name, font_path, exc)
        return False
    _AVAILABLE_FONTS.add(font_name)
    logger.info('Registered PDF font %s from %s', font_name, font_path)
    return True


def bold_variant(font_name: str) -> str:
    token = str(font_name or '').strip()
    known = _BOLD_FACES.get(token)
    if known:
        return known
    for candidate in (f'{token}-Bold', f'{token} Bold'):
        if font_available(candidate):
            return candidate
    return token


def _check_size(size: float) -> float:
    try:
        value = float(size)
    except (TypeError, ValueError) as exc:
        raise MetricsUnavailable(f'font size {size!r} is not a number') from exc
    if not math.isfinite(value) or value <= 0:
        raise MetricsUnavailable(f'font size {size!r} cannot be measured')
    return value


class GlyphMetrics:
    """Rendered string widths for registered PDF fonts.

    Stateless; an unknown font or an unusable size raises
    ``MetricsUnavailable`` instead of falling back to an estimated width.
    """

    def require(self, font: str, size: float) -> None:
        _check_size(size)
        if not font_available(font):
            raise MetricsUnavailable(f'font {font!r} is not registered')

    def width(self, text: str, font: str, size: float) -> float:
        value = _check_size(size)
        if not font_available(font):
            raise MetricsUnavailable(f'font {font!r} is not registered')
        return float(pdfmetrics.stringWidth(str(text or ''), font, value))

    def ascent(self, font: str, size: float) -> float:
        self.require(font, size)
        return float(pdfmetrics.getAscent(font, float(size)))

    def descent(self, font: str, size: float) -> float:
        self.require(font, size)
        return float(pdfmetrics.getDescent(font, float(size)))

    def baseline_in_box(self, font: str, size: float, *, top: float, height: float) -> float:
        # top-left origin: glyph box spans ascent above and -descent below the baseline
        return top + (height + self.ascent(font, size) + self.descent(font, size)) / 2.0
