from __future__ import annotations

import math

from .metrics import GlyphMetrics


ELLIPSIS = '...'


class TextFitter:
    def __init__(self, metrics: GlyphMetrics | None = None, *, exact_truncation: bool = False):
        self.metrics = metrics or GlyphMetrics()
        self.exact_truncation = exact_truncation

    def wrap(self, text: str, max_width: float, font: str, size: float) -> list[str]:
        """Greedy word wrap on whitespace tokens.

        A token wider than ``max_width`` on its own is kept whole on its own
        line; that overflow is accepted rather than splitting the word.
        """
        lines: list[str] = []
        current = ''
        for token in str(text or '').split():
            if not current:
                current = token
                continue
            candidate = f'{current} {token}'
            if self.metrics.width(candidate, font, size) <= max_width:
                current = candidate
                continue
            lines.append(current)
            current = token
        if current:
            lines.append(current)
        return lines

    def truncate(self, text: str, max_width: float, font: str, size: float) -> str:
        value = str(text or '')
        measured = self.metrics.width(value, font, size)
        if measured <= max_width:
            return value
        if self.exact_truncation:
            return self.truncate_exact(value, max_width, font, size)
        keep = math.floor(len(value) * max(0.0, max_width) / measured)
        return value[:keep] + ELLIPSIS

    def truncate_exact(self, text: str, max_width: float, font: str, size: float) -> str:
        value = str(text or '')
        measured = self.metrics.width(value, font, size)
        if measured <= max_width:
            return value
        keep = math.floor(len(value) * max(0.0, max_width) / measured)
        while keep > 0 and self.metrics.width(value[:keep] + ELLIPSIS, font, size) > max_width:
            keep -= 1
        while keep + 1 < len(value) and self.metrics.width(value[: keep + 1] + ELLIPSIS, font, size) <= max_width:
            keep += 1
        if keep == 0 and self.metrics.width(ELLIPSIS, font, size) > max_width:
            return ''
        return value[:keep] + ELLIPSIS
