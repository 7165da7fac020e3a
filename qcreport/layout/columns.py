from __future__ import annotations

from typing import Sequence

from ..errors import InvalidSectionSpec, LayoutOverflow
from ..types import FixedWidth, WidthSpec


WIDTH_EPSILON = 1e-6


def compute_widths(total_width: float, specs: Sequence[WidthSpec]) -> list[float]:
    """Resolve column width specs against a table width.

    Fixed columns keep their declared width and the remainder is shared
    equally by the proportional columns. With no proportional column the
    fixed widths are scaled so the columns still span ``total_width``.
    """
    if not specs:
        raise InvalidSectionSpec('a table needs at least one column')

    fixed_total = 0.0
    proportional = 0
    for spec in specs:
        if isinstance(spec, FixedWidth):
            if spec.width < 0:
                raise InvalidSectionSpec(f'fixed column width must be >= 0, got {spec.width}')
            fixed_total += spec.width
        else:
            proportional += 1

    if fixed_total > total_width + WIDTH_EPSILON:
        raise LayoutOverflow(
            f'fixed columns need {fixed_total:.2f} but the table is only {total_width:.2f} wide'
        )

    if proportional:
        share = max(0.0, total_width - fixed_total) / proportional
        return [spec.width if isinstance(spec, FixedWidth) else share for spec in specs]

    if fixed_total <= 0:
        raise InvalidSectionSpec('all columns are fixed with zero width')
    scale = total_width / fixed_total
    return [spec.width * scale for spec in specs]


def column_offsets(left: float, widths: Sequence[float]) -> list[float]:
    offsets: list[float] = []
    cursor = left
    for width in widths:
        offsets.append(cursor)
        cursor += width
    return offsets
