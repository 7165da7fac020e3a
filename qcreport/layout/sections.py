from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Callable, Sequence

from reportlab.lib.units import mm

from ..errors import InvalidSectionSpec, LayoutOverflow, RowTooLarge
from ..types import Choice, FieldGroup, FreeText, NotesGrid, StyleProfile, Table
from .canvas import BLACK, RectStyle
from .columns import column_offsets, compute_widths
from .flow import PageFlow, PageGeometry
from .metrics import GlyphMetrics, bold_variant
from .text_fit import TextFitter


LayoutUnit = Callable[[PageFlow], None]

SECTION_TITLE_HEIGHT = 16.0
SECTION_TITLE_INSET = 5.0
SECTION_GAP = 10.0
CELL_PADDING = 4.0
HEADER_LINE_FACTOR = 1.2

FIELD_GUTTER = 3 * mm
FIELD_LABEL_HEIGHT = 12.0
FIELD_LABEL_INSET = 3.0
FIELD_BOX_HEIGHT = 16.0
FIELD_ROW_GAP = 6.0

NOTE_GUTTER = 10.0
NOTE_BOX_HEIGHT = 8 * mm
NOTE_ROW_GAP = 8.0
NOTE_LEGEND_HEIGHT = 14.0

FREE_TEXT_LINE_FACTOR = 1.4

TABLE_STROKE = RectStyle(stroke_color=BLACK, line_width=0.5)
BOX_STROKE = RectStyle(stroke_color='#808080', line_width=0.85, radius=1.5 * mm)


@dataclass(frozen=True)
class RenderContext:
    geometry: PageGeometry
    style: StyleProfile
    fitter: TextFitter
    section_index: int

    @property
    def metrics(self) -> GlyphMetrics:
        return self.fitter.metrics

    @property
    def font(self) -> str:
        return self.style.font_family

    @property
    def bold_font(self) -> str:
        return bold_variant(self.style.font_family)

    @property
    def size(self) -> float:
        return self.style.base_font_size


class SectionRenderer:
    """Validates one section variant and plans it as atomic layout units.

    Planning draws nothing: each returned unit asks the page flow for space
    and then draws onto whatever page is current when it runs.
    """

    def validate(self, section, ctx: RenderContext) -> None:
        raise NotImplementedError

    def plan(self, section, ctx: RenderContext) -> list[LayoutUnit]:
        raise NotImplementedError

    def lead_height(self, section, ctx: RenderContext) -> float:
        return 0.0

    def check(self, section, ctx: RenderContext) -> None:
        self.validate(section, ctx)
        if section.title:
            ctx.metrics.require(ctx.bold_font, ctx.size + 3)
            needed = SECTION_TITLE_HEIGHT + self.lead_height(section, ctx)
            if needed > ctx.geometry.content_height:
                raise RowTooLarge(
                    f'section {ctx.section_index} title plus its first row needs {needed:.2f}, '
                    f'more than the page content height {ctx.geometry.content_height:.2f}'
                )

    def layout(self, section, ctx: RenderContext) -> list[LayoutUnit]:
        units = self.plan(section, ctx)
        if section.title:
            keep_with = self.lead_height(section, ctx)
            units.insert(0, partial(_draw_section_title, ctx=ctx, title=section.title, keep_with=keep_with))
        units.append(_section_gap)
        return units


def _draw_section_title(flow: PageFlow, *, ctx: RenderContext, title: str, keep_with: float) -> None:
    flow.ensure_space(SECTION_TITLE_HEIGHT + keep_with)
    canvas = flow.canvas
    top = flow.cursor_y
    size = ctx.size + 3
    canvas.set_text_color(BLACK)
    canvas.set_font(ctx.bold_font, size)
    text = ctx.fitter.truncate_exact(title, ctx.geometry.content_width, ctx.bold_font, size)
    canvas.text(text, ctx.geometry.content_left, top + SECTION_TITLE_HEIGHT - SECTION_TITLE_INSET)
    flow.place('section_title', SECTION_TITLE_HEIGHT, key=(ctx.section_index,))


def _section_gap(flow: PageFlow) -> None:
    flow.advance(SECTION_GAP)


def _slot_width(total: float, count: int, gutter: float) -> float:
    return (total - gutter * (count - 1)) / count


class FieldGroupRenderer(SectionRenderer):
    def _box_height(self, group: FieldGroup) -> float:
        return FIELD_BOX_HEIGHT if group.box_height is None else group.box_height

    def validate(self, group: FieldGroup, ctx: RenderContext) -> None:
        if group.columns < 1:
            raise InvalidSectionSpec(f'field group {ctx.section_index} needs at least one column')
        if self._box_height(group) <= 0:
            raise InvalidSectionSpec(f'field group {ctx.section_index} box height must be positive')
        if _slot_width(ctx.geometry.content_width, group.columns, FIELD_GUTTER) <= 2 * CELL_PADDING:
            raise LayoutOverflow(
                f'field group {ctx.section_index}: {group.columns} columns do not fit '
                f'{ctx.geometry.content_width:.2f}'
            )
        row_height = FIELD_LABEL_HEIGHT + self._box_height(group)
        if row_height > ctx.geometry.content_height:
            raise RowTooLarge(f'field group {ctx.section_index} row height {row_height:.2f} exceeds a page')
        ctx.metrics.require(ctx.bold_font, ctx.size + 1)

    def lead_height(self, group: FieldGroup, ctx: RenderContext) -> float:
        if not group.fields:
            return 0.0
        return FIELD_LABEL_HEIGHT + self._box_height(group)

    def plan(self, group: FieldGroup, ctx: RenderContext) -> list[LayoutUnit]:
        units: list[LayoutUnit] = []
        fields = list(group.fields)
        for row_index, start in enumerate(range(0, len(fields), group.columns)):
            chunk = fields[start : start + group.columns]
            units.append(partial(self._draw_row, group=group, ctx=ctx, row_index=row_index, fields=chunk))
        return units

    def _draw_row(
        self,
        flow: PageFlow,
        *,
        group: FieldGroup,
        ctx: RenderContext,
        row_index: int,
        fields: Sequence[tuple[str, str]],
    ) -> None:
        box_height = self._box_height(group)
        row_height = FIELD_LABEL_HEIGHT + box_height
        flow.ensure_space(row_height)

        canvas = flow.canvas
        geometry = ctx.geometry
        top = flow.cursor_y
        slot_width = _slot_width(geometry.content_width, group.columns, FIELD_GUTTER)
        label_size = ctx.size + 1
        box_top = top + FIELD_LABEL_HEIGHT
        value_baseline = ctx.metrics.baseline_in_box(ctx.font, ctx.size, top=box_top, height=box_height)

        for column, (label, value) in enumerate(fields):
            x = geometry.content_left + column * (slot_width + FIELD_GUTTER)

            canvas.set_font(ctx.bold_font, label_size)
            label_text = ctx.fitter.truncate(label, slot_width, ctx.bold_font, label_size)
            canvas.text(label_text, x, top + FIELD_LABEL_HEIGHT - FIELD_LABEL_INSET)

            canvas.rect(x, box_top, slot_width, box_height, BOX_STROKE)

            if value:
                canvas.set_font(ctx.font, ctx.size)
                value_text = ctx.fitter.truncate(value, slot_width - 2 * CELL_PADDING, ctx.font, ctx.size)
                canvas.text(value_text, x + CELL_PADDING, value_baseline)

        flow.place('field_row', row_height, key=(ctx.section_index, row_index))
        flow.advance(FIELD_ROW_GAP)


class TableRenderer(SectionRenderer):
    def _widths(self, table: Table, ctx: RenderContext) -> list[float]:
        return compute_widths(ctx.geometry.content_width, [header.width for header in table.headers])

    def validate(self, table: Table, ctx: RenderContext) -> None:
        index = ctx.section_index
        if not table.headers:
            raise InvalidSectionSpec(f'table {index} has no header cells')
        if table.row_height <= 0 or table.header_height <= 0:
            raise InvalidSectionSpec(f'table {index} row and header heights must be positive')
        self._widths(table, ctx)
        column_count = len(table.headers)
        for row_index, row in enumerate(table.rows):
            if len(row) > column_count:
                raise InvalidSectionSpec(
                    f'table {index} row {row_index} has {len(row)} cells for {column_count} columns'
                )
        for column in sorted(table.highlighted_columns):
            if column < 0 or column >= column_count:
                raise InvalidSectionSpec(f'table {index} highlights missing column {column}')
        needed = table.header_height + table.row_height
        if needed > ctx.geometry.content_height:
            raise RowTooLarge(
                f'table {index} header plus one row needs {needed:.2f}, '
                f'more than the page content height {ctx.geometry.content_height:.2f}'
            )
        ctx.metrics.require(ctx.bold_font, ctx.size + 1)
        ctx.metrics.require(ctx.font, ctx.size)

    def lead_height(self, table: Table, ctx: RenderContext) -> float:
        return table.header_height + (table.row_height if table.rows else 0.0)

    def plan(self, table: Table, ctx: RenderContext) -> list[LayoutUnit]:
        widths = self._widths(table, ctx)
        offsets = column_offsets(ctx.geometry.content_left, widths)
        grid = _TableGrid(table=table, ctx=ctx, widths=widths, offsets=offsets)
        units: list[LayoutUnit] = [grid.draw_first_header]
        units.extend(partial(grid.draw_row, row_index=row_index) for row_index in range(len(table.rows)))
        return units


@dataclass(frozen=True)
class _TableGrid:
    table: Table
    ctx: RenderContext
    widths: list[float]
    offsets: list[float]

    @property
    def width(self) -> float:
        return sum(self.widths)

    def draw_first_header(self, flow: PageFlow) -> None:
        flow.ensure_space(self.lead_height())
        self.draw_header(flow)

    def lead_height(self) -> float:
        return self.table.header_height + (self.table.row_height if self.table.rows else 0.0)

    def draw_header(self, flow: PageFlow) -> None:
        table, ctx = self.table, self.ctx
        canvas = flow.canvas
        top = flow.cursor_y
        left = ctx.geometry.content_left
        height = table.header_height

        canvas.filled_background(left, top, self.width, height, ctx.style.header_fill_color)
        for column in sorted(table.highlighted_columns):
            canvas.filled_background(
                self.offsets[column], top, self.widths[column], height, ctx.style.highlight_fill_color
            )
        for offset, width in zip(self.offsets, self.widths):
            canvas.rect(offset, top, width, height, TABLE_STROKE)

        font = ctx.bold_font
        size = ctx.size + 1
        line_height = size * HEADER_LINE_FACTOR
        canvas.set_text_color(BLACK)
        canvas.set_font(font, size)
        for header, offset, width in zip(table.headers, self.offsets, self.widths):
            lines = ctx.fitter.wrap(header.label, width - 2 * CELL_PADDING, font, size)
            block_top = top + (height - len(lines) * line_height) / 2.0
            for line_index, line in enumerate(lines):
                baseline = ctx.metrics.baseline_in_box(
                    font, size, top=block_top + line_index * line_height, height=line_height
                )
                canvas.text(line, offset + width / 2.0, baseline, align='center')

        flow.place('table_header', height, key=(ctx.section_index,))

    def draw_row(self, flow: PageFlow, *, row_index: int) -> None:
        table, ctx = self.table, self.ctx
        if flow.ensure_space(table.row_height):
            self.draw_header(flow)

        canvas = flow.canvas
        top = flow.cursor_y
        left = ctx.geometry.content_left
        height = table.row_height

        # parity of the absolute row index keeps shading continuous across pages
        if row_index % 2 == 1:
            canvas.filled_background(left, top, self.width, height, ctx.style.alternate_row_fill_color)
        for column in sorted(table.highlighted_columns):
            canvas.filled_background(
                self.offsets[column], top, self.widths[column], height, ctx.style.highlight_fill_color
            )
        for offset, width in zip(self.offsets, self.widths):
            canvas.rect(offset, top, width, height, TABLE_STROKE)

        row = list(table.rows[row_index])
        row.extend([''] * (len(self.widths) - len(row)))
        canvas.set_text_color(BLACK)
        canvas.set_font(ctx.font, ctx.size)
        baseline = ctx.metrics.baseline_in_box(ctx.font, ctx.size, top=top, height=height)
        for value, offset, width in zip(row, self.offsets, self.widths):
            if isinstance(value, Choice):
                text = value.display()
                if text:
                    canvas.text(text, offset + width / 2.0, baseline, align='center')
                continue
            if not value:
                continue
            text = ctx.fitter.truncate(value, width - 2 * CELL_PADDING, ctx.font, ctx.size)
            canvas.text(text, offset + CELL_PADDING, baseline)

        flow.place('table_row', height, key=(ctx.section_index, row_index))


class NotesGridRenderer(SectionRenderer):
    def _box_height(self, grid: NotesGrid) -> float:
        return NOTE_BOX_HEIGHT if grid.box_height is None else grid.box_height

    def validate(self, grid: NotesGrid, ctx: RenderContext) -> None:
        index = ctx.section_index
        if grid.boxes_per_row < 1:
            raise InvalidSectionSpec(f'notes grid {index} needs at least one box per row')
        if self._box_height(grid) <= 0:
            raise InvalidSectionSpec(f'notes grid {index} box height must be positive')
        if _slot_width(ctx.geometry.content_width, grid.boxes_per_row, NOTE_GUTTER) <= 2 * CELL_PADDING:
            raise LayoutOverflow(
                f'notes grid {index}: {grid.boxes_per_row} boxes do not fit {ctx.geometry.content_width:.2f}'
            )
        if self._box_height(grid) > ctx.geometry.content_height:
            raise RowTooLarge(f'notes grid {index} box height exceeds a page')
        ctx.metrics.require(ctx.bold_font, ctx.size)

    def lead_height(self, grid: NotesGrid, ctx: RenderContext) -> float:
        lead = NOTE_LEGEND_HEIGHT if grid.legend else 0.0
        if grid.notes:
            lead += self._box_height(grid)
        return lead

    def plan(self, grid: NotesGrid, ctx: RenderContext) -> list[LayoutUnit]:
        units: list[LayoutUnit] = []
        if grid.legend:
            units.append(partial(self._draw_legend, grid=grid, ctx=ctx))
        notes = list(grid.notes)
        for row_index, start in enumerate(range(0, len(notes), grid.boxes_per_row)):
            chunk = notes[start : start + grid.boxes_per_row]
            units.append(partial(self._draw_row, grid=grid, ctx=ctx, row_index=row_index, notes=chunk))
        return units

    def _draw_legend(self, flow: PageFlow, *, grid: NotesGrid, ctx: RenderContext) -> None:
        flow.ensure_space(NOTE_LEGEND_HEIGHT)
        canvas = flow.canvas
        canvas.set_font(ctx.font, ctx.size + 1)
        baseline = ctx.metrics.baseline_in_box(ctx.font, ctx.size + 1, top=flow.cursor_y, height=NOTE_LEGEND_HEIGHT)
        legend = ctx.fitter.truncate(grid.legend or '', ctx.geometry.content_width, ctx.font, ctx.size + 1)
        canvas.text(legend, ctx.geometry.content_left + CELL_PADDING, baseline)
        flow.place('notes_legend', NOTE_LEGEND_HEIGHT, key=(ctx.section_index,))

    def _draw_row(
        self,
        flow: PageFlow,
        *,
        grid: NotesGrid,
        ctx: RenderContext,
        row_index: int,
        notes: Sequence[tuple[str, str]],
    ) -> None:
        box_height = self._box_height(grid)
        # a box is atomic: the whole row moves to the next page when it does not fit
        flow.ensure_space(box_height)

        canvas = flow.canvas
        geometry = ctx.geometry
        top = flow.cursor_y
        box_width = _slot_width(geometry.content_width, grid.boxes_per_row, NOTE_GUTTER)
        label_baseline = top + ctx.size + CELL_PADDING / 2.0
        value_baseline = top + box_height - CELL_PADDING

        for column, (label, text) in enumerate(notes):
            x = geometry.content_left + column * (box_width + NOTE_GUTTER)
            canvas.rect(x, top, box_width, box_height, BOX_STROKE)

            canvas.set_font(ctx.bold_font, ctx.size)
            label_text = ctx.fitter.truncate(label, box_width - 2 * CELL_PADDING, ctx.bold_font, ctx.size)
            canvas.text(label_text, x + CELL_PADDING, label_baseline)

            if text:
                label_width = ctx.metrics.width(label_text, ctx.bold_font, ctx.size)
                value_x = x + CELL_PADDING + label_width + CELL_PADDING
                available = x + box_width - CELL_PADDING - value_x
                canvas.set_font(ctx.font, ctx.size)
                canvas.text(ctx.fitter.truncate(text, available, ctx.font, ctx.size), value_x, value_baseline)

        flow.place('notes_row', box_height, key=(ctx.section_index, row_index))
        flow.advance(NOTE_ROW_GAP)


class FreeTextRenderer(SectionRenderer):
    """Word-wraps text to the content width; each wrapped line is one unit.

    Explicit line breaks in ``text`` start a new paragraph, so text without
    newlines lays out as a single paragraph.
    """

    def _line_height(self, ctx: RenderContext) -> float:
        return (ctx.size + 1) * FREE_TEXT_LINE_FACTOR

    def validate(self, block: FreeText, ctx: RenderContext) -> None:
        ctx.metrics.require(ctx.font, ctx.size + 1)

    def lead_height(self, block: FreeText, ctx: RenderContext) -> float:
        return self._line_height(ctx) if block.text.strip() else 0.0

    def plan(self, block: FreeText, ctx: RenderContext) -> list[LayoutUnit]:
        lines: list[str] = []
        for paragraph in block.text.splitlines():
            lines.extend(ctx.fitter.wrap(paragraph, ctx.geometry.content_width, ctx.font, ctx.size + 1))
        return [partial(self._draw_line, ctx=ctx, line_index=index, line=line) for index, line in enumerate(lines)]

    def _draw_line(self, flow: PageFlow, *, ctx: RenderContext, line_index: int, line: str) -> None:
        line_height = self._line_height(ctx)
        flow.ensure_space(line_height)
        canvas = flow.canvas
        canvas.set_text_color(BLACK)
        canvas.set_font(ctx.font, ctx.size + 1)
        baseline = ctx.metrics.baseline_in_box(ctx.font, ctx.size + 1, top=flow.cursor_y, height=line_height)
        canvas.text(line, ctx.geometry.content_left, baseline)
        flow.place('text_line', line_height, key=(ctx.section_index, line_index))


RENDERERS: dict[str, SectionRenderer] = {
    'field_group': FieldGroupRenderer(),
    'table': TableRenderer(),
    'notes_grid': NotesGridRenderer(),
    'free_text': FreeTextRenderer(),
}


def renderer_for(section) -> SectionRenderer:
    renderer = RENDERERS.get(getattr(section, 'kind', ''))
    if renderer is None:
        raise InvalidSectionSpec(f'unsupported section type: {type(section).__name__}')
    return renderer
