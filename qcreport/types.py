from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm


HEX_COLOR_PATTERN = r'^#[0-9A-Fa-f]{6}$'


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Orientation(str, Enum):
    portrait = 'portrait'
    landscape = 'landscape'


class PageSize(_Frozen):
    width: float
    height: float
    orientation: Orientation = Orientation.portrait

    @classmethod
    def a4(cls, orientation: Orientation = Orientation.portrait) -> PageSize:
        width, height = A4
        return cls(width=width, height=height, orientation=orientation)

    def dimensions(self) -> tuple[float, float]:
        size = (self.width, self.height)
        # explicit sizes are kept as given; landscape only turns a portrait-shaped sheet
        if self.orientation == Orientation.landscape:
            return landscape(size)
        return size


class DocumentMetadata(_Frozen):
    generated_by: str = ''
    generated_at: datetime = Field(default_factory=utcnow)


class FixedWidth(_Frozen):
    kind: Literal['fixed'] = 'fixed'
    width: float


class ProportionalWidth(_Frozen):
    kind: Literal['proportional'] = 'proportional'


WidthSpec = Annotated[Union[FixedWidth, ProportionalWidth], Field(discriminator='kind')]


class HeaderCell(_Frozen):
    label: str
    width: WidthSpec = Field(default_factory=ProportionalWidth)
    key: str | None = None

    @classmethod
    def fixed(cls, label: str, width: float, *, key: str | None = None) -> HeaderCell:
        return cls(label=label, width=FixedWidth(width=width), key=key)

    @classmethod
    def proportional(cls, label: str, *, key: str | None = None) -> HeaderCell:
        return cls(label=label, width=ProportionalWidth(), key=key)


class Choice(_Frozen):
    options: tuple[str, ...] = ('Pass', 'Fail')
    selected: str | None = None

    @model_validator(mode='after')
    def _selected_is_an_option(self) -> Choice:
        if self.selected is not None and self.selected not in self.options:
            raise ValueError(f'selected value {self.selected!r} is not one of {list(self.options)}')
        return self

    def display(self) -> str:
        return self.selected or ''


CellValue = Union[str, Choice]


class FieldGroup(_Frozen):
    kind: Literal['field_group'] = 'field_group'
    title: str | None = None
    columns: int = 2
    fields: list[tuple[str, str]] = Field(default_factory=list)
    box_height: float | None = None


class Table(_Frozen):
    kind: Literal['table'] = 'table'
    title: str | None = None
    headers: list[HeaderCell] = Field(default_factory=list)
    rows: list[list[CellValue]] = Field(default_factory=list)
    highlighted_columns: frozenset[int] = frozenset()
    row_height: float = 8 * mm
    header_height: float = 16 * mm


class NotesGrid(_Frozen):
    kind: Literal['notes_grid'] = 'notes_grid'
    title: str | None = None
    legend: str | None = None
    boxes_per_row: int = 3
    notes: list[tuple[str, str]] = Field(default_factory=list)
    box_height: float | None = None


class FreeText(_Frozen):
    kind: Literal['free_text'] = 'free_text'
    title: str | None = None
    text: str = ''


Section = Annotated[Union[FieldGroup, Table, NotesGrid, FreeText], Field(discriminator='kind')]


class Document(_Frozen):
    title: str
    page_size: PageSize = Field(default_factory=PageSize.a4)
    margin: float = 10 * mm
    sections: list[Section] = Field(default_factory=list)
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)
    form_code: str | None = None


class StyleProfile(_Frozen):
    font_family: str = 'Helvetica'
    base_font_size: float = 7.0
    header_fill_color: str = Field(default='#C8C8C8', pattern=HEX_COLOR_PATTERN)
    highlight_fill_color: str = Field(default='#FFFF00', pattern=HEX_COLOR_PATTERN)
    alternate_row_fill_color: str = Field(default='#F5F5F5', pattern=HEX_COLOR_PATTERN)
    footer_text: str = ''
