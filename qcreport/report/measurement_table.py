from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from reportlab.lib.units import mm

from ..types import CellValue, Choice, HeaderCell, Table


_DIMENSION_KEY = re.compile(r'^d(\d+)$')


@dataclass(frozen=True)
class ColumnDef:
    key: str
    label: str
    # None means the column shares the width left over by fixed columns
    width: float | None = None
    highlighted: bool = False
    choices: tuple[str, ...] | None = None
    dimension: int | None = None

    def header(self) -> HeaderCell:
        if self.width is None:
            return HeaderCell.proportional(self.label, key=self.key)
        return HeaderCell.fixed(self.label, self.width, key=self.key)


def dimension_pair(number: int) -> tuple[ColumnDef, ColumnDef]:
    return (
        ColumnDef(key=f'd{number}', label=f'D{number}', dimension=number),
        ColumnDef(key=f'd{number}_me', label='ME', dimension=number),
    )


class MeasurementTable:
    """Editable inspection table whose cells are keyed by column key.

    Columns can come and go without touching the data of other columns,
    which is why cells are never addressed by column position.
    """

    def __init__(
        self,
        columns: Iterable[ColumnDef],
        *,
        rows: int = 1,
        dimension_anchor: str | None = None,
        row_height: float = 8 * mm,
        header_height: float = 16 * mm,
    ):
        if rows < 1:
            raise ValueError('a measurement table needs at least one row')
        self._columns: list[ColumnDef] = []
        self._cells: dict[tuple[int, str], CellValue] = {}
        self.row_count = rows
        self.dimension_anchor = dimension_anchor
        self.row_height = row_height
        self.header_height = header_height
        for column in columns:
            self.add_column(column)

    @property
    def columns(self) -> tuple[ColumnDef, ...]:
        return tuple(self._columns)

    @property
    def column_keys(self) -> list[str]:
        return [column.key for column in self._columns]

    def column(self, key: str) -> ColumnDef:
        for column in self._columns:
            if column.key == key:
                return column
        raise KeyError(f'unknown column: {key}')

    def add_column(self, column: ColumnDef, *, before: str | None = None) -> ColumnDef:
        if column.key in self.column_keys:
            raise ValueError(f'duplicate column key: {column.key}')
        if before is None:
            self._columns.append(column)
        else:
            self._columns.insert(self._index_of(before), column)
        return column

    def remove_column(self, key: str) -> ColumnDef:
        column = self.column(key)
        self._columns.remove(column)
        for cell_key in [k for k in self._cells if k[1] == key]:
            del self._cells[cell_key]
        return column

    def dimension_numbers(self) -> list[int]:
        numbers = []
        for column in self._columns:
            match = _DIMENSION_KEY.match(column.key)
            if match:
                numbers.append(int(match.group(1)))
        return numbers

    def add_dimension_pair(self) -> tuple[ColumnDef, ColumnDef]:
        """Append a ``D{n}``/``ME`` pair after the last dimension column."""
        number = max(self.dimension_numbers(), default=0) + 1
        pair = dimension_pair(number)
        dimension_indexes = [i for i, column in enumerate(self._columns) if column.dimension is not None]
        if dimension_indexes:
            position = dimension_indexes[-1] + 1
        elif self.dimension_anchor is not None:
            position = self._index_of(self.dimension_anchor)
        else:
            position = len(self._columns)
        for offset, column in enumerate(pair):
            if column.key in self.column_keys:
                raise ValueError(f'duplicate column key: {column.key}')
            self._columns.insert(position + offset, column)
        return pair

    def remove_dimension_pair(self) -> tuple[ColumnDef, ...]:
        numbers = self.dimension_numbers()
        if not numbers:
            raise ValueError('no dimension columns to remove')
        number = max(numbers)
        removed = [column for column in self._columns if column.dimension == number]
        return tuple(self.remove_column(column.key) for column in removed)

    def add_row(self) -> int:
        self.row_count += 1
        return self.row_count - 1

    def remove_row(self) -> None:
        if self.row_count <= 1:
            raise ValueError('a measurement table needs at least one row')
        last = self.row_count - 1
        for cell_key in [k for k in self._cells if k[0] == last]:
            del self._cells[cell_key]
        self.row_count -= 1

    def set_cell(self, row: int, key: str, value: CellValue | None) -> None:
        self._check_row(row)
        column = self.column(key)
        if value is None or value == '':
            self._cells.pop((row, key), None)
            return
        if column.choices is not None and isinstance(value, str):
            value = Choice(options=column.choices, selected=value)
        self._cells[(row, key)] = value

    def get_cell(self, row: int, key: str) -> CellValue:
        self._check_row(row)
        column = self.column(key)
        value = self._cells.get((row, key))
        if value is not None:
            return value
        if column.choices is not None:
            return Choice(options=column.choices)
        return ''

    def to_section(self, *, title: str | None = None) -> Table:
        return Table(
            title=title,
            headers=[column.header() for column in self._columns],
            rows=[[self.get_cell(row, column.key) for column in self._columns] for row in range(self.row_count)],
            highlighted_columns=frozenset(i for i, column in enumerate(self._columns) if column.highlighted),
            row_height=self.row_height,
            header_height=self.header_height,
        )

    def _index_of(self, key: str) -> int:
        return self._columns.index(self.column(key))

    def _check_row(self, row: int) -> None:
        if not 0 <= row < self.row_count:
            raise IndexError(f'row {row} out of range (0..{self.row_count - 1})')
