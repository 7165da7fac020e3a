"""Editable measurement tables."""

import pytest
from pydantic import ValidationError

from qcreport.layout.columns import compute_widths
from qcreport.report.measurement_table import ColumnDef, MeasurementTable
from qcreport.types import Choice


@pytest.fixture
def table() -> MeasurementTable:
    table = MeasurementTable(
        [
            ColumnDef('machine', 'Perforation Machine', width=70),
            ColumnDef('drill_bit', 'Drill Bit Size', width=50),
            ColumnDef('visual', 'Visual (Pass/Fail)', width=60, choices=('Pass', 'Fail'), highlighted=True),
        ],
        rows=2,
        dimension_anchor='drill_bit',
    )
    for _ in range(3):
        table.add_dimension_pair()
    return table


class TestColumns:
    def test_dimension_pairs_inserted_before_anchor(self, table):
        assert table.column_keys == [
            'machine', 'd1', 'd1_me', 'd2', 'd2_me', 'd3', 'd3_me', 'drill_bit', 'visual',
        ]
        assert [c.label for c in table.columns[1:7]] == ['D1', 'ME', 'D2', 'ME', 'D3', 'ME']

    def test_removing_a_column_keeps_other_data(self, table):
        table.set_cell(0, 'd1', '12.5')
        table.set_cell(0, 'd2', '13.0')
        table.set_cell(1, 'd3', '14.1')
        table.set_cell(1, 'machine', 'PM-2')

        table.remove_column('d2')

        assert table.get_cell(0, 'd1') == '12.5'
        assert table.get_cell(1, 'd3') == '14.1'
        assert table.get_cell(1, 'machine') == 'PM-2'
        with pytest.raises(KeyError):
            table.get_cell(0, 'd2')

    def test_remaining_proportional_columns_share_width(self, table):
        table.remove_column('d2')
        section = table.to_section()
        widths = compute_widths(600, [header.width for header in section.headers])

        assert widths[0] == 70 and widths[-2:] == [50, 60]
        share = (600 - 180) / 5
        assert widths[1:6] == pytest.approx([share] * 5)
        assert sum(widths) == pytest.approx(600)

    def test_remove_dimension_pair_drops_last_pair(self, table):
        table.set_cell(0, 'd3', '9')
        removed = table.remove_dimension_pair()
        assert [c.key for c in removed] == ['d3', 'd3_me']
        assert 'd3' not in table.column_keys

        table.add_dimension_pair()
        assert table.get_cell(0, 'd3') == ''

    def test_duplicate_key_rejected(self, table):
        with pytest.raises(ValueError):
            table.add_column(ColumnDef('machine', 'Again'))

    def test_dimension_numbering_continues_after_gap(self, table):
        table.remove_column('d1')
        table.remove_column('d1_me')
        pair = table.add_dimension_pair()
        assert [c.label for c in pair] == ['D4', 'ME']
        assert table.column_keys.index('d4') == table.column_keys.index('drill_bit') - 2


class TestRows:
    def test_row_minimum(self, table):
        table.remove_row()
        assert table.row_count == 1
        with pytest.raises(ValueError):
            table.remove_row()

    def test_removed_row_data_does_not_come_back(self, table):
        table.set_cell(1, 'machine', 'PM-9')
        table.remove_row()
        table.add_row()
        assert table.get_cell(1, 'machine') == ''

    def test_out_of_range_row(self, table):
        with pytest.raises(IndexError):
            table.set_cell(5, 'machine', 'x')

    def test_zero_rows_rejected(self):
        with pytest.raises(ValueError):
            MeasurementTable([ColumnDef('a', 'A')], rows=0)


class TestCells:
    def test_choice_columns_wrap_values(self, table):
        table.set_cell(0, 'visual', 'Pass')
        assert table.get_cell(0, 'visual') == Choice(options=('Pass', 'Fail'), selected='Pass')
        assert table.get_cell(1, 'visual') == Choice(options=('Pass', 'Fail'))

    def test_invalid_choice_rejected(self, table):
        with pytest.raises(ValidationError):
            table.set_cell(0, 'visual', 'Maybe')

    def test_blank_value_clears_cell(self, table):
        table.set_cell(0, 'machine', 'PM-1')
        table.set_cell(0, 'machine', '')
        assert table.get_cell(0, 'machine') == ''

    def test_to_section(self, table):
        table.set_cell(1, 'd1', '10.2')
        section = table.to_section(title='3. LENGTH VERIFICATION')

        assert section.title == '3. LENGTH VERIFICATION'
        assert len(section.rows) == 2
        assert section.rows[1][1] == '10.2'
        assert section.highlighted_columns == frozenset({8})
        assert [h.key for h in section.headers] == table.column_keys
