"""Column width resolution."""

import pytest

from qcreport.errors import InvalidSectionSpec, LayoutOverflow
from qcreport.layout.columns import column_offsets, compute_widths
from qcreport.types import FixedWidth, ProportionalWidth


class TestComputeWidths:
    def test_fixed_and_proportional_mix(self):
        specs = [FixedWidth(width=20), FixedWidth(width=15)] + [ProportionalWidth()] * 9
        widths = compute_widths(300, specs)
        assert widths[:2] == [20, 15]
        for width in widths[2:]:
            assert width == pytest.approx((300 - 35) / 9)
        assert sum(widths) == pytest.approx(300)

    def test_all_proportional(self):
        widths = compute_widths(120, [ProportionalWidth()] * 4)
        assert widths == [30.0] * 4

    def test_fixed_overflow_raises(self):
        with pytest.raises(LayoutOverflow):
            compute_widths(100, [FixedWidth(width=60), FixedWidth(width=50), ProportionalWidth()])

    def test_fixed_filling_table_leaves_zero_share(self):
        widths = compute_widths(100, [FixedWidth(width=100), ProportionalWidth()])
        assert widths == [100, 0.0]

    def test_all_fixed_scaled_to_table(self):
        widths = compute_widths(80, [FixedWidth(width=10), FixedWidth(width=30)])
        assert widths == pytest.approx([20, 60])

    def test_empty_specs_raise(self):
        with pytest.raises(InvalidSectionSpec):
            compute_widths(100, [])

    def test_zero_fixed_only_raises(self):
        with pytest.raises(InvalidSectionSpec):
            compute_widths(100, [FixedWidth(width=0)])

    def test_negative_width_raises(self):
        with pytest.raises(InvalidSectionSpec):
            compute_widths(100, [FixedWidth(width=-1), ProportionalWidth()])


def test_column_offsets():
    assert column_offsets(10, [5, 20, 15]) == [10, 15, 35]
