"""Word wrap and truncation."""

import math

import pytest

from qcreport.layout.text_fit import ELLIPSIS, TextFitter

FONT = 'Helvetica'
SIZE = 8.0
LOREM = (
    'Visual inspection of the perforation pattern shows uniform hole spacing '
    'along every ring of the base pipe joint'
)


class TestWrap:
    def test_empty_text_has_no_lines(self, fitter):
        assert fitter.wrap('', 100, FONT, SIZE) == []
        assert fitter.wrap('   ', 100, FONT, SIZE) == []

    @pytest.mark.parametrize('max_width', [30.0, 60.0, 120.0, 400.0])
    def test_lines_fit_unless_single_token(self, fitter, metrics, max_width):
        lines = fitter.wrap(LOREM, max_width, FONT, SIZE)
        assert ' '.join(lines) == ' '.join(LOREM.split())
        for line in lines:
            if ' ' in line:
                assert metrics.width(line, FONT, SIZE) <= max_width

    def test_long_token_kept_whole(self, fitter):
        lines = fitter.wrap('a Supercalifragilisticexpialidocious b', 20, FONT, SIZE)
        assert lines == ['a', 'Supercalifragilisticexpialidocious', 'b']


class TestTruncate:
    def test_fitting_text_unchanged(self, fitter):
        assert fitter.truncate('OK', 100, FONT, SIZE) == 'OK'

    def test_linear_estimate(self, fitter, metrics):
        text = 'Countersunk & Thread Verification'
        max_width = 60.0
        measured = metrics.width(text, FONT, SIZE)
        keep = math.floor(len(text) * max_width / measured)
        assert fitter.truncate(text, max_width, FONT, SIZE) == text[:keep] + ELLIPSIS

    def test_exact_truncation_is_maximal(self, fitter, metrics):
        text = 'Countersunk & Thread Verification'
        max_width = 60.0
        result = fitter.truncate_exact(text, max_width, FONT, SIZE)
        assert result.endswith(ELLIPSIS)
        assert metrics.width(result, FONT, SIZE) <= max_width
        kept = len(result) - len(ELLIPSIS)
        assert metrics.width(text[: kept + 1] + ELLIPSIS, FONT, SIZE) > max_width

    def test_exact_truncation_below_ellipsis_width(self, fitter):
        assert fitter.truncate_exact('Diameter', 1.0, FONT, SIZE) == ''

    def test_exact_mode_switches_truncate(self, metrics):
        fitter = TextFitter(metrics, exact_truncation=True)
        result = fitter.truncate('Surface Finish (If applicable)', 40.0, FONT, SIZE)
        assert metrics.width(result, FONT, SIZE) <= 40.0
