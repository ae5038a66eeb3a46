"""
Unit tests for JavaScript-compatible rounding.
"""

import pytest

from claude_metrics.core.rounding import js_round, round_cents, to_fixed


class TestJsRound:
    """Test Math.round semantics."""

    @pytest.mark.parametrize("value,expected", [
        (0.5, 1),
        (1.5, 2),
        (2.5, 3),
        (-0.5, 0),
        (-2.5, -2),
        (2.4999, 2),
        (0.49999999999999994, 0),
        (7, 7),
    ])
    def test_half_rounds_up(self, value, expected):
        assert js_round(value) == expected


class TestRoundCents:
    """Test Math.round(x * 100) / 100."""

    def test_half_cent_rounds_up(self):
        assert round_cents(0.125) == 0.13

    def test_whole_amount(self):
        assert round_cents(18) == 18.0


class TestToFixed:
    """Test Number.prototype.toFixed semantics."""

    def test_binary_value_governs_ties(self):
        """1.005 is really 1.00499..., so it rounds down."""
        assert to_fixed(1.005, 2) == 1.0

    def test_exact_half_rounds_up(self):
        assert to_fixed(0.75, 1) == 0.8
        assert to_fixed(0.25, 1) == 0.3

    def test_zero_digits(self):
        assert to_fixed(12.5, 0) == 13.0
        assert to_fixed(18.0, 0) == 18.0

    def test_negative_digits_rejected(self):
        with pytest.raises(ValueError):
            to_fixed(1.0, -1)
