"""
Tests for Decimal coercion and monetary rounding.

Covers:
- Conversion of int, str, float and Decimal inputs
- Rejection of None, booleans, garbage and non-finite values
- Sign checks
- ROUND_HALF_UP to 0.01
"""

from decimal import Decimal

import pytest

from payroll_kernel.domain.values import floor_money, round_money, to_decimal
from payroll_kernel.exceptions import InvalidInputError


class TestToDecimal:
    """Tests for to_decimal."""

    def test_float_goes_through_str(self):
        assert to_decimal(0.1, "x") == Decimal("0.1")

    def test_int_and_str(self):
        assert to_decimal(30000, "x") == Decimal("30000")
        assert to_decimal(" 20002.50 ", "x") == Decimal("20002.50")

    def test_decimal_passthrough(self):
        value = Decimal("12.345")
        assert to_decimal(value, "x") is value

    @pytest.mark.parametrize("raw", [None, True, False, "abc", [1], {"a": 1}])
    def test_rejects_non_numeric(self, raw):
        with pytest.raises(InvalidInputError) as exc_info:
            to_decimal(raw, "monthly_salary")
        assert exc_info.value.field == "monthly_salary"
        assert exc_info.value.code == "INVALID_INPUT"

    @pytest.mark.parametrize("raw", ["NaN", "Infinity", float("inf"), Decimal("-Infinity")])
    def test_rejects_non_finite(self, raw):
        with pytest.raises(InvalidInputError, match="finite"):
            to_decimal(raw, "hours")

    def test_negative_rejected_by_default(self):
        with pytest.raises(InvalidInputError, match="negative"):
            to_decimal("-1", "hours")

    def test_negative_allowed_when_requested(self):
        assert to_decimal("-1", "delta", allow_negative=True) == Decimal("-1")

    def test_zero_rejected_when_requested(self):
        assert to_decimal(0, "hours") == Decimal("0")
        with pytest.raises(InvalidInputError, match="greater than zero"):
            to_decimal(0, "monthly_salary", allow_zero=False)


class TestRoundMoney:
    """Tests for round_money."""

    def test_half_up(self):
        assert round_money(Decimal("200.025")) == Decimal("200.03")
        assert round_money(Decimal("200.024")) == Decimal("200.02")

    def test_negative_half_rounds_away_from_zero(self):
        assert round_money(Decimal("-0.005")) == Decimal("-0.01")

    def test_repeating_division_is_stable(self):
        daily = Decimal("20002.50") / Decimal(31)
        assert round_money(daily * 31) == Decimal("20002.50")


class TestFloorMoney:
    """Tests for floor_money."""

    @pytest.mark.parametrize(
        "raw, expected",
        [("1500.155", "1500.15"), ("1500.159", "1500.15"), ("0.009", "0.00"), ("12.30", "12.30")],
    )
    def test_truncates_to_cents(self, raw, expected):
        assert floor_money(Decimal(raw)) == Decimal(expected)

    def test_never_above_input(self):
        value = Decimal("3952.4999")
        assert floor_money(value) <= value
