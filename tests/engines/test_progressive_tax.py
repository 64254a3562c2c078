"""
Tests for the cumulative progressive income tax calculator.

Covers:
- Bracket split when the cumulative crosses a boundary mid-month
- Starting position above lower brackets
- Open-ended top bracket
- Per-bracket slices
- Error handling
"""

from decimal import Decimal

import pytest

from payroll_config.loader import DEFAULT_TAX_BRACKETS
from payroll_engines.progressive_tax import BracketSlice, calculate_progressive_tax
from payroll_kernel.domain.tax_brackets import TaxBracket
from payroll_kernel.exceptions import ConfigurationError, InvalidInputError

THREE_BRACKETS = (
    TaxBracket(Decimal("110000"), Decimal("0.15")),
    TaxBracket(Decimal("230000"), Decimal("0.20")),
    TaxBracket(None, Decimal("0.40")),
)


def _tax(base, previous, brackets=THREE_BRACKETS):
    return calculate_progressive_tax(
        income_tax_base=Decimal(base),
        previous_cumulative_income=Decimal(previous),
        brackets=brackets,
    )


class TestProgressiveTax:
    """Tests for calculate_progressive_tax."""

    def test_split_across_boundary(self):
        result = _tax("20000", "100000")
        assert result.tax == Decimal("3500")
        assert result.slices == (
            BracketSlice(Decimal("0"), Decimal("110000"), Decimal("0.15"), Decimal("10000"), Decimal("1500.00")),
            BracketSlice(Decimal("110000"), Decimal("230000"), Decimal("0.20"), Decimal("10000"), Decimal("2000.00")),
        )

    def test_split_across_boundary_with_plain_numbers(self):
        brackets = (TaxBracket(110000, 0.15), TaxBracket(230000, 0.20), TaxBracket(None, 0.40))
        result = calculate_progressive_tax(
            income_tax_base=20000, previous_cumulative_income=100000, brackets=brackets
        )
        assert result.tax == Decimal("3500")
        assert [s.taxable for s in result.slices] == [Decimal("10000"), Decimal("10000")]

    def test_within_first_bracket(self):
        result = _tax("25500", "0")
        assert result.tax == Decimal("3825")
        assert len(result.slices) == 1
        assert result.marginal_rate == Decimal("0.15")

    def test_starts_above_first_bracket(self):
        result = _tax("10000", "120000")
        assert result.tax == Decimal("2000")
        assert result.slices[0].lower == Decimal("110000")

    def test_reaches_open_bracket(self):
        result = _tax("300000", "0")
        assert result.tax == Decimal("16500") + Decimal("24000") + Decimal("28000")
        assert result.slices[-1].upper is None
        assert result.marginal_rate == Decimal("0.40")

    def test_taxed_amount_equals_base(self):
        result = _tax("250000", "50000", DEFAULT_TAX_BRACKETS)
        assert result.taxed_amount == Decimal("250000")

    def test_zero_base_has_no_slices(self):
        result = _tax("0", "500000")
        assert result.tax == Decimal("0")
        assert result.slices == ()
        assert result.marginal_rate == Decimal("0")

    def test_default_schedule_deep_cumulative(self):
        result = _tax("100000", "2950000", DEFAULT_TAX_BRACKETS)
        assert result.tax == Decimal("50000") * Decimal("0.35") + Decimal("50000") * Decimal("0.40")

    @pytest.mark.parametrize("base, previous", [("-1", "0"), ("0", "-1")])
    def test_negative_inputs(self, base, previous):
        with pytest.raises(InvalidInputError):
            _tax(base, previous)

    def test_malformed_brackets(self):
        with pytest.raises(ConfigurationError):
            _tax("1000", "0", (TaxBracket(Decimal("110000"), Decimal("0.15")),))

    def test_empty_brackets(self):
        with pytest.raises(ConfigurationError):
            _tax("1000", "0", ())
