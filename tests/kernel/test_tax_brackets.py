"""
Tests for tax bracket value objects and schedule validation.
"""

from decimal import Decimal

import pytest

from payroll_kernel.domain.tax_brackets import INFINITY, TaxBracket, validate_brackets
from payroll_kernel.exceptions import ConfigurationError


def _b(limit, rate) -> TaxBracket:
    return TaxBracket(None if limit is None else Decimal(limit), Decimal(rate))


class TestTaxBracket:
    """Tests for a single bracket."""

    def test_open_bracket_effective_limit_is_infinite(self):
        bracket = _b(None, "0.40")
        assert bracket.is_open
        assert bracket.effective_limit == INFINITY

    def test_closed_bracket(self):
        bracket = _b("110000", "0.15")
        assert not bracket.is_open
        assert bracket.effective_limit == Decimal("110000")

    @pytest.mark.parametrize("limit", ["0", "-5"])
    def test_non_positive_limit_rejected(self, limit):
        with pytest.raises(ConfigurationError):
            _b(limit, "0.15")

    @pytest.mark.parametrize("rate", ["-0.01", "1.01"])
    def test_rate_out_of_range_rejected(self, rate):
        with pytest.raises(ConfigurationError) as exc_info:
            _b("1000", rate)
        assert exc_info.value.code == "INVALID_CONFIGURATION"
        assert exc_info.value.setting == "tax_brackets"


class TestValidateBrackets:
    """Tests for validate_brackets."""

    def test_valid_schedule_returned_as_tuple(self):
        schedule = [_b("110000", "0.15"), _b("230000", "0.20"), _b(None, "0.40")]
        result = validate_brackets(schedule)
        assert isinstance(result, tuple)
        assert list(result) == schedule

    def test_single_open_bracket_is_valid(self):
        assert len(validate_brackets([_b(None, "0.10")])) == 1

    def test_empty_rejected(self):
        with pytest.raises(ConfigurationError, match="at least one"):
            validate_brackets([])

    def test_missing_open_top_bracket_rejected(self):
        with pytest.raises(ConfigurationError, match="last bracket"):
            validate_brackets([_b("110000", "0.15"), _b("230000", "0.20")])

    def test_open_bracket_not_last_rejected(self):
        with pytest.raises(ConfigurationError, match="only the last"):
            validate_brackets([_b(None, "0.15"), _b("230000", "0.20"), _b(None, "0.40")])

    def test_descending_limits_rejected(self):
        with pytest.raises(ConfigurationError, match="strictly increasing"):
            validate_brackets([_b("230000", "0.20"), _b("110000", "0.15"), _b(None, "0.40")])

    def test_equal_limits_rejected(self):
        with pytest.raises(ConfigurationError, match="strictly increasing"):
            validate_brackets([_b("110000", "0.15"), _b("110000", "0.20"), _b(None, "0.40")])


class TestBracketCoercion:
    """Brackets built from plain numbers."""

    def test_int_and_float_coerced_to_decimal(self):
        bracket = TaxBracket(110000, 0.15)
        assert bracket.limit == Decimal("110000")
        assert bracket.rate == Decimal("0.15")
        assert isinstance(bracket.limit, Decimal)
        assert isinstance(bracket.rate, Decimal)

    def test_string_values_coerced(self):
        assert TaxBracket("230000", "0.20") == _b("230000", "0.20")

    @pytest.mark.parametrize(
        "limit, rate",
        [("abc", "0.15"), (float("inf"), "0.15"), ("1000", "NaN"), ("1000", None), (True, "0.15")],
    )
    def test_unusable_values_rejected_as_configuration_error(self, limit, rate):
        with pytest.raises(ConfigurationError) as exc_info:
            TaxBracket(limit, rate)
        assert exc_info.value.setting.startswith("tax_brackets.")
