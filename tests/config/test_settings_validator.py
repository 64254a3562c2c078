"""
Tests for settings validation warnings and errors.
"""

from dataclasses import replace
from decimal import Decimal

from payroll_config import get_default_settings, validate_settings
from payroll_kernel.domain.tax_brackets import TaxBracket


class TestValidateSettings:
    """Tests for validate_settings."""

    def setup_method(self):
        self.settings = get_default_settings()

    def test_packaged_settings_are_clean(self):
        result = validate_settings(self.settings)
        assert result.is_valid
        assert result.warnings == []

    def test_top_rate_above_half_warns(self):
        brackets = self.settings.tax_brackets[:-1] + (TaxBracket(None, Decimal("0.55")),)
        result = validate_settings(replace(self.settings, tax_brackets=brackets))
        assert result.is_valid
        assert any("exceeds 50%" in w for w in result.warnings)

    def test_regressive_schedule_warns(self):
        brackets = (
            TaxBracket(Decimal("100000"), Decimal("0.30")),
            TaxBracket(None, Decimal("0.10")),
        )
        result = validate_settings(replace(self.settings, tax_brackets=brackets))
        assert any("not progressive" in w for w in result.warnings)

    def test_low_multiplier_warns(self):
        result = validate_settings(replace(self.settings, weekend_multiplier=Decimal("0.8")))
        assert any("weekend_multiplier" in w for w in result.warnings)

    def test_long_workday_warns(self):
        result = validate_settings(replace(self.settings, daily_work_hours=Decimal("14")))
        assert any("daily_work_hours" in w for w in result.warnings)

    def test_deductions_consuming_gross_is_error(self):
        result = validate_settings(
            replace(self.settings, sgk_rate=Decimal("0.9"), unemployment_rate=Decimal("0.1"))
        )
        assert not result.is_valid
        assert "combined deduction rate" in result.errors[0]
