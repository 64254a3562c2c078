"""
Tests for settings loading: YAML sets, wire mappings, defaults, checksums.
"""

import json
from decimal import Decimal
from pathlib import Path

import pytest

from payroll_config import (
    DEFAULT_TAX_BRACKETS,
    get_active_settings,
    get_default_settings,
    list_settings_sets,
    resolve_settings,
)
from payroll_config.loader import (
    compute_checksum,
    load_settings_file,
    parse_settings,
    parse_tax_brackets,
    settings_checksum,
    settings_to_dict,
)
from payroll_config.schema import PayrollSettings
from payroll_kernel.exceptions import ConfigurationError, InvalidInputError

WIRE_SETTINGS = {
    "sgkRate": 0.14,
    "unemploymentRate": 0.01,
    "stampTaxRate": 0.00759,
    "minimumWage": 20002.50,
}

SET_YAML = """\
settings_id: {sid}
version: {version}
effective_year: {year}
settings:
  sgk_rate: "0.14"
  unemployment_rate: "0.01"
  stamp_tax_rate: "0.00759"
  minimum_wage: "{wage}"
"""


def _write_set(directory: Path, name: str, year: int, wage: str = "20002.50", version: int = 1) -> Path:
    path = directory / f"{name}.yaml"
    path.write_text(SET_YAML.format(sid=name, version=version, year=year, wage=wage))
    return path


class TestPackagedSettings:
    """Tests for the packaged tr_2025 set."""

    def test_default_values(self):
        settings = get_default_settings()
        assert settings.sgk_rate == Decimal("0.14")
        assert settings.unemployment_rate == Decimal("0.01")
        assert settings.stamp_tax_rate == Decimal("0.00759")
        assert settings.minimum_wage == Decimal("20002.50")
        assert settings.daily_work_hours == Decimal("8")
        assert settings.overtime_multiplier == Decimal("1.5")
        assert settings.weekend_multiplier == Decimal("2.0")
        assert settings.holiday_multiplier == Decimal("2.0")
        assert settings.tax_brackets == DEFAULT_TAX_BRACKETS

    def test_active_settings_emit_trace(self, captured_logs):
        chosen = get_active_settings(2025)
        assert chosen.settings_id == "tr_2025"
        assert len(chosen.checksum) == 64
        traces = [r for r in captured_logs() if r["message"] == "PAYROLL_CONFIG_TRACE"]
        assert traces[0]["settings_id"] == "tr_2025"
        assert traces[0]["checksum"] == chosen.checksum

    def test_no_set_before_2025(self):
        with pytest.raises(FileNotFoundError):
            get_active_settings(2020)


class TestSettingsDirectory:
    """Tests for set selection from a directory."""

    def test_latest_effective_year_wins(self, tmp_path):
        _write_set(tmp_path, "tr_2024", 2024, wage="17002.12")
        _write_set(tmp_path, "tr_2025", 2025)
        assert get_active_settings(2024, tmp_path).settings_id == "tr_2024"
        assert get_active_settings(2026, tmp_path).settings_id == "tr_2025"
        assert get_active_settings(config_dir=tmp_path).settings_id == "tr_2025"

    def test_sets_sorted_by_year(self, tmp_path):
        _write_set(tmp_path, "b", 2025)
        _write_set(tmp_path, "a", 2024)
        assert [s.effective_year for s in list_settings_sets(tmp_path)] == [2024, 2025]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list_settings_sets(tmp_path / "nope")

    def test_set_missing_required_key(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("settings_id: bad\nsettings: {}\n")
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings_file(path)
        assert exc_info.value.setting == "effective_year"


class TestParseSettings:
    """Tests for parse_settings on wire mappings."""

    def test_camel_case_with_defaults(self):
        settings = parse_settings(WIRE_SETTINGS)
        assert settings.minimum_wage == Decimal("20002.5")
        assert settings.daily_work_hours == Decimal("8")
        assert settings.tax_brackets == DEFAULT_TAX_BRACKETS

    def test_snake_case_keys(self):
        settings = parse_settings({
            "sgk_rate": "0.14",
            "unemployment_rate": "0.01",
            "stamp_tax_rate": "0",
            "minimum_wage": "1000",
            "daily_work_hours": "7.5",
        })
        assert settings.daily_work_hours == Decimal("7.5")
        assert settings.stamp_tax_rate == Decimal("0")

    def test_float_values_are_exact(self):
        assert parse_settings(WIRE_SETTINGS).stamp_tax_rate == Decimal("0.00759")

    def test_json_string_brackets(self):
        raw = json.dumps([{"limit": 110000, "rate": 0.15}, {"limit": None, "rate": 0.3}])
        settings = parse_settings({**WIRE_SETTINGS, "taxBrackets": raw})
        assert len(settings.tax_brackets) == 2
        assert settings.tax_brackets[0].limit == Decimal("110000")
        assert settings.tax_brackets[1].limit is None

    @pytest.mark.parametrize("missing", ["sgkRate", "unemploymentRate", "stampTaxRate", "minimumWage"])
    def test_required_keys(self, missing):
        data = {k: v for k, v in WIRE_SETTINGS.items() if k != missing}
        with pytest.raises(ConfigurationError, match="required"):
            parse_settings(data)

    @pytest.mark.parametrize(
        "override",
        [
            {"sgkRate": "1.5"},
            {"sgkRate": "-0.1"},
            {"minimumWage": "0"},
            {"dailyWorkHours": "0"},
            {"dailyWorkHours": "25"},
            {"weekendMultiplier": "-2"},
            {"minimumWage": "lots"},
            {"minimumWage": True},
        ],
    )
    def test_invalid_values(self, override):
        with pytest.raises(ConfigurationError):
            parse_settings({**WIRE_SETTINGS, **override})

    def test_not_a_mapping(self):
        with pytest.raises(ConfigurationError):
            parse_settings(["sgkRate"])


class TestSettingsConstruction:
    """PayrollSettings built directly from plain numbers."""

    @staticmethod
    def _settings(**overrides) -> PayrollSettings:
        values = {
            "sgk_rate": 0.14,
            "unemployment_rate": 0.01,
            "stamp_tax_rate": 0.00759,
            "minimum_wage": 20002.50,
            "daily_work_hours": 8,
            "overtime_multiplier": 1.5,
            "weekend_multiplier": 2,
            "holiday_multiplier": 2,
            "tax_brackets": DEFAULT_TAX_BRACKETS,
            **overrides,
        }
        return PayrollSettings(**values)

    def test_floats_and_ints_coerced(self):
        settings = self._settings()
        assert settings.sgk_rate == Decimal("0.14")
        assert settings.minimum_wage == Decimal("20002.5")
        assert settings.daily_work_hours == Decimal("8")
        assert isinstance(settings.weekend_multiplier, Decimal)
        assert settings == get_default_settings()

    @pytest.mark.parametrize(
        "field, value",
        [("sgk_rate", "x"), ("minimum_wage", None), ("daily_work_hours", float("nan")), ("stamp_tax_rate", 1.5)],
    )
    def test_unusable_values_are_configuration_errors(self, field, value):
        with pytest.raises(ConfigurationError) as exc_info:
            self._settings(**{field: value})
        assert exc_info.value.setting == field


class TestParseTaxBrackets:
    """Tests for parse_tax_brackets."""

    def test_invalid_json(self):
        with pytest.raises(ConfigurationError, match="invalid JSON"):
            parse_tax_brackets("[{")

    def test_not_a_list(self):
        with pytest.raises(ConfigurationError):
            parse_tax_brackets({"limit": 1, "rate": 0.1})

    def test_entry_without_rate(self):
        with pytest.raises(ConfigurationError, match="bracket 1"):
            parse_tax_brackets([{"limit": 100}])

    def test_schedule_validated_on_settings(self):
        with pytest.raises(ConfigurationError, match="strictly increasing"):
            parse_settings({
                **WIRE_SETTINGS,
                "taxBrackets": [
                    {"limit": 200, "rate": 0.1},
                    {"limit": 100, "rate": 0.2},
                    {"limit": None, "rate": 0.3},
                ],
            })


class TestResolveSettings:
    """Tests for resolve_settings."""

    def test_none_is_missing_input(self):
        with pytest.raises(InvalidInputError) as exc_info:
            resolve_settings(None)
        assert exc_info.value.field == "settings"

    def test_object_passthrough(self):
        settings = get_default_settings()
        assert resolve_settings(settings) is settings

    def test_mapping_parsed(self):
        assert isinstance(resolve_settings(WIRE_SETTINGS), PayrollSettings)

    def test_validation_errors_raise(self):
        with pytest.raises(ConfigurationError, match="combined deduction rate"):
            resolve_settings({**WIRE_SETTINGS, "sgkRate": "0.6", "unemploymentRate": "0.5"})


class TestChecksum:
    """Tests for deterministic checksums."""

    def test_same_values_same_checksum(self):
        assert settings_checksum(parse_settings(WIRE_SETTINGS)) == settings_checksum(get_default_settings())

    def test_value_change_changes_checksum(self):
        other = parse_settings({**WIRE_SETTINGS, "minimumWage": "20002.51"})
        assert settings_checksum(other) != settings_checksum(get_default_settings())

    def test_checksum_is_key_order_independent(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_canonical_dict_is_json_safe(self):
        data = settings_to_dict(get_default_settings())
        assert json.loads(json.dumps(data))["tax_brackets"][-1] == {"limit": None, "rate": "0.4"}
