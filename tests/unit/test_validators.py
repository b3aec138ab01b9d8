"""
Unit tests for client-side input validation.
"""
import pytest

from frontend.utils.validators import (
    DiceInputValidator,
    DiceValidationResult,
    MSG_NO_DECIMALS,
    MSG_NOT_PREDEFINED,
    MSG_REQUIRED,
    MSG_TOO_FEW,
    MSG_TOO_MANY,
    MSG_WHOLE_NUMBERS,
    PRIORITY_FORMAT,
    PRIORITY_RANGE,
)


class TestValidateCustomSides:
    """Tests for prioritized custom-sides validation."""

    def test_decimal_reports_format_error(self):
        result = DiceInputValidator.validate_custom_sides("12.5")

        assert not result
        assert result.status == "invalid"
        assert result.error_message == MSG_NO_DECIMALS
        assert result.error_priority == PRIORITY_FORMAT

    def test_below_minimum_reports_range_error(self):
        result = DiceInputValidator.validate_custom_sides("1")

        assert result.error_message == MSG_TOO_FEW
        assert result.error_priority == PRIORITY_RANGE

    def test_format_checked_before_range(self):
        assert DiceInputValidator.validate_custom_sides("0.5").error_priority == PRIORITY_FORMAT
        assert DiceInputValidator.validate_custom_sides("5000.5").error_message == MSG_NO_DECIMALS

    def test_above_maximum(self):
        assert DiceInputValidator.validate_custom_sides("1001").error_message == MSG_TOO_MANY

    def test_very_long_digit_string_is_range_error(self):
        result = DiceInputValidator.validate_custom_sides("9" * 5000)

        assert result.error_message == MSG_TOO_MANY
        assert result.error_priority == PRIORITY_RANGE

    def test_leading_zeros_do_not_count_towards_length(self):
        assert DiceInputValidator.validate_custom_sides("00000000020")

    @pytest.mark.parametrize("value", ["20", " 20 ", 20, 20.0, "2", "1000"])
    def test_valid_values(self, value):
        result = DiceInputValidator.validate_custom_sides(value)

        assert result
        assert result.status == "valid"
        assert result.error_message is None
        assert result.error_priority is None

    @pytest.mark.parametrize("value", [None, "", "   ", False])
    def test_missing_values(self, value):
        result = DiceInputValidator.validate_custom_sides(value)
        assert result.error_message == MSG_REQUIRED
        assert result.error_priority == PRIORITY_RANGE

    @pytest.mark.parametrize("value", ["abc", "-5", "1e3", "12,5 dice", float("nan"), [6]])
    def test_non_numeric_values(self, value):
        result = DiceInputValidator.validate_custom_sides(value)
        assert result.error_priority == PRIORITY_FORMAT

    def test_comma_is_treated_as_decimal(self):
        assert DiceInputValidator.validate_custom_sides("12,5").error_message == MSG_NO_DECIMALS

    def test_non_digit_message(self):
        assert DiceInputValidator.validate_custom_sides("abc").error_message == MSG_WHOLE_NUMBERS


class TestValidateConfig:
    """Tests for full configuration validation."""

    @pytest.mark.parametrize("sides", [4, 6, 8, 10, 12, 20])
    def test_predefined_accepted(self, sides):
        assert DiceInputValidator.validate_config(sides, "predefined")

    def test_predefined_rejects_other_values(self):
        result = DiceInputValidator.validate_config(7, "predefined")
        assert result.error_message == MSG_NOT_PREDEFINED

    def test_custom_uses_custom_rules(self):
        assert DiceInputValidator.validate_config(7, "custom")
        assert not DiceInputValidator.validate_config(1001, "custom")

    def test_unknown_method(self):
        assert not DiceInputValidator.validate_config(6, "random")


class TestResultHelpers:
    def test_from_api(self):
        result = DiceValidationResult.from_api({
            "isValid": False,
            "status": "invalid",
            "errorMessage": "Enter whole numbers only",
            "errorPriority": 1,
        })

        assert result.is_valid is False
        assert result.error_priority == 1

    def test_to_dict(self):
        assert DiceValidationResult.valid().to_dict() == {
            "is_valid": True,
            "status": "valid",
            "error_message": None,
            "error_priority": None,
        }

    @pytest.mark.parametrize("raw,expected", [
        ("12a3", "123"),
        ("", ""),
        (None, ""),
        ("1.5", "15"),
    ])
    def test_filter_numeric_input(self, raw, expected):
        assert DiceInputValidator.filter_numeric_input(raw) == expected
