"""Unit tests for record validation."""

from crm_sync.normalization import check_field, validate
from crm_sync.rules import RuleSet
from crm_sync.rules.ruleset import ValidationRule


class TestCheckField:
    """Tests for check_field."""

    def test_required_missing_reports_only_required(self) -> None:
        """A missing required field does not also report minLength or pattern."""
        rule = ValidationRule(required=True, minLength=3, pattern="^x")
        assert check_field("name", None, rule) == ["name is required"]
        assert check_field("name", "   ", rule) == ["name is required"]

    def test_optional_missing_is_fine(self) -> None:
        rule = ValidationRule(pattern="^x")
        assert check_field("email", "", rule) == []

    def test_min_length(self) -> None:
        rule = ValidationRule(required=True, minLength=2)
        assert check_field("name", "J", rule) == ["name must be at least 2 characters"]
        assert check_field("name", "Jo", rule) == []

    def test_pattern_default_message(self) -> None:
        rule = ValidationRule(pattern=r"^\d+$")
        assert check_field("phone", "abc", rule) == ["phone format is invalid"]

    def test_pattern_custom_message(self) -> None:
        rule = ValidationRule(pattern=r"^\d+$", message="digits only")
        assert check_field("phone", "abc", rule) == ["digits only"]

    def test_min_length_and_pattern_both_reported(self) -> None:
        rule = ValidationRule(minLength=5, pattern=r"^\d+$")
        assert check_field("code", "ab", rule) == [
            "code must be at least 5 characters",
            "code format is invalid",
        ]


class TestValidate:
    """Tests for validate with the bundled rules."""

    def test_valid(self, rules: RuleSet) -> None:
        result = validate({"name": "John Doe", "email": "john@example.com"}, rules)
        assert result.is_valid is True
        assert result.errors == []

    def test_name_required(self, rules: RuleSet) -> None:
        result = validate({"email": "john@example.com"}, rules)
        assert result.is_valid is False
        assert result.errors == ["name is required"]

    def test_bad_email(self, rules: RuleSet) -> None:
        result = validate({"name": "John", "email": "not-an-email"}, rules)
        assert result.errors == ["email must be a valid email address"]

    def test_bad_phone(self, rules: RuleSet) -> None:
        result = validate({"name": "John", "phone": "0123"}, rules)
        assert result.errors == ["phone format is invalid"]

    def test_no_rules(self) -> None:
        assert validate({}, RuleSet()).is_valid is True
