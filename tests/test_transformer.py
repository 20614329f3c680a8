"""Unit tests for transformation rules."""

from crm_sync.normalization import apply_rule, synthesize_name, to_title_case, transform
from crm_sync.rules import RuleSet
from crm_sync.rules.ruleset import TransformationRule


def _rule(**flags) -> TransformationRule:
    return TransformationRule.model_validate(flags)


class TestToTitleCase:
    def test_words(self) -> None:
        assert to_title_case("jane SMITH") == "Jane Smith"

    def test_keeps_whitespace(self) -> None:
        assert to_title_case("  a  b ") == "  A  B "


class TestApplyRule:
    """Tests for the fixed flag order."""

    def test_trim_and_lower(self) -> None:
        assert apply_rule(" Jane@Acme.DE ", _rule(trim=True, toLowerCase=True)) == "jane@acme.de"

    def test_phone_cleanup(self) -> None:
        rule = _rule(removeSpaces=True, removeSpecialChars=True)
        assert apply_rule("+49 (170) 123-4567", rule) == "+491701234567"

    def test_country_code_added_once(self) -> None:
        rule = _rule(addCountryCode="+1")
        assert apply_rule("5551234", rule) == "+15551234"
        assert apply_rule("+445551234", rule) == "+445551234"

    def test_protocol_added_once(self) -> None:
        rule = _rule(addProtocol="https")
        assert apply_rule("acme.com", rule) == "https://acme.com"
        assert apply_rule("http://acme.com", rule) == "http://acme.com"

    def test_lower_runs_before_title(self) -> None:
        """Both flags set: title case wins because it runs after lower-casing."""
        assert apply_rule("mIxEd cAsE", _rule(toLowerCase=True, titleCase=True)) == "Mixed Case"

    def test_non_string_value(self) -> None:
        assert apply_rule(42, _rule(trim=True)) == "42"


class TestSynthesizeName:
    def test_from_first_and_last(self) -> None:
        assert synthesize_name({"first_name": "John", "last_name": "Doe"})["name"] == "John Doe"

    def test_first_only(self) -> None:
        assert synthesize_name({"first_name": "John"})["name"] == "John"

    def test_existing_name_kept(self) -> None:
        record = {"name": "Given", "first_name": "John"}
        assert synthesize_name(record) is record

    def test_nothing_to_synthesize(self) -> None:
        assert "name" not in synthesize_name({"email": "a@b.de"})


class TestTransform:
    """Tests for transform with the bundled rules."""

    def test_applies_rules(self, rules: RuleSet) -> None:
        record = transform(
            {"name": " jane SMITH ", "email": " Jane@Acme.de ", "website": "Acme.de", "phone": "+49 170 123-4567"},
            rules,
        )
        assert record["name"] == "Jane Smith"
        assert record["email"] == "jane@acme.de"
        assert record["website"] == "https://acme.de"
        assert record["phone"] == "+491701234567"

    def test_returns_new_record(self, rules: RuleSet) -> None:
        original = {"email": " A@B.DE "}
        result = transform(original, rules)
        assert original == {"email": " A@B.DE "}
        assert result["email"] == "a@b.de"

    def test_absent_fields_skipped(self, rules: RuleSet) -> None:
        result = transform({"company": ""}, rules)
        assert result == {"company": ""}

    def test_synthesized_name_is_title_cased(self, rules: RuleSet) -> None:
        result = transform({"first_name": "john", "last_name": "doe"}, rules)
        assert result["name"] == "John Doe"

    def test_idempotent(self, rules: RuleSet) -> None:
        once = transform({"name": "jane smith", "email": "X@Y.COM"}, rules)
        assert transform(once, rules) == once
