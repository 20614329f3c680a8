"""Unit tests for field extraction."""

from crm_sync.normalization import extract, extract_aliased
from crm_sync.rules import RuleSet


class TestExtractAliased:
    """Tests for first-match-wins alias scanning."""

    def test_first_alias_wins(self) -> None:
        """name is taken from 'name' even when 'Name' and 'full_name' are also present."""
        mappings = {"name": ("name", "Name", "full_name")}
        record = extract_aliased({"full_name": "C", "Name": "B", "name": "A"}, mappings)
        assert record == {"name": "A"}

    def test_empty_and_none_skipped(self) -> None:
        """Empty strings and None do not count as a match."""
        mappings = {"name": ("name", "Name", "full_name")}
        record = extract_aliased({"name": "", "Name": None, "full_name": "C"}, mappings)
        assert record == {"name": "C"}

    def test_missing_field_absent(self) -> None:
        record = extract_aliased({"other": "x"}, {"email": ("email",)})
        assert "email" not in record

    def test_scalars_become_strings(self) -> None:
        record = extract_aliased(
            {"users": 20, "trial": True, "meta": {"k": 1}},
            {"user_bucket": ("users",), "flag": ("trial",), "meta": ("meta",)},
        )
        assert record == {"user_bucket": "20", "flag": "true", "meta": {"k": 1}}

    def test_zero_is_a_value(self) -> None:
        record = extract_aliased({"amount": 0}, {"deal_amount": ("amount",)})
        assert record == {"deal_amount": "0"}


class TestExtract:
    """Tests for extract across payload shapes."""

    def test_enveloped(self, rules: RuleSet, enveloped_payload: dict) -> None:
        record = extract(enveloped_payload, rules)
        assert record["first_name"] == "John"
        assert record["last_name"] == "Doe"
        assert record["email"] == "john@example.com"
        assert record["company"] == "Example Corp"
        assert record["event_name"] == "user.login.register"
        assert "name" not in record

    def test_data_event_name_wins_over_envelope(self, rules: RuleSet, enveloped_payload: dict) -> None:
        """An eventName inside data overrides the one beside it in the envelope."""
        enveloped_payload["webhookTrigger"]["payload"]["data"]["eventName"] = "license.activated"
        record = extract(enveloped_payload, rules)
        assert record["event_name"] == "license.activated"

    def test_envelope_event_name_without_data_value(self, rules: RuleSet, enveloped_payload: dict) -> None:
        enveloped_payload["webhookTrigger"]["payload"]["data"]["eventName"] = ""
        record = extract(enveloped_payload, rules)
        assert record["event_name"] == "user.login.register"

    def test_event_name_from_data_when_envelope_has_none(self, rules: RuleSet) -> None:
        payload = {"webhookTrigger": {"payload": {"data": {"eventName": "trial.started", "name": "Al"}}}}
        assert extract(payload, rules)["event_name"] == "trial.started"

    def test_flat(self, rules: RuleSet) -> None:
        record = extract({"Full_Name": "Zed Q", "Email_Address": "z@q.io", "leadSource": "MP"}, rules)
        assert record == {"name": "Zed Q", "email": "z@q.io", "source": "MP"}

    def test_alternate(self, rules: RuleSet, alternate_payload: dict) -> None:
        """UserDetails fields map to canonical names; name is FirstName + LastName."""
        record = extract(alternate_payload, rules)
        assert record["name"] == "Ana Lopez"
        assert record["first_name"] == "Ana"
        assert record["email"] == "ana@lopez-consulting.es"
        assert record["phone"] == "34600111222"
        assert record["user_title"] == "CTO"
        assert record["source"] == "MP"
        assert record["action_code"] == "TRIAL"
        assert record["offer_title"] == "Standard Visuals"
        assert record["message"] == "Downloaded a sample"

    def test_alternate_without_last_name(self, rules: RuleSet, alternate_payload: dict) -> None:
        del alternate_payload["UserDetails"]["LastName"]
        record = extract(alternate_payload, rules)
        assert "name" not in record
        assert record["first_name"] == "Ana"

    def test_does_not_mutate_payload(self, rules: RuleSet, enveloped_payload: dict) -> None:
        before = repr(enveloped_payload)
        extract(enveloped_payload, rules)
        assert repr(enveloped_payload) == before
