"""Unit tests for DerivedFieldEngine and deal labels."""

from datetime import date

from crm_sync.derivation import DerivedFieldEngine, generate_deal_label
from crm_sync.derivation.products import DEFAULT_ITEM_ID

FIXED_DAY = date(2026, 3, 9)


class TestDerivedFieldEngine:
    """Tests for DerivedFieldEngine.derive."""

    def test_contact_fields(self, fixed_clock) -> None:
        record = {"name": "John Doe", "email": "john@example.com", "company": "Example Corp"}
        out = DerivedFieldEngine(clock=fixed_clock).derive(record)
        assert out["domain"] == "example.com"
        assert out["deal_name"] == "John Doe-Example Corp"
        assert out["closed_deal_name"] == "John Doe-Example Corp-CW-20260309"
        assert out["user_name"] == "johndoe"
        assert out["closing_date"] == "2026-04-08"
        assert "country" not in out

    def test_does_not_mutate_input(self, fixed_clock) -> None:
        record = {"name": "John Doe", "email": "john@example.com"}
        DerivedFieldEngine(clock=fixed_clock).derive(record)
        assert record == {"name": "John Doe", "email": "john@example.com"}

    def test_existing_values_kept(self, fixed_clock) -> None:
        """Derived fields never replace values already on the record."""
        record = {
            "name": "John Doe",
            "email": "john@acme.de",
            "company": "Given Co",
            "country": "Austria",
            "deal_name": "Preset",
            "closing_date": "2030-01-01",
        }
        out = DerivedFieldEngine(clock=fixed_clock).derive(record)
        assert out["company"] == "Given Co"
        assert out["country"] == "Austria"
        assert out["deal_name"] == "Preset"
        assert out["closed_deal_name"] == "Preset-CW-20260309"
        assert out["closing_date"] == "2030-01-01"

    def test_backfills_country_and_company(self, fixed_clock) -> None:
        out = DerivedFieldEngine(clock=fixed_clock).derive({"name": "Jane", "email": "jane@acme.de"})
        assert out["country"] == "DE"
        assert out["company"] == "acme.de"

    def test_webmail_has_no_company(self, fixed_clock) -> None:
        out = DerivedFieldEngine(clock=fixed_clock).derive({"name": "Jane", "email": "jane@gmail.com"})
        assert "company" not in out
        assert "deal_name" not in out

    def test_product_from_offer_title(self, fixed_clock) -> None:
        record = {
            "name": "Jane",
            "offer_title": "Pro License",
            "package_type": "single",
            "user_bucket": "20",
            "license_type": "team",
        }
        out = DerivedFieldEngine(clock=fixed_clock).derive(record)
        assert out["category"] == "Certified"
        assert out["product_name"] == "Certified - Single License - For team - 6-20 users"
        assert out["item_id"] == DEFAULT_ITEM_ID

    def test_product_defaults(self, fixed_clock) -> None:
        out = DerivedFieldEngine(clock=fixed_clock).derive({"name": "Jane", "offer_title": "Visuals"})
        assert out["product_name"] == "Standard - Single License - For Standard - 1-5 users"

    def test_extracted_category_wins(self, fixed_clock) -> None:
        out = DerivedFieldEngine(clock=fixed_clock).derive(
            {"name": "Jane", "offer_title": "Pro License", "category": "uncertified"}
        )
        assert out["category"] == "Standard"

    def test_no_product_without_category_source(self, fixed_clock) -> None:
        out = DerivedFieldEngine(clock=fixed_clock).derive({"name": "Jane"})
        assert "product_name" not in out
        assert "item_id" not in out

    def test_catalog_lookup(self, fixed_clock) -> None:
        engine = DerivedFieldEngine(clock=fixed_clock, catalog={"Chart X": "777"})
        out = engine.derive({"name": "Jane", "product_name": "Chart X"})
        assert out["item_id"] == "777"

    def test_visual_purchased_from_offer_title(self, fixed_clock) -> None:
        out = DerivedFieldEngine(clock=fixed_clock).derive({"name": "Jane", "offer_title": "Pro License"})
        assert out["visual_purchased"] == "Pro License"

    def test_visual_purchased_from_category(self, fixed_clock) -> None:
        """Without an offer title the label is package type and category."""
        out = DerivedFieldEngine(clock=fixed_clock).derive({"name": "Jane", "category": "certified"})
        assert out["visual_purchased"] == "Single - Certified"

    def test_no_visual_purchased_without_category(self, fixed_clock) -> None:
        assert "visual_purchased" not in DerivedFieldEngine(clock=fixed_clock).derive({"name": "Jane"})

    def test_deal_label(self, fixed_clock) -> None:
        record = {"name": "John Doe", "email": "john@acme.com", "company": "Acme Inc"}
        out = DerivedFieldEngine(clock=fixed_clock).derive(record)
        assert out["deal_label"] == "John Doe - Acme Inc"

    def test_deal_label_webmail(self, fixed_clock) -> None:
        out = DerivedFieldEngine(clock=fixed_clock).derive({"name": "Jane Roe", "email": "jane.roe@gmail.com"})
        assert out["deal_label"] == "jane.roe - gmail"

    def test_deal_label_kept(self, fixed_clock) -> None:
        record = {"name": "John Doe", "email": "john@acme.com", "deal_label": "Preset"}
        assert DerivedFieldEngine(clock=fixed_clock).derive(record)["deal_label"] == "Preset"

    def test_idempotent_with_fixed_clock(self, fixed_clock) -> None:
        engine = DerivedFieldEngine(clock=fixed_clock)
        record = {"name": "John Doe", "email": "john@acme.com", "offer_title": "Pro"}
        once = engine.derive(record)
        assert engine.derive(record) == once


class TestGenerateDealLabel:
    """Tests for generate_deal_label."""

    def test_business_email(self) -> None:
        assert generate_deal_label("Jane Smith", "jane@acme.de", None, None) == "Jane Smith - acme"

    def test_company_given(self) -> None:
        assert generate_deal_label("Jane Smith", "jane@acme.de", None, "Acme GmbH") == "Jane Smith - Acme GmbH"

    def test_webmail_uses_mailbox(self) -> None:
        assert generate_deal_label("Jane Smith", "jsmith@gmail.com", None, "Corp") == "jsmith - Corp"
        assert generate_deal_label("Jane Smith", "jsmith@yahoo.co.uk", None, "Corp") == "jsmith - Corp"

    def test_no_email(self) -> None:
        assert generate_deal_label("Jane Smith", None, "Deal A", None) == "Deal A"
        assert generate_deal_label("Jane Smith", None, None, None) == "Jane Smith"

    def test_closed_won(self) -> None:
        label = generate_deal_label("closedwon", "jane@acme.de", "Deal A", None, today=FIXED_DAY)
        assert label == "Deal A-CW-20260309"

    def test_closed_won_other_day(self) -> None:
        label = generate_deal_label("closedwon", "jane@acme.de", "D", None, today=date(2025, 12, 31))
        assert label == "D-CW-20251231"
