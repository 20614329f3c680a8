"""Pytest fixtures for crm-sync tests."""

import tempfile
from datetime import date
from pathlib import Path

import pytest

from crm_sync.rules import RuleSet, load_ruleset

FIXED_DAY = date(2026, 3, 9)


@pytest.fixture
def rules() -> RuleSet:
    """Bundled default rules."""
    return load_ruleset()


@pytest.fixture
def fixed_clock():
    """Clock pinned to FIXED_DAY so date-derived fields are stable."""
    return lambda: FIXED_DAY


@pytest.fixture
def enveloped_payload() -> dict:
    """Enveloped registration event with first/last name split."""
    return {
        "webhookTrigger": {
            "payload": {
                "data": {
                    "firstName": "John",
                    "lastName": "Doe",
                    "email": "john@example.com",
                    "company": "Example Corp",
                },
                "eventName": "user.login.register",
            }
        }
    }


@pytest.fixture
def purchase_payload() -> dict:
    """Enveloped purchase-completed event with product details."""
    return {
        "webhookTrigger": {
            "payload": {
                "data": {
                    "name": "jane SMITH",
                    "email": " Jane@Acme.de ",
                    "phone": "+49 170 123-4567",
                    "offerTitle": "Pro License",
                    "packageType": "single",
                    "userBucket": "20",
                    "licenseType": "team",
                    "leadSource": "website",
                },
                "eventName": "License.Purchase.Completed",
            }
        }
    }


@pytest.fixture
def alternate_payload() -> dict:
    """Lead-form payload with UserDetails at the top level."""
    return {
        "UserDetails": {
            "FirstName": "Ana",
            "LastName": "Lopez",
            "Email": "ana@lopez-consulting.es",
            "Phone": "34600111222",
            "Title": "CTO",
        },
        "LeadSource": "MP",
        "ActionCode": "TRIAL",
        "OfferTitle": "Standard Visuals",
        "Description": "Downloaded a sample",
    }


@pytest.fixture
def temp_db() -> Path:
    """Temporary database path for isolated tests."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        path = Path(f.name)
    yield path
    path.unlink(missing_ok=True)
