"""Canonical record -> CRM object payloads (Contact, Company, Deal, Product)."""

import logging
from typing import Any

from crm_sync.models.results import CanonicalRecord
from crm_sync.rules.ruleset import RuleSet

logger = logging.getLogger(__name__)

CONTACT_LAST_NAME_FIELD = "Last_Name"
LEAD_SOURCE_FIELD = "Lead_Source"
CONTACT_LEAD_SOURCE = "Website"
UNKNOWN_CONTACT = "Unknown Contact"

# Fields that only exist on Deal objects
DEAL_ONLY_FIELDS = ("Pipeline", "Stage", "Deal_Name", "Priority")


def contact_last_name(record: CanonicalRecord) -> str:
    """Fallback chain for the required contact name."""
    first = record.get("first_name")
    last = record.get("last_name")
    if record.get("name"):
        return record["name"]
    if record.get("customer_name"):
        return record["customer_name"]
    if first and last:
        return f"{first} {last}"
    if first:
        return first
    if last:
        return last
    return UNKNOWN_CONTACT


def to_crm_format(record: CanonicalRecord, kind: str, rules: RuleSet) -> dict[str, Any]:
    """
    Build a fresh payload for one CRM object kind: mapped truthy fields,
    then defaults for anything still unset, then per-kind adjustments.
    """
    payload: dict[str, Any] = {}
    for target, source in rules.crm_mapping(kind).items():
        value = record.get(source)
        if value:
            payload[target] = value

    for target, value in rules.defaults_for(kind).items():
        if not payload.get(target):
            payload[target] = value

    if kind == "Contact":
        if not payload.get(CONTACT_LAST_NAME_FIELD):
            payload[CONTACT_LAST_NAME_FIELD] = contact_last_name(record)
        payload[LEAD_SOURCE_FIELD] = CONTACT_LEAD_SOURCE

    if kind != "Deal":
        for field in DEAL_ONLY_FIELDS:
            payload.pop(field, None)

    logger.debug("Mapped %s payload fields: %s", kind, sorted(payload))
    return payload


class CRMFormatMapper:
    """Binds a RuleSet to to_crm_format for repeated use within one run."""

    def __init__(self, rules: RuleSet):
        self.rules = rules

    def contact(self, record: CanonicalRecord) -> dict[str, Any]:
        return to_crm_format(record, "Contact", self.rules)

    def company(self, record: CanonicalRecord) -> dict[str, Any]:
        return to_crm_format(record, "Company", self.rules)

    def deal(self, record: CanonicalRecord) -> dict[str, Any]:
        return to_crm_format(record, "Deal", self.rules)

    def product(self, record: CanonicalRecord) -> dict[str, Any]:
        return to_crm_format(record, "Product", self.rules)
