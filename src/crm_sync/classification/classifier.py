"""Lifecycle event classification: event name -> category, CRM stage, source, deal name."""

import logging
from datetime import date
from typing import Optional

from crm_sync.derivation.engine import Clock, closed_won_name, utc_today
from crm_sync.models.results import CanonicalRecord, ClassifiedEvent, EventType
from crm_sync.rules.ruleset import RuleSet

logger = logging.getLogger(__name__)

CANCELLED_STAGE = "Cancelled"
DEFAULT_ACTIVATION_STAGE = "Trial - Activated"
DEFAULT_NEW_CONTACT_TRIAL_STAGE = "Sample - Downloaded"
DEFAULT_EXISTING_CONTACT_TRIAL_STAGE = "Trial - License"
DEFAULT_MARKETPLACE_TRIAL_STAGE = "Sample - MP"
DEFAULT_TRIAL_SOURCE = "Webhook"

# Lead sources that count as marketplace for existing contacts
MARKETPLACE_SOURCES = ("PBI Marketplace", "PowerBI", "SPZA")


class EventClassifier:
    """
    Maps event_name (case-insensitive) to the first matching category, checked in order:
    trial, activation, purchase, purchaseInitiate, renewal, renewalInitiate, cancellation.
    A name matching nothing yields an empty ClassifiedEvent (downstream deal logic is skipped).
    """

    def __init__(self, rules: RuleSet, clock: Optional[Clock] = None):
        self.rules = rules
        self._clock = clock or utc_today

    def classify(self, record: CanonicalRecord, *, is_new_contact: bool = True) -> ClassifiedEvent:
        event_name = record.get("event_name")
        if not event_name:
            logger.info("No event_name on record; skipping classification")
            return ClassifiedEvent()

        name = str(event_name).lower()
        for category, events in self.rules.license_event_rules.categories():
            if name in events:
                event = self._build(EventType(category), name, record, is_new_contact)
                logger.info("Classified %r as %s (stage=%s)", name, event.event_type, event.stage)
                return event

        logger.info("Event %r matches no lifecycle category", name)
        return ClassifiedEvent()

    def _build(
        self,
        event_type: EventType,
        name: str,
        record: CanonicalRecord,
        is_new_contact: bool,
    ) -> ClassifiedEvent:
        stages = self.rules.stage_mapping
        if event_type is EventType.TRIAL:
            return ClassifiedEvent(
                event_type=event_type,
                stage=self.trial_stage(record.get("source"), is_new_contact),
                source=self.trial_source(record.get("source")),
            )
        if event_type is EventType.ACTIVATION:
            return ClassifiedEvent(
                event_type=event_type,
                stage=stages.activation.get(name) or DEFAULT_ACTIVATION_STAGE,
            )
        if event_type is EventType.PURCHASE:
            return ClassifiedEvent(
                event_type=event_type,
                stage=self.purchase_stage(name),
                deal_name=self.purchase_deal_name(record, self._clock()),
            )
        if event_type is EventType.PURCHASE_INITIATE:
            return ClassifiedEvent(event_type=event_type, stage=stages.purchase_initiate)
        if event_type is EventType.RENEWAL:
            return ClassifiedEvent(event_type=event_type, stage=stages.renewal)
        if event_type is EventType.RENEWAL_INITIATE:
            return ClassifiedEvent(event_type=event_type, stage=stages.renewal_initiate)
        return ClassifiedEvent(event_type=event_type, stage=CANCELLED_STAGE)

    def trial_stage(self, source: Optional[str], is_new_contact: bool) -> str:
        """Stage for a trial from (contact-is-new x lead source)."""
        trial = self.rules.stage_mapping.trial
        if is_new_contact:
            lowered = (source or "").lower()
            if lowered == "website":
                return trial.new_contact.get("website") or DEFAULT_NEW_CONTACT_TRIAL_STAGE
            if lowered == "mp":
                return trial.new_contact.get("MP") or DEFAULT_NEW_CONTACT_TRIAL_STAGE
            return DEFAULT_NEW_CONTACT_TRIAL_STAGE

        if source in MARKETPLACE_SOURCES:
            return trial.existing_contact.get(source) or DEFAULT_MARKETPLACE_TRIAL_STAGE
        if source == "Website":
            return trial.existing_contact.get("Website") or DEFAULT_EXISTING_CONTACT_TRIAL_STAGE
        return DEFAULT_EXISTING_CONTACT_TRIAL_STAGE

    def trial_source(self, source: Optional[str]) -> str:
        """Normalized lead source: website / mp|marketplace mapped, anything else raw."""
        mapping = self.rules.source_mapping
        lowered = (source or "").lower()
        if lowered == "website" and mapping.get("website"):
            return mapping["website"]
        if lowered in ("mp", "marketplace") and mapping.get("MP"):
            return mapping["MP"]
        return source or DEFAULT_TRIAL_SOURCE

    def purchase_stage(self, name: str) -> str:
        purchase = self.rules.stage_mapping.purchase
        if "completed" in name:
            return purchase.completed
        if "initiated" in name:
            return purchase.initiated
        return purchase.completed

    @staticmethod
    def purchase_deal_name(record: CanonicalRecord, today: date) -> str:
        """<deal_name or product_name>-CW-<YYYYMMDD>."""
        base = record.get("deal_name") or record.get("product_name") or "Deal"
        return closed_won_name(base, today)
