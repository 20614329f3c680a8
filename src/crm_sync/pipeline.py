"""Pipeline orchestration: extract → transform → validate → derive → sync entities → classify → deal."""

import logging
from typing import Any, Optional

from crm_sync.classification import EventClassifier
from crm_sync.crm import CRMClient, CRMError, CRMFormatMapper, CRMSync
from crm_sync.derivation import Clock, DerivedFieldEngine
from crm_sync.models.results import (
    CanonicalRecord,
    ClassifiedEvent,
    CRMEntities,
    DealOutcome,
    ProcessingResult,
)
from crm_sync.normalization import extract, transform, validate
from crm_sync.rules import RuleSet, RuleSetProvider

logger = logging.getLogger(__name__)


def normalize(payload: dict[str, Any], rules: RuleSet) -> tuple[CanonicalRecord, list[str]]:
    """Extract and transform; returns (record, validation errors)."""
    record = transform(extract(payload, rules), rules)
    result = validate(record, rules)
    return record, result.errors


class WebhookPipeline:
    """
    Processes one webhook payload per call and returns a ProcessingResult.
    Rules are read once per call (a reload mid-run never affects that run).
    Without a CRM client the entity and deal steps are skipped and the contact
    is treated as new for classification.
    """

    def __init__(
        self,
        rules: RuleSet | RuleSetProvider,
        client: Optional[CRMClient] = None,
        *,
        clock: Optional[Clock] = None,
    ):
        self._rules = rules
        self.client = client
        self._clock = clock

    @property
    def rules(self) -> RuleSet:
        if isinstance(self._rules, RuleSetProvider):
            return self._rules.current
        return self._rules

    def process(self, payload: Any) -> ProcessingResult:
        """Run every stage; validation and CRM failures come back as success=False."""
        rules = self.rules
        if not isinstance(payload, dict):
            return ProcessingResult.failed("Payload must be a JSON object", original_payload=payload)

        record, errors = normalize(payload, rules)
        if errors:
            message = f"Validation failed: {', '.join(errors)}"
            logger.warning("Validation failed: %s", ", ".join(errors))
            return ProcessingResult.failed(message, original_payload=payload)

        record = DerivedFieldEngine(self._clock, catalog=rules.product_catalog).derive(record)
        classifier = EventClassifier(rules, self._clock)

        try:
            if self.client is None:
                entities = CRMEntities(is_new_contact=True)
                event = classifier.classify(record, is_new_contact=True)
                deal = DealOutcome()
            else:
                sync = CRMSync(self.client, CRMFormatMapper(rules))
                entities = sync.sync_entities(record)
                event = classifier.classify(record, is_new_contact=entities.is_new_contact)
                deal = sync.sync_deal(record, entities, event)
        except CRMError as e:
            logger.error("CRM sync failed: %s", e)
            return ProcessingResult.failed(str(e), original_payload=payload)

        return ProcessingResult.ok(
            record,
            crm=entities,
            license=event,
            deal=deal,
            original_payload=payload,
        )

    def preview(self, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Normalized record, classification and the CRM payloads that would be sent,
        without touching a client. Raises ValueError when validation fails.
        """
        rules = self.rules
        record, errors = normalize(payload, rules)
        if errors:
            raise ValueError(f"Validation failed: {', '.join(errors)}")
        record = DerivedFieldEngine(self._clock, catalog=rules.product_catalog).derive(record)
        event: ClassifiedEvent = EventClassifier(rules, self._clock).classify(record)
        mapper = CRMFormatMapper(rules)

        payloads: dict[str, Any] = {"Contact": mapper.contact(record)}
        if record.get("company"):
            payloads["Company"] = mapper.company(record)
        if record.get("product_name"):
            payloads["Product"] = mapper.product(record)
        deal_name = event.deal_name or record.get("deal_name")
        if not event.is_miss and deal_name:
            payloads["Deal"] = mapper.deal({**record, "deal_name": deal_name, "stage": event.stage})
        return {"record": record, "license": event.model_dump(by_alias=True), "payloads": payloads}
