"""Contact/company/product upserts and deal create-or-update through a CRMClient."""

import logging
from typing import Any, Callable, Optional

from crm_sync.models.results import CanonicalRecord, ClassifiedEvent, CRMEntities, DealOutcome

from .client import CRMClient, DuplicateRecordError
from .mapper import CRMFormatMapper

logger = logging.getLogger(__name__)


def _upsert(
    kind: str,
    key: Optional[str],
    find: Callable[[str], Optional[dict[str, Any]]],
    create: Callable[[dict[str, Any]], dict[str, Any]],
    payload: dict[str, Any],
) -> tuple[dict[str, Any], bool]:
    """
    Find by key, else create. A duplicate rejection on create falls back to find.
    Returns (record, was_created).
    """
    if key:
        existing = find(key)
        if existing:
            logger.info("Found existing %s %s", kind, existing.get("id"))
            return existing, False
    try:
        created = create(payload)
    except DuplicateRecordError:
        existing = find(key) if key else None
        if not existing:
            raise
        logger.info("%s %r already exists; using %s", kind, key, existing.get("id"))
        return existing, False
    logger.info("Created %s %s", kind, created.get("id"))
    return created, True


class CRMSync:
    """Pushes one normalized record into the CRM via the injected client."""

    def __init__(self, client: CRMClient, mapper: CRMFormatMapper):
        self.client = client
        self.mapper = mapper

    def sync_entities(self, record: CanonicalRecord) -> CRMEntities:
        """Contact always; company and product when the record names them."""
        entities = CRMEntities()

        contact, entities.is_new_contact = _upsert(
            "contact",
            record.get("email"),
            self.client.find_contact_by_email,
            self.client.create_contact,
            self.mapper.contact(record),
        )
        entities.contact = contact

        if record.get("company"):
            entities.company, entities.is_new_company = _upsert(
                "company",
                record["company"],
                self.client.find_company_by_name,
                self.client.create_company,
                self.mapper.company(record),
            )

        if record.get("product_name"):
            entities.product, _ = _upsert(
                "product",
                record["product_name"],
                self.client.find_product_by_name,
                self.client.create_product,
                self.mapper.product(record),
            )

        return entities

    def sync_deal(self, record: CanonicalRecord, entities: CRMEntities, event: ClassifiedEvent) -> DealOutcome:
        """Create or update the deal for a classified event; no-op on a classification miss."""
        if event.is_miss:
            logger.info("No lifecycle event; skipping deal management")
            return DealOutcome()

        deal_name = event.deal_name or record.get("deal_name")
        if not deal_name:
            logger.info("No deal name available; skipping deal management")
            return DealOutcome()

        deal_record = dict(record)
        deal_record["deal_name"] = deal_name
        deal_record["stage"] = event.stage
        if entities.company_id:
            deal_record["company_ref"] = {"id": entities.company_id}
        if entities.contact_id:
            deal_record["contact_ref"] = {"id": entities.contact_id}
        payload = self.mapper.deal(deal_record)

        existing = self.client.find_deal_by_name(deal_name)
        if existing:
            deal = self.client.update_deal(str(existing["id"]), payload)
            logger.info("Updated deal %s to stage %s", existing["id"], event.stage)
            return DealOutcome(deal=deal, is_new_deal=False)

        deal = self.client.create_deal(payload)
        logger.info("Created deal %s at stage %s", deal.get("id"), event.stage)
        return DealOutcome(deal=deal, is_new_deal=True)
