"""Per-request result models produced by the pipeline stages."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# Canonical field name -> value. Plain dict; every stage returns a new one.
CanonicalRecord = dict[str, Any]


class ValidationResult(BaseModel):
    """Outcome of validating a record; advisory, never mutates the record."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    errors: list[str] = Field(default_factory=list)


class EventType(str, Enum):
    """Lifecycle categories, in the order they are checked."""

    TRIAL = "trial"
    ACTIVATION = "activation"
    PURCHASE = "purchase"
    PURCHASE_INITIATE = "purchaseInitiate"
    RENEWAL = "renewal"
    RENEWAL_INITIATE = "renewalInitiate"
    CANCELLATION = "cancellation"


class ClassifiedEvent(BaseModel):
    """Lifecycle category and CRM stage derived from event_name. Empty on a miss."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, use_enum_values=True)

    event_type: Optional[EventType] = Field(default=None, alias="eventType")
    stage: Optional[str] = None
    source: Optional[str] = None
    deal_name: Optional[str] = Field(default=None, alias="dealName")

    @property
    def is_miss(self) -> bool:
        return self.event_type is None


class CRMEntities(BaseModel):
    """Contact/company/product records found or created in the CRM."""

    model_config = ConfigDict(populate_by_name=True)

    contact: Optional[dict[str, Any]] = None
    company: Optional[dict[str, Any]] = None
    product: Optional[dict[str, Any]] = None
    is_new_contact: bool = Field(default=False, alias="isNewContact")
    is_new_company: bool = Field(default=False, alias="isNewCompany")

    @staticmethod
    def _id(entity: Optional[dict[str, Any]]) -> Optional[str]:
        return str(entity["id"]) if entity and entity.get("id") is not None else None

    @property
    def contact_id(self) -> Optional[str]:
        return self._id(self.contact)

    @property
    def company_id(self) -> Optional[str]:
        return self._id(self.company)

    @property
    def product_id(self) -> Optional[str]:
        return self._id(self.product)


class DealOutcome(BaseModel):
    """Deal created or updated for a classified event, if any."""

    model_config = ConfigDict(populate_by_name=True)

    deal: Optional[dict[str, Any]] = None
    is_new_deal: bool = Field(default=False, alias="isNewDeal")


class ProcessingResult(BaseModel):
    """
    Two-shape pipeline output. Collaborators branch on `success`:
    success -> data (record + crm/license/deal); failure -> error.
    """

    success: bool
    data: Optional[dict[str, Any]] = None
    error: Optional[str] = None
    original_payload: Any = None

    @classmethod
    def ok(
        cls,
        record: CanonicalRecord,
        *,
        crm: CRMEntities,
        license: ClassifiedEvent,
        deal: DealOutcome,
        original_payload: Any,
    ) -> "ProcessingResult":
        data = dict(record)
        data["crm"] = crm.model_dump(by_alias=True)
        data["license"] = license.model_dump(by_alias=True)
        data["deal"] = deal.model_dump(by_alias=True)
        return cls(success=True, data=data, original_payload=original_payload)

    @classmethod
    def failed(cls, error: str, *, original_payload: Any) -> "ProcessingResult":
        return cls(success=False, error=error, original_payload=original_payload)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire contract expected by the responder and dead-letter writer."""
        if self.success:
            return {"success": True, "data": self.data, "originalPayload": self.original_payload}
        return {"success": False, "error": self.error, "originalPayload": self.original_payload}
