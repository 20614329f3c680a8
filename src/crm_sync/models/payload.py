"""Known inbound payload shapes and shape detection."""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Top-level keys that together identify the alternate (lead-form) shape
ALTERNATE_SHAPE_KEYS = ("UserDetails", "LeadSource", "ActionCode", "OfferTitle")


class AlternatePayload(BaseModel):
    """Lead-form shape: contact fields nested under UserDetails, lead metadata at top level."""

    model_config = ConfigDict(frozen=True)

    user_details: dict[str, Any] = Field(default_factory=dict)
    lead_source: Any = None
    action_code: Any = None
    offer_title: Any = None
    description: Any = None


class EnvelopedPayload(BaseModel):
    """Transport envelope: webhookTrigger.payload.data plus eventName."""

    model_config = ConfigDict(frozen=True)

    data: dict[str, Any] = Field(default_factory=dict)
    event_name: Optional[str] = None


class FlatPayload(BaseModel):
    """Plain object whose top-level keys are the fields."""

    model_config = ConfigDict(frozen=True)

    data: dict[str, Any] = Field(default_factory=dict)


PayloadShape = Union[AlternatePayload, EnvelopedPayload, FlatPayload]


def detect_shape(payload: dict[str, Any]) -> PayloadShape:
    """
    Resolve a raw JSON payload to one of the known shapes.
    All four alternate keys present (and non-empty) selects AlternatePayload;
    otherwise a webhookTrigger.payload.data object selects EnvelopedPayload;
    anything else is treated as FlatPayload.
    """
    if all(payload.get(key) for key in ALTERNATE_SHAPE_KEYS):
        user_details = payload["UserDetails"]
        return AlternatePayload(
            user_details=user_details if isinstance(user_details, dict) else {},
            lead_source=payload.get("LeadSource"),
            action_code=payload.get("ActionCode"),
            offer_title=payload.get("OfferTitle"),
            description=payload.get("Description"),
        )

    trigger = payload.get("webhookTrigger")
    inner = trigger.get("payload") if isinstance(trigger, dict) else None
    data = inner.get("data") if isinstance(inner, dict) else None
    if isinstance(data, dict):
        event_name = inner.get("eventName")
        return EnvelopedPayload(
            data=data,
            event_name=str(event_name) if event_name else None,
        )

    return FlatPayload(data=payload)
