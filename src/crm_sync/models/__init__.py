"""Data models for payload shapes and pipeline results."""

from crm_sync.models.payload import (
    AlternatePayload,
    EnvelopedPayload,
    FlatPayload,
    PayloadShape,
    detect_shape,
)
from crm_sync.models.results import (
    CanonicalRecord,
    ClassifiedEvent,
    CRMEntities,
    DealOutcome,
    EventType,
    ProcessingResult,
    ValidationResult,
)

__all__ = [
    "AlternatePayload",
    "CanonicalRecord",
    "ClassifiedEvent",
    "CRMEntities",
    "DealOutcome",
    "EnvelopedPayload",
    "EventType",
    "FlatPayload",
    "PayloadShape",
    "ProcessingResult",
    "ValidationResult",
    "detect_shape",
]
