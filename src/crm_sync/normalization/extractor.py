"""Field extraction from heterogeneous webhook payloads."""

import logging
from typing import Any, Mapping

from crm_sync.models.payload import (
    AlternatePayload,
    EnvelopedPayload,
    FlatPayload,
    PayloadShape,
    detect_shape,
)
from crm_sync.models.results import CanonicalRecord
from crm_sync.rules.ruleset import RuleSet

logger = logging.getLogger(__name__)

# UserDetails key -> canonical field (alternate shape)
_USER_DETAILS_FIELDS: list[tuple[str, str]] = [
    ("FirstName", "first_name"),
    ("LastName", "last_name"),
    ("Email", "email"),
    ("Phone", "phone"),
    ("Country", "country"),
    ("Company", "company"),
    ("Title", "user_title"),
]


def _has_value(value: Any) -> bool:
    """Present means not None and not an empty string."""
    return value is not None and value != ""


def _coerce(value: Any) -> Any:
    """Scalars become strings; nested objects pass through untouched."""
    if isinstance(value, (dict, list)):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def extract_aliased(source: Mapping[str, Any], field_mappings: Mapping[str, tuple[str, ...]]) -> CanonicalRecord:
    """
    For each canonical field, take the first alias present in source with a value.
    Scanning stops at the first match; later aliases are never consulted.
    """
    record: CanonicalRecord = {}
    for target, aliases in field_mappings.items():
        for alias in aliases:
            if alias in source and _has_value(source[alias]):
                record[target] = _coerce(source[alias])
                logger.debug("Extracted %s from %r", target, alias)
                break
    return record


def _extract_alternate(shape: AlternatePayload) -> CanonicalRecord:
    record: CanonicalRecord = {}
    user = shape.user_details
    for key, target in _USER_DETAILS_FIELDS:
        if _has_value(user.get(key)):
            record[target] = _coerce(user[key])

    if _has_value(user.get("FirstName")) and _has_value(user.get("LastName")):
        record["name"] = f"{user['FirstName']} {user['LastName']}"

    for value, target in (
        (shape.lead_source, "source"),
        (shape.action_code, "action_code"),
        (shape.offer_title, "offer_title"),
        (shape.description, "message"),
    ):
        if _has_value(value):
            record[target] = _coerce(value)
    return record


def extract_shape(shape: PayloadShape, rules: RuleSet) -> CanonicalRecord:
    """Extract canonical fields from an already-detected payload shape."""
    if isinstance(shape, AlternatePayload):
        return _extract_alternate(shape)

    record: CanonicalRecord = {}
    if isinstance(shape, EnvelopedPayload) and shape.event_name:
        record["event_name"] = shape.event_name

    # Aliased data fields overwrite the envelope eventName
    record.update(extract_aliased(shape.data, rules.field_mappings))
    return record


def extract(payload: Mapping[str, Any], rules: RuleSet) -> CanonicalRecord:
    """
    Produce a flat canonical record from a raw payload.
    Missing fields are simply absent; nothing here raises for absent data.
    """
    shape = detect_shape(dict(payload))
    logger.info("Detected %s payload shape", _shape_label(shape))
    return extract_shape(shape, rules)


def _shape_label(shape: PayloadShape) -> str:
    if isinstance(shape, AlternatePayload):
        return "alternate"
    if isinstance(shape, EnvelopedPayload):
        return "enveloped"
    if isinstance(shape, FlatPayload):
        return "flat"
    return type(shape).__name__
