"""Per-field transformation rules."""

import re
from typing import Any

from crm_sync.models.results import CanonicalRecord
from crm_sync.rules.ruleset import RuleSet, TransformationRule

_WHITESPACE = re.compile(r"\s")
_NOT_DIGIT_OR_PLUS = re.compile(r"[^\d+]")
_WORD = re.compile(r"\S+")
_HAS_PROTOCOL = re.compile(r"^https?://")


def to_title_case(text: str) -> str:
    """Uppercase the first character of each whitespace-delimited word, lowercase the rest."""
    return _WORD.sub(lambda m: m.group(0)[:1].upper() + m.group(0)[1:].lower(), text)


def apply_rule(value: Any, rule: TransformationRule) -> str:
    """Apply one field's rule flags in their fixed order."""
    text = str(value)
    if rule.trim:
        text = text.strip()
    if rule.to_lower_case:
        text = text.lower()
    if rule.title_case:
        text = to_title_case(text)
    if rule.remove_spaces:
        text = _WHITESPACE.sub("", text)
    if rule.remove_special_chars:
        text = _NOT_DIGIT_OR_PLUS.sub("", text)
    if rule.add_country_code and not text.startswith("+"):
        text = rule.add_country_code + text
    if rule.add_protocol and not _HAS_PROTOCOL.match(text):
        text = f"{rule.add_protocol}://{text}"
    return text


def synthesize_name(record: CanonicalRecord) -> CanonicalRecord:
    """Fill name from first_name/last_name when name itself is absent."""
    if record.get("name") or not (record.get("first_name") or record.get("last_name")):
        return record
    updated = dict(record)
    updated["name"] = f"{record.get('first_name') or ''} {record.get('last_name') or ''}".strip()
    return updated


def transform(record: CanonicalRecord, rules: RuleSet) -> CanonicalRecord:
    """
    Return a new record with name synthesized and transformation rules applied.
    Fields absent or empty are skipped.
    """
    result = synthesize_name(dict(record))
    for field, rule in rules.transformation_rules.items():
        value = result.get(field)
        if not value:
            continue
        result[field] = apply_rule(value, rule)
    return result
