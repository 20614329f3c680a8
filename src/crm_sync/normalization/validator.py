"""Required / min-length / pattern validation of a transformed record."""

import re
from functools import lru_cache
from typing import Any

from crm_sync.models.results import CanonicalRecord, ValidationResult
from crm_sync.rules.ruleset import RuleSet, ValidationRule


@lru_cache(maxsize=128)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


def _is_blank(value: Any) -> bool:
    return not value or str(value).strip() == ""


def check_field(field: str, value: Any, rule: ValidationRule) -> list[str]:
    """Errors for one field. A missing required field reports only 'is required'."""
    if _is_blank(value):
        return [f"{field} is required"] if rule.required else []

    errors: list[str] = []
    text = str(value)
    if rule.min_length and len(text) < rule.min_length:
        errors.append(f"{field} must be at least {rule.min_length} characters")
    if rule.pattern and not _compile(rule.pattern).search(text):
        errors.append(rule.message or f"{field} format is invalid")
    return errors


def validate(record: CanonicalRecord, rules: RuleSet) -> ValidationResult:
    """Check every field that has a validation rule; never raises for bad data."""
    errors: list[str] = []
    for field, rule in rules.validation_rules.items():
        errors.extend(check_field(field, record.get(field), rule))
    return ValidationResult(is_valid=not errors, errors=errors)
