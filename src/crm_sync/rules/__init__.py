"""Rule configuration: loading, validation and hot reload."""

from crm_sync.rules.provider import RuleSetProvider
from crm_sync.rules.ruleset import (
    CRM_KINDS,
    DEFAULT_RULES_PATH,
    LicenseEventRules,
    RuleSet,
    StageMapping,
    TransformationRule,
    ValidationRule,
    load_ruleset,
)

__all__ = [
    "CRM_KINDS",
    "DEFAULT_RULES_PATH",
    "LicenseEventRules",
    "RuleSet",
    "RuleSetProvider",
    "StageMapping",
    "TransformationRule",
    "ValidationRule",
    "load_ruleset",
]
