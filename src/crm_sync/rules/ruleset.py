"""Rule tables driving extraction, transformation, validation, mapping and classification."""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Optional

try:
    import yaml
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "PyYAML is required for rule loading. Run: pip install pyyaml"
    ) from e
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).parent / "default_rules.json"

# CRM object kinds the mapper can produce
CRM_KINDS = ("Contact", "Company", "Deal", "Product")


class _Rule(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class ValidationRule(_Rule):
    """required / minLength / pattern check for one field."""

    required: bool = False
    min_length: Optional[int] = Field(default=None, alias="minLength")
    pattern: Optional[str] = None
    message: Optional[str] = None

    @field_validator("pattern")
    @classmethod
    def _compilable(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"Invalid pattern {value!r}: {e}") from e
        return value


class TransformationRule(_Rule):
    """Flags applied in fixed order: trim, lower, title, spaces, specials, country code, protocol."""

    trim: bool = False
    to_lower_case: bool = Field(default=False, alias="toLowerCase")
    title_case: bool = Field(default=False, alias="titleCase")
    remove_spaces: bool = Field(default=False, alias="removeSpaces")
    remove_special_chars: bool = Field(default=False, alias="removeSpecialChars")
    add_country_code: Optional[str] = Field(default=None, alias="addCountryCode")
    add_protocol: Optional[str] = Field(default=None, alias="addProtocol")


class LicenseEventRules(_Rule):
    """Event-name lists per lifecycle category. Names are compared lower-cased."""

    trial_events: tuple[str, ...] = Field(default=(), alias="trialEvents")
    activation_events: tuple[str, ...] = Field(default=(), alias="activationEvents")
    purchase_events: tuple[str, ...] = Field(default=(), alias="purchaseEvents")
    purchase_initiate_events: tuple[str, ...] = Field(default=(), alias="purchaseInitiateEvents")
    renewal_events: tuple[str, ...] = Field(default=(), alias="renewalEvents")
    renewal_initiate_events: tuple[str, ...] = Field(default=(), alias="renewalInitiateEvents")
    cancellation_events: tuple[str, ...] = Field(default=(), alias="cancellationEvents")

    @field_validator("*", mode="before")
    @classmethod
    def _lower(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return tuple(str(v).lower() for v in value)
        return value

    def categories(self) -> list[tuple[str, tuple[str, ...]]]:
        """(category, events) pairs in classification priority order."""
        return [
            ("trial", self.trial_events),
            ("activation", self.activation_events),
            ("purchase", self.purchase_events),
            ("purchaseInitiate", self.purchase_initiate_events),
            ("renewal", self.renewal_events),
            ("renewalInitiate", self.renewal_initiate_events),
            ("cancellation", self.cancellation_events),
        ]


class TrialStageMapping(_Rule):
    """Trial stage lookup: contact-is-new x lead source."""

    new_contact: dict[str, str] = Field(default_factory=dict, alias="newContact")
    existing_contact: dict[str, str] = Field(default_factory=dict, alias="existingContact")


class PurchaseStageMapping(_Rule):
    completed: str = "Closed Won"
    initiated: str = "Purchase Initiated"


class StageMapping(_Rule):
    """CRM pipeline stage per lifecycle category."""

    trial: TrialStageMapping = Field(default_factory=TrialStageMapping)
    activation: dict[str, str] = Field(default_factory=dict)
    purchase: PurchaseStageMapping = Field(default_factory=PurchaseStageMapping)
    purchase_initiate: Optional[str] = Field(default=None, alias="purchaseInitiate")
    renewal: Optional[str] = None
    renewal_initiate: Optional[str] = Field(default=None, alias="renewalInitiate")

    @field_validator("activation", mode="before")
    @classmethod
    def _lower_event_keys(cls, value: Any) -> Any:
        """Activation stages are keyed by event name, compared lower-cased like the event lists."""
        if isinstance(value, dict):
            return {str(k).lower(): v for k, v in value.items()}
        return value


class RuleSet(_Rule):
    """
    Immutable rule configuration for one pipeline run.
    Loaded from JSON (or YAML); keys follow the camelCase names of the rules file.
    The table fields are shared between runs and must never be changed in place:
    crm_mapping and defaults_for hand out copies, and a changed configuration is a
    new RuleSet swapped in by RuleSetProvider.
    """

    field_mappings: dict[str, tuple[str, ...]] = Field(default_factory=dict, alias="fieldMappings")
    validation_rules: dict[str, ValidationRule] = Field(default_factory=dict, alias="validationRules")
    transformation_rules: dict[str, TransformationRule] = Field(
        default_factory=dict, alias="transformationRules"
    )
    crm_field_mappings: dict[str, dict[str, str]] = Field(default_factory=dict, alias="crmFieldMappings")
    default_values: dict[str, Any] = Field(default_factory=dict, alias="defaultValues")
    license_event_rules: LicenseEventRules = Field(
        default_factory=LicenseEventRules, alias="licenseEventRules"
    )
    stage_mapping: StageMapping = Field(default_factory=StageMapping, alias="stageMapping")
    source_mapping: dict[str, str] = Field(default_factory=dict, alias="sourceMapping")
    product_catalog: Optional[dict[str, str]] = Field(default=None, alias="productCatalog")

    @model_validator(mode="before")
    @classmethod
    def _legacy_contact_mapping(cls, data: Any) -> Any:
        """Accept zohoFieldMappings as the Contact mapping when crmFieldMappings lacks one."""
        if isinstance(data, dict) and "zohoFieldMappings" in data:
            data = dict(data)
            legacy = data.pop("zohoFieldMappings") or {}
            mappings = dict(data.get("crmFieldMappings") or data.get("crm_field_mappings") or {})
            mappings.setdefault("Contact", legacy)
            data["crmFieldMappings"] = mappings
            data.pop("crm_field_mappings", None)
        return data

    @field_validator("crm_field_mappings")
    @classmethod
    def _known_kinds(cls, value: dict[str, dict[str, str]]) -> dict[str, dict[str, str]]:
        unknown = set(value) - set(CRM_KINDS)
        if unknown:
            raise ValueError(f"Unknown CRM object kinds: {sorted(unknown)}. Expected: {list(CRM_KINDS)}")
        return value

    def crm_mapping(self, kind: str) -> dict[str, str]:
        """Target CRM field -> canonical source field for one object kind."""
        if kind not in CRM_KINDS:
            raise ValueError(f"Unknown CRM object kind: {kind}. Expected: {list(CRM_KINDS)}")
        return dict(self.crm_field_mappings.get(kind, {}))

    def defaults_for(self, kind: str) -> dict[str, Any]:
        """
        Default values for one kind: top-level scalar entries apply to every kind,
        a nested table keyed by the kind name adds to or overrides them.
        """
        defaults = {k: v for k, v in self.default_values.items() if k not in CRM_KINDS}
        per_kind = self.default_values.get(kind)
        if isinstance(per_kind, dict):
            defaults.update(per_kind)
        return defaults

    def event_overlaps(self) -> dict[str, list[str]]:
        """Event names listed under more than one category -> those categories in priority order."""
        seen: dict[str, list[str]] = {}
        for category, events in self.license_event_rules.categories():
            for event in dict.fromkeys(events):
                seen.setdefault(event, []).append(category)
        return {event: cats for event, cats in seen.items() if len(cats) > 1}

    @classmethod
    def from_file(cls, path: str | Path) -> "RuleSet":
        """Load rules from a .json, .yaml or .yml file."""
        path = Path(path)
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text)
        return cls.model_validate(data)


def load_ruleset(path: Optional[str | Path] = None) -> RuleSet:
    """
    Load a RuleSet: explicit path, else CRM_SYNC_RULES_PATH, else bundled defaults.
    Logs every event name that appears in more than one category list.
    """
    resolved = Path(path or os.environ.get("CRM_SYNC_RULES_PATH") or DEFAULT_RULES_PATH)
    rules = RuleSet.from_file(resolved)
    for event, categories in rules.event_overlaps().items():
        logger.warning(
            "Rules %s list event %r under %s; classification uses %s",
            resolved,
            event,
            categories,
            categories[0],
        )
    logger.info("Loaded rules from %s", resolved)
    return rules
