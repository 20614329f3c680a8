"""Extraction, transformation and validation of raw webhook fields."""

from .extractor import extract, extract_aliased, extract_shape
from .transformer import apply_rule, synthesize_name, to_title_case, transform
from .validator import check_field, validate

__all__ = [
    "apply_rule",
    "check_field",
    "extract",
    "extract_aliased",
    "extract_shape",
    "synthesize_name",
    "to_title_case",
    "transform",
    "validate",
]
