"""Derived fields computed from a validated record."""

from .email_inference import extract_company_name, extract_country_name, extract_domain
from .engine import Clock, DerivedFieldEngine, closing_date, generate_deal_label, utc_today
from .products import (
    DEFAULT_ITEM_ID,
    PRODUCT_CATALOG,
    determine_category,
    display_category,
    generate_product_name,
    generate_visual_purchased,
    lookup_item_id,
)

__all__ = [
    "Clock",
    "DEFAULT_ITEM_ID",
    "DerivedFieldEngine",
    "PRODUCT_CATALOG",
    "closing_date",
    "determine_category",
    "display_category",
    "extract_company_name",
    "extract_country_name",
    "extract_domain",
    "generate_deal_label",
    "generate_product_name",
    "generate_visual_purchased",
    "lookup_item_id",
    "utc_today",
]
