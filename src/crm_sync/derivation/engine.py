"""Computed fields: domain, deal names and labels, product/catalog fields, dates, country/company backfill."""

import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Mapping, Optional

from crm_sync.models.results import CanonicalRecord

from .email_inference import (
    PUBLIC_DEAL_DOMAINS,
    PUBLIC_DEAL_PROVIDERS,
    extract_company_name,
    extract_country_name,
    extract_domain,
)
from .products import (
    DEFAULT_LICENSE_TYPE,
    DEFAULT_PACKAGE_TYPE,
    DEFAULT_USER_BUCKET,
    determine_category,
    display_category,
    generate_product_name,
    generate_visual_purchased,
    lookup_item_id,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], date]

CLOSING_WINDOW_DAYS = 30


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def compact_date(day: date) -> str:
    """YYYYMMDD."""
    return day.strftime("%Y%m%d")


def closed_won_name(base: str, day: date) -> str:
    return f"{base}-CW-{compact_date(day)}"


def closing_date(day: date) -> str:
    """day + 30 days as YYYY-MM-DD."""
    return (day + timedelta(days=CLOSING_WINDOW_DAYS)).isoformat()


def generate_deal_label(
    full_name: str,
    email: Optional[str],
    deal_name: Optional[str],
    company: Optional[str],
    *,
    today: Optional[date] = None,
) -> str:
    """
    Human deal label. Webmail senders are labelled by mailbox id, others by name;
    the company is taken from the domain when blank. full_name 'closedwon' yields
    the closed-won form of deal_name.
    """
    domain = extract_domain(email)
    if not domain:
        return deal_name or full_name

    if full_name == "closedwon":
        return closed_won_name(deal_name or "", today or utc_today())

    mailbox = email.split("@")[0]
    company_label = company or ".".join(domain.split(".")[:-1])
    is_public = domain in PUBLIC_DEAL_DOMAINS or any(p in domain for p in PUBLIC_DEAL_PROVIDERS)
    return f"{mailbox if is_public else full_name} - {company_label}"


class DerivedFieldEngine:
    """
    Adds computed fields to a validated record.
    Values already on the record are never replaced; the clock is injectable so
    date-derived fields can be pinned.
    """

    def __init__(self, clock: Optional[Clock] = None, catalog: Optional[Mapping[str, str]] = None):
        self._clock = clock or utc_today
        self._catalog = catalog

    def derive(self, record: CanonicalRecord) -> CanonicalRecord:
        today = self._clock()
        out = dict(record)

        email = out.get("email")
        domain = extract_domain(email)
        if domain and not out.get("domain"):
            out["domain"] = domain

        if out.get("name") and out.get("company") and not out.get("deal_name"):
            out["deal_name"] = f"{out['name']}-{out['company']}"
        if out.get("deal_name") and not out.get("closed_deal_name"):
            out["closed_deal_name"] = closed_won_name(out["deal_name"], today)

        if out.get("name") and not out.get("user_name"):
            out["user_name"] = re.sub(r"\s+", "", out["name"].lower())

        self._derive_product(out)

        if not out.get("closing_date"):
            out["closing_date"] = closing_date(today)

        if email and not out.get("country"):
            country = extract_country_name(email)
            if country:
                out["country"] = country
        if email and not out.get("company"):
            company = extract_company_name(email)
            if company:
                out["company"] = company
                logger.info("Inferred company %r from email domain", company)

        if out.get("name") and email and not out.get("deal_label"):
            out["deal_label"] = generate_deal_label(
                out["name"], email, out.get("deal_name"), out.get("company"), today=today
            )

        return out

    def _derive_product(self, out: CanonicalRecord) -> None:
        if out.get("offer_title"):
            out["category"] = display_category(out.get("category") or determine_category(out["offer_title"]))
        elif out.get("category"):
            out["category"] = display_category(out["category"])

        if not out.get("product_name") and out.get("category"):
            out["product_name"] = generate_product_name(
                out["category"],
                out.get("package_type") or DEFAULT_PACKAGE_TYPE,
                out.get("user_bucket") or DEFAULT_USER_BUCKET,
                out.get("license_type") or DEFAULT_LICENSE_TYPE,
            )

        if out.get("product_name") and not out.get("item_id"):
            out["item_id"] = lookup_item_id(out["product_name"], self._catalog)

        if out.get("category") and not out.get("visual_purchased"):
            out["visual_purchased"] = generate_visual_purchased(
                out["category"], out.get("package_type") or DEFAULT_PACKAGE_TYPE, out.get("offer_title")
            )
