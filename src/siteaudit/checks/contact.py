"""Contact page checks. Everything after the first check needs a contact page."""

import re

from siteaudit.checks.base import (
    AuditFacts,
    Check,
    Evaluated,
    flag,
    has_map_link,
    mentions_business_name,
    requires,
)
from siteaudit.models import AuditStatus, Importance, PageCrawlResult

NO_CONTACT_PAGE = "N/A - No contact page found"

BUSINESS_HOURS_RE = re.compile(r"\b(hours|open|mon|tue|wed|thu|fri|sat|sun)\b", re.IGNORECASE)


def _page(facts: AuditFacts) -> PageCrawlResult:
    page = facts.site.contact_page
    if page is None:
        raise LookupError("contact page checks need a contact page")
    return page


def _has_contact_page(facts: AuditFacts) -> bool:
    return facts.site.contact_page is not None


contact_only = requires(_has_contact_page, NO_CONTACT_PAGE)


def has_contact_page(facts: AuditFacts) -> Evaluated:
    page = facts.site.contact_page
    if page is None:
        return Evaluated(AuditStatus.PRIORITY_OFI, "No dedicated contact page found")
    return Evaluated(AuditStatus.OK, f"Contact page: {page.url}")


@contact_only
def business_name(facts: AuditFacts) -> Evaluated:
    found = mentions_business_name(_page(facts), facts.business_name_terms)
    return Evaluated(
        flag(found), None if found else "Business name not prominently displayed on contact page"
    )


@contact_only
def address(facts: AuditFacts) -> Evaluated:
    found = _page(facts).has_address
    return Evaluated(flag(found), None if found else "No physical address found on contact page")


@contact_only
def phone(facts: AuditFacts) -> Evaluated:
    found = _page(facts).has_phone_number
    return Evaluated(flag(found), None if found else "No phone number found on contact page")


@contact_only
def click_to_call(facts: AuditFacts) -> Evaluated:
    page = _page(facts)
    if page.has_click_to_call:
        return Evaluated(AuditStatus.OK)
    if page.has_phone_number:
        return Evaluated(AuditStatus.OFI, "Phone number exists but is not clickable")
    return Evaluated(AuditStatus.NA, "No phone number to make clickable")


@contact_only
def contact_form(facts: AuditFacts) -> Evaluated:
    found = _page(facts).has_contact_form
    return Evaluated(flag(found), None if found else "No contact form found on contact page")


@contact_only
def schema_markup(facts: AuditFacts) -> Evaluated:
    page = _page(facts)
    if not page.has_schema:
        return Evaluated(AuditStatus.OFI, "No schema markup found on contact page")
    return Evaluated(
        AuditStatus.OK, f"Found schema types: {', '.join(page.schema_types) or 'Unknown'}"
    )


@contact_only
def map_or_directions(facts: AuditFacts) -> Evaluated:
    page = _page(facts)
    found = "map" in page.body_text.lower() or has_map_link(page)
    return Evaluated(flag(found), None if found else "No map or directions found on contact page")


@contact_only
def business_hours(facts: AuditFacts) -> Evaluated:
    found = bool(BUSINESS_HOURS_RE.search(_page(facts).body_text))
    return Evaluated(flag(found), None if found else "No business hours found on contact page")


@contact_only
def mobile_friendly(facts: AuditFacts) -> Evaluated:
    ok = _page(facts).mobile_friendly
    return Evaluated(
        flag(ok, AuditStatus.PRIORITY_OFI), None if ok else "Contact page is not mobile-friendly"
    )


CHECKS = (
    Check(
        "Has a contact page?",
        "A dedicated contact page is important",
        Importance.HIGH,
        has_contact_page,
    ),
    Check(
        "Business name appears in the copy?",
        "Business name should be prominently displayed",
        Importance.HIGH,
        business_name,
    ),
    Check(
        "Address appears in the copy?",
        "Physical address should be visible",
        Importance.HIGH,
        address,
    ),
    Check(
        "Phone number appears in the copy?",
        "Phone number should be easy to find",
        Importance.HIGH,
        phone,
    ),
    Check(
        "Phone number is clickable?",
        "Phone numbers should be clickable for mobile users",
        Importance.MEDIUM,
        click_to_call,
    ),
    Check(
        "Has a contact form?",
        "Page should have a working contact form",
        Importance.MEDIUM,
        contact_form,
    ),
    Check(
        "Has schema markup?",
        "Contact page should have LocalBusiness schema",
        Importance.MEDIUM,
        schema_markup,
    ),
    Check(
        "Has map or directions?",
        "Contact page should include a map or directions",
        Importance.MEDIUM,
        map_or_directions,
    ),
    Check(
        "Lists business hours?",
        "Contact page should display business hours",
        Importance.MEDIUM,
        business_hours,
    ),
    Check(
        "Mobile-friendly?",
        "Contact page should be optimized for mobile devices",
        Importance.HIGH,
        mobile_friendly,
    ),
)
