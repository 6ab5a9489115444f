"""Location page checks.

A single location page means a single-location business: only the first
check is graded and every other check is N/A.
"""

import re

from siteaudit.checks.base import (
    AuditFacts,
    Check,
    Evaluated,
    Floor,
    Skipped,
    has_map_link,
    mentions_business_name,
    percent,
    requires,
)
from siteaudit.models import AuditStatus, Importance, PageCrawlResult
from siteaudit.urls import path_segments

NOT_MULTI_LOCATION = "N/A - Not a multi-location business"

MIN_LOCATION_PAGES = 2
URL_NAME_COVERAGE = Floor(ok=80)
MIN_WORDS = 500
CONTENT_COVERAGE = Floor(ok=70)
MOBILE_COVERAGE = Floor(ok=90)
LOCAL_SCHEMA_COVERAGE = Floor(ok=50)
NAP_COVERAGE = Floor(ok=90)
MAPS_COVERAGE = Floor(ok=70)

STATE_SUFFIX_RE = re.compile(
    r"-(fl|ca|tx|ny|il|pa|oh|ga|nc|mi|nj|va|wa|az|ma|in|tn|mo|md|wi|mn|co|al|sc|la|ky|or|ok|ct"
    r"|ut|ia|nv|ar|ms|ks|nm|ne|wv|id|hi|me|nh|ri|mt|de|sd|nd|ak|dc|vt|wy)(-|$)"
)
DIRECTION_RE = re.compile(r"-(north|south|east|west|central|downtown|uptown|midtown)(-|$)")
PLACE_WORD_RE = re.compile(
    r"(city|town|village|heights|springs|beach|falls|valley|hills|park)(-|$)"
)
LOCAL_SCHEMA_HINTS = ("local", "geo", "place", "business")


def _pages(facts: AuditFacts) -> tuple[PageCrawlResult, ...]:
    return facts.site.location_pages


multi_location = requires(
    lambda facts: len(_pages(facts)) >= MIN_LOCATION_PAGES, NOT_MULTI_LOCATION
)


def _coverage(value: float, what: str, floor: Floor) -> Evaluated:
    status = floor.grade(value)
    prefix = "" if status is AuditStatus.OK else "Only "
    return Evaluated(status, f"{prefix}{round(value)}% of location pages {what}")


def uses_location_pages(facts: AuditFacts) -> Evaluated:
    count = len(_pages(facts))
    if count >= MIN_LOCATION_PAGES:
        return Evaluated(AuditStatus.OK, f"Found {count} location pages")
    return Evaluated(AuditStatus.NA, "Site appears to be a single-location business")


@multi_location
def unique_content(facts: AuditFacts) -> Evaluated:
    uniqueness = facts.location_uniqueness
    if uniqueness.unique:
        return Evaluated(AuditStatus.OK, "Location pages have unique content")
    return Evaluated(
        AuditStatus.OFI,
        "Location pages have significant content overlap: "
        + ", ".join(uniqueness.duplicate_urls),
    )


def _names_location(page: PageCrawlResult) -> bool:
    segments = path_segments(page.url)
    last = segments[-1] if segments else ""
    return bool(
        STATE_SUFFIX_RE.search(last) or DIRECTION_RE.search(last) or PLACE_WORD_RE.search(last)
    )


@multi_location
def names_in_urls(facts: AuditFacts) -> Evaluated:
    return _coverage(
        percent(_pages(facts), _names_location), "have location names in URLs", URL_NAME_COVERAGE
    )


@multi_location
def sufficient_content(facts: AuditFacts) -> Evaluated:
    value = percent(_pages(facts), lambda page: page.word_count >= MIN_WORDS)
    return _coverage(value, "have sufficient content length", CONTENT_COVERAGE)


@multi_location
def mobile_friendly(facts: AuditFacts) -> Evaluated:
    value = percent(_pages(facts), lambda page: page.mobile_friendly)
    return _coverage(value, "are mobile-friendly", MOBILE_COVERAGE)


def _has_local_schema(page: PageCrawlResult) -> bool:
    return page.has_schema and any(
        hint in schema_type.lower()
        for schema_type in page.schema_types
        for hint in LOCAL_SCHEMA_HINTS
    )


@multi_location
def local_schema(facts: AuditFacts) -> Evaluated:
    value = percent(_pages(facts), _has_local_schema)
    return _coverage(value, "have local business schema", LOCAL_SCHEMA_COVERAGE)


@multi_location
def traffic(facts: AuditFacts) -> Skipped:
    return Skipped("Traffic data not available in this audit")


@multi_location
def nap_name(facts: AuditFacts) -> Evaluated:
    terms = facts.business_name_terms
    value = percent(_pages(facts), lambda page: mentions_business_name(page, terms))
    return _coverage(value, "include business name", NAP_COVERAGE)


@multi_location
def nap_address(facts: AuditFacts) -> Evaluated:
    value = percent(_pages(facts), lambda page: page.has_address)
    return _coverage(value, "include address information", NAP_COVERAGE)


@multi_location
def nap_phone(facts: AuditFacts) -> Evaluated:
    value = percent(_pages(facts), lambda page: page.has_phone_number)
    return _coverage(value, "include phone number", NAP_COVERAGE)


def _has_map(page: PageCrawlResult) -> bool:
    body = page.body_text.lower()
    return "map" in body or "direction" in body or has_map_link(page)


@multi_location
def maps(facts: AuditFacts) -> Evaluated:
    return _coverage(
        percent(_pages(facts), _has_map), "include maps or directions", MAPS_COVERAGE
    )


CHECKS = (
    Check(
        "Site uses location pages? (For single location business, this tab is not needed)",
        "Multi-location businesses should have dedicated pages",
        Importance.HIGH,
        uses_location_pages,
    ),
    Check(
        "Location pages are unique?",
        "Each location page should have unique content",
        Importance.HIGH,
        unique_content,
    ),
    Check(
        "Location names in URLs?",
        "URLs should include city, region, or neighborhood names",
        Importance.HIGH,
        names_in_urls,
    ),
    Check(
        "Sufficient content on location pages?",
        "Pages should have at least 500 words of unique content",
        Importance.MEDIUM,
        sufficient_content,
    ),
    Check(
        "Mobile-first (or at least, mobile-friendly) design?",
        "Pages should work well on mobile devices",
        Importance.HIGH,
        mobile_friendly,
    ),
    Check(
        "Local business schema markup?",
        "Pages should have local business structured data",
        Importance.MEDIUM,
        local_schema,
    ),
    Check(
        "Are location pages getting traffic?",
        "Pages should be attracting visitors",
        Importance.MEDIUM,
        traffic,
    ),
    Check(
        "NAP: Business (N)ame appears in the copy?",
        "Name, Address, Phone information should be present",
        Importance.HIGH,
        nap_name,
    ),
    Check(
        "NAP: (A)ddress appears in the copy?",
        "Each location page should show its address",
        Importance.HIGH,
        nap_address,
    ),
    Check(
        "NAP: (P)hone number appears in the copy?",
        "Each location page should show its phone number",
        Importance.HIGH,
        nap_phone,
    ),
    Check(
        "Maps or directions on location pages?",
        "Pages should include maps or directions",
        Importance.MEDIUM,
        maps,
    ),
)
