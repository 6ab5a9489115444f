"""Service-area page checks (localized "service in city" landing pages)."""

import re

from siteaudit.checks.base import (
    AuditFacts,
    Check,
    Evaluated,
    Floor,
    examples,
    percent,
    requires,
)
from siteaudit.models import AuditStatus, Importance, PageCrawlResult
from siteaudit.urls import path_segments

NO_SERVICE_AREA_PAGES = "N/A - No service area pages found"

LOCATION_SIGNAL_RE = re.compile(r"\b(city|county|area|town|region|located|local)\b")
LOCATION_SIGNAL_COVERAGE = Floor(ok=80)
LOCATION_HEADING_COVERAGE = Floor(ok=70)
SCHEMA_COVERAGE = Floor(ok=50, otherwise=AuditStatus.PRIORITY_OFI)
LINK_DENSITY = Floor(ok=0.7, ofi=0.3, otherwise=AuditStatus.PRIORITY_OFI)

SERVICE_AREA_SCHEMA_HINTS = ("LocalBusiness", "Service")


def _pages(facts: AuditFacts) -> tuple[PageCrawlResult, ...]:
    return facts.site.service_area_pages


service_area_only = requires(lambda facts: bool(_pages(facts)), NO_SERVICE_AREA_PAGES)


def has_service_area_pages(facts: AuditFacts) -> Evaluated:
    pages = _pages(facts)
    if not pages:
        return Evaluated(
            AuditStatus.PRIORITY_OFI,
            "No service area pages found. Service area pages (like /city-name/service-name/) "
            "target specific services in specific locations. "
            "Examples: /miami/ac-repair/ or /miami-fl-ac-repair/",
        )
    return Evaluated(
        AuditStatus.OK, f"Found {len(pages)} service area pages. Examples: {examples(pages)}"
    )


@service_area_only
def unique_content(facts: AuditFacts) -> Evaluated:
    uniqueness = facts.service_area_uniqueness
    if uniqueness.unique:
        return Evaluated(AuditStatus.OK, "Service area pages have good content uniqueness")
    return Evaluated(
        AuditStatus.PRIORITY_OFI,
        "Service area pages have similar or duplicate content: "
        + ", ".join(uniqueness.duplicate_urls)
        + ". Each page should have content specific to its location and service.",
    )


@service_area_only
def location_signals(facts: AuditFacts) -> Evaluated:
    pages = _pages(facts)
    value = percent(pages, lambda page: bool(LOCATION_SIGNAL_RE.search(page.body_text.lower())))
    status = LOCATION_SIGNAL_COVERAGE.grade(value)
    if status is AuditStatus.OK:
        return Evaluated(status, "Good location signals found in service area pages")
    return Evaluated(
        status,
        f"Only {round(value)}% of service area pages have strong location signals",
    )


def _heading_names_location(page: PageCrawlResult) -> bool:
    segments = path_segments(page.url)
    if len(page.headings.h1) != 1 or not segments:
        return False
    return segments[0].replace("-", " ") in page.headings.h1[0].lower()


@service_area_only
def heading_with_location(facts: AuditFacts) -> Evaluated:
    pages = _pages(facts)
    value = percent(pages, _heading_names_location)
    status = LOCATION_HEADING_COVERAGE.grade(value)
    if status is AuditStatus.OK:
        return Evaluated(status, "Good heading structure found in service area pages")
    missing = [page for page in pages if not _heading_names_location(page)]
    return Evaluated(
        status,
        f"Only {round(value)}% of service area pages have one H1 naming the location. "
        f"Example problems in: {examples(missing, limit=2)}",
    )


def _has_service_area_schema(page: PageCrawlResult) -> bool:
    return page.has_schema and any(
        hint in schema_type
        for schema_type in page.schema_types
        for hint in SERVICE_AREA_SCHEMA_HINTS
    )


@service_area_only
def schema_markup(facts: AuditFacts) -> Evaluated:
    pages = _pages(facts)
    value = percent(pages, _has_service_area_schema)
    status = SCHEMA_COVERAGE.grade(value)
    if status is AuditStatus.OK:
        return Evaluated(status, "Good schema markup implementation on service area pages")
    missing = [page for page in pages if not _has_service_area_schema(page)]
    return Evaluated(
        status,
        f"Only {round(value)}% of service area pages have LocalBusiness or Service schema. "
        f"Examples missing schema: {examples(missing, limit=2)}",
    )


def link_density(pages: tuple[PageCrawlResult, ...]) -> float:
    """Share of possible directed links between the pages that actually exist.

    1.0 for zero or one page, where there is nothing to link.
    """
    if len(pages) <= 1:
        return 1.0
    urls = {page.url for page in pages}
    actual = sum(
        1
        for page in pages
        for link in set(page.links.internal)
        if link in urls and link != page.url
    )
    return actual / (len(pages) * (len(pages) - 1))


@service_area_only
def internal_linking(facts: AuditFacts) -> Evaluated:
    density = link_density(_pages(facts))
    status = LINK_DENSITY.grade(density)
    notes = {
        AuditStatus.OK: "Good internal linking structure between service area pages",
        AuditStatus.OFI: "Some internal linking between service area pages, but could be improved",
        AuditStatus.PRIORITY_OFI: "Poor internal linking between service area pages",
    }[status]
    return Evaluated(status, f"{notes} ({density:.0%} of possible links)")


CHECKS = (
    Check(
        "Has service area pages?",
        "Service area pages combine location and service information for local SEO",
        Importance.HIGH,
        has_service_area_pages,
    ),
    Check(
        "Service area pages have unique content?",
        "Each service area page should have substantial unique content",
        Importance.HIGH,
        unique_content,
    ),
    Check(
        "Location signals in service area pages?",
        "Service area pages should mention the location name and related terms",
        Importance.MEDIUM,
        location_signals,
    ),
    Check(
        "Proper heading structure with location?",
        "H1 headings should include both service and location name",
        Importance.MEDIUM,
        heading_with_location,
    ),
    Check(
        "LocalBusiness or Service schema markup?",
        "Service area pages should include appropriate schema markup",
        Importance.HIGH,
        schema_markup,
    ),
    Check(
        "Internal linking between service area pages?",
        "Service area pages should link to related pages",
        Importance.MEDIUM,
        internal_linking,
    ),
)
