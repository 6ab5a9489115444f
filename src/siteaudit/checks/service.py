"""Service page checks. Coverage checks are percentages over the service bucket."""

from siteaudit.checks.base import (
    AuditFacts,
    Check,
    Evaluated,
    Floor,
    average,
    percent,
    requires,
)
from siteaudit.models import AuditStatus, Importance, PageCrawlResult

NO_SERVICE_PAGES = "N/A - No service pages detected"

AUDIENCE_WORDS = Floor(ok=500)
DETAIL_WORDS = Floor(ok=800)
MIN_H2 = 2
SCHEMA_COVERAGE = Floor(ok=50)
CTA_COVERAGE = Floor(ok=80)
MIN_INTERNAL_LINKS = 3
INTERNAL_LINK_COVERAGE = Floor(ok=70)
IMAGE_COVERAGE = Floor(ok=80)
URL_KEYWORD_MIN_LENGTH = 4
DESCRIPTIVE_URL_COVERAGE = Floor(ok=80)
MOBILE_COVERAGE = Floor(ok=90, ofi=70, otherwise=AuditStatus.PRIORITY_OFI)

CTA_PHRASES = ("call", "contact", "get a quote", "free quote", "book", "schedule", "learn more")


def _pages(facts: AuditFacts) -> tuple[PageCrawlResult, ...]:
    return facts.site.service_pages


service_only = requires(lambda facts: bool(_pages(facts)), NO_SERVICE_PAGES)


def _coverage(value: float, what: str, floor: Floor) -> Evaluated:
    status = floor.grade(value)
    prefix = "" if status is AuditStatus.OK else "Only "
    return Evaluated(status, f"{prefix}{round(value)}% of service pages {what}")


def has_service_pages(facts: AuditFacts) -> Evaluated:
    count = len(_pages(facts))
    if count == 0:
        return Evaluated(AuditStatus.OFI, "No dedicated service pages found")
    if count == 1:
        return Evaluated(AuditStatus.OK, "Only one service page found")
    return Evaluated(AuditStatus.OK, f"Found {count} service pages")


@service_only
def written_for_audience(facts: AuditFacts) -> Evaluated:
    avg = average(page.word_count for page in _pages(facts))
    status = AUDIENCE_WORDS.grade(avg)
    if status is AuditStatus.OK:
        return Evaluated(status, f"Good content length (average {round(avg)} words)")
    return Evaluated(status, f"Service pages may be too brief (average {round(avg)} words)")


@service_only
def sufficiently_detailed(facts: AuditFacts) -> Evaluated:
    avg = average(page.word_count for page in _pages(facts))
    status = DETAIL_WORDS.grade(avg)
    if status is AuditStatus.OK:
        return Evaluated(status, "Service pages have good level of detail")
    return Evaluated(status, "Service pages need more detail for comprehensive coverage")


@service_only
def heading_structure(facts: AuditFacts) -> Evaluated:
    improper = [
        page
        for page in _pages(facts)
        if len(page.headings.h1) != 1 or len(page.headings.h2) < MIN_H2
    ]
    if improper:
        return Evaluated(
            AuditStatus.OFI,
            f"{len(improper)} service page(s) have improper heading structure",
        )
    return Evaluated(AuditStatus.OK, "Good heading structure on service pages")


@service_only
def schema_markup(facts: AuditFacts) -> Evaluated:
    value = percent(_pages(facts), lambda page: page.has_schema)
    return _coverage(value, "have schema markup", SCHEMA_COVERAGE)


def _has_cta(page: PageCrawlResult) -> bool:
    text = " ".join((*page.headings.h1, *page.headings.h2, *page.headings.h3, page.body_text))
    text = text.lower()
    return any(phrase in text for phrase in CTA_PHRASES)


@service_only
def call_to_action(facts: AuditFacts) -> Evaluated:
    return _coverage(percent(_pages(facts), _has_cta), "have clear CTAs", CTA_COVERAGE)


@service_only
def internal_linking(facts: AuditFacts) -> Evaluated:
    value = percent(_pages(facts), lambda page: len(page.links.internal) >= MIN_INTERNAL_LINKS)
    return _coverage(value, "have good internal linking", INTERNAL_LINK_COVERAGE)


@service_only
def visual_elements(facts: AuditFacts) -> Evaluated:
    value = percent(_pages(facts), lambda page: page.images.total >= 1)
    return _coverage(value, "use images", IMAGE_COVERAGE)


def _descriptive_url(page: PageCrawlResult) -> bool:
    url = page.url.lower()
    return any(
        word in url
        for word in page.title.lower().split()
        if len(word) >= URL_KEYWORD_MIN_LENGTH
    )


@service_only
def descriptive_urls(facts: AuditFacts) -> Evaluated:
    value = percent(_pages(facts), _descriptive_url)
    return _coverage(value, "have descriptive URLs", DESCRIPTIVE_URL_COVERAGE)


@service_only
def mobile_friendly(facts: AuditFacts) -> Evaluated:
    value = percent(_pages(facts), lambda page: page.mobile_friendly)
    return _coverage(value, "are mobile-friendly", MOBILE_COVERAGE)


CHECKS = (
    Check(
        "Has a single Service Page for each primary service?",
        "Each main service should have its own page",
        Importance.HIGH,
        has_service_pages,
    ),
    Check(
        "Service Pages are written for the audience, not the business owner?",
        "Content should focus on customer needs",
        Importance.HIGH,
        written_for_audience,
    ),
    Check(
        "Service Pages are sufficiently detailed?",
        "Pages should provide comprehensive information",
        Importance.HIGH,
        sufficiently_detailed,
    ),
    Check(
        "Proper heading structure?",
        "Each page should have one H1 and multiple H2 headings",
        Importance.MEDIUM,
        heading_structure,
    ),
    Check(
        "Service pages have schema markup?",
        "Pages should have structured data for better SEO",
        Importance.MEDIUM,
        schema_markup,
    ),
    Check(
        "Strong and clear Call To Action (CTA)?",
        "Each page should have a clear next step for users",
        Importance.HIGH,
        call_to_action,
    ),
    Check(
        "Good internal linking?",
        "Service pages should link to related content",
        Importance.MEDIUM,
        internal_linking,
    ),
    Check(
        "Uses images or visual elements?",
        "Service pages should include relevant visuals",
        Importance.MEDIUM,
        visual_elements,
    ),
    Check(
        "Service pages have descriptive URLs?",
        "URLs should include service keywords",
        Importance.MEDIUM,
        descriptive_urls,
    ),
    Check(
        "Mobile-friendly service pages?",
        "Pages should be optimized for mobile devices",
        Importance.HIGH,
        mobile_friendly,
    ),
)
