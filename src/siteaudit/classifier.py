"""Page classification.

Every non-homepage page lands in exactly one bucket. The buckets are tried in
the order of CLASSIFICATION_RULES and the first matching rule wins; OTHER is
the fallback. Classification only looks at the page itself, so the same page
always gets the same bucket.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from functools import cached_property
from urllib.parse import urlsplit

from siteaudit.models import PageBucket, PageCrawlResult

CONTACT_TERMS = ("contact", "get in touch", "reach us", "contact us")
SERVICE_TERMS = ("service", "product", "solution", "offering", "feature")
LOCATION_TERMS = ("location", "city", "town", "county", "area", "serving", "service-area")

# Trade vocabulary that turns a place slug into a localized landing page.
# Terms longer than three letters also match as prefixes (install -> installation).
SERVICE_AREA_TERMS = (
    "repair", "service", "install", "replacement", "maintenance",
    "ac", "hvac", "heat", "furnace", "cooling",
)  # fmt: skip
# Terms that disqualify a page from being a pure location page
EXCLUDED_FROM_LOCATION = ("repair", "service", "installation")

LOCATIONAL_PREPOSITIONS = ("in", "near", "around", "serving")
PLACE_SUFFIXES = ("county", "city", "area")

US_STATE_CODES = frozenset(
    "al ak az ar ca co ct de dc fl ga hi id il in ia ks ky la me md ma mi mn ms mo "
    "mt ne nv nh nj nm ny nc nd oh ok or pa ri sc sd tn tx ut vt va wa wv wi wy".split()
)

GEOGRAPHIC_NOUN_RE = re.compile(r"\b(city|county|area|town|region)\b")
LOCATION_TITLE_PATTERNS = (
    re.compile(r"serving\s+[a-z]"),
    re.compile(r"\b(in|near)\s+[a-z]"),
    re.compile(r"areas\s+(we|our company)\s+(serve|cover)"),
)
_WORD_RE = re.compile(r"[a-z]+")


@dataclass(frozen=True)
class PageSignals:
    """Lowercased views of a page that the rules match against."""

    page: PageCrawlResult

    @cached_property
    def path(self) -> str:
        return urlsplit(self.page.url).path.lower()

    @cached_property
    def segments(self) -> list[str]:
        return [segment for segment in self.path.split("/") if segment]

    @cached_property
    def title(self) -> str:
        return self.page.title.lower()

    @cached_property
    def title_words(self) -> list[str]:
        return _WORD_RE.findall(self.title)

    @cached_property
    def body(self) -> str:
        return self.page.body_text.lower()


def _has_trade_term(tokens: list[str]) -> bool:
    for token in tokens:
        for term in SERVICE_AREA_TERMS:
            if token == term or (len(term) > 3 and token.startswith(term)):
                return True
    return False


def _slug_tokens(segment: str) -> list[str]:
    return [token for token in segment.split("-") if token]


def is_place_slug(segment: str) -> bool:
    """``miami-fl``, ``palm-bay-fl`` or ``brevard-county`` style segment."""
    tokens = _slug_tokens(segment)
    if len(tokens) < 2 or _has_trade_term(tokens):
        return False
    return tokens[-1] in US_STATE_CODES or tokens[-1] in PLACE_SUFFIXES


def is_place_service_slug(segment: str) -> bool:
    """``miami-fl-ac-repair`` or ``ac-repair-miami-fl`` style segment.

    A state code must either end the slug or be directly followed by a trade
    term, so words like "in" or "or" inside ordinary slugs do not count.
    """
    tokens = _slug_tokens(segment)
    for i, token in enumerate(tokens[1:], start=1):
        if token not in US_STATE_CODES:
            continue
        rest = tokens[:i] + tokens[i + 1 :]
        is_last = i == len(tokens) - 1
        if (is_last or _has_trade_term(tokens[i + 1 : i + 2])) and _has_trade_term(rest):
            return True
    return False


def is_contact(s: PageSignals) -> bool:
    if any(term in s.path or term in s.title for term in CONTACT_TERMS):
        return True
    return s.page.has_contact_form and s.page.has_phone_number


def is_service_area(s: PageSignals) -> bool:
    segments = s.segments
    if len(segments) >= 2 and is_place_slug(segments[0]):
        if _has_trade_term(_slug_tokens(segments[1])):
            return True

    if segments and is_place_service_slug(segments[-1]):
        return True

    has_preposition = any(word in LOCATIONAL_PREPOSITIONS for word in s.title_words)
    return (
        has_preposition
        and bool(GEOGRAPHIC_NOUN_RE.search(s.body))
        and _has_trade_term(s.title_words)
    )


def is_service(s: PageSignals) -> bool:
    return any(term in s.path or term in s.title for term in SERVICE_TERMS)


def _mentions_service(text: str) -> bool:
    # "service-area" names a location page, not a service
    text = text.replace("service-area", "").replace("service area", "")
    return any(term in text for term in EXCLUDED_FROM_LOCATION)


def is_location(s: PageSignals) -> bool:
    segments = s.segments
    if len(segments) == 1 and is_place_slug(segments[0]):
        return True

    if any(term in s.path for term in LOCATION_TERMS) and not _mentions_service(s.path):
        return True

    if any(term in s.title for term in LOCATION_TERMS) and not _mentions_service(s.title):
        return True

    if (
        s.page.has_address
        and len(segments) <= 2
        and not any(_mentions_service(segment) for segment in segments)
    ):
        return True

    return any(p.search(s.title) for p in LOCATION_TITLE_PATTERNS) and not _mentions_service(
        s.title
    )


@dataclass(frozen=True, slots=True)
class ClassificationRule:
    bucket: PageBucket
    matches: Callable[[PageSignals], bool]


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(PageBucket.CONTACT, is_contact),
    ClassificationRule(PageBucket.SERVICE_AREA, is_service_area),
    ClassificationRule(PageBucket.SERVICE, is_service),
    ClassificationRule(PageBucket.LOCATION, is_location),
)


def classify_page(
    page: PageCrawlResult,
    rules: tuple[ClassificationRule, ...] = CLASSIFICATION_RULES,
) -> PageBucket:
    """Return the bucket of the first rule that matches ``page``.

    Args:
        page: Crawled non-homepage page
        rules: Ordered rule table

    Returns:
        Matching bucket, PageBucket.OTHER when no rule matches
    """
    signals = PageSignals(page)
    for rule in rules:
        if rule.matches(signals):
            return rule.bucket
    return PageBucket.OTHER
