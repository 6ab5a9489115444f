"""Building blocks for audit checks.

A check is a named, pure function from AuditFacts to an outcome: either
Evaluated (a status with optional notes) or Skipped (the check does not apply,
reported as N/A with the reason as notes). Numeric cutoffs live in Floor and
Ceiling tables declared at the top of each category module.
"""

import functools
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from siteaudit.models import (
    AuditItem,
    AuditStatus,
    Importance,
    PageCrawlResult,
    SiteStructure,
)
from siteaudit.similarity import BucketUniqueness, assess_uniqueness

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Evaluated:
    status: AuditStatus
    notes: str | None = None


@dataclass(frozen=True, slots=True)
class Skipped:
    """The check is structurally inapplicable; rendered as N/A."""

    reason: str


Outcome = Evaluated | Skipped


@dataclass(frozen=True, slots=True)
class Floor:
    """Higher is better: ``value >= ok`` is OK, ``value >= ofi`` is OFI.

    With ``strict`` the comparisons are ``>``. Anything below the last
    tier gets ``otherwise``.
    """

    ok: float
    ofi: float | None = None
    otherwise: AuditStatus = AuditStatus.OFI
    strict: bool = False

    def grade(self, value: float) -> AuditStatus:
        if self._meets(value, self.ok):
            return AuditStatus.OK
        if self.ofi is not None and self._meets(value, self.ofi):
            return AuditStatus.OFI
        return self.otherwise

    def _meets(self, value: float, bound: float) -> bool:
        return value > bound if self.strict else value >= bound


@dataclass(frozen=True, slots=True)
class Ceiling:
    """Lower is better: ``value <= ok`` is OK, ``value <= ofi`` is OFI."""

    ok: float
    ofi: float | None = None
    otherwise: AuditStatus = AuditStatus.OFI

    def grade(self, value: float) -> AuditStatus:
        if value <= self.ok:
            return AuditStatus.OK
        if self.ofi is not None and value <= self.ofi:
            return AuditStatus.OFI
        return self.otherwise


def flag(passed: bool, failing: AuditStatus = AuditStatus.OFI) -> AuditStatus:
    """OK when ``passed``, otherwise ``failing``."""
    return AuditStatus.OK if passed else failing


@dataclass(frozen=True, slots=True)
class AuditFacts:
    """Everything a check may look at: the finished site plus derived facts."""

    site: SiteStructure
    service_area_uniqueness: BucketUniqueness = field(
        default_factory=lambda: BucketUniqueness(unique=True)
    )
    location_uniqueness: BucketUniqueness = field(
        default_factory=lambda: BucketUniqueness(unique=True)
    )
    business_name_terms: tuple[str, ...] = ()

    @classmethod
    def from_site(cls, site: SiteStructure, similarity_threshold: float) -> "AuditFacts":
        return cls(
            site=site,
            service_area_uniqueness=assess_uniqueness(
                site.service_area_pages, similarity_threshold
            ),
            location_uniqueness=assess_uniqueness(site.location_pages, similarity_threshold),
            business_name_terms=business_name_terms(site.homepage.title),
        )


def business_name_terms(homepage_title: str) -> tuple[str, ...]:
    """Guess the business name from the homepage title.

    Titles usually read "Business Name - Tagline" or "Business Name | Tagline";
    the words of the leading part longer than three characters are returned.

    Examples:
        >>> business_name_terms("Acme Plumbing - Fast Repairs | Springfield")
        ('acme', 'plumbing')
    """
    lead = homepage_title.split(" - ")[0].split(" | ")[0]
    return tuple(word for word in lead.lower().split() if len(word) > 3)


@dataclass(frozen=True, slots=True)
class Check:
    name: str
    description: str
    importance: Importance
    evaluate: Callable[[AuditFacts], Outcome]


def requires(
    condition: Callable[[AuditFacts], bool], reason: str
) -> Callable[[Callable[[AuditFacts], Outcome]], Callable[[AuditFacts], Outcome]]:
    """Skip the decorated check with ``reason`` unless ``condition`` holds."""

    def decorator(fn: Callable[[AuditFacts], Outcome]) -> Callable[[AuditFacts], Outcome]:
        @functools.wraps(fn)
        def wrapper(facts: AuditFacts) -> Outcome:
            if not condition(facts):
                return Skipped(reason)
            return fn(facts)

        return wrapper

    return decorator


def run_checks(checks: Iterable[Check], facts: AuditFacts) -> tuple[AuditItem, ...]:
    """Evaluate ``checks`` in order.

    A check that raises is logged and reported as N/A so one bad input can
    never abort the audit.
    """
    items = []
    for check in checks:
        try:
            outcome = check.evaluate(facts)
        except Exception as e:
            logger.warning(f"Check {check.name!r} failed: {e}")
            outcome = Skipped(f"Could not be evaluated: {e}")

        if isinstance(outcome, Skipped):
            status, notes = AuditStatus.NA, outcome.reason
        else:
            status, notes = outcome.status, outcome.notes

        items.append(
            AuditItem(
                name=check.name,
                description=check.description,
                status=status,
                importance=check.importance,
                notes=notes,
            )
        )
    return tuple(items)


# ============================================================================
# Helpers shared by the category tables
# ============================================================================


def percent(
    pages: Sequence[PageCrawlResult], predicate: Callable[[PageCrawlResult], bool]
) -> float:
    """Share of ``pages`` satisfying ``predicate``, 0-100. 0 for no pages."""
    if not pages:
        return 0.0
    return 100 * sum(1 for page in pages if predicate(page)) / len(pages)


def average(values: Iterable[float]) -> float:
    values = list(values)
    return sum(values) / len(values) if values else 0.0


def url_path(url: str) -> str:
    return urlsplit(url).path or "/"


def examples(pages: Iterable[PageCrawlResult], limit: int = 3) -> str:
    """Comma-separated paths of the first ``limit`` pages."""
    return ", ".join(url_path(page.url) for page in list(pages)[:limit])


def page_copy(page: PageCrawlResult) -> str:
    """Title, meta description, H1s and H2s, lowercased."""
    return " ".join(
        (page.title, page.meta_description, *page.headings.h1, *page.headings.h2)
    ).lower()


def mentions_business_name(page: PageCrawlResult, terms: Sequence[str]) -> bool:
    copy = page_copy(page)
    return any(term in copy for term in terms)


MAP_LINK_HOSTS = ("maps.google.", "google.com/maps", "maps.apple.com", "goo.gl/maps")


def has_map_link(page: PageCrawlResult) -> bool:
    return any(host in link for link in page.links.external for host in MAP_LINK_HOSTS)
