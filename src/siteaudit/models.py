"""Data model shared by the crawler, the rule engine and the report.

Page facts are frozen dataclasses: they are built once by the extractor and
then only read. The report types are frozen Pydantic models so the HTTP layer
and the CLI can serialize them directly (camelCase keys on the wire).
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PageBucket(StrEnum):
    """Functional classification of a crawled page."""

    HOME = "home"
    CONTACT = "contact"
    SERVICE_AREA = "service_area"
    SERVICE = "service"
    LOCATION = "location"
    OTHER = "other"


class AuditStatus(StrEnum):
    """Outcome of one audit check."""

    PRIORITY_OFI = "Priority OFI"
    OFI = "OFI"
    OK = "OK"
    NA = "N/A"


class Importance(StrEnum):
    """SEO weight of one audit check."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


# ============================================================================
# Page facts
# ============================================================================


@dataclass(frozen=True, slots=True)
class Headings:
    h1: tuple[str, ...] = ()
    h2: tuple[str, ...] = ()
    h3: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Links:
    """Links found on a page, split by destination."""

    internal: tuple[str, ...] = ()
    external: tuple[str, ...] = ()
    broken: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ImageStats:
    total: int = 0
    with_alt: int = 0
    without_alt: int = 0
    large_images: int = 0


@dataclass(frozen=True, slots=True)
class ContentStructure:
    has_faqs: bool = False
    has_table: bool = False
    has_lists: bool = False
    has_video: bool = False


@dataclass(frozen=True, slots=True)
class PageLoadSpeed:
    """Page speed metrics in milliseconds, score 0-100.

    ``simulated`` is True when no measurement source was available and the
    values were synthesized from the URL. Such values are stable for a URL
    but carry no information about the page.
    """

    score: int
    first_contentful_paint: int
    total_blocking_time: int
    largest_contentful_paint: int
    simulated: bool = True


@dataclass(frozen=True, slots=True)
class PageCrawlResult:
    """Everything the rule engine knows about one fetched page."""

    url: str
    title: str = ""
    meta_description: str = ""
    body_text: str = ""
    headings: Headings = field(default_factory=Headings)
    links: Links = field(default_factory=Links)
    has_contact_form: bool = False
    has_phone_number: bool = False
    has_address: bool = False
    has_schema: bool = False
    schema_types: tuple[str, ...] = ()
    mobile_friendly: bool = False
    has_https: bool = False
    has_canonical: bool = False
    has_sitemap: bool = False
    has_hreflang: bool = False
    has_amp_version: bool = False
    has_social_tags: bool = False
    has_robots_meta: bool = False
    has_click_to_call: bool = False
    images: ImageStats = field(default_factory=ImageStats)
    content_structure: ContentStructure = field(default_factory=ContentStructure)
    keyword_density: dict[str, int] = field(default_factory=dict)
    readability_score: float = 0.0
    page_load_speed: PageLoadSpeed = field(
        default_factory=lambda: PageLoadSpeed(0, 0, 0, 0, simulated=True)
    )
    word_count: int = 0

    @property
    def path(self) -> str:
        """URL path, ``/`` for the root."""
        return urlsplit(self.url).path or "/"


@dataclass(frozen=True, slots=True)
class SiteStructure:
    """Finalized, bucketed result of one crawl session."""

    homepage: PageCrawlResult
    contact_page: PageCrawlResult | None = None
    service_pages: tuple[PageCrawlResult, ...] = ()
    location_pages: tuple[PageCrawlResult, ...] = ()
    service_area_pages: tuple[PageCrawlResult, ...] = ()
    other_pages: tuple[PageCrawlResult, ...] = ()
    has_sitemap_xml: bool = False

    @property
    def all_pages(self) -> tuple[PageCrawlResult, ...]:
        """Homepage first, then every bucketed page."""
        pages: tuple[PageCrawlResult, ...] = (self.homepage,)
        if self.contact_page is not None:
            pages += (self.contact_page,)
        return (
            pages
            + self.service_pages
            + self.location_pages
            + self.service_area_pages
            + self.other_pages
        )


class SiteStructureBuilder:
    """Mutable accumulator used while a crawl is running.

    Pages arrive in completion order; build() sorts every bucket by URL so the
    finished structure does not depend on worker scheduling.
    """

    def __init__(self, homepage: PageCrawlResult) -> None:
        self.homepage = homepage
        self.has_sitemap_xml = False
        self._buckets: dict[PageBucket, list[PageCrawlResult]] = {
            bucket: [] for bucket in PageBucket if bucket is not PageBucket.HOME
        }

    def add(self, page: PageCrawlResult, bucket: PageBucket) -> None:
        if bucket is PageBucket.HOME:
            raise ValueError("homepage is fixed when the builder is created")
        self._buckets[bucket].append(page)

    def __len__(self) -> int:
        return 1 + sum(len(pages) for pages in self._buckets.values())

    def build(self) -> SiteStructure:
        """Freeze the collected pages.

        One contact page is kept, the one with the shortest path (ties broken
        by URL). Any other contact-like pages are reported as other pages.
        """
        contacts = sorted(
            self._buckets[PageBucket.CONTACT], key=lambda p: (len(p.path), p.url)
        )
        contact_page = contacts[0] if contacts else None

        def ordered(pages: list[PageCrawlResult]) -> tuple[PageCrawlResult, ...]:
            return tuple(sorted(pages, key=lambda p: p.url))

        return SiteStructure(
            homepage=self.homepage,
            contact_page=contact_page,
            service_pages=ordered(self._buckets[PageBucket.SERVICE]),
            location_pages=ordered(self._buckets[PageBucket.LOCATION]),
            service_area_pages=ordered(self._buckets[PageBucket.SERVICE_AREA]),
            other_pages=ordered(self._buckets[PageBucket.OTHER] + contacts[1:]),
            has_sitemap_xml=self.has_sitemap_xml,
        )


# ============================================================================
# Report
# ============================================================================


class ReportModel(BaseModel):
    """Immutable report node serialized with camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class AuditItem(ReportModel):
    name: str
    description: str = ""
    status: AuditStatus
    importance: Importance
    notes: str | None = None


class CategoryResult(ReportModel):
    items: tuple[AuditItem, ...] = ()


class AuditSummary(ReportModel):
    priority_ofi_count: int = 0
    ofi_count: int = 0
    ok_count: int = 0
    na_count: int = 0
    total: int = 0


class CrawlStats(ReportModel):
    """Diagnostics describing how complete the crawl was."""

    pages_fetched: int = 0
    pages_failed: int = 0
    skipped_by_robots: int = 0
    reached_max_pages: bool = False
    stopped_early: bool = Field(
        default=False,
        description="True when the deadline or a cancel signal cut the crawl short",
    )


class RivalAudit(ReportModel):
    """Terminal output of one audit run."""

    url: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    on_page: CategoryResult
    structure_navigation: CategoryResult
    contact_page: CategoryResult
    service_pages: CategoryResult
    location_pages: CategoryResult
    service_area_pages: CategoryResult
    summary: AuditSummary
    crawl_stats: CrawlStats = Field(default_factory=CrawlStats)

    def categories(self) -> dict[str, CategoryResult]:
        """Category results keyed by field name, in report order."""
        return {
            "on_page": self.on_page,
            "structure_navigation": self.structure_navigation,
            "contact_page": self.contact_page,
            "service_pages": self.service_pages,
            "location_pages": self.location_pages,
            "service_area_pages": self.service_area_pages,
        }

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")

    def to_json(self, indent: int | None = 2) -> str:
        return self.model_dump_json(by_alias=True, indent=indent)
