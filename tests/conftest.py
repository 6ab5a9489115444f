"""Pytest fixtures for siteaudit tests."""

from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest

from siteaudit.checks.base import AuditFacts
from siteaudit.config import AnalysisConfig, AuditConfig, CrawlingConfig, SitemapConfig
from siteaudit.http_client import create_http_client
from siteaudit.models import (
    Headings,
    Links,
    PageCrawlResult,
    PageLoadSpeed,
    SiteStructure,
)

PageFactory = Callable[..., PageCrawlResult]


def create_page(url: str = "https://example.com", **overrides: Any) -> PageCrawlResult:
    """Create a PageCrawlResult with a healthy baseline.

    The baseline page is HTTPS, mobile friendly, has a measured page speed of
    85 and otherwise empty content. Any field can be overridden; ``h1``,
    ``h2`` and ``internal`` are shortcuts for headings and internal links.

    Example:
        >>> page = create_page("https://example.com/contact", title="Contact Us")
        >>> page.has_https
        True
    """
    headings = Headings(
        h1=tuple(overrides.pop("h1", ())),
        h2=tuple(overrides.pop("h2", ())),
    )
    internal = tuple(overrides.pop("internal", ()))
    defaults: dict[str, Any] = {
        "url": url,
        "has_https": url.startswith("https://"),
        "mobile_friendly": True,
        "headings": headings,
        "links": Links(internal=internal),
        "page_load_speed": PageLoadSpeed(85, 900, 100, 1800, simulated=False),
    }
    defaults.update(overrides)
    return PageCrawlResult(**defaults)


def create_site(homepage: PageCrawlResult | None = None, **buckets: Any) -> SiteStructure:
    """Create a SiteStructure; bucket lists are converted to tuples."""
    return SiteStructure(
        homepage=homepage or create_page(),
        contact_page=buckets.pop("contact_page", None),
        has_sitemap_xml=buckets.pop("has_sitemap_xml", False),
        **{name: tuple(pages) for name, pages in buckets.items()},
    )


def create_basic_config(
    *,
    max_pages: int = 10,
    max_concurrency: int = 2,
    retry_attempts: int = 1,
    respect_robots: bool = False,
    sitemap: bool = False,
    deadline_seconds: float | None = None,
) -> AuditConfig:
    """Create an AuditConfig for fast tests.

    No request delay, no retry backoff, robots.txt and sitemap discovery off
    unless asked for, so tests only need to mock the pages they care about.
    """
    return AuditConfig(
        crawling=CrawlingConfig(
            max_pages=max_pages,
            max_concurrency=max_concurrency,
            retry_attempts=retry_attempts,
            retry_backoff_ms=0,
            request_delay_ms=0,
            per_request_timeout_ms=1000,
            respect_robots=respect_robots,
            deadline_seconds=deadline_seconds,
        ),
        sitemap=SitemapConfig(enabled=sitemap),
        analysis=AnalysisConfig(similarity_threshold=0.7),
    )


def html_page(
    title: str = "Acme Plumbing",
    body: str = "<p>Welcome</p>",
    *,
    head: str = '<meta name="viewport" content="width=device-width">',
) -> str:
    """Wrap ``body`` in a minimal HTML document."""
    return (
        "<!DOCTYPE html><html lang='en'><head>"
        f"<title>{title}</title>{head}"
        f"</head><body>{body}</body></html>"
    )


@pytest.fixture
def page_factory() -> PageFactory:
    return create_page


@pytest.fixture
def fast_config() -> AuditConfig:
    return create_basic_config()


@pytest.fixture
def facts_for() -> Callable[..., AuditFacts]:
    """Build AuditFacts from a homepage and bucket keyword arguments."""

    def build(homepage: PageCrawlResult | None = None, **buckets: Any) -> AuditFacts:
        return AuditFacts.from_site(create_site(homepage, **buckets), similarity_threshold=0.7)

    return build


@pytest.fixture
async def client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Plain async client; pytest-httpx intercepts its requests."""
    async with httpx.AsyncClient(follow_redirects=True) as http_client:
        yield http_client


@pytest.fixture
async def retrying_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Audit client with one retry and no backoff, as run_audit builds it."""
    async with create_http_client(create_basic_config(retry_attempts=1)) as http_client:
        yield http_client


@pytest.fixture
def sample_html() -> str:
    """Homepage of a small local business.

    Contains a title, meta description, headings, navigation, a tel: link, a
    JSON-LD LocalBusiness block, images and a street address.
    """
    return """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <meta name="description" content="Acme Plumbing fixes leaks, drains and water heaters.">
    <meta property="og:title" content="Acme Plumbing">
    <link rel="canonical" href="https://example.com/">
    <title>Acme Plumbing - Fast Repairs</title>
    <script type="application/ld+json">
    {"@context": "https://schema.org", "@type": "LocalBusiness", "name": "Acme Plumbing"}
    </script>
    <style>body { color: red; }</style>
</head>
<body>
    <h1>Acme Plumbing</h1>
    <h2>Our Services</h2>
    <h2>Reviews</h2>
    <h3>Drain cleaning</h3>
    <p>We fix leaks. Call us today!</p>
    <p>Visit us at 123 Main Street, Springfield, IL 62701 or call (555) 123-4567.</p>
    <ul>
        <li><a href="/services">Services</a></li>
        <li><a href="/contact-us/">Contact</a></li>
        <li><a href="https://www.example.com/about#team">About</a></li>
        <li><a href="#top">Top</a></li>
        <li><a href="tel:+15551234567">Call now</a></li>
        <li><a href="mailto:info@example.com">Email</a></li>
        <li><a href="https://maps.google.com/?q=acme">Directions</a></li>
        <li><a href="http://[broken">Broken</a></li>
    </ul>
    <img src="/logo.png" alt="Acme logo">
    <img src="/hero.jpg" width="1600" height="900">
    <table><tr><td>Mon-Fri</td><td>8-5</td></tr></table>
</body>
</html>"""
