"""Top-level audit entry point: crawl, evaluate, aggregate."""

import asyncio
import logging
import urllib.parse
from datetime import datetime

import httpx

from siteaudit.aggregator import build_audit
from siteaudit.checks import evaluate_categories
from siteaudit.checks.base import AuditFacts
from siteaudit.config import AuditConfig
from siteaudit.crawler import SiteCrawler
from siteaudit.exceptions import ConfigError
from siteaudit.http_client import create_http_client
from siteaudit.models import RivalAudit
from siteaudit.types import PageSpeedProvider
from siteaudit.urls import URLNormalizer, is_requestable

logger = logging.getLogger(__name__)


def validate_seed(url: str) -> str:
    """Normalize a user-supplied site URL, rejecting anything that isn't one.

    Args:
        url: Raw input such as "example.com" or "https://www.example.com/"

    Returns:
        Normalized seed URL

    Raises:
        ConfigError: Empty input, a non-http(s) scheme, no usable host or port
    """
    raw = url.strip()
    if not raw:
        raise ConfigError("Site URL is empty")

    normalized = URLNormalizer.normalize_url(raw)
    parsed = urllib.parse.urlsplit(normalized)
    if parsed.scheme not in URLNormalizer.SAFE_SCHEMES:
        raise ConfigError(f"Unsupported URL scheme: {parsed.scheme!r} in {url!r}")

    try:
        host = parsed.hostname
    except ValueError as e:
        raise ConfigError(f"Invalid site URL: {url!r}") from e
    if not host or any(ch.isspace() for ch in host):
        raise ConfigError(f"Invalid site URL: {url!r}")
    if "." not in host and host != "localhost":
        raise ConfigError(f"Site URL has no domain: {url!r}")
    if not is_requestable(normalized):
        raise ConfigError(f"Invalid site URL: {url!r}")
    return normalized


async def run_audit(
    url: str,
    config: AuditConfig | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    speed_provider: PageSpeedProvider | None = None,
    cancel_event: asyncio.Event | None = None,
    timestamp: datetime | None = None,
) -> RivalAudit:
    """Audit one site and return the report.

    Args:
        url: Site URL as entered by the user
        config: Audit configuration (defaults if None)
        client: HTTP client to reuse; created and closed here if None
        speed_provider: Optional real page-speed source
        cancel_event: Setting this stops the crawl early; the report then
            covers the pages fetched so far
        timestamp: Report time (defaults to now)

    Returns:
        The completed RivalAudit

    Raises:
        ConfigError: ``url`` is not a usable site URL
        RobotsDisallowed: robots.txt forbids fetching the homepage
        CrawlError: The homepage could not be fetched
    """
    config = config or AuditConfig()
    seed_url = validate_seed(url)
    logger.info(f"Auditing {seed_url}")

    owns_client = client is None
    http_client = client or create_http_client(config)
    try:
        crawler = SiteCrawler(config, http_client, speed_provider=speed_provider)
        outcome = await crawler.crawl(seed_url, cancel_event=cancel_event)
    finally:
        if owns_client:
            await http_client.aclose()

    site = outcome.site
    logger.info(
        f"Classified {len(site.all_pages)} pages: "
        f"{len(site.service_pages)} service, {len(site.location_pages)} location, "
        f"{len(site.service_area_pages)} service area, "
        f"contact page {'found' if site.contact_page else 'missing'}"
    )
    facts = AuditFacts.from_site(site, config.analysis.similarity_threshold)
    categories = evaluate_categories(facts)
    return build_audit(seed_url, categories, timestamp=timestamp, crawl_stats=outcome.stats)
