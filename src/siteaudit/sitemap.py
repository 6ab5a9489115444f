"""Sitemap-assisted frontier seeding.

Bounded, best-effort discovery: /sitemap.xml first, then /sitemap_index.xml.
When either turns out to be a sitemap index only its first child sitemap is
read. Both namespaced and non-namespaced XML are accepted.
"""

import logging
from dataclasses import dataclass

import httpx
from lxml import etree

from siteaudit.exceptions import SitemapError
from siteaudit.urls import URLNormalizer, is_requestable, is_same_site, origin, should_skip

logger = logging.getLogger(__name__)

SITEMAP_PATHS = ("/sitemap.xml", "/sitemap_index.xml")

_XML_PARSER = etree.XMLParser(recover=True, resolve_entities=False, no_network=True)


@dataclass(frozen=True, slots=True)
class SitemapDiscovery:
    """Outcome of sitemap discovery.

    ``found`` is True when a sitemap document was read, even if it listed no
    usable URLs.
    """

    found: bool
    urls: tuple[str, ...] = ()


class SitemapDiscoverer:
    """Reads the site's sitemap to seed the crawl frontier.

    Example:
        >>> discoverer = SitemapDiscoverer(client)
        >>> discovery = await discoverer.discover("https://example.com")
        >>> discovery.urls
        ('https://example.com/services', ...)
    """

    def __init__(self, client: httpx.AsyncClient, timeout: float = 5.0) -> None:
        """Initialize sitemap discoverer.

        Args:
            client: HTTP client for fetching sitemaps
            timeout: Timeout in seconds for each sitemap fetch
        """
        self.client = client
        self.timeout = timeout

    async def discover(self, seed_url: str) -> SitemapDiscovery:
        """Collect same-site page URLs from the site's sitemap.

        Never raises: every failure is logged and reported as not found.

        Args:
            seed_url: Normalized seed URL

        Returns:
            SitemapDiscovery with normalized, deduplicated candidate URLs
        """
        site_root = origin(seed_url)
        for path in SITEMAP_PATHS:
            sitemap_url = f"{site_root}{path}"
            try:
                locs = await self._read_urlset(sitemap_url)
            except SitemapError as e:
                logger.debug(f"No usable sitemap at {sitemap_url}: {e}")
                continue

            urls = self._filter(locs, seed_url)
            logger.info(f"Sitemap {sitemap_url} listed {len(urls)} candidate pages")
            return SitemapDiscovery(found=True, urls=urls)

        return SitemapDiscovery(found=False)

    async def _read_urlset(self, sitemap_url: str) -> list[str]:
        kind, locs = await self._read(sitemap_url)
        if kind == "urlset":
            return locs
        if not locs:
            raise SitemapError(f"Empty sitemap index: {sitemap_url}")

        child = locs[0]
        logger.debug(f"Sitemap index {sitemap_url}: reading first child {child}")
        child_kind, child_locs = await self._read(child)
        if child_kind != "urlset":
            raise SitemapError(f"Nested sitemap index not followed: {child}")
        return child_locs

    async def _read(self, sitemap_url: str) -> tuple[str, list[str]]:
        """Fetch a sitemap document and return (root kind, <loc> values)."""
        try:
            response = await self.client.get(sitemap_url, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise SitemapError(f"Failed to fetch {sitemap_url}: {e}") from e
        except (httpx.InvalidURL, ValueError) as e:
            raise SitemapError(f"Invalid sitemap URL {sitemap_url}: {e}") from e

        if response.status_code != 200:
            raise SitemapError(f"HTTP {response.status_code} for {sitemap_url}")

        try:
            root = etree.fromstring(response.content, parser=_XML_PARSER)
        except (etree.XMLSyntaxError, ValueError) as e:
            raise SitemapError(f"Unparseable XML at {sitemap_url}: {e}") from e
        if root is None:
            raise SitemapError(f"Unparseable XML at {sitemap_url}")

        kind = etree.QName(root).localname
        if kind not in ("urlset", "sitemapindex"):
            raise SitemapError(f"Unexpected root element <{kind}> at {sitemap_url}")

        locs = [str(loc).strip() for loc in root.xpath("//*[local-name()='loc']/text()")]
        return kind, [loc for loc in locs if loc]

    @staticmethod
    def _filter(locs: list[str], seed_url: str) -> tuple[str, ...]:
        urls: dict[str, None] = {}
        for loc in locs:
            url = URLNormalizer.normalize_url(loc)
            if (
                URLNormalizer.filter_dangerous_schemes(url)
                and is_same_site(url, seed_url)
                and not should_skip(url)
                and is_requestable(url)
            ):
                urls[url] = None
        return tuple(urls)
