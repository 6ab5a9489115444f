"""Async site crawler.

Breadth-first crawl of one site with a bounded worker pool, token bucket
pacing per worker and robots.txt compliance. The homepage is fetched first
and must succeed; every other page is best effort.
"""

import asyncio
import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass, field

import httpx

from siteaudit.classifier import classify_page
from siteaudit.config import AuditConfig
from siteaudit.exceptions import CrawlError, FetchError, RobotsDisallowed
from siteaudit.fetcher import PageFetcher
from siteaudit.frontier import Frontier
from siteaudit.models import (
    CrawlStats,
    PageBucket,
    PageCrawlResult,
    SiteStructure,
    SiteStructureBuilder,
)
from siteaudit.robots import PolitenessGate
from siteaudit.sitemap import SitemapDiscoverer
from siteaudit.types import PageSpeedProvider
from siteaudit.urls import URLNormalizer, is_requestable, is_same_site, should_skip

logger = logging.getLogger(__name__)


class RateLimiter:
    """Token bucket rate limiter.

    Tokens are added to the bucket at a constant rate and each request
    consumes one. With ``burst=1`` this is a plain minimum delay between
    requests.

    Example:
        >>> limiter = RateLimiter(rate=1.0, burst=1)
        >>> await limiter.acquire()  # first call returns immediately
    """

    def __init__(self, rate: float, burst: int = 5) -> None:
        """Initialize rate limiter.

        Args:
            rate: Requests per second (e.g., 2.0 = 0.5s average delay)
            burst: Maximum burst size (tokens in bucket)
        """
        self.rate = rate
        self.burst = burst
        self.tokens = float(burst)
        self.last_update = time.monotonic()
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Acquire a token, sleeping until one is available."""
        async with self._lock:
            while True:
                now = time.monotonic()
                time_passed = now - self.last_update
                self.last_update = now

                self.tokens = min(self.burst, self.tokens + time_passed * self.rate)

                if self.tokens >= 1.0:
                    self.tokens -= 1.0
                    return

                await asyncio.sleep((1.0 - self.tokens) / self.rate)


@dataclass
class CrawlerStats:
    """Counters collected while a crawl runs."""

    pages_fetched: int = 0
    pages_failed: int = 0
    skipped_by_robots: int = 0
    stopped_early: bool = False
    start_time: float = field(default_factory=time.monotonic)

    def to_report(self, reached_max_pages: bool) -> CrawlStats:
        return CrawlStats(
            pages_fetched=self.pages_fetched,
            pages_failed=self.pages_failed,
            skipped_by_robots=self.skipped_by_robots,
            reached_max_pages=reached_max_pages,
            stopped_early=self.stopped_early,
        )


@dataclass(frozen=True, slots=True)
class CrawlOutcome:
    """What one crawl produced: the classified site and how complete it was."""

    site: SiteStructure
    stats: CrawlStats


class CrawlSession:
    """State owned by a single crawl.

    Nothing here is shared between audits, so concurrent audits of different
    sites never see each other's visited sets or counters.
    """

    def __init__(self, seed_url: str, homepage: PageCrawlResult, frontier: Frontier) -> None:
        self.seed_url = seed_url
        self.frontier = frontier
        self.builder = SiteStructureBuilder(homepage)
        self.stats = CrawlerStats(pages_fetched=1)
        self._pages: set[str] = {homepage.url}

    def record(self, page: PageCrawlResult) -> bool:
        """Classify and keep ``page`` unless its final URL was already recorded.

        Returns:
            True if the page was added.
        """
        if page.url in self._pages:
            logger.debug(f"Duplicate page after redirect: {page.url}")
            return False
        self._pages.add(page.url)
        bucket = classify_page(page)
        if bucket is PageBucket.HOME:
            bucket = PageBucket.OTHER
        self.builder.add(page, bucket)
        logger.debug(f"Classified {page.url} as {bucket}")
        return True

    def in_scope(self, links: Iterable[str]) -> list[str]:
        """Internal links worth queueing: same site, http(s), requestable, not an asset."""
        return [
            link
            for link in links
            if URLNormalizer.filter_dangerous_schemes(link)
            and is_same_site(link, self.seed_url)
            and not should_skip(link)
            and is_requestable(link)
        ]


class SiteCrawler:
    """Crawls one site and groups its pages into buckets.

    Order of work:
        1. robots.txt check for the seed (a disallowed seed aborts the audit)
        2. homepage fetch (failure aborts the audit)
        3. sitemap discovery; sitemap URLs join the frontier after the
           homepage links
        4. ``max_concurrency`` workers drain the frontier until it is empty,
           the page cap is reached, the deadline passes or the cancel event
           is set

    Example:
        >>> crawler = SiteCrawler(config, client)
        >>> outcome = await crawler.crawl("https://example.com")
        >>> outcome.site.service_pages
    """

    def __init__(
        self,
        config: AuditConfig,
        client: httpx.AsyncClient,
        speed_provider: PageSpeedProvider | None = None,
    ) -> None:
        """Initialize crawler.

        Args:
            config: Audit configuration
            client: Shared HTTP client, owned by the caller
            speed_provider: Optional real page-speed source
        """
        self.config = config
        self.client = client
        crawling = config.crawling
        self.fetcher = PageFetcher(client, crawling, speed_provider=speed_provider)
        self.gate = (
            PolitenessGate(client, crawling.user_agent, timeout=crawling.robots_timeout)
            if crawling.respect_robots
            else None
        )
        self.sitemaps = SitemapDiscoverer(client, timeout=config.sitemap.timeout)

    async def crawl(
        self, seed_url: str, cancel_event: asyncio.Event | None = None
    ) -> CrawlOutcome:
        """Crawl the site rooted at ``seed_url``.

        Args:
            seed_url: Normalized homepage URL
            cancel_event: Optional event; setting it stops the crawl and keeps
                the pages collected so far

        Returns:
            The classified site plus crawl diagnostics

        Raises:
            RobotsDisallowed: robots.txt forbids fetching the homepage
            CrawlError: The homepage could not be fetched
        """
        crawling = self.config.crawling
        loop = asyncio.get_running_loop()
        deadline = (
            loop.time() + crawling.deadline_seconds
            if crawling.deadline_seconds is not None
            else None
        )

        if self.gate is not None and not await self.gate.is_allowed(seed_url):
            raise RobotsDisallowed(seed_url)

        logger.info(f"Fetching homepage {seed_url}")
        try:
            homepage = await self.fetcher.fetch(seed_url, seed_url)
        except FetchError as e:
            raise CrawlError(f"Homepage could not be fetched: {e}") from e

        frontier = Frontier(crawling.max_pages)
        frontier.claim_seed(seed_url)
        frontier.mark_visited(homepage.url)
        session = CrawlSession(seed_url, homepage, frontier)

        await frontier.add_many(session.in_scope(homepage.links.internal))
        if self.config.sitemap.enabled:
            discovery = await self.sitemaps.discover(seed_url)
            session.builder.has_sitemap_xml = discovery.found
            await frontier.add_many(session.in_scope(discovery.urls))

        workers = [
            asyncio.create_task(self._worker(session, worker_id))
            for worker_id in range(crawling.max_concurrency)
        ]
        await self._supervise(session, workers, deadline, cancel_event)

        stats = session.stats.to_report(reached_max_pages=frontier.reached_cap)
        logger.info(
            f"Crawl finished: {stats.pages_fetched} fetched, {stats.pages_failed} failed, "
            f"{stats.skipped_by_robots} skipped by robots.txt"
            + (" (stopped early)" if stats.stopped_early else "")
        )
        return CrawlOutcome(site=session.builder.build(), stats=stats)

    async def _supervise(
        self,
        session: CrawlSession,
        workers: list[asyncio.Task[None]],
        deadline: float | None,
        cancel_event: asyncio.Event | None,
    ) -> None:
        """Wait for the workers, stopping them at the deadline or on cancel."""
        loop = asyncio.get_running_loop()
        pending: set[asyncio.Task[None]] = set(workers)
        stopper = asyncio.create_task(cancel_event.wait()) if cancel_event is not None else None
        try:
            while pending:
                timeout = None if deadline is None else deadline - loop.time()
                if timeout is not None and timeout <= 0:
                    logger.warning("Crawl deadline reached, keeping pages fetched so far")
                    session.stats.stopped_early = True
                    break

                waitables: set[asyncio.Future[object]] = set(pending)
                if stopper is not None:
                    waitables.add(stopper)
                done, _ = await asyncio.wait(
                    waitables, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
                )

                if stopper is not None and stopper in done:
                    logger.warning("Crawl cancelled, keeping pages fetched so far")
                    session.stats.stopped_early = True
                    break
                for task in done:
                    pending.discard(task)  # type: ignore[arg-type]
                    task.result()
        finally:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            if stopper is not None:
                stopper.cancel()
                await asyncio.gather(stopper, return_exceptions=True)

    async def _worker(self, session: CrawlSession, worker_id: int) -> None:
        delay_ms = self.config.crawling.request_delay_ms
        limiter = RateLimiter(rate=1000 / delay_ms, burst=1) if delay_ms > 0 else None
        frontier = session.frontier
        stats = session.stats

        while (url := await frontier.next()) is not None:
            links: list[str] = []
            fetched = True
            try:
                if self.gate is not None and not await self.gate.is_allowed(url):
                    fetched = False
                    stats.skipped_by_robots += 1
                    logger.info(f"Skipping {url}: disallowed by robots.txt")
                    continue

                if limiter is not None:
                    await limiter.acquire()

                page = await self.fetcher.fetch(url, session.seed_url)
                frontier.mark_visited(page.url)
                if session.record(page):
                    stats.pages_fetched += 1
                links = session.in_scope(page.links.internal)
            except FetchError as e:
                stats.pages_failed += 1
                logger.warning(f"Dropping {url}: {e}")
            finally:
                await frontier.complete(url, links, fetched=fetched)

        logger.debug(f"Worker {worker_id} finished")
