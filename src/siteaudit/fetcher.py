"""Single-page fetcher.

Retries happen below this module, in the RetryTransport of the shared client
(see ``siteaudit.http_client``). The fetcher only turns the final response or
exception into a crawl error.
"""

import logging

import httpx

from siteaudit.config import CrawlingConfig
from siteaudit.exceptions import HttpError, NetworkError, ParseError
from siteaudit.extract import measured_page_speed, parse_page, simulated_page_speed
from siteaudit.models import PageCrawlResult, PageLoadSpeed
from siteaudit.types import PageSpeedProvider
from siteaudit.urls import URLNormalizer

logger = logging.getLogger(__name__)


class PageFetcher:
    """Fetches one page and parses it into a PageCrawlResult.

    Network failures and non-2xx responses have already been retried by the
    client when they reach the fetcher, so they propagate as-is and the
    crawler drops the page. Unusable URLs and non-HTML bodies raise
    ParseError and are never retried.

    Example:
        >>> fetcher = PageFetcher(client, config.crawling)
        >>> page = await fetcher.fetch("https://example.com/services")
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        config: CrawlingConfig,
        speed_provider: PageSpeedProvider | None = None,
    ) -> None:
        """Initialize fetcher.

        Args:
            client: Shared HTTP client (see create_http_client)
            config: Crawl settings
            speed_provider: Optional real page-speed source
        """
        self.client = client
        self.config = config
        self.speed_provider = speed_provider

    async def fetch(self, url: str, site_url: str | None = None) -> PageCrawlResult:
        """Fetch and parse ``url``.

        Args:
            url: Normalized URL to fetch
            site_url: Seed URL used to decide which links are internal

        Returns:
            Parsed page. Its ``url`` is the normalized final URL after redirects.

        Raises:
            NetworkError: Timeout or transport failure after the last retry
            HttpError: Non-2xx status after the last retry
            ParseError: URL cannot be requested, or response is not HTML
        """
        response = await self._get(url)
        final_url = URLNormalizer.normalize_url(str(response.url))

        content_type = response.headers.get("content-type", "")
        if content_type and "html" not in content_type.lower():
            raise ParseError(url, f"Not an HTML document ({content_type})")

        speed = await self._page_speed(final_url)
        return parse_page(response.content, final_url, site_url, page_load_speed=speed)

    async def _get(self, url: str) -> httpx.Response:
        try:
            response = await self.client.get(url, timeout=self.config.request_timeout)
        except httpx.TimeoutException as e:
            raise NetworkError(url, f"Timed out after {self.config.request_timeout}s") from e
        except httpx.HTTPError as e:
            raise NetworkError(url, f"{type(e).__name__}: {e}") from e
        except (httpx.InvalidURL, ValueError) as e:
            # Bad port, IDNA failure and the like; UnicodeError is a ValueError.
            raise ParseError(url, f"Invalid URL: {e}") from e

        if not response.is_success:
            raise HttpError(url, response.status_code)
        return response

    async def _page_speed(self, url: str) -> PageLoadSpeed:
        if self.speed_provider is None:
            return simulated_page_speed(url)
        try:
            return measured_page_speed(await self.speed_provider.measure(url))
        except Exception as e:
            logger.warning(f"Page speed provider failed for {url}: {e}. Using simulated values.")
            return simulated_page_speed(url)
