"""Shared HTTP client factory.

One httpx.AsyncClient is created per audit and shared by the fetcher, the
politeness gate and the sitemap discoverer so they reuse pooled connections.
Retries live in the client's transport, so every request made through it
is retried the same way.
"""

import logging

import httpx
from httpx_retries import Retry, RetryTransport

from siteaudit.config import AuditConfig, CrawlingConfig

logger = logging.getLogger(__name__)

ACCEPT_HTML = "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8"
MAX_REDIRECTS = 5

# Every 4xx and 5xx status. Redirects are followed by the client above the
# transport and never reach the retry policy.
RETRY_STATUSES = tuple(range(400, 600))


def build_retry(crawling: CrawlingConfig) -> Retry:
    """Build the retry policy for one audit.

    httpx-retries waits ``backoff_factor * 2**attempts_made`` between
    attempts, so a factor of ``retry_backoff_ms / 1000`` gives delays of
    backoff, 2 x backoff, 4 x backoff and so on.
    """
    return Retry(
        total=crawling.retry_attempts,
        backoff_factor=crawling.retry_backoff_ms / 1000,
        backoff_jitter=0.0,
        status_forcelist=RETRY_STATUSES,
        respect_retry_after_header=True,
        allowed_methods=["HEAD", "GET"],
    )


def create_http_client(config: AuditConfig) -> httpx.AsyncClient:
    """Create the HTTP client for one audit.

    Args:
        config: Audit configuration (timeouts, concurrency, retries, user agent)

    Returns:
        httpx AsyncClient with HTTP/2, redirects, retries and connection
        pooling. The caller owns it and must close it.
    """
    crawling = config.crawling
    base_transport = httpx.AsyncHTTPTransport(
        http2=True,
        limits=httpx.Limits(
            max_connections=crawling.max_concurrency * 2,
            max_keepalive_connections=crawling.max_concurrency,
        ),
        retries=0,
    )
    transport = RetryTransport(transport=base_transport, retry=build_retry(crawling))

    logger.debug(
        f"Creating HTTP client (concurrency={crawling.max_concurrency}, "
        f"timeout={crawling.request_timeout}s, retries={crawling.retry_attempts})"
    )
    return httpx.AsyncClient(
        transport=transport,
        timeout=httpx.Timeout(crawling.request_timeout),
        follow_redirects=True,
        max_redirects=MAX_REDIRECTS,
        headers={"User-Agent": crawling.user_agent, "Accept": ACCEPT_HTML},
    )
