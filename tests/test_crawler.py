"""Tests for SiteCrawler and RateLimiter with pytest-httpx mocking."""

import asyncio
import time

import httpx
import pytest
from pytest_httpx import HTTPXMock

from siteaudit.crawler import RateLimiter, SiteCrawler
from siteaudit.exceptions import CrawlError, RobotsDisallowed
from tests.conftest import create_basic_config, html_page

SEED = "https://example.com"

HOME = html_page(
    "Acme Heating and Cooling - Fast AC Repair",
    """
    <h1>Acme Heating and Cooling</h1>
    <a href="/services">Services</a>
    <a href="/contact">Contact</a>
    <a href="/miami-fl/ac-repair">Miami</a>
    <a href="/tampa-fl/ac-repair">Tampa</a>
    <a href="/brochure.pdf">Brochure</a>
    <a href="https://facebook.com/acme">Facebook</a>
    """,
)

PAGES = {
    "/services": html_page("Our Services", "<h1>Services</h1><a href='/'>Home</a>"),
    "/contact": html_page("Contact Us", "<form></form><p>Call (555) 123-4567</p>"),
    "/miami-fl/ac-repair": html_page(
        "AC Repair in Miami", "<h1>Miami AC Repair</h1><a href='/tampa-fl/ac-repair'>Tampa</a>"
    ),
    "/tampa-fl/ac-repair": html_page("AC Repair in Tampa", "<h1>Tampa AC Repair</h1>"),
}


def mock_site(httpx_mock: HTTPXMock, skip: tuple[str, ...] = ()) -> None:
    httpx_mock.add_response(url=f"{SEED}/", html=HOME)
    for path, html in PAGES.items():
        if path not in skip:
            httpx_mock.add_response(url=f"{SEED}{path}", html=html)


# ============================================================================
# RateLimiter Tests
# ============================================================================


@pytest.mark.asyncio
async def test_rate_limiter_allows_burst() -> None:
    limiter = RateLimiter(rate=10.0, burst=3)
    start = time.monotonic()

    for _ in range(3):
        await limiter.acquire()

    assert time.monotonic() - start < 0.1, "Burst requests should be instant"


@pytest.mark.asyncio
async def test_rate_limiter_enforces_delay() -> None:
    limiter = RateLimiter(rate=10.0, burst=1)  # 0.1s between requests
    start = time.monotonic()

    await limiter.acquire()
    await limiter.acquire()

    assert time.monotonic() - start >= 0.08, "Second request should wait for a token"


# ============================================================================
# SiteCrawler Tests
# ============================================================================


@pytest.mark.asyncio
async def test_crawl_classifies_site(httpx_mock: HTTPXMock, client: httpx.AsyncClient) -> None:
    mock_site(httpx_mock)
    crawler = SiteCrawler(create_basic_config(), client)

    outcome = await crawler.crawl(SEED)

    site = outcome.site
    assert site.homepage.url == SEED
    assert site.contact_page is not None
    assert site.contact_page.url == f"{SEED}/contact"
    assert [p.url for p in site.service_pages] == [f"{SEED}/services"]
    assert [p.url for p in site.service_area_pages] == [
        f"{SEED}/miami-fl/ac-repair",
        f"{SEED}/tampa-fl/ac-repair",
    ]
    assert outcome.stats.pages_fetched == 5
    assert outcome.stats.pages_failed == 0
    assert outcome.stats.stopped_early is False


@pytest.mark.asyncio
async def test_page_failure_does_not_stop_crawl(
    httpx_mock: HTTPXMock, retrying_client: httpx.AsyncClient
) -> None:
    """A page that times out on every attempt is dropped; the rest are kept."""
    mock_site(httpx_mock, skip=("/tampa-fl/ac-repair",))
    for _ in range(2):  # first attempt + one retry
        httpx_mock.add_exception(
            httpx.ReadTimeout("timed out"), url=f"{SEED}/tampa-fl/ac-repair"
        )
    crawler = SiteCrawler(create_basic_config(retry_attempts=1), retrying_client)

    outcome = await crawler.crawl(SEED)

    urls = {page.url for page in outcome.site.all_pages}
    assert f"{SEED}/tampa-fl/ac-repair" not in urls
    assert f"{SEED}/miami-fl/ac-repair" in urls
    assert outcome.stats.pages_failed == 1
    assert outcome.stats.pages_fetched == 4


@pytest.mark.asyncio
@pytest.mark.httpx_mock(assert_all_responses_were_requested=False)
async def test_page_cap_includes_homepage(
    httpx_mock: HTTPXMock, client: httpx.AsyncClient
) -> None:
    mock_site(httpx_mock)
    crawler = SiteCrawler(create_basic_config(max_pages=2), client)

    outcome = await crawler.crawl(SEED)

    assert len(outcome.site.all_pages) == 2
    assert [p.url for p in outcome.site.service_pages] == [f"{SEED}/services"]
    assert outcome.stats.reached_max_pages is True
    assert len(httpx_mock.get_requests()) == 2


@pytest.mark.asyncio
async def test_homepage_failure_raises(
    httpx_mock: HTTPXMock, retrying_client: httpx.AsyncClient
) -> None:
    httpx_mock.add_response(url=f"{SEED}/", status_code=500)
    httpx_mock.add_response(url=f"{SEED}/", status_code=500)
    crawler = SiteCrawler(create_basic_config(retry_attempts=1), retrying_client)

    with pytest.raises(CrawlError, match="HTTP 500"):
        await crawler.crawl(SEED)


@pytest.mark.asyncio
async def test_disallowed_seed_raises(httpx_mock: HTTPXMock, client: httpx.AsyncClient) -> None:
    httpx_mock.add_response(url=f"{SEED}/robots.txt", text="User-agent: *\nDisallow: /\n")
    crawler = SiteCrawler(create_basic_config(respect_robots=True), client)

    with pytest.raises(RobotsDisallowed):
        await crawler.crawl(SEED)


@pytest.mark.asyncio
async def test_robots_disallowed_pages_skipped(
    httpx_mock: HTTPXMock, client: httpx.AsyncClient
) -> None:
    httpx_mock.add_response(
        url=f"{SEED}/robots.txt", text="User-agent: *\nDisallow: /contact\n"
    )
    mock_site(httpx_mock, skip=("/contact",))
    crawler = SiteCrawler(create_basic_config(respect_robots=True), client)

    outcome = await crawler.crawl(SEED)

    assert outcome.site.contact_page is None
    assert outcome.stats.skipped_by_robots == 1
    assert outcome.stats.pages_fetched == 4
    requested = {str(request.url) for request in httpx_mock.get_requests()}
    assert f"{SEED}/contact" not in requested


@pytest.mark.asyncio
async def test_sitemap_urls_join_frontier(
    httpx_mock: HTTPXMock, client: httpx.AsyncClient
) -> None:
    mock_site(httpx_mock)
    httpx_mock.add_response(
        url=f"{SEED}/sitemap.xml",
        text=(
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
            f"<url><loc>{SEED}/locations/orlando</loc></url>"
            f"<url><loc>{SEED}/services</loc></url>"
            "</urlset>"
        ),
    )
    httpx_mock.add_response(
        url=f"{SEED}/locations/orlando", html=html_page("Orlando Office", "<p>Visit us</p>")
    )
    crawler = SiteCrawler(create_basic_config(sitemap=True), client)

    outcome = await crawler.crawl(SEED)

    assert outcome.site.has_sitemap_xml is True
    assert [p.url for p in outcome.site.location_pages] == [f"{SEED}/locations/orlando"]
    assert outcome.stats.pages_fetched == 6


@pytest.mark.asyncio
async def test_redirected_duplicate_kept_once(
    httpx_mock: HTTPXMock, client: httpx.AsyncClient
) -> None:
    home = html_page(
        "Acme", '<a href="/services">Services</a><a href="/old-services">Old services</a>'
    )
    httpx_mock.add_response(url=f"{SEED}/", html=home)
    httpx_mock.add_response(
        url=f"{SEED}/old-services", status_code=301, headers={"Location": f"{SEED}/services"}
    )
    for _ in range(2):
        httpx_mock.add_response(url=f"{SEED}/services", html=PAGES["/services"])
    crawler = SiteCrawler(create_basic_config(max_concurrency=1), client)

    outcome = await crawler.crawl(SEED)

    assert [p.url for p in outcome.site.service_pages] == [f"{SEED}/services"]
    assert outcome.stats.pages_fetched == 2


@pytest.mark.asyncio
async def test_queued_redirect_target_not_fetched_again(
    httpx_mock: HTTPXMock, client: httpx.AsyncClient
) -> None:
    home = html_page(
        "Acme", '<a href="/old-services">Old services</a><a href="/services">Services</a>'
    )
    httpx_mock.add_response(url=f"{SEED}/", html=home)
    httpx_mock.add_response(
        url=f"{SEED}/old-services", status_code=301, headers={"Location": f"{SEED}/services"}
    )
    httpx_mock.add_response(url=f"{SEED}/services", html=PAGES["/services"])
    crawler = SiteCrawler(create_basic_config(max_concurrency=1), client)

    outcome = await crawler.crawl(SEED)

    assert [p.url for p in outcome.site.service_pages] == [f"{SEED}/services"]
    assert outcome.stats.pages_fetched == 2
    requested = [str(request.url) for request in httpx_mock.get_requests()]
    assert requested.count(f"{SEED}/services") == 1


@pytest.mark.asyncio
async def test_unrequestable_link_is_ignored(
    httpx_mock: HTTPXMock, retrying_client: httpx.AsyncClient
) -> None:
    home = html_page(
        "Acme", '<a href="https://example.com:abc/x">Broken</a><a href="/services">Services</a>'
    )
    httpx_mock.add_response(url=f"{SEED}/", html=home)
    httpx_mock.add_response(url=f"{SEED}/services", html=PAGES["/services"])
    crawler = SiteCrawler(create_basic_config(), retrying_client)

    outcome = await crawler.crawl(SEED)

    assert [p.url for p in outcome.site.service_pages] == [f"{SEED}/services"]
    assert outcome.stats.pages_fetched == 2
    assert outcome.stats.pages_failed == 0
    assert len(httpx_mock.get_requests()) == 2


@pytest.mark.asyncio
async def test_deadline_returns_partial_site(
    httpx_mock: HTTPXMock, client: httpx.AsyncClient
) -> None:
    async def slow_page(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, html=PAGES["/contact"])

    mock_site(httpx_mock, skip=("/contact",))
    httpx_mock.add_callback(slow_page, url=f"{SEED}/contact")
    crawler = SiteCrawler(create_basic_config(deadline_seconds=0.5), client)

    start = time.monotonic()
    outcome = await crawler.crawl(SEED)

    assert time.monotonic() - start < 3
    assert outcome.stats.stopped_early is True
    assert outcome.site.contact_page is None
    assert outcome.site.homepage.url == SEED


@pytest.mark.asyncio
@pytest.mark.httpx_mock(assert_all_responses_were_requested=False)
async def test_cancel_event_stops_crawl(
    httpx_mock: HTTPXMock, client: httpx.AsyncClient
) -> None:
    mock_site(httpx_mock)
    cancel = asyncio.Event()
    cancel.set()
    crawler = SiteCrawler(create_basic_config(), client)

    outcome = await crawler.crawl(SEED, cancel_event=cancel)

    assert outcome.stats.stopped_early is True
    assert outcome.site.homepage.url == SEED
