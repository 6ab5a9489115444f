"""End-to-end tests for run_audit with mocked HTTP."""

from datetime import UTC, datetime

import httpx
import pytest
from pytest_httpx import HTTPXMock

from siteaudit.auditor import run_audit, validate_seed
from siteaudit.exceptions import ConfigError
from siteaudit.models import AuditStatus, RivalAudit
from siteaudit.types import PageSpeedMeasurement
from tests.conftest import create_basic_config, html_page

SEED = "https://example.com"


def status_of(report: RivalAudit, category: str, name: str) -> AuditStatus:
    for item in report.categories()[category].items:
        if item.name == name:
            return item.status
    raise AssertionError(f"No check named {name!r} in {category}")


class FixedSpeed:
    """Page-speed provider returning the same measurement for every URL."""

    def __init__(self, score: float) -> None:
        self.score = score
        self.measured: list[str] = []

    async def measure(self, url: str) -> PageSpeedMeasurement:
        self.measured.append(url)
        return {"score": self.score, "lcp": 2100, "fid": 40, "cls": 0.02, "ttfb": 300}


class TestValidateSeed:
    """Tests for validate_seed()."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("example.com", "https://example.com"),
            ("  https://Example.com/  ", "https://example.com"),
            ("http://example.com/about", "http://example.com/about"),
            ("localhost:8000", "https://localhost:8000"),
        ],
    )
    def test_accepts(self, raw: str, expected: str) -> None:
        assert validate_seed(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["", "   ", "ftp://example.com", "not a url", "javascript:alert(1)", "example.com:abc"],
    )
    def test_rejects(self, raw: str) -> None:
        with pytest.raises(ConfigError):
            validate_seed(raw)


@pytest.mark.asyncio
async def test_https_site_with_viewport_and_no_schema(
    httpx_mock: HTTPXMock, client: httpx.AsyncClient
) -> None:
    httpx_mock.add_response(url=f"{SEED}/", html=html_page("Acme", "<h1>Acme</h1>"))

    report = await run_audit(
        "example.com",
        create_basic_config(),
        client=client,
        timestamp=datetime(2024, 5, 1, tzinfo=UTC),
    )

    assert report.url == SEED
    assert report.timestamp == datetime(2024, 5, 1, tzinfo=UTC)
    assert status_of(report, "on_page", "Has SSL?") is AuditStatus.OK
    assert status_of(report, "on_page", "Is site mobile friendly?") is AuditStatus.OK
    assert status_of(report, "on_page", "Has schema markup?") is AuditStatus.OFI
    assert report.summary.total == 57
    assert report.crawl_stats.pages_fetched == 1


@pytest.mark.asyncio
async def test_missing_robots_txt_allows_crawl(
    httpx_mock: HTTPXMock, client: httpx.AsyncClient
) -> None:
    httpx_mock.add_response(url=f"{SEED}/robots.txt", status_code=404)
    httpx_mock.add_response(
        url=f"{SEED}/", html=html_page("Acme", '<a href="/contact">Contact</a>')
    )
    httpx_mock.add_response(
        url=f"{SEED}/contact", html=html_page("Contact Us", "<form></form>")
    )

    report = await run_audit(SEED, create_basic_config(respect_robots=True), client=client)

    assert report.crawl_stats.pages_fetched == 2
    assert report.crawl_stats.skipped_by_robots == 0
    assert status_of(report, "contact_page", "Has a contact page?") is AuditStatus.OK


@pytest.mark.asyncio
async def test_speed_provider_is_used(httpx_mock: HTTPXMock, client: httpx.AsyncClient) -> None:
    httpx_mock.add_response(url=f"{SEED}/", html=html_page())
    provider = FixedSpeed(score=42)

    report = await run_audit(SEED, create_basic_config(), client=client, speed_provider=provider)

    assert provider.measured == [SEED]
    assert status_of(report, "on_page", "Page load speed") is AuditStatus.PRIORITY_OFI


@pytest.mark.asyncio
async def test_creates_and_closes_own_client(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(url=f"{SEED}/", html=html_page())

    report = await run_audit(SEED, create_basic_config())

    assert report.crawl_stats.pages_fetched == 1
    assert httpx_mock.get_requests()[0].headers["User-Agent"].startswith("SiteAuditBot")


@pytest.mark.asyncio
async def test_invalid_seed_makes_no_requests(httpx_mock: HTTPXMock) -> None:
    with pytest.raises(ConfigError):
        await run_audit("ftp://example.com", create_basic_config())
    assert httpx_mock.get_requests() == []
