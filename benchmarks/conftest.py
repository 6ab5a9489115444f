"""Benchmark fixtures for deterministic, repeatable performance tests.

All fixtures generate data programmatically - no external dependencies.
"""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from siteaudit.extract import parse_page
from siteaudit.models import PageCrawlResult, PageLoadSpeed

CITIES = ("miami", "tampa", "orlando", "ocala", "naples", "sarasota", "destin", "venice")
TRADES = ("ac-repair", "furnace-installation", "heat-pump-service", "water-heater-replacement")

SPEED = PageLoadSpeed(85, 900, 100, 1800, simulated=False)


@pytest.fixture
def homepage_html() -> str:
    """~15KB local-business homepage with navigation, schema and copy."""
    nav = "\n".join(
        f'        <li><a href="/{city}-fl/{trade}">{trade} in {city}</a></li>'
        for city in CITIES
        for trade in TRADES
    )
    paragraphs = "\n".join(
        f"    <p>Paragraph {i}. Our licensed technicians repair, install and maintain "
        f"heating and cooling systems. Call today for a free estimate.</p>"
        for i in range(60)
    )
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>Acme Heating and Cooling - AC Repair in Central Florida</title>
    <meta name="description" content="Family owned HVAC contractor serving Central Florida.">
    <meta property="og:title" content="Acme Heating and Cooling">
    <script type="application/ld+json">
    {{"@context": "https://schema.org", "@type": "HVACBusiness", "name": "Acme"}}
    </script>
</head>
<body>
    <h1>Acme Heating and Cooling</h1>
    <nav><ul>
{nav}
    </ul></nav>
    <h2>Customer Reviews</h2>
{paragraphs}
    <p>Call <a href="tel:+15551234567">(555) 123-4567</a> or visit
       123 Main Street, Orlando, FL 32801.</p>
    <img src="/team.jpg" alt="Our team" width="800">
    <img src="/van.jpg" width="1600">
</body>
</html>"""


def _service_area_text(city: str, variant: int) -> str:
    filler = " ".join(f"detail{variant}x{i}" for i in range(40))
    return (
        f"Fast AC repair in {city}. Our {city} technicians handle emergency "
        f"cooling repairs, maintenance plans and new installs. {filler}"
    )


@pytest.fixture
def service_area_pages() -> list[PageCrawlResult]:
    """32 service-area pages; every other city reuses its neighbour's copy."""
    pages = []
    for i, city in enumerate(CITIES):
        for trade in TRADES:
            pages.append(
                PageCrawlResult(
                    url=f"https://example.com/{city}-fl/{trade}",
                    title=f"{trade.replace('-', ' ').title()} in {city.title()}",
                    body_text=_service_area_text(city, i // 2),
                    page_load_speed=SPEED,
                )
            )
    return pages


@pytest.fixture
def parsed_homepage(homepage_html: str) -> PageCrawlResult:
    return parse_page(homepage_html, "https://example.com", page_load_speed=SPEED)
