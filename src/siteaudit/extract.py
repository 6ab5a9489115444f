"""HTML fact extraction.

parse_page() turns one HTML document into a PageCrawlResult. It is pure: no
network access, no clock, no randomness, so identical input always yields an
identical result.
"""

import hashlib
import json
import logging
import re
from collections import Counter
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, cast
from urllib.parse import urljoin, urlsplit

import lxml.etree
import lxml.html

from siteaudit.exceptions import ParseError
from siteaudit.models import (
    ContentStructure,
    Headings,
    ImageStats,
    Links,
    PageCrawlResult,
    PageLoadSpeed,
)
from siteaudit.urls import URLNormalizer, hostname, registrable_domain

if TYPE_CHECKING:
    from siteaudit.types import LxmlDocument, LxmlElement, PageSpeedMeasurement

logger = logging.getLogger(__name__)

PHONE_RE = re.compile(r"(?<!\d)(?:\+?1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}(?!\d)")

# Bounded repetitions keep these linear on long bodies of text
ADDRESS_PATTERNS = (
    # 123 Main St, Springfield, IL 62701
    re.compile(r"\b\d{1,6}\s+[A-Za-z0-9.#\s]{2,40},\s*[A-Za-z.\s]{2,30},\s*[A-Z]{2}\s*\d{5}\b"),
    # 123 North Oak Avenue
    re.compile(
        r"\b\d{1,6}\s+(?:[A-Za-z.]+\s+){1,4}"
        r"(?:street|st|road|rd|avenue|ave|lane|ln|drive|dr|boulevard|blvd|court|ct"
        r"|way|parkway|pkwy|highway|hwy)\b",
        re.IGNORECASE,
    ),
    # 123 Main St, Springfield, IL
    re.compile(r"\b\d{1,6}\s+[A-Za-z0-9.#\s]{2,40},\s*[A-Za-z.\s]{2,30},\s*[A-Z]{2}\b"),
)

LARGE_IMAGE_PX = 1000
TOP_KEYWORDS = 10
MIN_KEYWORD_LENGTH = 4

_NON_WORD_RE = re.compile(r"[^\w\s]")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_VOWEL_GROUP_RE = re.compile(r"[aeiouy]+")
_WHITESPACE_RE = re.compile(r"\s+")


def parse_page(
    html: str | bytes,
    url: str,
    site_url: str | None = None,
    page_load_speed: PageLoadSpeed | None = None,
) -> PageCrawlResult:
    """Extract audit facts from an HTML document.

    Args:
        html: Raw document
        url: Normalized URL the document was fetched from
        site_url: Seed URL; links on the same registrable domain count as
            internal. Defaults to ``url``.
        page_load_speed: Measured speed; synthesized from the URL when omitted

    Returns:
        Frozen PageCrawlResult

    Raises:
        ParseError: If the document is empty or not parseable as HTML
    """
    if not html or not html.strip():
        raise ParseError(url, "Empty document")

    try:
        doc = cast("LxmlDocument", lxml.html.document_fromstring(html))
    except (lxml.etree.ParserError, ValueError) as e:
        raise ParseError(url, f"Unparseable HTML: {e}") from e

    title = _first_text(doc, "//title")
    meta_description = _first_attr(
        doc, "//meta[translate(@name,'DESCRIPTION','description')='description']/@content"
    )

    # Structured data must be read before scripts are stripped from the tree
    schema_types, has_schema = extract_schema_types(doc)

    for element in doc.xpath("//script | //style | //noscript | //template"):
        element.drop_tree()

    body_text = _body_text(doc)
    lowered = body_text.lower()

    links, has_click_to_call = extract_links(doc, url, site_url or url)
    words = body_text.split()
    word_count = len(words)

    has_form = bool(doc.xpath("//form")) or bool(
        doc.xpath("//input[translate(@type,'EMAIL','email')='email']")
    )

    return PageCrawlResult(
        url=url,
        title=title,
        meta_description=meta_description,
        body_text=body_text,
        headings=Headings(
            h1=_texts(doc, "//h1"),
            h2=_texts(doc, "//h2"),
            h3=_texts(doc, "//h3"),
        ),
        links=links,
        has_contact_form=has_form or "contact form" in lowered,
        has_phone_number=bool(PHONE_RE.search(body_text)),
        has_address=has_address(body_text),
        has_schema=has_schema,
        schema_types=schema_types,
        mobile_friendly=_has(doc, "//meta[translate(@name,'VIEWPORT','viewport')='viewport']"),
        has_https=url.startswith("https://"),
        has_canonical=_has(doc, "//link[translate(@rel,'CANONICAL','canonical')='canonical']"),
        has_sitemap=_has(doc, "//a[contains(@href,'sitemap.xml')]") or "sitemap" in lowered,
        has_hreflang=_has(doc, "//link[@rel='alternate'][@hreflang]"),
        has_amp_version=_has(doc, "//link[@rel='amphtml']"),
        has_social_tags=bool(
            doc.xpath("//meta[starts-with(@property,'og:') or starts-with(@name,'twitter:')]")
        ),
        has_robots_meta=_has(doc, "//meta[translate(@name,'ROBTS','robts')='robots']"),
        has_click_to_call=has_click_to_call,
        images=extract_image_stats(doc),
        content_structure=ContentStructure(
            has_faqs="faq" in lowered or ("question" in lowered and "answer" in lowered),
            has_table=_has(doc, "//table"),
            has_lists=_has(doc, "//ul | //ol"),
            has_video=bool(
                doc.xpath(
                    "//video | //iframe[contains(@src,'youtube') or contains(@src,'vimeo')]"
                )
            ),
        ),
        keyword_density=keyword_density(body_text),
        readability_score=flesch_reading_ease(body_text),
        page_load_speed=page_load_speed or simulated_page_speed(url),
        word_count=word_count,
    )


def _texts(doc: "LxmlDocument", xpath: str) -> tuple[str, ...]:
    return tuple(
        _WHITESPACE_RE.sub(" ", el.text_content()).strip() for el in doc.xpath(xpath)
    )


def _has(doc: "LxmlDocument", xpath: str) -> bool:
    return bool(doc.xpath(xpath))


def _first_text(doc: "LxmlDocument", xpath: str) -> str:
    texts = _texts(doc, xpath)
    return texts[0] if texts else ""


def _first_attr(doc: "LxmlDocument", xpath: str) -> str:
    values = doc.xpath(xpath)
    return str(values[0]).strip() if values else ""


def _body_text(doc: "LxmlDocument") -> str:
    bodies = doc.xpath("//body")
    if not bodies:
        return ""
    # itertext keeps adjacent inline elements from gluing their words together
    return _WHITESPACE_RE.sub(" ", " ".join(bodies[0].itertext())).strip()


def has_address(text: str) -> bool:
    """True if any street-address shape appears in ``text``."""
    return any(pattern.search(text) for pattern in ADDRESS_PATTERNS)


def extract_links(
    doc: "LxmlDocument", page_url: str, site_url: str
) -> tuple[Links, bool]:
    """Split anchors into internal, external and broken links.

    Internal links are normalized and share the site's registrable domain.
    Fragment-only anchors are ignored. An href that cannot be resolved into a
    URL is reported as broken. ``tel:`` anchors are not links but mark the
    page as click-to-call.

    Returns:
        Tuple of (links, has_click_to_call)
    """
    site_domain = registrable_domain(hostname(site_url))
    internal: dict[str, None] = {}
    external: dict[str, None] = {}
    broken: dict[str, None] = {}
    click_to_call = False

    for anchor in cast("list[LxmlElement]", doc.xpath("//a[@href]")):
        href = (anchor.get("href") or "").strip()
        if not href or href.startswith("#"):
            continue

        lowered = href.lower()
        if lowered.startswith("tel:"):
            click_to_call = True
            continue

        try:
            absolute = urljoin(page_url, href)
            parts = urlsplit(absolute)
            host = parts.hostname
        except ValueError:
            broken[href] = None
            continue

        if not URLNormalizer.filter_dangerous_schemes(absolute):
            continue
        if not host:
            broken[href] = None
            continue

        bare_host = host[4:] if host.startswith("www.") else host
        if registrable_domain(bare_host) == site_domain:
            internal[URLNormalizer.normalize_url(absolute)] = None
        else:
            external[absolute] = None

    return (
        Links(internal=tuple(internal), external=tuple(external), broken=tuple(broken)),
        click_to_call,
    )


def extract_image_stats(doc: "LxmlDocument") -> ImageStats:
    """Count images, alt coverage and oversized images.

    An image is large when its declared width or height exceeds 1000px. The
    byte size is unknown without fetching it, so this is only a proxy.
    """
    images = cast("list[LxmlElement]", doc.xpath("//img"))
    with_alt = sum(1 for img in images if img.get("alt") is not None)
    large = sum(
        1
        for img in images
        if _pixels(img.get("width")) > LARGE_IMAGE_PX or _pixels(img.get("height")) > LARGE_IMAGE_PX
    )
    return ImageStats(
        total=len(images),
        with_alt=with_alt,
        without_alt=len(images) - with_alt,
        large_images=large,
    )


def _pixels(value: str | None) -> int:
    if not value:
        return 0
    match = re.match(r"\s*(\d+)", value)
    return int(match.group(1)) if match else 0


def extract_schema_types(doc: "LxmlDocument") -> tuple[tuple[str, ...], bool]:
    """Collect structured-data types from JSON-LD blocks and microdata.

    Every JSON-LD block is decoded on its own; a malformed block is logged and
    skipped without hiding the types of its siblings.

    Returns:
        Tuple of (unique types in document order, has_schema)
    """
    types: dict[str, None] = {}
    valid_blocks = 0

    for script in doc.xpath("//script[translate(@type,'LDJSON','ldjson')='application/ld+json']"):
        raw = script.text or ""
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.debug(f"Skipping malformed JSON-LD block: {e}")
            continue
        valid_blocks += 1
        for schema_type in _walk_types(data):
            types[schema_type] = None

    itemtypes = doc.xpath("//*[@itemtype]/@itemtype")
    for itemtype in itemtypes:
        for value in str(itemtype).split():
            name = value.rstrip("/").rsplit("/", 1)[-1]
            if name:
                types[name] = None

    return tuple(types), valid_blocks > 0 or bool(itemtypes)


def _walk_types(node: Any) -> Iterator[str]:
    if isinstance(node, list):
        for child in node:
            yield from _walk_types(child)
        return
    if not isinstance(node, dict):
        return

    declared = node.get("@type")
    if isinstance(declared, str):
        yield declared
    elif isinstance(declared, list):
        yield from (t for t in declared if isinstance(t, str))

    if "@graph" in node:
        yield from _walk_types(node["@graph"])


def keyword_density(text: str) -> dict[str, int]:
    """Top keywords by frequency: punctuation stripped, words of 4+ characters."""
    words = (w for w in _NON_WORD_RE.sub("", text.lower()).split() if len(w) >= MIN_KEYWORD_LENGTH)
    return dict(Counter(words).most_common(TOP_KEYWORDS))


def count_syllables(word: str) -> int:
    """Approximate syllables as groups of consecutive vowels, at least one."""
    letters = re.sub(r"[^a-z]", "", word.lower())
    return max(1, len(_VOWEL_GROUP_RE.findall(letters)))


def flesch_reading_ease(text: str) -> float:
    """Flesch Reading Ease clamped to 0-100; 0 for text with no sentences.

    Higher is easier: 60-70 is plain English, below 30 is academic prose.
    """
    words = text.split()
    sentences = [s for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]
    if not words or not sentences:
        return 0.0

    syllables = sum(count_syllables(word) for word in words)
    score = (
        206.835
        - 1.015 * (len(words) / len(sentences))
        - 84.6 * (syllables / len(words))
    )
    return round(min(100.0, max(0.0, score)), 1)


def simulated_page_speed(url: str) -> PageLoadSpeed:
    """Stand-in metrics derived from a hash of the URL.

    Same URL, same numbers. The ranges are plausible for a small business
    site (score 40-99, FCP 0.5-1.5s, TBT 50-250ms, LCP 1-3s) but the values
    say nothing about the real page.
    """
    digest = hashlib.sha256(url.encode("utf-8")).digest()
    return PageLoadSpeed(
        score=40 + digest[0] % 60,
        first_contentful_paint=500 + int.from_bytes(digest[1:3], "big") % 1000,
        total_blocking_time=50 + int.from_bytes(digest[3:5], "big") % 200,
        largest_contentful_paint=1000 + int.from_bytes(digest[5:7], "big") % 2000,
        simulated=True,
    )


def measured_page_speed(measurement: "PageSpeedMeasurement") -> PageLoadSpeed:
    """Map provider metrics onto the report's page speed fields.

    Providers report time-to-first-byte and first-input-delay rather than
    FCP and TBT; those are the nearest available proxies.
    """
    return PageLoadSpeed(
        score=round(max(0.0, min(100.0, float(measurement["score"])))),
        first_contentful_paint=round(float(measurement["ttfb"])),
        total_blocking_time=round(float(measurement["fid"])),
        largest_contentful_paint=round(float(measurement["lcp"])),
        simulated=False,
    )

