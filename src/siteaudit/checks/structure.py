"""Structure and navigation checks across all crawled URLs."""

import re

from siteaudit.checks.base import AuditFacts, Ceiling, Check, Evaluated, Floor, flag
from siteaudit.models import AuditStatus, Importance
from siteaudit.urls import path_segments

UNREADABLE_URL_PATTERNS = (
    re.compile(r"\?id=\d+"),
    re.compile(r"\.php"),
    re.compile(r"\.aspx"),
    re.compile(r"\.html"),
    re.compile(r"[_0-9]{6,}"),
)
LOCALIZED_URL_RE = re.compile(
    r"/(locations?|cities|towns|areas|regions|states|provinces|[a-z]+-[a-z]+)/[a-z-]+"
)
TITLE_STOPWORDS = frozenset({"page", "home", "about", "contact", "the", "and", "for", "with"})

HIERARCHY_DEPTH = 2
HIERARCHICAL_URLS = Floor(ok=3, strict=True)
BROKEN_LINKS = Ceiling(ok=0, ofi=2, otherwise=AuditStatus.PRIORITY_OFI)


def human_readable(facts: AuditFacts) -> Evaluated:
    bad = [
        page.url
        for page in facts.site.all_pages
        if any(pattern.search(page.url) for pattern in UNREADABLE_URL_PATTERNS)
    ]
    return Evaluated(
        flag(not bad), f"Found {len(bad)} URLs that are not human-readable" if bad else None
    )


def localized(facts: AuditFacts) -> Evaluated:
    pages = facts.site.location_pages
    if any(LOCALIZED_URL_RE.search(page.url.lower()) for page in pages):
        return Evaluated(AuditStatus.OK)
    if pages:
        return Evaluated(
            AuditStatus.OFI, "Location pages don't include location information in URLs"
        )
    return Evaluated(AuditStatus.NA, "No location pages found")


def keyword_rich(facts: AuditFacts) -> Evaluated:
    pages = facts.site.all_pages
    keywords = {
        word
        for page in pages
        for word in page.title.lower().split()
        if len(word) > 3 and word not in TITLE_STOPWORDS
    }
    matching = [page.url for page in pages if any(k in page.url.lower() for k in keywords)]
    if matching:
        return Evaluated(AuditStatus.OK, f"Found {len(matching)} URLs containing relevant keywords")
    return Evaluated(AuditStatus.OFI, "URLs don't contain relevant keywords from page titles")


def hierarchy(facts: AuditFacts) -> Evaluated:
    deep = sum(
        1 for page in facts.site.all_pages if len(path_segments(page.url)) >= HIERARCHY_DEPTH
    )
    status = HIERARCHICAL_URLS.grade(deep)
    notes = None
    if status is not AuditStatus.OK:
        notes = "Site lacks clear URL hierarchy with logical folder structure"
    return Evaluated(status, notes)


def navigation_labels(facts: AuditFacts) -> Evaluated:
    titled = {page.url for page in facts.site.all_pages if page.title}
    aligned = any(link in titled for link in facts.site.homepage.links.internal)
    return Evaluated(flag(aligned), None if aligned else "Navigation links don't match page titles")


def broken_links(facts: AuditFacts) -> Evaluated:
    count = len(facts.site.homepage.links.broken)
    return Evaluated(
        BROKEN_LINKS.grade(count), f"Found {count} broken or invalid links" if count else None
    )


def canonical(facts: AuditFacts) -> Evaluated:
    ok = facts.site.homepage.has_canonical
    return Evaluated(flag(ok), None if ok else "No canonical tag found on homepage")


def xml_sitemap(facts: AuditFacts) -> Evaluated:
    site = facts.site
    if site.has_sitemap_xml:
        return Evaluated(AuditStatus.OK, "sitemap.xml found")
    if site.homepage.has_sitemap:
        return Evaluated(AuditStatus.OK, "Sitemap referenced from the homepage")
    return Evaluated(AuditStatus.OFI, "No sitemap reference found")


def heading_structure(facts: AuditFacts) -> Evaluated:
    headings = facts.site.homepage.headings
    if not headings.h1:
        notes = "Homepage missing H1 heading"
    elif len(headings.h1) > 1:
        notes = "Multiple H1 headings on homepage"
    elif not headings.h2:
        notes = "No H2 headings on homepage"
    else:
        notes = None
    return Evaluated(flag(notes is None), notes)


CHECKS = (
    Check(
        "Human-readable? Simple? Informative?",
        "URLs should be user-friendly",
        Importance.MEDIUM,
        human_readable,
    ),
    Check(
        "Localized?",
        "URLs should include location information where relevant",
        Importance.MEDIUM,
        localized,
    ),
    Check(
        "Keyword-rich?",
        "URLs should contain relevant keywords",
        Importance.MEDIUM,
        keyword_rich,
    ),
    Check(
        "Clear URL hierarchy?",
        "URLs should have a logical folder structure",
        Importance.MEDIUM,
        hierarchy,
    ),
    Check(
        "Navigation labels aligned with page <title>?",
        "Navigation labels should match page titles",
        Importance.LOW,
        navigation_labels,
    ),
    Check(
        "No broken links?",
        "Site should not have broken or invalid links",
        Importance.HIGH,
        broken_links,
    ),
    Check(
        "Canonical domain version?",
        "Site should use canonical tags to prevent duplicate content",
        Importance.MEDIUM,
        canonical,
    ),
    Check(
        "XML sitemap?",
        "Site should have an XML sitemap for search engines",
        Importance.MEDIUM,
        xml_sitemap,
    ),
    Check(
        "Proper heading structure?",
        "Pages should use headings in hierarchical order (H1, H2, H3)",
        Importance.MEDIUM,
        heading_structure,
    ),
)
