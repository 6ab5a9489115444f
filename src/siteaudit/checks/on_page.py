"""On-page checks, evaluated against the homepage."""

from siteaudit.checks.base import (
    AuditFacts,
    Check,
    Ceiling,
    Evaluated,
    Floor,
    average,
    flag,
)
from siteaudit.models import AuditStatus, Importance

SLOW_SPEED_SCORE = 50
MIN_NAV_LINKS = 5
COPY_MIN_WORDS = 400
COPY_MAX_WORDS = 2000
COPY_READABILITY = Floor(ok=50, strict=True)
PAGE_LENGTH = Floor(ok=400)
MIN_META_DESCRIPTION = 80
IMAGE_ALT_MISSING = Ceiling(ok=0)
LARGE_IMAGES = Ceiling(ok=2)
PAGE_SPEED = Floor(ok=70, ofi=50, otherwise=AuditStatus.PRIORITY_OFI, strict=True)

REVIEW_TERMS = ("review", "testimonial", "rating", "stars")


def appealing(facts: AuditFacts) -> Evaluated:
    # Structured data, social cards and a viewport are the proxies for a modern build
    home = facts.site.homepage
    modern = home.has_schema and home.has_social_tags and home.mobile_friendly
    notes = None
    if home.page_load_speed.score < SLOW_SPEED_SCORE:
        notes = "Page load speed is slow, which affects user experience"
    return Evaluated(flag(modern), notes)


def intuitive(facts: AuditFacts) -> Evaluated:
    home = facts.site.homepage
    broken = len(home.links.broken)
    usable = (
        len(home.links.internal) >= MIN_NAV_LINKS
        and broken == 0
        and home.content_structure.has_lists
    )
    return Evaluated(flag(usable), f"Found {broken} broken links" if broken else None)


def readable_copy(facts: AuditFacts) -> Evaluated:
    home = facts.site.homepage
    words = home.word_count
    in_range = COPY_MIN_WORDS <= words <= COPY_MAX_WORDS
    readable = COPY_READABILITY.grade(home.readability_score) is AuditStatus.OK

    if words < COPY_MIN_WORDS:
        notes = "Content may be too thin"
    elif words > COPY_MAX_WORDS:
        notes = "Content may be too dense"
    elif not readable:
        notes = f"Content readability score is low ({home.readability_score:.0f})"
    else:
        notes = None
    return Evaluated(flag(in_range and readable), notes)


def page_length(facts: AuditFacts) -> Evaluated:
    avg = average(page.word_count for page in facts.site.other_pages)
    status = PAGE_LENGTH.grade(avg)
    notes = None
    if status is not AuditStatus.OK:
        notes = f"Average word count per page ({round(avg)}) is low"
    return Evaluated(status, notes)


def user_intent(facts: AuditFacts) -> Evaluated:
    home = facts.site.homepage
    if not home.headings.h1:
        notes = "Missing H1 heading"
    elif len(home.meta_description) <= MIN_META_DESCRIPTION:
        notes = "Meta description is too short or missing"
    elif not home.content_structure.has_faqs:
        notes = "Consider adding FAQ content to address user questions"
    else:
        notes = None
    return Evaluated(flag(notes is None), notes)


def reviews(facts: AuditFacts) -> Evaluated:
    body = facts.site.homepage.body_text.lower()
    found = any(term in body for term in REVIEW_TERMS)
    return Evaluated(
        flag(found), None if found else "No evidence of customer reviews or testimonials found"
    )


def ssl(facts: AuditFacts) -> Evaluated:
    secure = facts.site.homepage.has_https
    return Evaluated(
        flag(secure, AuditStatus.PRIORITY_OFI),
        None if secure else "Site is not using HTTPS which is a security risk and SEO disadvantage",
    )


def mobile_friendly(facts: AuditFacts) -> Evaluated:
    ok = facts.site.homepage.mobile_friendly
    return Evaluated(
        flag(ok, AuditStatus.PRIORITY_OFI), None if ok else "No mobile viewport meta tag found"
    )


def schema_markup(facts: AuditFacts) -> Evaluated:
    home = facts.site.homepage
    if not home.has_schema:
        return Evaluated(AuditStatus.OFI, "No schema markup detected")
    return Evaluated(AuditStatus.OK, f"Schema types: {', '.join(home.schema_types) or 'Unknown'}")


def images_optimized(facts: AuditFacts) -> Evaluated:
    images = facts.site.homepage.images
    missing_alt = IMAGE_ALT_MISSING.grade(images.without_alt)
    oversized = LARGE_IMAGES.grade(images.large_images)

    if missing_alt is not AuditStatus.OK:
        notes = f"{images.without_alt} images missing alt text"
    elif oversized is not AuditStatus.OK:
        notes = f"{images.large_images} large images could be optimized"
    else:
        notes = None
    return Evaluated(flag(notes is None), notes)


def page_speed(facts: AuditFacts) -> Evaluated:
    speed = facts.site.homepage.page_load_speed
    status = PAGE_SPEED.grade(speed.score)
    notes = None
    if status is not AuditStatus.OK:
        notes = f"Page speed score: {speed.score}/100. LCP: {speed.largest_contentful_paint}ms"
    if speed.simulated:
        estimate = "Estimated value, no page speed measurement was available"
        notes = f"{notes}. {estimate}" if notes else estimate
    return Evaluated(status, notes)


CHECKS = (
    Check(
        "Is the website appealing? Modern?",
        "The website should have a modern, professional design",
        Importance.HIGH,
        appealing,
    ),
    Check(
        "Is the website intuitive? Usable?",
        "Users should be able to easily navigate the site",
        Importance.HIGH,
        intuitive,
    ),
    Check(
        "Is the copy readable? Not keyword stuffed. Clear.",
        "Content should be user-friendly and readable",
        Importance.MEDIUM,
        readable_copy,
    ),
    Check(
        "Pages are easy to read? No typos/spelling errors? Sufficiently long?",
        "Content should be error-free and comprehensive",
        Importance.MEDIUM,
        page_length,
    ),
    Check(
        "Does the site answer user intent?",
        "Content should match what users are searching for",
        Importance.HIGH,
        user_intent,
    ),
    Check(
        "Leverages reviews on website?",
        "Reviews build trust and credibility",
        Importance.MEDIUM,
        reviews,
    ),
    Check("Has SSL?", "HTTPS is required for security and SEO", Importance.HIGH, ssl),
    Check(
        "Is site mobile friendly?",
        "Site should be responsive on all devices",
        Importance.HIGH,
        mobile_friendly,
    ),
    Check(
        "Has schema markup?",
        "Structured data helps search engines understand content",
        Importance.MEDIUM,
        schema_markup,
    ),
    Check(
        "Images properly optimized?",
        "Images should have alt text and appropriate sizes",
        Importance.MEDIUM,
        images_optimized,
    ),
    Check(
        "Page load speed",
        "Pages should load quickly for better user experience and SEO",
        Importance.HIGH,
        page_speed,
    ),
)
