"""Near-duplicate detection within a page bucket.

Pages are compared as sets of words (lowercased, whitespace-split, longer
than three characters) using Jaccard similarity. Comparing a bucket is
quadratic in its size, which the crawl's page cap keeps small.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from itertools import combinations

from siteaudit.models import PageCrawlResult

logger = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 4


def tokens(text: str) -> frozenset[str]:
    """Distinct lowercased words of 4+ characters."""
    return frozenset(word for word in text.lower().split() if len(word) >= MIN_TOKEN_LENGTH)


def jaccard(a: frozenset[str], b: frozenset[str]) -> float:
    """|A ∩ B| / |A ∪ B|. Two empty sets are identical (1.0)."""
    union = len(a | b)
    if union == 0:
        return 1.0
    return len(a & b) / union


def similarity(text_a: str, text_b: str) -> float:
    """Jaccard similarity of two texts' word sets. Symmetric, 1.0 for equal texts."""
    return jaccard(tokens(text_a), tokens(text_b))


@dataclass(frozen=True, slots=True)
class SimilarPair:
    url_a: str
    url_b: str
    score: float


@dataclass(frozen=True, slots=True)
class BucketUniqueness:
    """Result of comparing every pair of pages in a bucket."""

    unique: bool
    similar_pairs: tuple[SimilarPair, ...] = ()

    @property
    def duplicate_urls(self) -> tuple[str, ...]:
        """URLs involved in at least one similar pair, in first-seen order."""
        urls: dict[str, None] = {}
        for pair in self.similar_pairs:
            urls[pair.url_a] = None
            urls[pair.url_b] = None
        return tuple(urls)


def assess_uniqueness(pages: Sequence[PageCrawlResult], threshold: float) -> BucketUniqueness:
    """Flag a bucket as not unique if any two pages exceed ``threshold``.

    Args:
        pages: Pages of one bucket
        threshold: Similarity above which two pages are near-duplicates

    Returns:
        BucketUniqueness listing every offending pair
    """
    token_sets = [(page.url, tokens(page.body_text)) for page in pages]
    pairs = []
    for (url_a, set_a), (url_b, set_b) in combinations(token_sets, 2):
        score = jaccard(set_a, set_b)
        if score > threshold:
            pairs.append(SimilarPair(url_a, url_b, round(score, 3)))

    if pairs:
        logger.info(f"{len(pairs)} near-duplicate page pair(s) above {threshold:.2f}")
    return BucketUniqueness(unique=not pairs, similar_pairs=tuple(pairs))
