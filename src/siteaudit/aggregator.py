"""Folds category results into the final report."""

from collections import Counter
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime

from siteaudit.models import (
    AuditItem,
    AuditStatus,
    AuditSummary,
    CategoryResult,
    CrawlStats,
    RivalAudit,
)


def summarize(items: Iterable[AuditItem]) -> AuditSummary:
    """Count items by status."""
    counts = Counter(item.status for item in items)
    return AuditSummary(
        priority_ofi_count=counts[AuditStatus.PRIORITY_OFI],
        ofi_count=counts[AuditStatus.OFI],
        ok_count=counts[AuditStatus.OK],
        na_count=counts[AuditStatus.NA],
        total=sum(counts.values()),
    )


def build_audit(
    url: str,
    categories: Mapping[str, CategoryResult],
    timestamp: datetime | None = None,
    crawl_stats: CrawlStats | None = None,
) -> RivalAudit:
    """Assemble the RivalAudit for one run.

    Args:
        url: Normalized seed URL
        categories: Results keyed by report field name (see siteaudit.checks.CATEGORIES)
        timestamp: Report time; defaults to now (UTC)
        crawl_stats: Crawl diagnostics

    Returns:
        Immutable report whose summary counts every item exactly once
    """
    items = [item for result in categories.values() for item in result.items]
    return RivalAudit(
        url=url,
        timestamp=timestamp or datetime.now(UTC),
        summary=summarize(items),
        crawl_stats=crawl_stats or CrawlStats(),
        **categories,
    )
