"""Audit rule engine.

Six ordered category tables. Each category maps to one report section and
is evaluated independently against the same AuditFacts.
"""

from dataclasses import dataclass

from siteaudit.checks import contact, location, on_page, service, service_area, structure
from siteaudit.checks.base import AuditFacts, Check, run_checks
from siteaudit.models import CategoryResult


@dataclass(frozen=True, slots=True)
class Category:
    key: str
    title: str
    checks: tuple[Check, ...]


CATEGORIES: tuple[Category, ...] = (
    Category("on_page", "On-Page", on_page.CHECKS),
    Category("structure_navigation", "Structure & Navigation", structure.CHECKS),
    Category("contact_page", "Contact Page", contact.CHECKS),
    Category("service_pages", "Service Pages", service.CHECKS),
    Category("location_pages", "Location Pages", location.CHECKS),
    Category("service_area_pages", "Service Area Pages", service_area.CHECKS),
)


def evaluate_categories(facts: AuditFacts) -> dict[str, CategoryResult]:
    """Run every category table, keyed by report field name."""
    return {
        category.key: CategoryResult(items=run_checks(category.checks, facts))
        for category in CATEGORIES
    }


__all__ = ["CATEGORIES", "AuditFacts", "Category", "evaluate_categories"]
