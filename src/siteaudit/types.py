"""Type definitions and protocols for siteaudit.

Protocols for lxml types (lxml has incomplete type stubs) and for the
optional page-speed collaborator.
"""

from typing import Any, Protocol, TypedDict


class LxmlElement(Protocol):
    """Protocol for lxml Element objects."""

    def get(self, key: str) -> str | None:
        """Get attribute value."""
        ...

    def text_content(self) -> str:
        """Return the concatenated text of the element and its children."""
        ...


class LxmlDocument(Protocol):
    """Protocol for lxml document objects (HtmlElement)."""

    def xpath(self, expr: str) -> list[Any]:
        """Execute XPath query."""
        ...


class PageSpeedMeasurement(TypedDict):
    """Raw metrics returned by a page-speed provider.

    Timings are milliseconds, ``cls`` is unitless, ``score`` is 0-100.
    """

    score: float
    lcp: float
    fid: float
    cls: float
    ttfb: float


class PageSpeedProvider(Protocol):
    """Real page-speed measurement source injected by the caller."""

    async def measure(self, url: str) -> PageSpeedMeasurement:
        """Measure the given URL."""
        ...
