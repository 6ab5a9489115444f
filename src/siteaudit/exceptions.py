"""Custom exceptions for siteaudit."""


class SiteAuditError(Exception):
    """Base exception for all siteaudit errors."""


class ConfigError(SiteAuditError):
    """Raised when the seed URL or configuration is invalid or cannot be loaded."""


class CrawlError(SiteAuditError):
    """Raised when the crawl cannot produce a homepage."""


class SitemapError(SiteAuditError):
    """Raised when sitemap parsing fails."""


class FetchError(SiteAuditError):
    """Single-page failure. The crawl drops the page and continues."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(f"{message} ({url})")


class NetworkError(FetchError):
    """Raised on timeouts, connection failures and other transport errors."""


class HttpError(FetchError):
    """Raised when the server answers with a non-2xx status."""

    def __init__(self, url: str, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(url, f"HTTP {status_code}")


class ParseError(FetchError):
    """Raised when a URL cannot be requested or its response cannot be parsed.

    Never retried.
    """


class RobotsDisallowed(SiteAuditError):
    """Raised when robots.txt forbids fetching a URL."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Disallowed by robots.txt: {url}")
