"""URL normalization and crawl-scope helpers.

URLNormalizer canonicalizes URLs into the comparable form used as frontier
keys. The module-level helpers answer "is this the same site?" and "is this
worth fetching?" for discovered links.
"""

import re
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx

# Query parameters that only carry campaign attribution
TRACKING_PARAM_PREFIXES = ("utm_",)

# Second-level labels that form a public suffix together with a 2-letter ccTLD
_SECOND_LEVEL_SUFFIXES = {"co", "com", "org", "net", "ac", "gov", "edu", "ltd", "plc"}

MAX_URL_LENGTH = 500

NON_HTML_EXTENSIONS = (
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    ".zip", ".rar", ".tar", ".gz", ".exe", ".dmg", ".pkg",
    ".mp4", ".avi", ".mov", ".wmv", ".mp3", ".wav",
    ".jpg", ".jpeg", ".png", ".gif", ".svg", ".bmp", ".ico", ".webp",
    ".css", ".js", ".xml", ".json",
)  # fmt: skip

SKIPPED_PATH_MARKERS = (
    "/wp-json/", "/api/", "/ajax/", "/admin", "/login", "/wp-admin",
    "/register", "/cart", "/checkout", "/wp-content", "/wp-includes",
    "/tag/", "/category/", "/author/", "/archive/", "/feed/",
    "/assets/", "/static/", "/media/", "/uploads/", "/files/",
    "/test/", "/staging/", "/dev/", "/beta/",
)  # fmt: skip

SKIPPED_QUERY_KEYS = {"download", "export", "print", "pdf"}

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://")


class URLNormalizer:
    """Centralized URL normalization and validation.

    Utilities for:
    - Normalizing URLs into the frontier's comparable form
    - Filtering dangerous schemes (javascript:, mailto:, tel:, data:, ...)
    """

    SAFE_SCHEMES = {"http", "https"}

    DEFAULT_PORTS = {
        "http": 80,
        "https": 443,
    }

    @staticmethod
    def normalize_url(url: str) -> str:
        """Normalize URL for consistent handling.

        Normalizations applied:
        - Lowercase the whole URL
        - Default a missing scheme to https://
        - Remove default ports
        - Strip trailing slashes (the root path is rendered without one)
        - Remove utm_* tracking parameters
        - Remove fragments (#section)

        The result is stable: normalizing it again returns it unchanged. This
        never raises; unparseable input comes back lowercased and prefixed.

        Args:
            url: URL to normalize

        Returns:
            Normalized URL

        Examples:
            >>> URLNormalizer.normalize_url("Example.com")
            'https://example.com'

            >>> URLNormalizer.normalize_url("HTTP://Example.COM:80/Services/?utm_source=x#top")
            'http://example.com/services'
        """
        raw = (url or "").strip().lower()
        if not raw:
            return ""

        if raw.startswith("//"):
            raw = f"https:{raw}"
        elif not _SCHEME_RE.match(raw):
            raw = f"https://{raw}"

        try:
            parts = urlsplit(raw)
            netloc = parts.netloc
            port = parts.port
            if port is not None and port == URLNormalizer.DEFAULT_PORTS.get(parts.scheme):
                netloc = netloc.rsplit(":", 1)[0]

            path = parts.path.rstrip("/")

            query = parts.query
            if query:
                pairs = [
                    (key, value)
                    for key, value in parse_qsl(query, keep_blank_values=True)
                    if not key.startswith(TRACKING_PARAM_PREFIXES)
                ]
                query = urlencode(pairs)

            return urlunsplit((parts.scheme, netloc, path, query, ""))
        except ValueError:
            # e.g. non-numeric port or a broken IPv6 literal
            return raw.split("#", 1)[0]

    @staticmethod
    def filter_dangerous_schemes(url: str) -> bool:
        """Return True if URL scheme is safe (http/https), False otherwise.

        Examples:
            >>> URLNormalizer.filter_dangerous_schemes("https://example.com")
            True

            >>> URLNormalizer.filter_dangerous_schemes("tel:+15550100")
            False
        """
        try:
            return urlsplit(url).scheme.lower() in URLNormalizer.SAFE_SCHEMES
        except ValueError:
            return False


def hostname(url: str) -> str:
    """Return the lowercased hostname of ``url`` without a leading ``www.``."""
    try:
        host = urlsplit(url).hostname or ""
    except ValueError:
        return ""
    return host[4:] if host.startswith("www.") else host


def registrable_domain(host: str) -> str:
    """Approximate the registrable domain (eTLD+1) of a hostname.

    Examples:
        >>> registrable_domain("shop.example.com")
        'example.com'

        >>> registrable_domain("www.plumber.co.uk")
        'plumber.co.uk'
    """
    labels = [label for label in host.lower().strip(".").split(".") if label]
    if len(labels) <= 2:
        return ".".join(labels)
    if len(labels[-1]) == 2 and labels[-2] in _SECOND_LEVEL_SUFFIXES:
        return ".".join(labels[-3:])
    return ".".join(labels[-2:])


def is_same_site(url: str, base_url: str) -> bool:
    """True when both URLs share a registrable domain."""
    host = hostname(url)
    return bool(host) and registrable_domain(host) == registrable_domain(hostname(base_url))


def is_requestable(url: str) -> bool:
    """True when httpx can build a request for ``url``.

    Rejects URLs that urllib accepts but httpx does not, such as a
    non-numeric port or a hostname that fails IDNA encoding.
    """
    try:
        httpx.URL(url)
    except (httpx.InvalidURL, ValueError):
        return False
    return True


def origin(url: str) -> str:
    """Return ``scheme://netloc`` for ``url``."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def path_segments(url: str) -> list[str]:
    """Return the non-empty, lowercased path segments of ``url``."""
    try:
        path = urlsplit(url).path
    except ValueError:
        return []
    return [segment for segment in path.lower().split("/") if segment]


def should_skip(url: str) -> bool:
    """True for URLs that are never audit-relevant pages.

    Skips binary and asset downloads, CMS/admin/system paths, download or
    print variants and absurdly long URLs.
    """
    if len(url) > MAX_URL_LENGTH:
        return True

    try:
        parts = urlsplit(url.lower())
    except ValueError:
        return True

    path = parts.path
    if path.endswith(NON_HTML_EXTENSIONS):
        return True

    # Markers like "/admin" must also match the bare path "/admin"
    padded = f"{path}/"
    if any(marker in padded for marker in SKIPPED_PATH_MARKERS):
        return True

    if parts.query:
        keys = {key for key, _ in parse_qsl(parts.query, keep_blank_values=True)}
        if keys & SKIPPED_QUERY_KEYS:
            return True

    return False
