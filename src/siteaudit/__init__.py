"""siteaudit - polite site crawler and local-SEO rule engine."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("siteaudit")
except PackageNotFoundError:
    __version__ = "dev"
