"""robots.txt politeness gate."""

import asyncio
import logging

import httpx
from robotexclusionrulesparser import RobotFileParserLookalike

from siteaudit.urls import origin

logger = logging.getLogger(__name__)


class PolitenessGate:
    """Checks robots.txt files to determine if URLs can be fetched.

    robots.txt is fetched once per origin for the lifetime of the gate (one
    audit session). Concurrent workers asking about the same origin wait for
    a single fetch. If robots.txt cannot be fetched or parsed the origin is
    treated as unrestricted: a missing or broken robots.txt never blocks an
    audit.

    Example:
        >>> gate = PolitenessGate(client, user_agent="SiteAuditBot/1.0")
        >>> allowed = await gate.is_allowed("https://example.com/services")
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        user_agent: str,
        timeout: float = 5.0,
    ) -> None:
        """Initialize politeness gate.

        Args:
            client: HTTP client for fetching robots.txt files
            user_agent: Default user agent to check rules for
            timeout: Timeout in seconds for each robots.txt fetch
        """
        self.client = client
        self.user_agent = user_agent
        self.timeout = timeout
        self._cache: dict[str, RobotFileParserLookalike] = {}  # origin -> parser
        self._locks: dict[str, asyncio.Lock] = {}

    async def is_allowed(self, url: str, user_agent: str | None = None) -> bool:
        """Check if URL is allowed by robots.txt.

        Args:
            url: URL to check
            user_agent: Overrides the gate's default user agent

        Returns:
            True if allowed (or robots.txt is unavailable), False if disallowed
        """
        parser = await self._parser_for(origin(url))
        return bool(parser.is_allowed(user_agent or self.user_agent, url))

    async def _parser_for(self, site_origin: str) -> RobotFileParserLookalike:
        # setdefault has no await point, so every caller gets the same lock
        lock = self._locks.setdefault(site_origin, asyncio.Lock())
        async with lock:
            if site_origin not in self._cache:
                self._cache[site_origin] = await self._load(site_origin)
        return self._cache[site_origin]

    async def _load(self, site_origin: str) -> RobotFileParserLookalike:
        robots_url = f"{site_origin}/robots.txt"
        parser = RobotFileParserLookalike()
        try:
            response = await self.client.get(robots_url, timeout=self.timeout)
            if response.status_code == 200:
                parser.parse(response.text.splitlines())
                logger.debug(f"Loaded robots.txt for {site_origin}")
                return parser
            logger.debug(f"No robots.txt for {site_origin} (status {response.status_code})")
        except Exception as e:
            logger.warning(
                f"Failed to load robots.txt for {site_origin}: {e}. Proceeding without it."
            )
            parser = RobotFileParserLookalike()

        parser.parse([])
        return parser
