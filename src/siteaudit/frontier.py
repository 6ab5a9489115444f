"""Crawl frontier: visited set and pending queue under a page cap."""

import asyncio
from collections import deque
from collections.abc import Iterable


class Frontier:
    """URLs waiting to be fetched, owned by one crawl session.

    All state sits behind one asyncio.Condition, so "has this URL been seen?"
    and "enqueue it" happen atomically and two workers never receive the same
    URL. URLs are deduplicated on insert. Every dequeued URL reserves one of
    ``max_pages`` slots; once all slots are taken nothing more is handed out,
    even if the queue is not empty.

    Example:
        >>> frontier = Frontier(max_pages=25)
        >>> frontier.claim_seed("https://example.com")
        >>> await frontier.add_many(homepage.links.internal)
        >>> while (url := await frontier.next()) is not None:
        ...     links = await crawl(url)
        ...     await frontier.complete(url, links)
    """

    def __init__(self, max_pages: int) -> None:
        self.max_pages = max_pages
        self.visited: set[str] = set()
        self._seen: set[str] = set()
        self._queue: deque[str] = deque()
        self._claimed = 0
        self._in_flight = 0
        self._cond = asyncio.Condition()

    @property
    def claimed(self) -> int:
        """Slots currently reserved (fetched or in flight)."""
        return self._claimed

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def reached_cap(self) -> bool:
        return self._claimed >= self.max_pages

    def claim_seed(self, url: str) -> None:
        """Record the homepage as visited.

        The seed always takes a slot, even when ``max_pages`` is already used
        up, because no audit is possible without it.
        """
        self._seen.add(url)
        self.visited.add(url)
        self._claimed += 1

    def mark_visited(self, url: str) -> None:
        """Record a URL as visited without reserving a slot (e.g. a redirect target)."""
        self._seen.add(url)
        self.visited.add(url)

    async def add(self, url: str) -> bool:
        """Enqueue ``url`` unless it was seen before. Returns True if enqueued."""
        return await self.add_many((url,)) == 1

    async def add_many(self, urls: Iterable[str]) -> int:
        """Enqueue unseen URLs in order. Returns how many were enqueued."""
        async with self._cond:
            added = self._enqueue(urls)
            if added:
                self._cond.notify_all()
            return added

    async def next(self) -> str | None:
        """Hand out the next URL to fetch.

        Waits while the queue is empty but other workers are still fetching,
        since they may discover more links.

        Returns:
            A URL now marked visited, or None when the cap is reached or no
            work remains
        """
        async with self._cond:
            while True:
                if self._claimed >= self.max_pages:
                    return None
                if self._queue:
                    url = self._queue.popleft()
                    if url in self.visited:
                        # Already fetched as another page's redirect target
                        continue
                    self.visited.add(url)
                    self._claimed += 1
                    self._in_flight += 1
                    return url
                if self._in_flight == 0:
                    return None
                await self._cond.wait()

    async def complete(self, url: str, links: Iterable[str] = (), *, fetched: bool = True) -> None:
        """Finish work on ``url`` handed out by next().

        Args:
            url: URL previously returned by next()
            links: Newly discovered URLs to enqueue
            fetched: False when the URL was skipped without a request (e.g.
                robots.txt denial); its page slot is returned to the pool
        """
        async with self._cond:
            self._enqueue(links)
            self._in_flight -= 1
            if not fetched:
                self._claimed -= 1
            self._cond.notify_all()

    def _enqueue(self, urls: Iterable[str]) -> int:
        added = 0
        for url in urls:
            if url not in self._seen:
                self._seen.add(url)
                self._queue.append(url)
                added += 1
        return added
