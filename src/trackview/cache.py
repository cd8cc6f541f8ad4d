"""Paginated log cache owned by a tracking-status node.

Holds at most one GitLog per node and moves through three states:

    ABSENT --get()--> FETCHING --success--> PRESENT
       ^                  |                    |
       +----failure-------+                    |
       +------------invalidate()---------------+

Concurrent get() calls while FETCHING share the same pending task.
invalidate() bumps a generation counter, so a fetch that completes after
an invalidation is handed back to its waiters but never stored.
load_more() and reset() are serialized through one asyncio.Lock, and
concurrent load_more() calls share one pending task.
"""

import asyncio
import logging
from enum import StrEnum
from typing import Awaitable, Callable, Optional

from .models import GitLog

log = logging.getLogger(__name__)

FetchPage = Callable[[Optional[int]], Awaitable[Optional[GitLog]]]


class CacheState(StrEnum):
    ABSENT = "absent"
    FETCHING = "fetching"
    PRESENT = "present"


class PaginatedLogCache:
    """Single-flight, paginated cache for one log range.

    Args:
        fetch_page: Loads the first page for a given limit. None when the
            owner has no delta to show; get() then returns None without
            fetching.
        default_limit: Returns the configured first-page size, used while
            `limit` is None.
        page_limit: Returns the configured load-more page size.
        limit: Initial pagination cursor.
        on_loaded: Called once with the new log after each load_more()
            that changed the cache.
    """

    def __init__(
        self,
        fetch_page: Optional[FetchPage],
        *,
        default_limit: Callable[[], Optional[int]],
        page_limit: Callable[[], Optional[int]],
        limit: Optional[int] = None,
        on_loaded: Optional[Callable[[GitLog], None]] = None,
    ) -> None:
        self._fetch_page = fetch_page
        self._default_limit = default_limit
        self._page_limit = page_limit
        self._on_loaded = on_loaded
        self.limit = limit

        self._log: Optional[GitLog] = None
        self._pending: Optional[asyncio.Future] = None
        self._pending_more: Optional[asyncio.Future] = None
        self._generation = 0
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CacheState:
        if self._log is not None:
            return CacheState.PRESENT
        if self._pending is not None:
            return CacheState.FETCHING
        return CacheState.ABSENT

    @property
    def has_more(self) -> bool:
        """Whether more commits may exist. True until a page is cached."""
        if self._log is None:
            return True
        return self._log.has_more

    @property
    def current(self) -> Optional[GitLog]:
        return self._log

    async def get(self) -> Optional[GitLog]:
        """Return the cached log, fetching the first page if needed.

        Raises:
            FetchFailed: If the fetch fails. The cache stays ABSENT.
        """
        if self._fetch_page is None:
            return None
        if self._log is not None:
            return self._log

        if self._pending is None:
            limit = self.limit if self.limit is not None else self._default_limit()
            log.debug(f"Fetching first log page (limit={limit})")
            self._pending = asyncio.ensure_future(self._fetch(limit, self._generation))
        return await asyncio.shield(self._pending)

    async def _fetch(self, limit: Optional[int], generation: int) -> Optional[GitLog]:
        try:
            result = await self._fetch_page(limit)
        finally:
            if generation == self._generation:
                self._pending = None

        if generation != self._generation:
            log.debug("Discarding log page fetched before the cache was invalidated")
            return result

        self._log = result
        return result

    def invalidate(self) -> None:
        """Drop the cached log. A fetch still in flight will not be stored."""
        self._generation += 1
        self._log = None
        self._pending = None

    async def reset(self) -> None:
        """Invalidate once any in-flight load_more() has been applied."""
        async with self._lock:
            self.invalidate()

    async def load_more(self, limit: Optional[int] = None) -> Optional[GitLog]:
        """Extend the cached log by one page.

        Args:
            limit: Page size; defaults to the configured page size.

        Returns:
            The new log, or None when nothing changed (no cached log, no
            more commits, or the continuation returned the same log).

        Raises:
            FetchFailed: If the fetch fails. The cached log is unchanged.
        """
        if self._pending_more is None:
            self._pending_more = asyncio.ensure_future(self._load_more(limit))
        return await asyncio.shield(self._pending_more)

    async def _load_more(self, limit: Optional[int]) -> Optional[GitLog]:
        try:
            async with self._lock:
                generation = self._generation
                current = await self.get()
                if generation != self._generation:
                    log.debug("Discarding first log page fetched before the cache was invalidated")
                    return None
                if current is None or not current.has_more or current.more is None:
                    return None

                page_limit = limit if limit is not None else self._page_limit()
                result = await current.more(page_limit)
                if result is None or result is current:
                    return None

                if generation != self._generation:
                    log.debug("Discarding log page loaded before the cache was invalidated")
                    return None

                self._log = result
                self.limit = result.count
                log.debug(f"Loaded more commits (count={result.count}, has_more={result.has_more})")
        finally:
            self._pending_more = None

        if self._on_loaded is not None:
            self._on_loaded(result)
        return result
