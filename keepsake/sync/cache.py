"""Keyed cache of remote read results with de-duplication and invalidation."""

from __future__ import annotations

import asyncio
import datetime
import logging
import typing as t

logger = logging.getLogger(__name__)

Fetcher = t.Callable[[], t.Awaitable[t.Any]]
EntryListener = t.Callable[["CacheEntry"], None]


class CacheEntry(object):
    """State of a single cache key.

    `generation` is bumped by every invalidation. A fetch records the
    generation it started under; if the entry was invalidated meanwhile, the
    result is stored but the entry stays stale.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        self.data: t.Any | None = None
        self.error: BaseException | None = None
        self.stale = False
        self.generation = 0
        self.updated_at: datetime.datetime | None = None
        self.fetcher: Fetcher | None = None
        self.task: asyncio.Task[t.Any] | None = None
        self.listeners: list[EntryListener] = []

    @property
    def has_data(self) -> bool:
        return self.updated_at is not None

    @property
    def is_fetching(self) -> bool:
        return self.task is not None

    @property
    def is_fresh(self) -> bool:
        return self.has_data and not self.stale

    def __repr__(self) -> str:
        return (
            f"<CacheEntry {self.key!r} generation={self.generation} stale={self.stale} "
            f"fetching={self.is_fetching} error={self.error!r}>"
        )


class QueryCache(object):
    """Cache of the last-known result for each query key.

    Reads for a key that is already being fetched join the in-flight fetch
    instead of issuing another remote call. Invalidation is lazy for keys
    nobody observes and eager (immediate re-fetch) for keys with subscribers.

    The cache is constructed explicitly and passed to the queries and
    mutations that share it.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._background: set[asyncio.Task[t.Any]] = set()

    def entry(self, key: str) -> CacheEntry:
        if key not in self._entries:
            self._entries[key] = CacheEntry(key)
        return self._entries[key]

    def get(self, key: str) -> t.Any | None:
        entry = self._entries.get(key)
        return entry.data if entry is not None else None

    def keys(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def subscribe(self, key: str, listener: EntryListener) -> t.Callable[[], None]:
        entry = self.entry(key)
        entry.listeners.append(listener)

        def unsubscribe() -> None:
            if listener in entry.listeners:
                entry.listeners.remove(listener)

        return unsubscribe

    def _notify(self, entry: CacheEntry) -> None:
        for listener in list(entry.listeners):
            listener(entry)

    async def fetch(self, key: str, fetcher: Fetcher, *, force: bool = False) -> t.Any:
        """Return data for `key`, fetching it if it is missing or stale.

        Args:
            key: Cache key.
            fetcher: Coroutine function that performs the remote read.
            force: Fetch even if the cached value is fresh.

        Raises:
            Whatever `fetcher` raised, if this read started or joined a failed fetch.
        """
        entry = self.entry(key)
        entry.fetcher = fetcher

        if entry.task is None:
            if entry.is_fresh and not force:
                return entry.data
            entry.task = asyncio.create_task(self._run(entry, fetcher))
            self._notify(entry)
            logger.debug("fetching", extra={"key": key, "generation": entry.generation})
        else:
            logger.debug("joining in-flight fetch", extra={"key": key})

        # readers are shielded so one cancelled reader cannot cancel a shared fetch
        return await asyncio.shield(entry.task)

    async def _run(self, entry: CacheEntry, fetcher: Fetcher) -> t.Any:
        generation = entry.generation
        try:
            data = await fetcher()
        except Exception as e:
            entry.error = e
            entry.task = None
            logger.warning("fetch failed", extra={"key": entry.key, "error": str(e)})
            self._notify(entry)
            if entry.generation != generation:
                self._refetch_if_observed(entry)
            raise

        entry.data = data
        entry.error = None
        entry.updated_at = datetime.datetime.now(datetime.UTC)
        entry.stale = entry.generation != generation
        entry.task = None
        self._notify(entry)
        if entry.stale:
            self._refetch_if_observed(entry)
        return data

    def invalidate(self, key: str) -> None:
        """Mark `key` stale so the next read re-executes its fetch.

        Subscribed keys are re-fetched immediately; if a fetch is already in
        flight, the re-fetch starts as soon as it completes.
        """
        entry = self.entry(key)
        entry.stale = True
        entry.generation += 1
        logger.debug(
            "invalidated",
            extra={
                "key": key,
                "generation": entry.generation,
                "subscribers": len(entry.listeners),
            },
        )
        self._notify(entry)
        if entry.task is None:
            self._refetch_if_observed(entry)

    def _refetch_if_observed(self, entry: CacheEntry) -> None:
        if not entry.listeners or entry.fetcher is None or entry.task is not None:
            return
        self.spawn(self.fetch(entry.key, entry.fetcher))

    def spawn(self, coro: t.Coroutine[t.Any, t.Any, t.Any]) -> asyncio.Task[t.Any]:
        """Run `coro` in the background; failures are logged, not raised."""
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._reap)
        return task

    def _reap(self, task: asyncio.Task[t.Any]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        if (e := task.exception()) is not None:
            # errors are already recorded on the entry that failed
            logger.debug("background task failed", extra={"error": str(e)})

    async def settle(self) -> None:
        """Wait until all background fetches have finished."""
        while self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
