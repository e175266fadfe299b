"""Read side: the video list query."""

from __future__ import annotations

import logging
import typing as t

from keepsake.model.enum import QueryStatus

from .errors import KeepsakeError, TransportError

if t.TYPE_CHECKING:
    from keepsake.model import VideoMetadata

    from .actor import ActorHandle
    from .cache import CacheEntry, QueryCache

logger = logging.getLogger(__name__)

QueryListener = t.Callable[["ListVideosQuery"], None]


class ListVideosQuery(object):
    """Current video collection as (data, status, error) state.

    The query is enabled only while the actor handle holds a live actor and
    is not connecting; while disabled, reads are deferred rather than failed.
    A failed fetch keeps the last successful collection available as `data`.
    """

    Key: t.ClassVar[str] = "videos"

    def __init__(self, handle: ActorHandle, cache: QueryCache) -> None:
        self._handle = handle
        self._cache = cache
        self._listeners: list[QueryListener] = []
        self._unsubscribe: list[t.Callable[[], None]] = []

    @property
    def enabled(self) -> bool:
        return self._handle.actor is not None and not self._handle.is_fetching

    @property
    def _entry(self) -> CacheEntry:
        return self._cache.entry(self.Key)

    @property
    def data(self) -> tuple[VideoMetadata, ...] | None:
        return self._cache.get(self.Key)

    @property
    def error(self) -> BaseException | None:
        return self._entry.error

    @property
    def status(self) -> QueryStatus:
        entry = self._entry
        if not self.enabled and not entry.has_data and entry.error is None and not entry.is_fetching:
            return QueryStatus.Disabled
        if entry.is_fetching:
            return QueryStatus.Loading
        if entry.error is not None:
            return QueryStatus.Error
        if entry.has_data:
            return QueryStatus.Success
        # enabled, first fetch not started yet
        return QueryStatus.Loading

    @property
    def is_loading(self) -> bool:
        """True while there is nothing to show yet."""
        return self.status in (QueryStatus.Disabled, QueryStatus.Loading) and not self._entry.has_data

    @property
    def is_fetching(self) -> bool:
        return self._entry.is_fetching

    async def _fetch(self) -> tuple[VideoMetadata, ...]:
        actor = self._handle.require()
        try:
            videos = await actor.list_videos()
        except KeepsakeError:
            raise
        except Exception as e:
            raise TransportError(f"could not list videos: {e!s}") from e
        return tuple(videos)

    async def read(self) -> tuple[VideoMetadata, ...] | None:
        """Return the collection, fetching if it is missing or stale.

        Returns None without a remote call while the query is disabled.

        Raises:
            TransportError: If the fetch this read started or joined failed.
        """
        if not self.enabled:
            logger.debug("video list deferred: actor unavailable")
            return None
        return await self._cache.fetch(self.Key, self._fetch)

    async def refetch(self) -> tuple[VideoMetadata, ...] | None:
        """Fetch even if the cached collection is fresh (user-initiated retry)."""
        if not self.enabled:
            return None
        return await self._cache.fetch(self.Key, self._fetch, force=True)

    def observe(self, listener: QueryListener | None = None) -> t.Callable[[], None]:
        """Make this query an active subscriber of its cache key.

        Active queries fetch as soon as they are enabled and re-fetch
        immediately when their key is invalidated. Returns a callable that
        stops observing.
        """
        if listener is not None:
            self._listeners.append(listener)
        if not self._unsubscribe:
            self._unsubscribe = [
                self._cache.subscribe(self.Key, self._on_entry),
                self._handle.subscribe(self._on_handle),
            ]
            self._cache.entry(self.Key).fetcher = self._fetch
            self._start_if_needed()

        def stop() -> None:
            if listener is not None and listener in self._listeners:
                self._listeners.remove(listener)
            if not self._listeners:
                self.close()

        return stop

    def close(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []

    def _start_if_needed(self) -> None:
        entry = self._entry
        if self.enabled and not entry.is_fresh and not entry.is_fetching:
            self._cache.spawn(self.read())

    def _on_handle(self, _: ActorHandle) -> None:
        self._emit()
        self._start_if_needed()

    def _on_entry(self, _: CacheEntry) -> None:
        self._emit()

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self)

