"""Remote actor contract and the lazily-connected handle that supplies it."""

from __future__ import annotations

import asyncio
import logging
import typing as t

from keepsake.lib.sentinel import NotReady

from .errors import ActorUnavailable

if t.TYPE_CHECKING:
    from keepsake.model import VideoMetadata

    from .blob import ExternalBlob

logger = logging.getLogger(__name__)


class RemoteActor(t.Protocol):
    """The two operations the video service exposes.

    Both are fallible; implementations raise TransportError for network or
    service failures.
    """

    async def list_videos(self) -> t.Sequence[VideoMetadata]:
        """Return the full video collection. Idempotent, unpaginated."""
        ...

    async def upload_video(self, title: str, upload_date: int, blob: ExternalBlob, file_size: int) -> None:
        """Store `blob` and append its metadata to the collection.

        Args:
            title: Trimmed, non-empty title.
            upload_date: Client-assigned timestamp, nanoseconds since the epoch.
            blob: Pending blob; uploaded as part of this call.
            file_size: Byte count reported by the client.
        """
        ...


ActorFactory = t.Callable[[], t.Awaitable[RemoteActor]]
HandleListener = t.Callable[["ActorHandle"], None]


class ActorHandle(object):
    """Possibly-absent connection to the video service.

    The actor is built on first `connect()` from an async factory. Until then,
    and after a failed attempt, the handle is unavailable; while the factory
    runs it is connecting (`is_fetching`). Neither condition is an error for
    readers, which simply defer.
    """

    def __init__(self, factory: ActorFactory | None = None) -> None:
        self._factory = factory
        self._actor: RemoteActor | NotReady = NotReady()
        self._connecting: asyncio.Future[RemoteActor] | None = None
        self._listeners: list[HandleListener] = []

    @classmethod
    def connected(cls, actor: RemoteActor) -> ActorHandle:
        """Create a handle around an actor that is already live."""
        handle = cls()
        handle._actor = actor
        return handle

    @property
    def actor(self) -> RemoteActor | None:
        return None if isinstance(self._actor, NotReady) else self._actor

    @property
    def is_fetching(self) -> bool:
        return self._connecting is not None

    @property
    def is_available(self) -> bool:
        return self.actor is not None and not self.is_fetching

    def require(self) -> RemoteActor:
        actor = self.actor
        if actor is None:
            raise ActorUnavailable("not connected to the video service")
        return actor

    def subscribe(self, listener: HandleListener) -> t.Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    async def connect(self) -> RemoteActor:
        """Connect if necessary and return the live actor.

        Concurrent callers share a single connection attempt.

        Raises:
            ActorUnavailable: If the factory is missing or fails.
        """
        if (actor := self.actor) is not None:
            return actor

        if self._connecting is None:
            if self._factory is None:
                raise ActorUnavailable("no actor factory configured")
            self._connecting = asyncio.ensure_future(self._connect(self._factory))
            self._notify()

        return await asyncio.shield(self._connecting)

    async def _connect(self, factory: ActorFactory) -> RemoteActor:
        logger.debug("connecting to video service")
        try:
            actor = await factory()
        except ActorUnavailable as e:
            logger.warning("video service unavailable", extra={"error": str(e)})
            self._connecting = None
            self._notify()
            raise
        except Exception as e:
            logger.warning("video service connection failed", extra={"error": str(e)})
            self._connecting = None
            self._notify()
            raise ActorUnavailable(f"could not connect to the video service: {e!s}") from e

        self._actor = actor
        self._connecting = None
        logger.info("connected to video service", extra={"actor": type(actor).__name__})
        self._notify()
        return actor

    async def aclose(self) -> None:
        actor = self.actor
        self._actor = NotReady()
        if actor is not None:
            aclose = getattr(actor, "aclose", None)
            if aclose is not None:
                await aclose()
            self._notify()
