"""Tests for keepsake.sync.query."""

from __future__ import annotations

import asyncio
import typing as t

import pytest

from keepsake.model import QueryStatus, VideoMetadata
from keepsake.sync import ActorHandle, ActorUnavailable, ListVideosQuery, QueryCache, TransportError

if t.TYPE_CHECKING:
    from conftest import FakeActor


class TestDisabled(object):
    """The query defers while the actor handle is unavailable."""

    @pytest.mark.anyio
    async def test_read_without_actor_makes_no_call(self, cache: QueryCache) -> None:
        query = ListVideosQuery(ActorHandle(), cache)

        assert await query.read() is None
        assert query.status is QueryStatus.Disabled
        assert query.is_loading
        assert query.error is None

    @pytest.mark.anyio
    async def test_unavailable_actor_is_not_an_error(self, cache: QueryCache) -> None:
        async def never_ready() -> t.Any:
            raise ActorUnavailable("still starting")

        handle = ActorHandle(never_ready)
        query = ListVideosQuery(handle, cache)
        query.observe()

        with pytest.raises(ActorUnavailable):
            await handle.connect()
        await cache.settle()

        assert query.status is QueryStatus.Disabled
        assert query.error is None
        assert query.data is None

    @pytest.mark.anyio
    async def test_disabled_while_connecting(self, cache: QueryCache, actor: FakeActor) -> None:
        gate = asyncio.Event()

        async def slow() -> FakeActor:
            await gate.wait()
            return actor

        handle = ActorHandle(slow)
        query = ListVideosQuery(handle, cache)
        connecting = asyncio.create_task(handle.connect())
        await asyncio.sleep(0)

        assert handle.is_fetching
        assert not query.enabled
        assert await query.read() is None

        gate.set()
        await connecting
        assert query.enabled

    @pytest.mark.anyio
    async def test_observer_fetches_once_actor_connects(self, cache: QueryCache, actor: FakeActor) -> None:
        async def factory() -> FakeActor:
            return actor

        handle = ActorHandle(factory)
        query = ListVideosQuery(handle, cache)
        statuses: list[QueryStatus] = []
        query.observe(lambda q: statuses.append(q.status))

        await handle.connect()
        await cache.settle()

        assert actor.list_calls == 1
        assert query.status is QueryStatus.Success
        assert [v.title for v in query.data or ()] == ["Beach Day", "Birthday"]
        assert QueryStatus.Loading in statuses


class TestRead(object):
    """Tests for ListVideosQuery.read()."""

    @pytest.mark.anyio
    async def test_read_returns_collection(self, handle: ActorHandle, cache: QueryCache) -> None:
        query = ListVideosQuery(handle, cache)

        videos = await query.read()

        assert videos is not None
        assert all(isinstance(v, VideoMetadata) for v in videos)
        assert query.status is QueryStatus.Success
        assert not query.is_loading

    @pytest.mark.anyio
    async def test_concurrent_reads_are_deduplicated(
        self, handle: ActorHandle, actor: FakeActor, cache: QueryCache
    ) -> None:
        actor.list_gate = asyncio.Event()
        first, second = ListVideosQuery(handle, cache), ListVideosQuery(handle, cache)

        reads = [asyncio.create_task(first.read()), asyncio.create_task(second.read())]
        await asyncio.sleep(0)
        assert first.status is QueryStatus.Loading
        actor.list_gate.set()
        a, b = await asyncio.gather(*reads)

        assert a is b
        assert actor.list_calls == 1

    @pytest.mark.anyio
    async def test_success_replaces_prior_collection(
        self, handle: ActorHandle, actor: FakeActor, cache: QueryCache, video_factory: t.Callable[..., VideoMetadata]
    ) -> None:
        query = ListVideosQuery(handle, cache)
        await query.read()
        actor.videos = [video_factory("Graduation")]

        videos = await query.refetch()

        assert [v.title for v in videos or ()] == ["Graduation"]

    @pytest.mark.anyio
    async def test_error_keeps_last_known_data(
        self, handle: ActorHandle, actor: FakeActor, cache: QueryCache
    ) -> None:
        query = ListVideosQuery(handle, cache)
        before = await query.read()
        actor.fail_list = True

        with pytest.raises(TransportError):
            await query.refetch()

        assert query.status is QueryStatus.Error
        assert isinstance(query.error, TransportError)
        assert query.data is before

    @pytest.mark.anyio
    async def test_first_fetch_error(self, handle: ActorHandle, actor: FakeActor, cache: QueryCache) -> None:
        actor.fail_list = True
        query = ListVideosQuery(handle, cache)

        with pytest.raises(TransportError):
            await query.read()

        assert query.status is QueryStatus.Error
        assert query.data is None

    @pytest.mark.anyio
    async def test_unexpected_failure_becomes_transport_error(self, cache: QueryCache) -> None:
        class Broken(object):
            async def list_videos(self) -> list[VideoMetadata]:
                raise RuntimeError("socket closed")

            async def upload_video(self, *args: t.Any) -> None: ...

        query = ListVideosQuery(ActorHandle.connected(Broken()), cache)

        with pytest.raises(TransportError, match="socket closed"):
            await query.read()

    @pytest.mark.anyio
    async def test_invalidation_refetches_observed_query(
        self, handle: ActorHandle, actor: FakeActor, cache: QueryCache, video_factory: t.Callable[..., VideoMetadata]
    ) -> None:
        query = ListVideosQuery(handle, cache)
        stop = query.observe()
        await cache.settle()
        actor.videos.append(video_factory("Anniversary"))

        cache.invalidate(ListVideosQuery.Key)
        await cache.settle()

        assert actor.list_calls == 2
        assert len(query.data or ()) == 3
        stop()
