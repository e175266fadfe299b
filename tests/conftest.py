"""Pytest fixtures for keepsake tests.

Async tests run on asyncio through the anyio pytest plugin. Remote calls are
served by `FakeActor`, an in-memory stand-in for the video service whose
calls can be counted, failed, or held open to observe in-flight state.
"""

from __future__ import annotations

import asyncio
import datetime
import typing as t
from pathlib import Path

import pydantic as p
import pytest

import keepsake
from keepsake.core import TimestampProvider
from keepsake.model import VideoMetadata, VideoRecord
from keepsake.storage.catalog import VideoCatalog
from keepsake.storage.object import LocalObjectStore
from keepsake.sync import ActorHandle, ExternalBlob, QueryCache, TransportError
from keepsake.sync.backend import LocalActor

Now = datetime.datetime(2024, 6, 15, 12, 0, tzinfo=datetime.UTC)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def utcnow() -> TimestampProvider:
    return lambda: Now


@pytest.fixture
def store(tmp_path: Path) -> LocalObjectStore:
    return LocalObjectStore(tmp_path / "objects")


@pytest.fixture
def catalog(tmp_path: Path) -> VideoCatalog:
    return VideoCatalog(tmp_path / "catalog.json")


@pytest.fixture
def cache() -> QueryCache:
    return QueryCache()


class FakeActor(object):
    """In-memory video service.

    `list_gate` and `upload_gate`, when set, hold every list or upload call
    open until the test sets the event. `fail_list` / `fail_upload` make the
    next calls raise.
    """

    def __init__(self, videos: t.Sequence[VideoMetadata] = ()) -> None:
        self.videos: list[VideoMetadata] = list(videos)
        self.list_calls = 0
        self.upload_calls: list[tuple[str, int, int]] = []
        self.blobs: list[ExternalBlob] = []
        self.list_gate: asyncio.Event | None = None
        self.upload_gate: asyncio.Event | None = None
        self.fail_list = False
        self.fail_upload = False

    async def list_videos(self) -> list[VideoMetadata]:
        self.list_calls += 1
        if self.list_gate is not None:
            await self.list_gate.wait()
        if self.fail_list:
            raise TransportError("service unavailable")
        return list(self.videos)

    async def upload_video(self, title: str, upload_date: int, blob: ExternalBlob, file_size: int) -> None:
        self.upload_calls.append((title, upload_date, file_size))
        self.blobs.append(blob)
        if self.upload_gate is not None:
            await self.upload_gate.wait()
        if self.fail_upload:
            raise TransportError("upload rejected")
        self.videos.append(
            VideoMetadata(
                title=title,
                upload_date=upload_date,
                file_size=file_size,
                video=ExternalBlob.from_url(f"https://videos.example/{len(self.videos)}"),
            )
        )


def make_video(title: str, file_size: int = 1024, upload_date: int = 1_700_000_000_000_000_000) -> VideoMetadata:
    return VideoRecord(
        title=title, upload_date=upload_date, file_size=file_size, video_url=f"https://videos.example/{title}"
    ).to_metadata()


@pytest.fixture
def actor() -> FakeActor:
    return FakeActor([make_video("Beach Day"), make_video("Birthday")])


@pytest.fixture
def handle(actor: FakeActor) -> ActorHandle:
    return ActorHandle.connected(actor)


@pytest.fixture
def local_actor_factory(
    store: LocalObjectStore, catalog: VideoCatalog
) -> t.Callable[[], t.Awaitable[LocalActor]]:
    async def factory() -> LocalActor:
        return await LocalActor.connect(store=store, catalog=catalog)

    return factory


@pytest.fixture
def video_factory() -> t.Callable[..., VideoMetadata]:
    return make_video


@pytest.fixture
def actor_factory() -> type[FakeActor]:
    return FakeActor


@pytest.fixture
def config_root() -> p.FileUrl:
    root = Path(keepsake.__file__).resolve().parents[1]
    return p.FileUrl(f"file://{root}/config")


@pytest.fixture
def state_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "state"
    monkeypatch.setenv("XDG_STATE_HOME", str(path))
    return path
