"""Tests for the HTTP actor and object store against a mocked video service."""

from __future__ import annotations

import json
import re

import httpx
import pytest

from keepsake.model import VideoRecord
from keepsake.storage.object import HTTPObjectStore
from keepsake.sync import ActorUnavailable, ExternalBlob, TransportError
from keepsake.sync.backend import HTTPActor

BaseURL = "http://videos.test"

_Chunk = re.compile(r"^/api/blobs/(?P<key>.+)/chunks/(?P<seq>\d+)$")
_Chunks = re.compile(r"^/api/blobs/(?P<key>.+)/chunks$")
_Finalize = re.compile(r"^/api/blobs/(?P<key>.+)/finalize$")
_Blob = re.compile(r"^/api/blobs/(?P<key>.+)$")


class FakeService(object):
    """Just enough of the video service API to exercise the client."""

    def __init__(self) -> None:
        self.records: list[dict[str, object]] = []
        self.chunks: dict[str, dict[int, bytes]] = {}
        self.objects: dict[str, bytes] = {}
        self.requests: list[tuple[str, str]] = []
        self.healthy = True
        self.fail_chunk: int | None = None
        self.fail_record = False
        self.fail_list = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append((request.method, path))

        if path == "/api/health":
            return httpx.Response(200 if self.healthy else 503, json={"status": "ok"})

        if path == "/api/videos":
            if request.method == "GET":
                if self.fail_list:
                    return httpx.Response(500)
                return httpx.Response(200, json=self.records)
            if self.fail_record:
                return httpx.Response(500)
            self.records.append(json.loads(request.content))
            return httpx.Response(201)

        if m := _Chunk.match(path):
            seq = int(m["seq"])
            if seq == self.fail_chunk:
                return httpx.Response(502)
            staged = self.chunks.setdefault(m["key"], {})
            staged[seq] = request.content
            return httpx.Response(
                200, json={"sequence": seq, "size": len(request.content), "total_chunks": len(staged)}
            )

        if m := _Chunks.match(path):
            staged = self.chunks.get(m["key"])
            if staged is None:
                return httpx.Response(404)
            if request.method == "DELETE":
                del self.chunks[m["key"]]
                return httpx.Response(200, json={"discarded": len(staged)})
            return httpx.Response(200, json={"count": len(staged)})

        if m := _Finalize.match(path):
            body = json.loads(request.content)
            staged = self.chunks.pop(m["key"])
            data = b"".join(staged[i] for i in sorted(staged))
            self.objects[body["final_key"]] = data
            return httpx.Response(
                200,
                json={
                    "url": f"{BaseURL}/media/{body['final_key']}",
                    "total_size": len(data),
                    "chunks_assembled": len(staged),
                    "content_type": body["content_type"],
                },
            )

        if (m := _Blob.match(path)) and request.method == "DELETE":
            if self.objects.pop(m["key"], None) is None:
                return httpx.Response(404)
            return httpx.Response(204)

        return httpx.Response(404)


@pytest.fixture
def service() -> FakeService:
    return FakeService()


async def connect(service: FakeService) -> HTTPActor:
    return await HTTPActor.connect(base_url=BaseURL, transport=httpx.MockTransport(service))


class TestHTTPActor(object):
    @pytest.mark.anyio
    async def test_unhealthy_service_is_unavailable(self, service: FakeService) -> None:
        service.healthy = False

        with pytest.raises(ActorUnavailable):
            await connect(service)

    @pytest.mark.anyio
    async def test_list_videos(self, service: FakeService) -> None:
        service.records.append(
            VideoRecord(title="Beach Day", upload_date=5, file_size=10, video_url=f"{BaseURL}/media/a.mp4").model_dump(
                mode="json"
            )
        )
        actor = await connect(service)

        videos = await actor.list_videos()

        assert [v.title for v in videos] == ["Beach Day"]
        assert videos[0].video.get_direct_url() == f"{BaseURL}/media/a.mp4"
        await actor.aclose()

    @pytest.mark.anyio
    async def test_list_failure_is_transport_error(self, service: FakeService) -> None:
        service.fail_list = True
        actor = await connect(service)

        with pytest.raises(TransportError):
            await actor.list_videos()
        await actor.aclose()

    @pytest.mark.anyio
    async def test_malformed_listing_is_transport_error(self, service: FakeService) -> None:
        service.records.append({"title": "", "upload_date": "yesterday"})
        actor = await connect(service)

        with pytest.raises(TransportError):
            await actor.list_videos()
        await actor.aclose()

    @pytest.mark.anyio
    async def test_upload_sends_chunks_then_metadata(self, service: FakeService) -> None:
        actor = await connect(service)
        blob = ExternalBlob.from_bytes(b"0123456789", content_type="video/mp4", chunk_size=4)

        await actor.upload_video("First Dance", 7, blob, 10)

        assert len(service.records) == 1
        record = VideoRecord.model_validate(service.records[0])
        assert (record.title, record.upload_date, record.file_size) == ("First Dance", 7, 10)
        assert record.video_url == blob.get_direct_url()
        assert list(service.objects.values()) == [b"0123456789"]
        puts = [path for method, path in service.requests if method == "PUT"]
        assert len(puts) == 3
        await actor.aclose()

    @pytest.mark.anyio
    async def test_failed_chunk_discards_and_records_nothing(self, service: FakeService) -> None:
        service.fail_chunk = 1
        actor = await connect(service)

        with pytest.raises(TransportError):
            await actor.upload_video("Beach", 1, ExternalBlob.from_bytes(b"0123456789", chunk_size=4), 10)

        assert service.records == []
        assert service.chunks == {}
        assert service.objects == {}
        await actor.aclose()

    @pytest.mark.anyio
    async def test_failed_metadata_write_deletes_blob(self, service: FakeService) -> None:
        service.fail_record = True
        actor = await connect(service)

        with pytest.raises(TransportError):
            await actor.upload_video("Beach", 1, ExternalBlob.from_bytes(b"abc", content_type="video/mp4"), 3)

        assert service.objects == {}
        assert any(m == "DELETE" and not p.endswith("/chunks") for m, p in service.requests)
        await actor.aclose()


class TestHTTPObjectStore(object):
    @pytest.mark.anyio
    async def test_missing_chunks(self, service: FakeService) -> None:
        async with httpx.AsyncClient(base_url=BaseURL, transport=httpx.MockTransport(service)) as client:
            store = HTTPObjectStore(client)

            assert await store.get_chunk_count("videos/none.mp4") == 0
            assert await store.discard_chunks("videos/none.mp4") == 0
            assert not await store.delete("videos/none.mp4")

    def test_get_url(self) -> None:
        store = HTTPObjectStore(httpx.AsyncClient(base_url=BaseURL))

        assert store.get_url("videos/a.mp4") == f"{BaseURL}/api/blobs/videos/a.mp4"
