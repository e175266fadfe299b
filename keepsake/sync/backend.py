"""Remote actor implementations: a store-backed local service and an HTTP client."""

from __future__ import annotations

import logging
import typing as t

import httpx
import pydantic as p

from keepsake.model import VideoMetadata, VideoRecord
from keepsake.storage.object import HTTPObjectStore

from .blob import new_blob_key
from .errors import ActorUnavailable, TransportError, ValidationError

if t.TYPE_CHECKING:
    from keepsake.storage.catalog import VideoCatalog
    from keepsake.storage.object import ObjectStore

    from .blob import ExternalBlob

logger = logging.getLogger(__name__)

_Records = p.TypeAdapter(list[VideoRecord])


def _check_upload(title: str, blob: ExternalBlob, file_size: int) -> None:
    if not title.strip():
        raise ValidationError("title must not be empty")
    if file_size < 0:
        raise ValidationError(f"invalid file size: {file_size}")
    if blob.is_uploaded:
        raise ValidationError("blob was already uploaded")


class LocalActor(object):
    """Video service backed directly by an object store and a catalog."""

    def __init__(self, store: ObjectStore, catalog: VideoCatalog) -> None:
        self._store = store
        self._catalog = catalog

    @classmethod
    async def connect(cls, *, store: ObjectStore, catalog: VideoCatalog) -> LocalActor:
        try:
            await catalog.load()
        except (OSError, p.ValidationError) as e:
            raise ActorUnavailable(f"could not load video catalog: {e!s}") from e
        return cls(store, catalog)

    async def list_videos(self) -> list[VideoMetadata]:
        return [r.to_metadata() for r in self._catalog.records()]

    async def upload_video(self, title: str, upload_date: int, blob: ExternalBlob, file_size: int) -> None:
        _check_upload(title, blob, file_size)
        key = new_blob_key(blob.content_type)
        url = await blob.upload(self._store, key)

        record = VideoRecord(title=title, upload_date=upload_date, file_size=file_size, video_url=url)
        try:
            await self._catalog.append(record)
        except Exception as e:
            # the blob must not outlive a failed metadata write
            await self._store.delete(key)
            raise TransportError(f"could not record video metadata: {e!s}") from e

        logger.info(
            "stored video",
            extra={
                "title": title,
                "key": key,
                "file_size": file_size,
            },
        )


class HTTPActor(object):
    """Async client for the video service HTTP API."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client
        self._store = HTTPObjectStore(client)

    @classmethod
    async def connect(
        cls,
        *,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> HTTPActor:
        """Open a client and check that the service answers its health endpoint."""
        client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        try:
            resp = await client.get("/api/health")
            resp.raise_for_status()
        except httpx.HTTPError as e:
            await client.aclose()
            raise ActorUnavailable(f"video service at {base_url} is not reachable: {e!s}") from e
        return cls(client)

    async def list_videos(self) -> list[VideoMetadata]:
        try:
            resp = await self._client.get("/api/videos")
            resp.raise_for_status()
            records = _Records.validate_json(resp.content)
        except (httpx.HTTPError, p.ValidationError) as e:
            raise TransportError(f"could not list videos: {e!s}") from e
        return [r.to_metadata() for r in records]

    async def upload_video(self, title: str, upload_date: int, blob: ExternalBlob, file_size: int) -> None:
        _check_upload(title, blob, file_size)
        key = new_blob_key(blob.content_type)
        url = await blob.upload(self._store, key)

        record = VideoRecord(title=title, upload_date=upload_date, file_size=file_size, video_url=url)
        try:
            resp = await self._client.post("/api/videos", json=record.model_dump(mode="json"))
            resp.raise_for_status()
        except httpx.HTTPError as e:
            try:
                await self._store.delete(key)
            except httpx.HTTPError:
                logger.exception("failed to delete orphaned blob", extra={"key": key})
            raise TransportError(f"could not record video metadata: {e!s}") from e

    async def aclose(self) -> None:
        await self._client.aclose()
