"""Object store that stages chunks on a remote blob service over HTTP."""

from __future__ import annotations

import typing as t

import httpx

from .store import ChunkUploadResult, FinalizeResult, ObjectStore

if t.TYPE_CHECKING:
    from typing import BinaryIO


class HTTPObjectStore(ObjectStore):
    """Chunked object storage backed by the service's blob endpoints.

    The client is owned by the caller; this store never closes it.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    def get_url(self, key: str) -> str:
        return str(self._client.base_url.join(f"/api/blobs/{key}"))

    async def upload_chunk(
        self,
        key_prefix: str,
        sequence: int,
        file: BinaryIO,
        content_type: str = "application/octet-stream",
    ) -> ChunkUploadResult:
        resp = await self._client.put(
            f"/api/blobs/{key_prefix}/chunks/{sequence}",
            content=file.read(),
            headers={"content-type": "application/octet-stream", "x-object-content-type": content_type},
        )
        resp.raise_for_status()
        return ChunkUploadResult.model_validate(resp.json())

    async def get_chunk_count(self, key_prefix: str) -> int:
        resp = await self._client.get(f"/api/blobs/{key_prefix}/chunks")
        if resp.status_code == httpx.codes.NOT_FOUND:
            return 0
        resp.raise_for_status()
        return int(resp.json()["count"])

    async def finalize_chunks(
        self,
        key_prefix: str,
        final_key: str,
        content_type: str = "application/octet-stream",
    ) -> FinalizeResult:
        resp = await self._client.post(
            f"/api/blobs/{key_prefix}/finalize",
            json={"final_key": final_key, "content_type": content_type},
        )
        resp.raise_for_status()
        return FinalizeResult.model_validate(resp.json())

    async def discard_chunks(self, key_prefix: str) -> int:
        resp = await self._client.delete(f"/api/blobs/{key_prefix}/chunks")
        if resp.status_code == httpx.codes.NOT_FOUND:
            return 0
        resp.raise_for_status()
        return int(resp.json().get("discarded", 0))

    async def delete(self, key: str) -> bool:
        resp = await self._client.delete(f"/api/blobs/{key}")
        if resp.status_code == httpx.codes.NOT_FOUND:
            return False
        resp.raise_for_status()
        return True
