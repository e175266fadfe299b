"""Blob upload adapter: turns a local byte buffer into a stored blob reference."""

from __future__ import annotations

import io
import logging
import mimetypes
import typing as t

import shortuuid

from .errors import TransportError, ValidationError

if t.TYPE_CHECKING:
    from keepsake.storage.object import ObjectStore

logger = logging.getLogger(__name__)

ProgressObserver = t.Callable[[int], None]


def new_blob_key(content_type: str, prefix: str = "videos") -> str:
    """Generate a fresh storage key, keeping an extension for the content type."""
    ext = mimetypes.guess_extension(content_type.split(";")[0].strip()) or ""
    return f"{prefix}/{shortuuid.uuid()}{ext}"


class ExternalBlob(object):
    """Reference to binary data held (or about to be held) by the remote store.

    A blob is either *pending*, carrying local bytes that have not been sent,
    or *uploaded*, carrying only the URL the store assigned to it. Pending
    blobs are uploaded by the actor as part of a mutation, never eagerly.
    """

    DefaultChunkSize: t.ClassVar[int] = 1024 * 1024
    DefaultContentType: t.ClassVar[str] = "application/octet-stream"

    def __init__(
        self,
        *,
        data: bytes | None = None,
        url: str | None = None,
        content_type: str = DefaultContentType,
        chunk_size: int = DefaultChunkSize,
        on_progress: ProgressObserver | None = None,
    ) -> None:
        if (data is None) == (url is None):
            raise ValueError("exactly one of data or url is required")
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive: {chunk_size}")
        self._data = data
        self._url = url
        self._content_type = content_type
        self._chunk_size = chunk_size
        self._on_progress = on_progress
        self._last_reported = -1

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        *,
        content_type: str = DefaultContentType,
        chunk_size: int = DefaultChunkSize,
    ) -> ExternalBlob:
        if not data:
            raise ValidationError("cannot create a blob from an empty buffer")
        return cls(data=bytes(data), content_type=content_type, chunk_size=chunk_size)

    @classmethod
    def from_url(cls, url: str, *, content_type: str = DefaultContentType) -> ExternalBlob:
        return cls(url=url, content_type=content_type)

    def with_upload_progress(self, on_progress: ProgressObserver) -> ExternalBlob:
        """Return a copy of this blob that reports upload progress to `on_progress`."""
        if self._data is None:
            return ExternalBlob(url=self._url, content_type=self._content_type, on_progress=on_progress)
        return ExternalBlob(
            data=self._data,
            content_type=self._content_type,
            chunk_size=self._chunk_size,
            on_progress=on_progress,
        )

    @property
    def content_type(self) -> str:
        return self._content_type

    @property
    def size(self) -> int | None:
        return len(self._data) if self._data is not None else None

    @property
    def is_uploaded(self) -> bool:
        return self._url is not None

    def get_direct_url(self) -> str:
        if self._url is None:
            raise RuntimeError("blob has not been uploaded")
        return self._url

    def _report(self, percent: int) -> None:
        if self._on_progress is None or percent <= self._last_reported:
            return
        self._last_reported = percent
        self._on_progress(percent)

    async def upload(self, store: ObjectStore, key: str) -> str:
        """Send the blob to `store` under `key` and return its direct URL.

        Chunks are staged under the key and assembled only after the last one
        arrives. Progress is reported as 0 first, then capped at 99 while
        chunks are in flight, and 100 once the object is finalized.

        Raises:
            TransportError: If any chunk or the finalize step fails. Staged
                chunks are discarded before the error propagates.
        """
        if self._url is not None:
            return self._url
        assert self._data is not None

        total = len(self._data)
        sent = 0
        self._last_reported = -1
        self._report(0)
        try:
            for sequence, offset in enumerate(range(0, total, self._chunk_size)):
                part = self._data[offset : offset + self._chunk_size]
                await store.upload_chunk(key, sequence, io.BytesIO(part), self._content_type)
                sent += len(part)
                self._report(min(99, sent * 100 // total))
            result = await store.finalize_chunks(key, key, self._content_type)
        except Exception as e:
            logger.warning(
                "blob upload failed",
                extra={
                    "key": key,
                    "sent": sent,
                    "total": total,
                    "error": str(e),
                },
            )
            try:
                await store.discard_chunks(key)
            except Exception:
                logger.exception("failed to discard staged chunks", extra={"key": key})
            raise TransportError(f"blob upload failed: {e!s}") from e

        self._url = result.url
        self._report(100)
        logger.debug(
            "blob uploaded",
            extra={
                "key": key,
                "size": result.total_size,
                "chunks": result.chunks_assembled,
            },
        )
        return self._url

    def __repr__(self) -> str:
        if self._url is not None:
            return f"<ExternalBlob url={self._url!r}>"
        return f"<ExternalBlob pending size={self.size}>"
