"""Object storage interface and implementations."""

from __future__ import annotations

import abc
import shutil
import typing as t
from pathlib import Path

import pydantic as p

if t.TYPE_CHECKING:
    from typing import BinaryIO


class ChunkUploadResult(p.BaseModel):
    """Result of a chunk upload operation."""

    model_config = p.ConfigDict(frozen=True)

    # Sequence number of the chunk
    sequence: int

    # Size of this chunk in bytes
    size: int

    # Total number of chunks staged so far
    total_chunks: int


class FinalizeResult(p.BaseModel):
    """Result of finalizing a chunked upload."""

    model_config = p.ConfigDict(frozen=True)

    # The URL to access the assembled object
    url: str

    # Total size of the assembled object in bytes
    total_size: int

    # Number of chunks that were assembled
    chunks_assembled: int

    # Content type of the object
    content_type: str


class ObjectStore(abc.ABC):
    """Abstract base class for chunked object storage.

    Chunks are staged under a key prefix and only become a readable object
    once `finalize_chunks` succeeds. Staged chunks are never addressable by URL.
    """

    @abc.abstractmethod
    async def upload_chunk(
        self,
        key_prefix: str,
        sequence: int,
        file: BinaryIO,
        content_type: str = "application/octet-stream",
    ) -> ChunkUploadResult:
        """Stage a chunk of a multi-part upload.

        Args:
            key_prefix: The prefix for chunk staging (e.g., "videos/{key}").
            sequence: The sequence number of this chunk (0-indexed).
            file: A file-like object containing the chunk data.
            content_type: MIME type of the final assembled object.

        Returns:
            ChunkUploadResult with the sequence and chunk count.
        """
        ...

    @abc.abstractmethod
    async def get_chunk_count(self, key_prefix: str) -> int:
        """Get the number of chunks staged for a key prefix."""
        ...

    @abc.abstractmethod
    async def finalize_chunks(
        self,
        key_prefix: str,
        final_key: str,
        content_type: str = "application/octet-stream",
    ) -> FinalizeResult:
        """Assemble staged chunks into a final object.

        Args:
            key_prefix: The prefix used for chunk staging.
            final_key: The key for the final assembled object.
            content_type: MIME type of the final object.

        Returns:
            FinalizeResult with the URL and metadata of the assembled object.
        """
        ...

    @abc.abstractmethod
    async def discard_chunks(self, key_prefix: str) -> int:
        """Drop all chunks staged under a key prefix.

        Returns:
            Number of chunks discarded.
        """
        ...

    @abc.abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete an object from storage.

        Returns:
            True if deleted, False if not found.
        """
        ...

    @abc.abstractmethod
    def get_url(self, key: str) -> str:
        """Get the URL for an object."""
        ...


class LocalObjectStore(ObjectStore):
    """Local filesystem implementation."""

    def __init__(self, base_path: Path, url_prefix: str | None = None) -> None:
        """Initialize local object store.

        Args:
            base_path: Directory to store objects in.
            url_prefix: URL prefix for accessing objects; defaults to file:// URLs
                under base_path.
        """
        self._base_path = base_path

        # Ensure base directory exists
        self._base_path.mkdir(parents=True, exist_ok=True)

        if url_prefix is None:
            url_prefix = self._base_path.resolve().as_uri()
        self._url_prefix = url_prefix.rstrip("/")

    @property
    def base_path(self) -> Path:
        return self._base_path

    def _chunks_dir(self, key_prefix: str) -> Path:
        return self._base_path / f"{key_prefix}.chunks"

    def get_url(self, key: str) -> str:
        return f"{self._url_prefix}/{key}"

    async def delete(self, key: str) -> bool:
        file_path = self._base_path / key

        if file_path.exists():
            file_path.unlink()
            return True

        return False

    async def upload_chunk(
        self,
        key_prefix: str,
        sequence: int,
        file: BinaryIO,
        content_type: str = "application/octet-stream",
    ) -> ChunkUploadResult:
        chunks_dir = self._chunks_dir(key_prefix)
        chunks_dir.mkdir(parents=True, exist_ok=True)

        chunk_path = chunks_dir / f"{sequence:06d}.chunk"

        with open(chunk_path, "wb") as dest:
            shutil.copyfileobj(file, dest)

        chunk_size = chunk_path.stat().st_size
        total_chunks = len(list(chunks_dir.glob("*.chunk")))

        return ChunkUploadResult(
            sequence=sequence,
            size=chunk_size,
            total_chunks=total_chunks,
        )

    async def get_chunk_count(self, key_prefix: str) -> int:
        chunks_dir = self._chunks_dir(key_prefix)

        if not chunks_dir.exists():
            return 0

        return len(list(chunks_dir.glob("*.chunk")))

    async def finalize_chunks(
        self,
        key_prefix: str,
        final_key: str,
        content_type: str = "application/octet-stream",
    ) -> FinalizeResult:
        chunks_dir = self._chunks_dir(key_prefix)
        final_path = self._base_path / final_key

        # Get sorted chunk files
        chunk_files = sorted(chunks_dir.glob("*.chunk")) if chunks_dir.exists() else []

        if not chunk_files:
            raise ValueError(f"No chunks found for key_prefix: {key_prefix}")

        final_path.parent.mkdir(parents=True, exist_ok=True)

        # assemble next to the final path so a failed write never leaves a readable object
        partial_path = final_path.with_name(f"{final_path.name}.partial")
        total_size = 0
        try:
            with open(partial_path, "wb") as dest:
                for chunk_file in chunk_files:
                    with open(chunk_file, "rb") as src:
                        shutil.copyfileobj(src, dest)
                    total_size += chunk_file.stat().st_size
            partial_path.replace(final_path)
        finally:
            partial_path.unlink(missing_ok=True)

        chunks_assembled = len(chunk_files)
        await self.discard_chunks(key_prefix)

        return FinalizeResult(
            url=self.get_url(final_key),
            total_size=total_size,
            chunks_assembled=chunks_assembled,
            content_type=content_type,
        )

    async def discard_chunks(self, key_prefix: str) -> int:
        chunks_dir = self._chunks_dir(key_prefix)

        if not chunks_dir.exists():
            return 0

        chunk_files = list(chunks_dir.glob("*.chunk"))
        for chunk_file in chunk_files:
            chunk_file.unlink()
        chunks_dir.rmdir()
        return len(chunk_files)
