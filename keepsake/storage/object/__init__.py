"""Object storage abstraction for chunked blob uploads."""

from .http import HTTPObjectStore
from .store import ChunkUploadResult, FinalizeResult, LocalObjectStore, ObjectStore

__all__ = ["ChunkUploadResult", "FinalizeResult", "HTTPObjectStore", "LocalObjectStore", "ObjectStore"]
