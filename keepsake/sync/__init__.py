"""Client-side synchronization: remote actor, query cache, uploads."""

import importlib
import sys
import types
import typing as t

__all__ = [
    # Errors
    "KeepsakeError",
    "ValidationError",
    "ActorUnavailable",
    "TransportError",
    # Actor
    "RemoteActor",
    "ActorHandle",
    "LocalActor",
    "HTTPActor",
    # Blob
    "ExternalBlob",
    "ProgressObserver",
    # Cache & operations
    "CacheEntry",
    "QueryCache",
    "ListVideosQuery",
    "UploadVideoMutation",
    "UploadFormController",
]

_exports: dict[str, str] = {
    "KeepsakeError": "errors",
    "ValidationError": "errors",
    "ActorUnavailable": "errors",
    "TransportError": "errors",
    "RemoteActor": "actor",
    "ActorHandle": "actor",
    "LocalActor": "backend",
    "HTTPActor": "backend",
    "ExternalBlob": "blob",
    "ProgressObserver": "blob",
    "CacheEntry": "cache",
    "QueryCache": "cache",
    "ListVideosQuery": "query",
    "UploadVideoMutation": "mutation",
    "UploadFormController": "form",
}

if t.TYPE_CHECKING:
    from .actor import ActorHandle, RemoteActor
    from .backend import HTTPActor, LocalActor
    from .blob import ExternalBlob, ProgressObserver
    from .cache import CacheEntry, QueryCache
    from .errors import ActorUnavailable, KeepsakeError, TransportError, ValidationError
    from .form import UploadFormController
    from .mutation import UploadVideoMutation
    from .query import ListVideosQuery


def __getattr__(name: str) -> t.Any:
    # submodules import the data model, which in turn imports sync.blob; load lazily
    if name in _exports:
        module: types.ModuleType = importlib.import_module(f"{__name__}.{_exports[name]}")
        value = getattr(module, name)
        setattr(sys.modules[__name__], name, value)
        return value
    raise AttributeError(f"module {__name__} has no attribute {name}")
