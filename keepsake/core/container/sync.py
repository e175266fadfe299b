from __future__ import annotations

import functools
import typing as t

from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Callable, Configuration, Factory, Object, Provider, Singleton

from keepsake.storage.catalog import VideoCatalog
from keepsake.storage.object import ObjectStore
from keepsake.sync.actor import ActorFactory, ActorHandle
from keepsake.sync.backend import HTTPActor, LocalActor
from keepsake.sync.cache import QueryCache
from keepsake.sync.form import UploadFormController
from keepsake.sync.mutation import UploadVideoMutation
from keepsake.sync.query import ListVideosQuery

from ..provider import TimestampProvider


async def connect_local(store: t.Callable[[], ObjectStore], catalog: t.Callable[[], VideoCatalog]) -> LocalActor:
    return await LocalActor.connect(store=store(), catalog=catalog())


def provide_actor_factory(
    config: dict[str, t.Any],
    store: t.Callable[[], ObjectStore],
    catalog: t.Callable[[], VideoCatalog],
) -> ActorFactory:
    match config["backend"]:
        case "local":
            return functools.partial(connect_local, store=store, catalog=catalog)
        case "http":
            return functools.partial(
                HTTPActor.connect, base_url=str(config["base_url"]), timeout=config["timeout_seconds"]
            )
        case _:
            raise ValueError(f"unsupported actor backend: {config['backend']}")


class SyncContainer(DeclarativeContainer):
    config: Configuration = Configuration(strict=True)
    store: Provider[ObjectStore] = Object()
    catalog: Provider[VideoCatalog] = Object()
    utcnow: Provider[TimestampProvider] = Object()

    # store and catalog are only built if the local backend actually connects
    factory: Provider[ActorFactory] = Callable(
        provide_actor_factory, config=config.actor, store=store.provider, catalog=catalog.provider
    )
    handle: Provider[ActorHandle] = Singleton(ActorHandle, factory=factory)
    cache: Provider[QueryCache] = Singleton(QueryCache)

    videos: Provider[ListVideosQuery] = Factory(ListVideosQuery, handle=handle, cache=cache)
    upload: Provider[UploadVideoMutation] = Factory(
        UploadVideoMutation, handle=handle, cache=cache, utcnow=utcnow, chunk_size=config.upload.chunk_size
    )
    form: Provider[UploadFormController] = Factory(UploadFormController, mutation=upload)
