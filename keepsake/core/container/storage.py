from __future__ import annotations

import typing as t
from pathlib import Path

from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Object, Provider, Resource, Singleton

from keepsake.storage.catalog import VideoCatalog
from keepsake.storage.object import LocalObjectStore, ObjectStore

from ..provider import LoggingProvider


def provide_object_store(
    config: dict[str, t.Any], state_path: Path, logging: LoggingProvider
) -> ObjectStore:
    logger = logging.get_logger()

    match config["backend"]:
        case "local":
            base_path = Path(config["local_path"] or state_path / "objects")
            store = LocalObjectStore(base_path, url_prefix=config["url_prefix"])
        case _:
            raise ValueError(f"unsupported object storage backend: {config['backend']}")

    logger.info(
        "initialized object storage",
        extra={
            "backend": config["backend"],
            "path": base_path,
        },
    )
    return store


def provide_catalog(path: Path | None, state_path: Path) -> VideoCatalog:
    return VideoCatalog(Path(path) if path else state_path / "catalog.json")


class StorageContainer(DeclarativeContainer):
    config: Configuration = Configuration(strict=True)
    logging: Provider[LoggingProvider] = Resource()
    state_path: Provider[Path] = Object()

    object: Provider[ObjectStore] = Singleton(
        provide_object_store, config=config.object, state_path=state_path, logging=logging
    )
    catalog: Provider[VideoCatalog] = Singleton(provide_catalog, path=config.catalog_path, state_path=state_path)
