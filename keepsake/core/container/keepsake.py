from __future__ import annotations

import datetime
import os
import sys
import types
import typing as t
from pathlib import Path

import pydantic as p
import xdg_base_dirs as xdg
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Container, Object, Provider, Resource, Singleton

import keepsake
from keepsake.model import BaseModel, DeploymentEnvironment

from ..config import Settings
from ..di import NotReady
from ..provider import LoggingProvider, TimestampProvider
from .storage import StorageContainer
from .sync import SyncContainer


def provide_xdg_state() -> Path:
    stp = xdg.xdg_state_home() / "keepsake"
    if stp.exists() and stp.is_dir():
        return stp
    stp.mkdir(parents=True, exist_ok=True)
    return stp


class BootConfiguration(BaseModel):
    debug: bool
    env: DeploymentEnvironment
    config_root: p.AnyUrl
    override: tuple[str, ...]


class KeepsakeContainer(DeclarativeContainer):
    config: Configuration = Configuration()

    debug: Provider[bool] = Singleton(bool)
    env: Provider[DeploymentEnvironment] = Singleton(DeploymentEnvironment)
    root: Object[NotReady | Path] = Object(NotReady())
    state_path: Provider[Path] = Resource(provide_xdg_state)

    logging: Provider[LoggingProvider] = Resource(LoggingProvider, config=config.logging, debug=debug)
    utcnow: Provider[TimestampProvider] = Object(lambda: datetime.datetime.now(datetime.UTC))

    storage: Provider[StorageContainer] = Container(
        StorageContainer, config=config.storage, logging=logging, state_path=state_path
    )
    sync: Provider[SyncContainer] = Container(
        SyncContainer, config=config.sync, store=storage.object, catalog=storage.catalog, utcnow=utcnow
    )

    _boot_config: Provider[BootConfiguration | NotReady] = Object(NotReady())

    @staticmethod
    def boot(
        ct: KeepsakeContainer,
        /,
        debug: bool,
        env: DeploymentEnvironment,
        config_root: p.FileUrl,
        override: tuple[str, ...] | None = None,
        wiring: tuple[str | types.ModuleType, ...] | None = None,
    ):
        if config_root.scheme != "file":
            raise ValueError(f"unsupported scheme for config root: {config_root.scheme}")
        ps = Settings(env=env, root=config_root, override=override or ())
        ct.config.from_pydantic(ps)
        if wiring:
            ct.wire(modules=wiring)
        if imported := [mod for name, mod in sys.modules.items() if name.startswith("keepsake.cli.")]:
            ct.wire(modules=imported)

        ct.debug.override(debug)
        ct.env.override(env)
        ct.root.override(Path(os.path.dirname(keepsake.__file__)).parent)

        logger = ct.logging().get_logger()

        for ov in ps.override:
            k, v = ov.split("=", 1)
            logger.info(
                "overriding configuration parameter",
                extra={
                    "key": k,
                    "value": v,
                },
            )

        logger.debug(
            "configuration finished",
            extra={
                "config": str(config_root),
                "env": env,
            },
        )
        ct._boot_config.override(
            BootConfiguration(debug=debug, env=env, config_root=config_root, override=override or ())
        )

    @staticmethod
    def boot_config(ct: KeepsakeContainer) -> BootConfiguration:
        bc = ct._boot_config()
        if isinstance(bc, NotReady):
            raise RuntimeError("container has not been booted")
        return t.cast(BootConfiguration, bc)
