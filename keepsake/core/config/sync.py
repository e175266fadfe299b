from __future__ import annotations

import typing as t

import annotated_types as ant
import pydantic as p

from .base import BaseSettings


class ActorSettings(BaseSettings):
    """How to reach the video service."""

    backend: t.Literal["local", "http"] = "local"
    base_url: p.HttpUrl | None = None
    timeout_seconds: t.Annotated[float, ant.Gt(0)] = 10.0

    @p.model_validator(mode="after")
    def check_base_url(self) -> t.Self:
        if self.backend == "http" and self.base_url is None:
            raise ValueError("base_url is required for the http backend")
        return self


class UploadSettings(BaseSettings):
    chunk_size: t.Annotated[int, ant.Gt(0)] = 1024 * 1024


class SyncSettings(BaseSettings):
    actor: ActorSettings = ActorSettings()
    upload: UploadSettings = UploadSettings()
