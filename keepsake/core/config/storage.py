from __future__ import annotations

import typing as t
from pathlib import Path

from .base import BaseSettings


class ObjectSettings(BaseSettings):
    """Object storage settings for uploaded blobs."""

    backend: t.Literal["local"] = "local"
    # defaults to <XDG state>/keepsake/objects
    local_path: Path | None = None
    # defaults to file:// URLs under local_path
    url_prefix: str | None = None


class StorageSettings(BaseSettings):
    object: ObjectSettings = ObjectSettings()
    # defaults to <XDG state>/keepsake/catalog.json
    catalog_path: Path | None = None
