from __future__ import annotations

import asyncio
import mimetypes
import re
import typing as t
from pathlib import Path

import annotated_types as ant
import pydantic as p

from .base import BaseModel
from .enum import NoticeLevel

_Extension = re.compile(r"\.[^/.]+$")


class LocalFile(BaseModel):
    """A file the user picked or dropped, not yet read into memory."""

    model_config = p.ConfigDict(frozen=True)

    name: str
    content_type: str
    size: t.Annotated[int, ant.Ge(0)]
    path: Path | None = None
    data: bytes | None = p.Field(default=None, repr=False)

    @p.model_validator(mode="after")
    def _has_source(self) -> LocalFile:
        if self.path is None and self.data is None:
            raise ValueError(f"{self.name}: a path or data is required")
        return self

    @classmethod
    def from_path(cls, path: Path, content_type: str | None = None) -> LocalFile:
        if content_type is None:
            content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            content_type=content_type or "application/octet-stream",
            size=path.stat().st_size,
            path=path,
        )

    @classmethod
    def from_bytes(cls, name: str, data: bytes, content_type: str) -> LocalFile:
        return cls(name=name, content_type=content_type, size=len(data), data=data)

    @property
    def is_video(self) -> bool:
        return self.content_type.startswith("video/")

    @property
    def stem(self) -> str:
        """File name with its extension stripped."""
        return _Extension.sub("", self.name)

    async def read_bytes(self) -> bytes:
        if self.data is not None:
            return self.data
        if self.path is None:
            raise ValueError(f"{self.name}: no path or data to read")
        return await asyncio.to_thread(self.path.read_bytes)


class UploadDraft(BaseModel):
    """Local, not-yet-committed state of an upload form."""

    model_config = p.ConfigDict(validate_assignment=True)

    title: str = ""
    selected_file: LocalFile | None = None
    progress: t.Annotated[int, ant.Ge(0), ant.Le(100)] = 0
    drag_active: bool = False


class Notice(BaseModel):
    """A user-facing message."""

    model_config = p.ConfigDict(frozen=True)

    level: NoticeLevel
    message: str
