from __future__ import annotations

import typing as t

import annotated_types as ant
import pydantic as p

from keepsake.sync.blob import ExternalBlob

from .base import BaseModel


class VideoMetadata(BaseModel):
    """A video in the gallery. Owned by the remote store; read-only here."""

    model_config = p.ConfigDict(frozen=True, arbitrary_types_allowed=True)

    title: str
    # nanoseconds since the Unix epoch, assigned by the uploading client
    upload_date: int
    file_size: t.Annotated[int, ant.Ge(0)]
    video: ExternalBlob

    def to_record(self) -> VideoRecord:
        return VideoRecord(
            title=self.title,
            upload_date=self.upload_date,
            file_size=self.file_size,
            video_url=self.video.get_direct_url(),
        )


class VideoRecord(BaseModel):
    """Serialized form of VideoMetadata, as stored in the catalog and sent over the wire."""

    model_config = p.ConfigDict(frozen=True)

    title: t.Annotated[str, ant.MinLen(1)]
    upload_date: int
    file_size: t.Annotated[int, ant.Ge(0)]
    video_url: str

    def to_metadata(self) -> VideoMetadata:
        return VideoMetadata(
            title=self.title,
            upload_date=self.upload_date,
            file_size=self.file_size,
            video=ExternalBlob.from_url(self.video_url),
        )
