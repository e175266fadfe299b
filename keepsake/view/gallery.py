"""View models for the video gallery and player."""

from __future__ import annotations

import datetime
import typing as t

import pydantic as p

from keepsake.lib.timestamp import from_epoch_ns
from keepsake.model import VideoMetadata
from keepsake.model.enum import QueryStatus

if t.TYPE_CHECKING:
    from keepsake.sync.query import ListVideosQuery

PlaceholderCount = 3
LoadErrorMessage = "Failed to load videos. Please try again."


def format_file_size(size: int) -> str:
    mb = size / (1024 * 1024)
    if mb < 1024:
        return f"{mb:.1f} MB"
    return f"{mb / 1024:.2f} GB"


def format_upload_date(upload_date: int, tz: datetime.tzinfo | None = None) -> str:
    """Long-form date, in the local time zone unless `tz` is given."""
    d = from_epoch_ns(upload_date).astimezone(tz)
    return f"{d:%B} {d.day}, {d.year}"


class VideoCard(p.BaseModel):
    """A single gallery tile."""

    title: str
    upload_date: str = p.Field(description="Human-readable upload date")
    file_size: str = p.Field(description="Human-readable size, e.g. '5.0 MB'")
    url: str

    @classmethod
    def from_video(cls, video: VideoMetadata) -> VideoCard:
        return cls(
            title=video.title,
            upload_date=format_upload_date(video.upload_date),
            file_size=format_file_size(video.file_size),
            url=video.video.get_direct_url(),
        )


class GalleryView(p.BaseModel):
    """Snapshot of what the gallery shows.

    While the list is loading (or the service is not connected yet) and
    nothing has been fetched, `placeholders` loading tiles are shown. A failed
    first load shows only the error, with no summary. After a failed refresh
    the last-known cards stay visible next to the error.
    """

    status: QueryStatus
    summary: str | None = None
    cards: list[VideoCard] = p.Field(default_factory=list)
    placeholders: int = 0
    error: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.status is QueryStatus.Success and not self.cards

    @classmethod
    def from_query(cls, query: ListVideosQuery) -> GalleryView:
        status = query.status
        videos = query.data
        if videos is None:
            if status is QueryStatus.Error:
                return cls(status=status, error=LoadErrorMessage)
            return cls(status=status, summary="Loading...", placeholders=PlaceholderCount)

        return cls(
            status=status,
            summary=f"{len(videos)} precious memories",
            cards=[VideoCard.from_video(v) for v in videos],
            error=LoadErrorMessage if status is QueryStatus.Error else None,
        )


class Gallery(object):
    """Gallery plus the player's current selection.

    Closing the player only clears the selection; uploads in flight are
    never affected.
    """

    def __init__(self, query: ListVideosQuery) -> None:
        self._query = query
        self.selected: VideoMetadata | None = None

    def view(self) -> GalleryView:
        return GalleryView.from_query(self._query)

    def select(self, video: VideoMetadata | int) -> VideoMetadata:
        if isinstance(video, int):
            videos = self._query.data or ()
            if not 0 <= video < len(videos):
                raise IndexError(f"no video at position {video}")
            video = videos[video]
        self.selected = video
        return video

    def close(self) -> None:
        self.selected = None

    @property
    def player_url(self) -> str | None:
        return self.selected.video.get_direct_url() if self.selected is not None else None
