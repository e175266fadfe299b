"""Write side: the video upload mutation."""

from __future__ import annotations

import logging
import typing as t

from keepsake.lib.timestamp import to_epoch_ns
from keepsake.model.enum import MutationStatus

from .blob import ExternalBlob
from .errors import ActorUnavailable, KeepsakeError, TransportError, ValidationError
from .query import ListVideosQuery

if t.TYPE_CHECKING:
    from keepsake.core.provider import TimestampProvider

    from .actor import ActorHandle
    from .blob import ProgressObserver
    from .cache import QueryCache

logger = logging.getLogger(__name__)


class UploadVideoMutation(object):
    """Uploads one video and invalidates the video list on success.

    Each call makes at most one remote write. Failures are recorded on the
    mutation (`status`, `error`) and re-raised; nothing is retried.
    """

    def __init__(
        self,
        handle: ActorHandle,
        cache: QueryCache,
        utcnow: TimestampProvider,
        *,
        chunk_size: int = ExternalBlob.DefaultChunkSize,
        invalidates: t.Sequence[str] = (ListVideosQuery.Key,),
    ) -> None:
        self._handle = handle
        self._cache = cache
        self._utcnow = utcnow
        self._chunk_size = chunk_size
        self._invalidates = tuple(invalidates)
        self.status = MutationStatus.Idle
        self.error: KeepsakeError | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is MutationStatus.Pending

    def reset(self) -> None:
        self.status = MutationStatus.Idle
        self.error = None

    def _fail(self, error: KeepsakeError) -> KeepsakeError:
        self.status = MutationStatus.Error
        self.error = error
        return error

    async def upload(
        self,
        title: str,
        file_bytes: bytes,
        file_size: int,
        *,
        content_type: str = ExternalBlob.DefaultContentType,
        on_progress: ProgressObserver | None = None,
    ) -> None:
        """Upload a video and append it to the remote collection.

        Args:
            title: Video title; surrounding whitespace is trimmed.
            file_bytes: Contents of the video file.
            file_size: Byte count reported for the file.
            content_type: MIME type of the file.
            on_progress: Observer called with integer percentages 0-100.

        Raises:
            ValidationError: If the title is blank or no bytes were supplied.
            ActorUnavailable: If there is no live connection to the service.
            TransportError: If the blob transfer or the remote write fails.
        """
        title = title.strip()
        if not title:
            raise ValidationError("title must not be empty")
        if not file_bytes:
            raise ValidationError("no file data supplied")

        actor = self._handle.actor
        if actor is None:
            raise self._fail(ActorUnavailable("not connected to the video service"))

        self.status = MutationStatus.Pending
        self.error = None
        upload_date = to_epoch_ns(self._utcnow())

        blob = ExternalBlob.from_bytes(file_bytes, content_type=content_type, chunk_size=self._chunk_size)
        if on_progress is not None:
            blob = blob.with_upload_progress(on_progress)

        logger.info(
            "uploading video",
            extra={
                "title": title,
                "file_size": file_size,
                "upload_date": upload_date,
            },
        )
        try:
            await actor.upload_video(title, upload_date, blob, file_size)
        except KeepsakeError as e:
            logger.warning("video upload failed", extra={"title": title, "error": str(e)})
            raise self._fail(e)
        except Exception as e:
            logger.warning("video upload failed", extra={"title": title, "error": str(e)})
            raise self._fail(TransportError(f"upload failed: {e!s}")) from e

        for key in self._invalidates:
            self._cache.invalidate(key)
        self.status = MutationStatus.Success
        logger.info("video uploaded", extra={"title": title})
