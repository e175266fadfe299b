"""Upload form controller: local state machine driving the upload mutation."""

from __future__ import annotations

import logging
import typing as t

from keepsake.model import LocalFile, Notice, UploadDraft
from keepsake.model.enum import NoticeLevel, UploadFormState

from .errors import ActorUnavailable, KeepsakeError

if t.TYPE_CHECKING:
    from .mutation import UploadVideoMutation

logger = logging.getLogger(__name__)

DraftListener = t.Callable[[UploadDraft], None]
NoticeSink = t.Callable[[Notice], None]

InvalidFileMessage = "Please select a valid video file"
IncompleteFormMessage = "Please provide a title and select a video file"
UploadedMessage = "Video uploaded successfully!"
UploadFailedMessage = "Failed to upload video. Please try again."
UnavailableMessage = "Not connected to the video service yet. Please try again shortly."


class UploadFormController(object):
    """Holds the upload draft and turns user actions into at most one upload at a time.

    States: empty -> file-selected -> uploading -> empty on success, or back
    to file-selected on failure with the file and title kept for a retry.
    Picking and dropping a file are equivalent; a new file always replaces
    the previous one.
    """

    def __init__(self, mutation: UploadVideoMutation, *, notify: NoticeSink | None = None) -> None:
        self._mutation = mutation
        self._notify_sink = notify
        self._uploading = False
        self._listeners: list[DraftListener] = []
        self.draft = UploadDraft()
        self.notices: list[Notice] = []

    @property
    def state(self) -> UploadFormState:
        if self._uploading:
            return UploadFormState.Uploading
        if self.draft.selected_file is not None:
            return UploadFormState.FileSelected
        return UploadFormState.Empty

    @property
    def is_uploading(self) -> bool:
        return self._uploading

    @property
    def can_submit(self) -> bool:
        return self.draft.selected_file is not None and bool(self.draft.title.strip()) and not self._uploading

    def subscribe(self, listener: DraftListener) -> t.Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener(self.draft)

    def _notice(self, level: NoticeLevel, message: str) -> None:
        notice = Notice(level=level, message=message)
        self.notices.append(notice)
        if self._notify_sink is not None:
            self._notify_sink(notice)

    def set_title(self, title: str) -> None:
        if self._uploading:
            return
        self.draft.title = title
        self._changed()

    def select_file(self, file: LocalFile) -> bool:
        """Replace the selected file. Non-video files are refused with a notice."""
        if self._uploading:
            return False
        if not file.is_video:
            self._notice(NoticeLevel.Error, InvalidFileMessage)
            return False
        self.draft.selected_file = file
        self.draft.progress = 0
        if not self.draft.title:
            self.draft.title = file.stem
        self._changed()
        return True

    def pick(self, files: t.Sequence[LocalFile]) -> bool:
        """File-picker entry point; only the first file is used."""
        return self.select_file(files[0]) if files else False

    def clear_file(self) -> None:
        if self._uploading or self.draft.selected_file is None:
            return
        self.draft.selected_file = None
        self.draft.progress = 0
        self._changed()

    def drag_enter(self) -> None:
        self.draft.drag_active = True
        self._changed()

    def drag_leave(self) -> None:
        self.draft.drag_active = False
        self._changed()

    def drop(self, files: t.Sequence[LocalFile]) -> bool:
        """Drag-and-drop entry point; only the first file is used."""
        self.draft.drag_active = False
        self._changed()
        return self.pick(files)

    def _on_progress(self, percent: int) -> None:
        self.draft.progress = max(0, min(100, percent))
        self._changed()

    async def submit(self) -> bool:
        """Upload the drafted video.

        Returns:
            True if the upload succeeded and the draft was cleared. Refused
            submissions and failed uploads return False and leave a notice.
            Cancellation propagates, with the form released first.
        """
        if self._uploading:
            logger.debug("upload already in flight; submit ignored")
            return False

        file = self.draft.selected_file
        title = self.draft.title.strip()
        if file is None or not title:
            self._notice(NoticeLevel.Error, IncompleteFormMessage)
            return False
        if not file.is_video:
            self._notice(NoticeLevel.Error, InvalidFileMessage)
            return False

        self._uploading = True
        self.draft.progress = 0
        self._changed()
        uploaded = False
        error: Exception | None = None
        try:
            data = await file.read_bytes()
            await self._mutation.upload(
                title,
                data,
                file.size,
                content_type=file.content_type,
                on_progress=self._on_progress,
            )
            uploaded = True
        except (KeepsakeError, OSError) as e:
            logger.warning("upload from form failed", extra={"file": file.name, "error": str(e)})
            error = e
        except Exception as e:
            logger.exception("unexpected error uploading from form", extra={"file": file.name})
            error = e
        finally:
            # also reached on cancellation, which propagates
            self._uploading = False
            if uploaded:
                self.draft = UploadDraft(drag_active=self.draft.drag_active)
            else:
                self.draft.progress = 0
            self._changed()

        if error is not None:
            self._notice(
                NoticeLevel.Error, UnavailableMessage if isinstance(error, ActorUnavailable) else UploadFailedMessage
            )
            return False

        self._notice(NoticeLevel.Success, UploadedMessage)
        return True
