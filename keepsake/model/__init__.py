__all__ = [
    # Base
    "BaseModel",
    # Enums
    "DeploymentEnvironment",
    "MutationStatus",
    "NoticeLevel",
    "QueryStatus",
    "UploadFormState",
    # Drafts
    "LocalFile",
    "Notice",
    "UploadDraft",
    # Videos
    "VideoMetadata",
    "VideoRecord",
]

from .base import BaseModel
from .draft import LocalFile, Notice, UploadDraft
from .enum import DeploymentEnvironment, MutationStatus, NoticeLevel, QueryStatus, UploadFormState
from .video import VideoMetadata, VideoRecord
