__all__ = [
    "ActorSettings",
    "LoggingSettings",
    "ObjectSettings",
    "Settings",
    "StorageSettings",
    "SyncSettings",
    "UploadSettings",
]


from .logging import LoggingSettings
from .settings import Settings
from .storage import ObjectSettings, StorageSettings
from .sync import ActorSettings, SyncSettings, UploadSettings
