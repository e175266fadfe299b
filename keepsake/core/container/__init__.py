__all__ = ["BootConfiguration", "KeepsakeContainer", "StorageContainer", "SyncContainer"]

from .keepsake import BootConfiguration, KeepsakeContainer
from .storage import StorageContainer
from .sync import SyncContainer
