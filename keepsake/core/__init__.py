__all__ = [
    "di",
    "KeepsakeContainer",
    "LoggingProvider",
    "Settings",
    "TimestampProvider",
]


from . import di
from .config import Settings
from .container import KeepsakeContainer
from .provider import LoggingProvider, TimestampProvider
