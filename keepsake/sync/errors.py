"""Exceptions raised by the synchronization layer."""


class KeepsakeError(Exception):
    """Base class for client-side synchronization errors."""

    pass


class ValidationError(KeepsakeError):
    """Input was rejected locally before any remote call was made."""

    pass


class ActorUnavailable(KeepsakeError):
    """The remote actor has no live connection."""

    pass


class TransportError(KeepsakeError):
    """A network or service failure occurred during a remote call."""

    pass
