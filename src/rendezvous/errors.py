"""Base exceptions for the rendezvous relay."""


class RelayError(Exception):
    """Base exception for all relay errors."""

    pass


class InvalidArgumentError(RelayError):
    """Required field missing, empty or of the wrong type."""

    pass


class NotFoundError(RelayError):
    """Referenced id has no live session."""

    pass


class ConflictError(RelayError):
    """Host session is already paired with a guest."""

    pass
