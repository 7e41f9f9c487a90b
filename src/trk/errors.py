"""Exceptions raised by trk."""


class TrkError(Exception):
    """Base class for trk errors."""


class FatalTimestampError(TrkError):
    """An explicit timestamp was rejected in a way that ends the interaction.

    Raised when finalizing a session or starting a new one with a timestamp
    that does not lie after the previous recorded point in time. Callers are
    expected to report the message and stop without saving.
    """

    def __init__(self, message: str, timestamp: int):
        super().__init__(message)
        self.timestamp = timestamp


class StorageError(TrkError):
    """The timesheet store could not be read or created."""
