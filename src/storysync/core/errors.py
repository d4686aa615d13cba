"""Exception types raised by the sync engine"""


class StorySyncError(Exception):
    """Base class for storysync errors."""


class NotFoundError(StorySyncError, FileNotFoundError):
    """A required root directory does not exist."""

    def __init__(self, path):
        super().__init__(f"directory not found: {path}")
        self.path = path


class MalformedMetadata(StorySyncError, ValueError):
    """A metadata value could not be parsed; callers degrade it to unset."""
