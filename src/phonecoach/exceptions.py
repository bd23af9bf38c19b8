"""Exceptions raised by the pronunciation coach."""


class PhonecoachError(Exception):
    """Base class for all application errors."""


class EmptyQueueError(PhonecoachError):
    """Raised when a practice item is requested and no material is available."""

    def __init__(self, message: str = "Practice queue is empty and no phrases could be scheduled"):
        super().__init__(message)


class PhraseSeedError(PhonecoachError):
    """Raised when the phrase seed file cannot be read or decoded."""
