"""Exceptions raised by the editor core."""

from typing import Optional


class RangeError(IndexError):
    """An offset or span falls outside the buffer."""


class OutOfRangeError(RangeError):
    """A position query asked about an offset past the end of the document."""


class DocumentIOError(OSError):
    """Reading or writing a document failed.

    The underlying exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class DocumentBusyError(RuntimeError):
    """A load or save is already in flight for this document."""
