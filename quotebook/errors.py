from __future__ import annotations


class QuotebookError(Exception):
    """Base class for errors raised by the quote book."""


class StorageUnavailable(QuotebookError):
    """The quote table could not be created or opened. Fatal at startup."""


class StorageFault(QuotebookError):
    """An insert, delete or scan failed after the table exists."""


class NetworkError(QuotebookError):
    """The remote quote fetch failed or returned malformed content."""
