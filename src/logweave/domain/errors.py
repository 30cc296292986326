from __future__ import annotations
from typing import Any


class LogweaveError(Exception):
    """Base class for every error raised by logweave."""


class ConfigurationError(LogweaveError):
    """Bad input caught before any network call (missing contract, bad limit, ...). Never retried."""


class FormatError(ConfigurationError):
    """A human-authored event signature could not be parsed."""


class TransportError(LogweaveError):
    """The indexer could not be reached or answered with a non-success status."""

    def __init__(self, message: str, *, status_code: int | None = None,
                 body: str | None = None, response: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.response = response


class DecodeError(LogweaveError):
    """A scalar failed to decode as its declared type."""

    def __init__(self, message: str, *, column: str | None = None, value: Any = None) -> None:
        super().__init__(message)
        self.column = column
        self.value = value
