from __future__ import annotations

from typing import Any


class PriceTrackerError(Exception):
    """Base class for every error the tracker raises on purpose."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class FetchError(PriceTrackerError):
    """A price could not be observed for a (product, source) pair."""


class ConfigurationError(FetchError):
    """The source has no URL the fetcher can resolve."""


class TransportError(FetchError):
    """Network failure or non-2xx response from the marketplace."""

    def __init__(
        self, message: str, status_code: int | None = None, timeout: bool = False
    ):
        self.status_code = status_code
        self.timeout = timeout
        super().__init__(message)


class ParseError(FetchError):
    """The page was fetched but no usable price was found in it."""


class NotFoundError(PriceTrackerError):
    pass


class ConflictError(PriceTrackerError):
    def __init__(self, message: str, existing: dict[str, Any] | None = None):
        self.existing = existing
        super().__init__(message)
