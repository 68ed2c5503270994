"""Exceptions raised across the cidview pipeline."""


class CidviewError(Exception):
    """Base exception for cidview operations."""


class FetchError(CidviewError):
    """Raised when a byte source cannot retrieve a payload."""

    def __init__(self, locator: str, message: str) -> None:
        super().__init__(f"{locator}: {message}")
        self.locator = locator
        self.reason = message


class DecodeError(CidviewError, ValueError):
    """Raised when payload bytes cannot be decoded into text or structured data."""
