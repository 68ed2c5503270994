"""Data models shared by byte sources and type resolution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class Payload:
    """Immutable byte sequence retrieved for a single request."""

    data: bytes = b""

    @property
    def size(self) -> int:
        """Return the payload length in bytes."""
        return len(self.data)


@dataclass(frozen=True, slots=True)
class FetchResponse:
    """Bytes returned by a byte source plus the transport's declared content type.

    Attributes:
        locator: Locator the payload was requested with.
        payload: Retrieved bytes.
        declared_type: Raw Content-Type value asserted by the transport, if any.
    """

    locator: str
    payload: Payload
    declared_type: Optional[str] = None


__all__ = ["Payload", "FetchResponse"]
