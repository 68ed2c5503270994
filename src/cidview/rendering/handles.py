"""Displayable resource handles for binary content.

A handle plays the role of a browser object URL: it gives the presentation side
an opaque reference to payload bytes tagged with a MIME type. Handles stay live
until released, so the registry makes leaks across repeated requests visible.
"""

from __future__ import annotations

import base64
import logging
import uuid
from typing import Dict

LOGGER = logging.getLogger(__name__)

REFERENCE_PREFIX = "blob:cidview/"


class ResourceHandle:
    """Reference to payload bytes that can be embedded by a presentation sink."""

    __slots__ = ("reference", "mime_type", "_data", "_registry")

    def __init__(self, reference: str, mime_type: str, data: bytes, registry: "HandleRegistry") -> None:
        self.reference = reference
        self.mime_type = mime_type
        self._data: bytes | None = data
        self._registry = registry

    @property
    def released(self) -> bool:
        return self._data is None

    @property
    def data(self) -> bytes:
        """Return the referenced bytes.

        Raises:
            RuntimeError: If the handle has already been released.
        """
        if self._data is None:
            raise RuntimeError(f"{self.reference} has been released")
        return self._data

    def data_uri(self) -> str:
        """Return an inline ``data:`` URI carrying the referenced bytes."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    def release(self) -> None:
        """Free the referenced bytes; releasing twice is a no-op."""
        if self._data is None:
            return
        self._data = None
        self._registry._forget(self.reference)

    def __repr__(self) -> str:
        state = "released" if self.released else "live"
        return f"ResourceHandle({self.reference!r}, {self.mime_type!r}, {state})"


class HandleRegistry:
    """Issue and track live resource handles."""

    def __init__(self) -> None:
        self._live: Dict[str, ResourceHandle] = {}

    @property
    def live_count(self) -> int:
        return len(self._live)

    def create(self, data: bytes, mime_type: str) -> ResourceHandle:
        """Register ``data`` and return a new handle for it."""
        reference = f"{REFERENCE_PREFIX}{uuid.uuid4()}"
        handle = ResourceHandle(reference, mime_type, data, self)
        self._live[reference] = handle
        LOGGER.debug("Created %s (%s, %d bytes)", reference, mime_type, len(data))
        return handle

    def _forget(self, reference: str) -> None:
        self._live.pop(reference, None)
        LOGGER.debug("Released %s", reference)


__all__ = ["ResourceHandle", "HandleRegistry", "REFERENCE_PREFIX"]
