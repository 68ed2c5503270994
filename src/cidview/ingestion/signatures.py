"""libmagic-backed signature detection."""

from __future__ import annotations

import logging
from typing import Optional

import magic

LOGGER = logging.getLogger(__name__)

# libmagic answers that carry no information about the payload.
_UNRECOGNIZED = frozenset({"application/octet-stream", "application/x-empty", "inode/x-empty"})


class MagicSignatureDetector:
    """Identify MIME types from leading payload bytes using python-magic."""

    def __init__(self, sniff_bytes: int = 8192) -> None:
        self.sniff_bytes = sniff_bytes
        self._magic = magic.Magic(mime=True)

    def detect(self, data: bytes) -> Optional[str]:
        """Return the detected MIME type, or None for empty or unrecognized input."""
        if not data:
            return None
        try:
            mime = self._magic.from_buffer(data[: self.sniff_bytes])
        except magic.MagicException as exc:
            LOGGER.warning("Signature detection failed: %s", exc)
            return None
        if not mime or mime in _UNRECOGNIZED:
            return None
        return mime


__all__ = ["MagicSignatureDetector"]
