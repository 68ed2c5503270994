"""Authoritative MIME type resolution for retrieved payloads."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Optional, Protocol

from cidview.config.models import DEFAULT_MIME

from .models import Payload

LOGGER = logging.getLogger(__name__)

Origin = Literal["declared", "detected", "default"]


class SignatureDetector(Protocol):
    """Inspect a byte prefix and return a best-guess MIME type."""

    def detect(self, data: bytes) -> Optional[str]:
        """Return a MIME type, or None when the signature is unrecognized."""


@dataclass(frozen=True, slots=True)
class Resolution:
    """Resolved MIME type and the signal it came from."""

    mime_type: str
    origin: Origin


def normalize_mime(value: Optional[str]) -> Optional[str]:
    """Return the lowercased MIME essence of ``value`` or None when it is blank.

    Parameters such as ``; charset=utf-8`` are dropped so classification compares
    bare ``type/subtype`` strings.
    """
    if value is None:
        return None
    essence = value.split(";", 1)[0].strip().lower()
    return essence or None


class TypeResolver:
    """Decide the authoritative MIME type for a payload.

    A declared type always wins, even when it looks wrong; the detector is only
    consulted when nothing was declared, and the default type covers the case where
    neither signal is available.
    """

    def __init__(self, detector: SignatureDetector, *, default_mime: str = DEFAULT_MIME) -> None:
        if not default_mime:
            raise ValueError("default_mime must be a non-empty MIME type")
        self.detector = detector
        self.default_mime = default_mime

    def resolve(self, declared_type: Optional[str], payload: Payload) -> str:
        """Return the MIME type used for classification and rendering."""
        return self.explain(declared_type, payload).mime_type

    def explain(self, declared_type: Optional[str], payload: Payload) -> Resolution:
        """Return the resolved MIME type together with its origin."""
        declared = normalize_mime(declared_type)
        if declared:
            LOGGER.debug("Using declared content type %s", declared)
            return Resolution(declared, "declared")

        detected = normalize_mime(self.detector.detect(payload.data))
        if detected:
            LOGGER.debug("Detected content type %s from %d bytes", detected, payload.size)
            return Resolution(detected, "detected")

        LOGGER.debug("No type signal; falling back to %s", self.default_mime)
        return Resolution(self.default_mime, "default")


__all__ = ["SignatureDetector", "Resolution", "TypeResolver", "normalize_mime"]
