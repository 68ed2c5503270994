"""Payload retrieval and MIME type resolution."""

from .detectors import Resolution, SignatureDetector, TypeResolver, normalize_mime
from .models import FetchResponse, Payload
from .sources import ByteSource, FileSource, GatewaySource, LocatorSource, gateway_url

__all__ = [
    "ByteSource",
    "FetchResponse",
    "FileSource",
    "GatewaySource",
    "LocatorSource",
    "Payload",
    "Resolution",
    "SignatureDetector",
    "TypeResolver",
    "gateway_url",
    "normalize_mime",
]
