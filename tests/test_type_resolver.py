"""Tests covering MIME type resolution."""

import pytest
from conftest import StaticDetector

from cidview.ingestion import Payload, TypeResolver, normalize_mime


def test_declared_type_is_authoritative() -> None:
    detector = StaticDetector("image/png")
    resolver = TypeResolver(detector)

    mime = resolver.resolve("text/plain", Payload(b"\x89PNG\r\n\x1a\n"))

    assert mime == "text/plain"
    assert detector.calls == 0


def test_declared_type_is_normalized_to_essence() -> None:
    resolver = TypeResolver(StaticDetector())

    assert resolver.resolve("Text/HTML; charset=UTF-8", Payload(b"<p>")) == "text/html"


@pytest.mark.parametrize("declared", [None, "", "   "])
def test_missing_declared_type_uses_detector(declared: str | None) -> None:
    detector = StaticDetector("image/gif")
    resolver = TypeResolver(detector)

    resolution = resolver.explain(declared, Payload(b"GIF89a"))

    assert resolution.mime_type == "image/gif"
    assert resolution.origin == "detected"
    assert detector.calls == 1


def test_absent_and_empty_declared_types_match() -> None:
    resolver = TypeResolver(StaticDetector())
    payload = Payload(b"\x00\x01")

    assert resolver.resolve(None, payload) == resolver.resolve("", payload)
    assert resolver.resolve(None, payload) == "application/octet-stream"


def test_empty_payload_without_signals_falls_back_to_default() -> None:
    resolution = TypeResolver(StaticDetector()).explain(None, Payload(b""))

    assert resolution.mime_type == "application/octet-stream"
    assert resolution.origin == "default"


def test_custom_default_mime() -> None:
    resolver = TypeResolver(StaticDetector(), default_mime="application/x-unknown")

    assert resolver.resolve(None, Payload(b"??")) == "application/x-unknown"


def test_empty_default_mime_rejected() -> None:
    with pytest.raises(ValueError):
        TypeResolver(StaticDetector(), default_mime="")


def test_normalize_mime_blank_values() -> None:
    assert normalize_mime(None) is None
    assert normalize_mime(" ; charset=utf-8") is None
    assert normalize_mime("application/JSON") == "application/json"


def test_magic_detector_recognizes_png_signature() -> None:
    pytest.importorskip("magic")
    from cidview.ingestion.signatures import MagicSignatureDetector

    png_header = bytes.fromhex("89504e470d0a1a0a0000000d49484452")
    detector = MagicSignatureDetector(sniff_bytes=64)

    assert detector.detect(png_header + b"\x00" * 32) == "image/png"
    assert detector.detect(b"") is None
