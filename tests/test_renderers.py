"""Tests covering per-category renderer policies."""

import io
import json
import sys

import pytest
from PIL import Image

from cidview.classification import Category
from cidview.config.models import RenderingSettings
from cidview.errors import DecodeError
from cidview.ingestion import Payload
from cidview.rendering import HandleRegistry, RenderContext
from cidview.rendering.models import (
    ArchiveFragment,
    HexFragment,
    MarkupFragment,
    MediaFragment,
    StructuredFragment,
    TextFragment,
)
from cidview.rendering.renderers import (
    ARCHIVE_WARNING,
    render_archive,
    render_audio,
    render_binary,
    render_image,
    render_json,
    render_markup,
    render_pdf,
    render_text,
)


def _context(data: bytes = b"", mime: str = "application/octet-stream") -> RenderContext:
    handle = HandleRegistry().create(data, mime)
    return RenderContext(settings=RenderingSettings(), handle=handle)


def _png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (32, 16), color="red").save(buffer, format="PNG")
    return buffer.getvalue()


def test_image_renderer_wraps_media_with_metadata() -> None:
    data = _png_bytes()
    context = _context(data, "image/png")

    result = render_image(Payload(data), "image/png", context)

    assert result.label == "Image (image/png)"
    assert result.category is Category.IMAGE
    assert isinstance(result.fragment, MediaFragment)
    assert result.fragment.element == "img"
    assert result.fragment.source == context.handle.reference
    assert result.download is not None
    assert result.download.extension == "png"
    assert result.download.filename == "image.png"
    assert result.metadata["width"] == "32"
    assert result.metadata["height"] == "16"


def test_media_renderer_falls_back_to_bin_extension() -> None:
    result = render_audio(Payload(b"ID3"), "audio/mp3", _context(b"ID3", "audio/mp3"))

    assert result.fragment.element == "audio"
    assert result.download.extension == "bin"
    assert result.metadata == {}


def test_markup_renderer_escapes_both_views() -> None:
    document = '<script>alert("x")</script>'
    result = render_markup(Payload(document.encode()), "text/html", RenderContext())

    assert isinstance(result.fragment, MarkupFragment)
    for view in (result.fragment.srcdoc, result.fragment.source_view):
        assert "<" not in view
        assert ">" not in view
        assert '"' not in view
    assert "&lt;script&gt;" in result.fragment.source_view
    assert result.fragment.sandbox == ""
    assert result.label == "HTML Preview"


def test_text_renderer_escapes_and_counts_encoded_bytes() -> None:
    text = "café <tag>"
    result = render_text(Payload(text.encode("utf-8")), "text/plain", RenderContext())

    assert isinstance(result.fragment, TextFragment)
    assert result.fragment.text == "café &lt;tag&gt;"
    assert result.size_bytes == len(text.encode("utf-8"))
    assert result.size_bytes != len(text)


def test_text_renderer_rejects_invalid_encoding() -> None:
    with pytest.raises(DecodeError):
        render_text(Payload(b"\xff\xfe\xfa"), "text/plain", RenderContext())


def test_pdf_renderer_uses_pdf_extension() -> None:
    result = render_pdf(Payload(b"%PDF-1.7"), "application/pdf", _context(b"%PDF-1.7"))

    assert result.label == "PDF"
    assert result.download.extension == "pdf"
    assert result.download.filename == "document.pdf"


def test_archive_renderer_warns_and_offers_download() -> None:
    result = render_archive(Payload(b"PK\x03\x04"), "application/zip", _context(b"PK\x03\x04"))

    assert isinstance(result.fragment, ArchiveFragment)
    assert result.warnings == [ARCHIVE_WARNING]
    assert result.download.filename == "archive.zip"


def test_json_renderer_pretty_prints() -> None:
    result = render_json(Payload(b'{"a":1}'), "application/json", RenderContext())

    assert isinstance(result.fragment, StructuredFragment)
    assert result.fragment.valid is True
    assert result.fragment.text == '{\n  "a": 1\n}'
    assert result.label == "JSON"


def test_json_renderer_escapes_markup_in_values() -> None:
    result = render_json(Payload(b'{"html": "<b>"}'), "application/json", RenderContext())

    assert "&lt;b&gt;" in result.fragment.text
    assert "<b>" not in result.fragment.text


def test_json_pretty_print_round_trips() -> None:
    raw = b'{"list": [1, 2.5, null, true], "nested": {"k": "v"}, "s": "caf\\u00e9"}'
    result = render_json(Payload(raw), "application/json", RenderContext())

    assert json.loads(result.fragment.text) == json.loads(raw)


def test_json_renderer_falls_back_on_malformed_input() -> None:
    result = render_json(Payload(b"{a:}"), "application/json", RenderContext())

    assert result.fragment.valid is False
    assert result.fragment.text == "{a:}"
    assert result.fragment.error
    assert result.label == "Invalid JSON"


def test_json_renderer_falls_back_on_invalid_bytes() -> None:
    result = render_json(Payload(b'{"a": "\xff<"}'), "text/json", RenderContext())

    assert result.fragment.valid is False
    assert "&lt;" in result.fragment.text


@pytest.mark.skipif(
    not hasattr(sys, "get_int_max_str_digits"), reason="interpreter has no integer digit limit"
)
def test_json_renderer_falls_back_on_oversized_integer() -> None:
    raw = b"[" + b"1" * 5000 + b"]"
    result = render_json(Payload(raw), "application/json", RenderContext())

    assert result.label == "Invalid JSON"
    assert result.fragment.valid is False
    assert result.fragment.text == raw.decode()
    assert result.size_bytes == len(raw)


def test_json_renderer_falls_back_on_deep_nesting() -> None:
    raw = b"[" * 100_000 + b"]" * 100_000
    result = render_json(Payload(raw), "application/json", RenderContext())

    assert result.label == "Invalid JSON"
    assert result.fragment.valid is False
    assert result.fragment.error


def test_binary_renderer_hex_dump_bounds() -> None:
    data = bytes(range(256)) + bytes(44)
    result = render_binary(Payload(data), "application/x-thing", _context(data))

    assert isinstance(result.fragment, HexFragment)
    assert result.fragment.preview_bytes == 256
    assert len(result.fragment.dump.split()) == 256
    assert result.download.extension == "bin"
    assert result.download.filename == "file.bin"
    assert result.size_bytes == 300


def test_binary_renderer_never_infers_specific_extension() -> None:
    result = render_binary(Payload(b"PK"), "application/zip", _context(b"PK"))

    assert result.download.extension == "bin"


def test_handle_required_for_binary_content() -> None:
    with pytest.raises(RuntimeError):
        render_binary(Payload(b"x"), "application/octet-stream", RenderContext())
