"""Category-specific renderers.

Every renderer takes ``(payload, mime, context)`` and returns a
:class:`RenderResult`. Renderers hold no state; the dispatcher supplies the
resource handle through the context for categories that embed raw bytes.
"""

from __future__ import annotations

import io
import json
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from PIL import Image

from cidview.classification import Category
from cidview.config.models import RenderingSettings
from cidview.errors import DecodeError
from cidview.ingestion.models import Payload

from .handles import ResourceHandle
from .helpers import escape_markup, escape_text, extension_for, format_bytes, hex_dump
from .models import (
    ArchiveFragment,
    DocumentFragment,
    DownloadDescriptor,
    HexFragment,
    MarkupFragment,
    MediaFragment,
    RenderResult,
    StructuredFragment,
    TextFragment,
)

LOGGER = logging.getLogger(__name__)

ARCHIVE_WARNING = "Cannot preview archive contents"


@dataclass(slots=True)
class RenderContext:
    """Settings and the optional resource handle for a single render."""

    settings: RenderingSettings = field(default_factory=RenderingSettings)
    handle: Optional[ResourceHandle] = None

    def require_handle(self) -> ResourceHandle:
        if self.handle is None:
            raise RuntimeError("renderer requires a resource handle")
        return self.handle


Renderer = Callable[[Payload, str, RenderContext], RenderResult]


def decode_text(payload: Payload, encoding: str = "utf-8") -> str:
    """Strictly decode payload bytes.

    Raises:
        DecodeError: If the bytes are not valid in ``encoding``.
    """
    try:
        return payload.data.decode(encoding)
    except UnicodeDecodeError as exc:
        raise DecodeError(f"Payload is not valid {encoding} text: {exc.reason}") from exc
    except LookupError as exc:
        raise DecodeError(f"Unknown text encoding '{encoding}'") from exc


def _download(stem: str, extension: str, handle: ResourceHandle) -> DownloadDescriptor:
    return DownloadDescriptor(
        filename=f"{stem}.{extension}",
        extension=extension,
        reference=handle.reference,
    )


def _image_metadata(payload: Payload) -> Dict[str, str]:
    try:
        with Image.open(io.BytesIO(payload.data)) as img:
            return {
                "width": str(img.width),
                "height": str(img.height),
                "mode": img.mode,
            }
    except Exception as exc:
        LOGGER.debug("Image metadata unavailable: %s", exc)
        return {}


def _media_renderer(element: str, title: str, stem: str) -> Renderer:
    def render(payload: Payload, mime: str, context: RenderContext) -> RenderResult:
        handle = context.require_handle()
        settings = context.settings
        extension = extension_for(mime, settings.extensions, settings.fallback_extension)
        return RenderResult(
            label=f"{title} ({mime})",
            category=Category(stem),
            mime_type=mime,
            size_bytes=payload.size,
            size_label=format_bytes(payload.size),
            fragment=MediaFragment(element=element, source=handle.reference, mime_type=mime),
            download=_download(stem, extension, handle),
            metadata=_image_metadata(payload) if element == "img" else {},
        )

    render.__name__ = f"render_{stem}"
    render.__doc__ = f"Wrap the payload as a displayable {stem} resource."
    return render


render_image = _media_renderer("img", "Image", "image")
render_video = _media_renderer("video", "Video", "video")
render_audio = _media_renderer("audio", "Audio", "audio")


def render_markup(payload: Payload, mime: str, context: RenderContext) -> RenderResult:
    """Embed markup in a sandboxed frame and expose the escaped source beside it."""
    document = decode_text(payload, context.settings.text_encoding)
    escaped = escape_markup(document)
    return RenderResult(
        label="HTML Preview",
        category=Category.MARKUP_DOCUMENT,
        mime_type=mime,
        size_bytes=payload.size,
        size_label=format_bytes(payload.size),
        fragment=MarkupFragment(
            srcdoc=escaped,
            source_view=escaped,
            sandbox=context.settings.sandbox_policy,
        ),
    )


def render_text(payload: Payload, mime: str, context: RenderContext) -> RenderResult:
    """Display decoded text as escaped preformatted content."""
    encoding = context.settings.text_encoding
    text = decode_text(payload, encoding)
    size = len(text.encode(encoding))
    return RenderResult(
        label=f"Text ({mime})",
        category=Category.PLAIN_TEXT,
        mime_type=mime,
        size_bytes=size,
        size_label=format_bytes(size),
        fragment=TextFragment(text=escape_text(text)),
    )


def render_pdf(payload: Payload, mime: str, context: RenderContext) -> RenderResult:
    """Embed the payload as a document with a ``.pdf`` download."""
    handle = context.require_handle()
    return RenderResult(
        label="PDF",
        category=Category.PORTABLE_DOCUMENT,
        mime_type=mime,
        size_bytes=payload.size,
        size_label=format_bytes(payload.size),
        fragment=DocumentFragment(source=handle.reference),
        download=_download("document", "pdf", handle),
    )


def render_archive(payload: Payload, mime: str, context: RenderContext) -> RenderResult:
    """Offer the archive for download without inspecting its contents."""
    handle = context.require_handle()
    settings = context.settings
    extension = extension_for(mime, settings.extensions, settings.fallback_extension)
    return RenderResult(
        label=f"Archive ({mime})",
        category=Category.ARCHIVE,
        mime_type=mime,
        size_bytes=payload.size,
        size_label=format_bytes(payload.size),
        fragment=ArchiveFragment(source=handle.reference),
        download=_download("archive", extension, handle),
        warnings=[ARCHIVE_WARNING],
    )


def render_json(payload: Payload, mime: str, context: RenderContext) -> RenderResult:
    """Pretty-print JSON, falling back to the raw text when it does not parse.

    A payload that cannot be decoded, parsed, or re-serialized is still a result:
    the fragment is marked invalid and carries the parser message. This covers
    integers past the interpreter's digit limit and nesting past the recursion
    limit as well as plain syntax errors.
    """
    settings = context.settings
    try:
        text = decode_text(payload, settings.text_encoding)
        pretty = json.dumps(json.loads(text), indent=settings.json_indent, ensure_ascii=False)
    except (DecodeError, ValueError, RecursionError) as exc:
        raw = payload.data.decode(settings.text_encoding, errors="replace")
        size = len(raw.encode(settings.text_encoding))
        LOGGER.info("Showing raw JSON text: %s", exc)
        return RenderResult(
            label="Invalid JSON",
            category=Category.STRUCTURED_DATA,
            mime_type=mime,
            size_bytes=size,
            size_label=format_bytes(size),
            fragment=StructuredFragment(text=escape_text(raw), valid=False, error=str(exc)),
        )

    size = len(text.encode(settings.text_encoding))
    return RenderResult(
        label="JSON",
        category=Category.STRUCTURED_DATA,
        mime_type=mime,
        size_bytes=size,
        size_label=format_bytes(size),
        fragment=StructuredFragment(text=escape_text(pretty)),
    )


def render_binary(payload: Payload, mime: str, context: RenderContext) -> RenderResult:
    """Show a bounded hex dump and offer a generic ``.bin`` download."""
    handle = context.require_handle()
    settings = context.settings
    return RenderResult(
        label=f"Binary ({mime})",
        category=Category.BINARY,
        mime_type=mime,
        size_bytes=payload.size,
        size_label=format_bytes(payload.size),
        fragment=HexFragment(
            dump=hex_dump(payload.data, settings.hex_preview_bytes, settings.hex_line_bytes),
            preview_bytes=min(payload.size, settings.hex_preview_bytes),
        ),
        download=_download("file", "bin", handle),
    )


DEFAULT_RENDERERS: Dict[Category, Renderer] = {
    Category.IMAGE: render_image,
    Category.VIDEO: render_video,
    Category.AUDIO: render_audio,
    Category.MARKUP_DOCUMENT: render_markup,
    Category.PLAIN_TEXT: render_text,
    Category.PORTABLE_DOCUMENT: render_pdf,
    Category.ARCHIVE: render_archive,
    Category.STRUCTURED_DATA: render_json,
    Category.BINARY: render_binary,
}

# Categories whose renderers embed raw bytes and therefore need a resource handle.
HANDLE_CATEGORIES = frozenset(
    {
        Category.IMAGE,
        Category.VIDEO,
        Category.AUDIO,
        Category.PORTABLE_DOCUMENT,
        Category.ARCHIVE,
        Category.BINARY,
    }
)


__all__ = [
    "ARCHIVE_WARNING",
    "DEFAULT_RENDERERS",
    "HANDLE_CATEGORIES",
    "RenderContext",
    "Renderer",
    "decode_text",
    "render_archive",
    "render_audio",
    "render_binary",
    "render_image",
    "render_json",
    "render_markup",
    "render_pdf",
    "render_text",
    "render_video",
]
