"""Rendering dispatch, renderers, and render result models."""

from .dispatcher import RenderDispatcher
from .handles import HandleRegistry, ResourceHandle
from .helpers import escape_markup, escape_text, extension_for, format_bytes, hex_dump
from .models import (
    DownloadDescriptor,
    RenderError,
    RenderOutcome,
    RenderResult,
    RenderStage,
)
from .renderers import DEFAULT_RENDERERS, RenderContext

__all__ = [
    "DEFAULT_RENDERERS",
    "DownloadDescriptor",
    "HandleRegistry",
    "RenderContext",
    "RenderDispatcher",
    "RenderError",
    "RenderOutcome",
    "RenderResult",
    "RenderStage",
    "ResourceHandle",
    "escape_markup",
    "escape_text",
    "extension_for",
    "format_bytes",
    "hex_dump",
]
