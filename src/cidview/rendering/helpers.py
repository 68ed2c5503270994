"""Formatting, escaping, and lookup helpers shared by renderers."""

from __future__ import annotations

import html
from typing import Mapping

from cidview.config.models import DEFAULT_EXTENSIONS

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


def format_bytes(size: int) -> str:
    """Return a human readable size such as ``"0 Bytes"`` or ``"1.5 KB"``."""
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    rendered = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{rendered} {_SIZE_UNITS[unit]}"


def extension_for(
    mime: str,
    table: Mapping[str, str] | None = None,
    fallback: str = "bin",
) -> str:
    """Look up the file extension for ``mime``, returning ``fallback`` when unmapped."""
    lookup = DEFAULT_EXTENSIONS if table is None else table
    return lookup.get(mime.lower(), fallback)


def escape_text(text: str) -> str:
    """Escape ``&``, ``<`` and ``>`` for display inside an HTML text node."""
    return html.escape(text, quote=False)


def escape_markup(text: str) -> str:
    """Escape text for an attribute value or a raw source view (adds quotes)."""
    return html.escape(text, quote=True)


def hex_dump(data: bytes, limit: int = 256, per_line: int = 24) -> str:
    """Return lowercase hex pairs for the first ``limit`` bytes.

    Pairs are separated by single spaces and lines hold ``per_line`` bytes.
    """
    head = data[:limit]
    lines = [
        " ".join(f"{byte:02x}" for byte in head[offset : offset + per_line])
        for offset in range(0, len(head), per_line)
    ]
    return "\n".join(lines)


__all__ = ["format_bytes", "extension_for", "escape_text", "escape_markup", "hex_dump"]
