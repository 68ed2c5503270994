"""HTML fragments for render outcomes.

Fragment text arrives already escaped from the renderers and is inserted
verbatim. Resource references are either handle references (for a host that
resolves them) or inline ``data:`` URIs for standalone pages.
"""

from __future__ import annotations

import html
import logging
from typing import Callable, List, Optional

from cidview.rendering import RenderError, RenderOutcome, RenderResult
from cidview.rendering.models import (
    DocumentFragment,
    HexFragment,
    MarkupFragment,
    MediaFragment,
    StructuredFragment,
    TextFragment,
)

LOGGER = logging.getLogger(__name__)

ReferenceResolver = Callable[[RenderResult, str], str]

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
</head>
<body>
<main id="app">
{body}
</main>
</body>
</html>
"""


def handle_reference(result: RenderResult, reference: str) -> str:
    """Keep the handle reference as-is."""
    return reference


def inline_reference(result: RenderResult, reference: str) -> str:
    """Replace the handle reference with a ``data:`` URI of the payload."""
    handle = result.handle
    if handle is None or handle.released or handle.reference != reference:
        return reference
    return handle.data_uri()


def _attr(value: str) -> str:
    return html.escape(value, quote=True)


def render_error_html(message: str) -> str:
    """Return the inline error fragment shown in place of content."""
    return f'<div class="error">{html.escape(message, quote=False)}</div>'


def render_html(outcome: RenderOutcome, *, resolve: Optional[ReferenceResolver] = None) -> str:
    """Return the HTML fragment describing ``outcome``."""
    if isinstance(outcome, RenderError):
        return render_error_html(f"Error rendering content ({outcome.stage.value}): {outcome.message}")

    resolve = resolve or handle_reference
    fragment = outcome.fragment
    parts: List[str] = [f"<h3>{html.escape(outcome.label, quote=False)}</h3>"]

    if isinstance(fragment, MediaFragment):
        source = _attr(resolve(outcome, fragment.source))
        if fragment.element == "img":
            parts.append(f'<img src="{source}" alt="Image">')
        else:
            parts.append(
                f"<{fragment.element} controls>"
                f'<source src="{source}" type="{_attr(fragment.mime_type)}">'
                f"</{fragment.element}>"
            )
    elif isinstance(fragment, MarkupFragment):
        parts.append(f'<iframe sandbox="{_attr(fragment.sandbox)}" srcdoc="{fragment.srcdoc}"></iframe>')
        parts.append(
            "<details><summary>View Source</summary>"
            f"<pre>{fragment.source_view}</pre></details>"
        )
    elif isinstance(fragment, (TextFragment, StructuredFragment)):
        parts.append(f"<pre>{fragment.text}</pre>")
        if isinstance(fragment, StructuredFragment) and fragment.error:
            parts.append(f'<p class="error">Error: {html.escape(fragment.error, quote=False)}</p>')
    elif isinstance(fragment, DocumentFragment):
        parts.append(f'<iframe src="{_attr(resolve(outcome, fragment.source))}"></iframe>')
    elif isinstance(fragment, HexFragment):
        parts.append(
            f"<details><summary>Hex Preview (first {fragment.preview_bytes} bytes)</summary>"
            f"<pre>{fragment.dump}</pre></details>"
        )

    parts.append(f"<p>Size: {html.escape(outcome.size_label, quote=False)}</p>")
    for warning in outcome.warnings:
        parts.append(f'<p class="warning">{html.escape(warning, quote=False)}</p>')
    if outcome.download is not None and outcome.download.reference:
        href = _attr(resolve(outcome, outcome.download.reference))
        parts.append(f'<a href="{href}" download="{_attr(outcome.download.filename)}">Download</a>')

    return '<section class="render">\n' + "\n".join(parts) + "\n</section>"


def render_page(outcome: RenderOutcome, *, title: str = "cidview") -> str:
    """Return a standalone HTML document with media inlined as ``data:`` URIs."""
    body = render_html(outcome, resolve=inline_reference)
    return _PAGE_TEMPLATE.format(title=html.escape(title, quote=False), body=body)


class HtmlSink:
    """Presentation sink that keeps the latest HTML fragment for a display slot."""

    def __init__(self, *, inline_media: bool = False) -> None:
        self.inline_media = inline_media
        self.fragment: str = ""

    def show_loading(self, locator: str) -> None:
        self.fragment = f'<div class="loading">Loading {html.escape(locator, quote=False)}...</div>'

    def show(self, outcome: RenderOutcome) -> None:
        resolve = inline_reference if self.inline_media else handle_reference
        self.fragment = render_html(outcome, resolve=resolve)

    def show_error(self, message: str) -> None:
        LOGGER.debug("Displaying inline error: %s", message)
        self.fragment = render_error_html(message)


__all__ = [
    "HtmlSink",
    "handle_reference",
    "inline_reference",
    "render_error_html",
    "render_html",
    "render_page",
]
