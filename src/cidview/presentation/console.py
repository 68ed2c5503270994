"""Rich console presentation sink used by the CLI."""

from __future__ import annotations

import html
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from cidview.rendering import RenderError, RenderOutcome, RenderResult
from cidview.rendering.models import (
    DocumentFragment,
    HexFragment,
    MarkupFragment,
    MediaFragment,
    StructuredFragment,
    TextFragment,
)


class ConsoleSink:
    """Print render outcomes to a terminal.

    Fragment text is stored HTML-escaped, so it is unescaped before printing.
    Labels, MIME types, metadata, and fragment text are always wrapped in plain
    ``Text`` because they come from the payload or the transport and must never be
    read as Rich markup.
    """

    def __init__(self, console: Optional[Console] = None, *, quiet: bool = False) -> None:
        self.console = console or Console()
        self.quiet = quiet

    def show_loading(self, locator: str) -> None:
        if not self.quiet:
            self.console.print(Text(f"Loading {locator}...", style="blue"))

    def show_error(self, message: str) -> None:
        self.console.print(Text(message, style="bold red"))

    def show(self, outcome: RenderOutcome) -> None:
        if isinstance(outcome, RenderError):
            self.show_error(
                f"Error rendering content ({outcome.stage.value}): {outcome.message}"
            )
            return
        if self.quiet:
            return
        self.console.print(self._summary(outcome))
        body = self._body(outcome)
        if body is not None:
            self.console.print(body)
        for warning in outcome.warnings:
            self.console.print(Text(f"Warning: {warning}", style="yellow"))

    def _summary(self, result: RenderResult) -> Table:
        table = Table(title=Text(result.label), show_header=False)
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("MIME type", Text(result.mime_type))
        table.add_row("Category", result.category.value)
        table.add_row("Size", result.size_label)
        for key, value in result.metadata.items():
            table.add_row(Text(key), Text(value))
        if result.download is not None:
            table.add_row("Download", Text(result.download.filename))
        return table

    def _body(self, result: RenderResult) -> Panel | Syntax | Text | None:
        fragment = result.fragment
        if isinstance(fragment, StructuredFragment):
            text = html.unescape(fragment.text)
            if fragment.valid:
                return Syntax(text, "json", word_wrap=True)
            return Panel(Text(text), title=Text(f"Invalid JSON: {fragment.error}"), border_style="red")
        if isinstance(fragment, TextFragment):
            return Panel(Text(html.unescape(fragment.text)), title="Text")
        if isinstance(fragment, MarkupFragment):
            return Syntax(html.unescape(fragment.source_view), "html", word_wrap=True)
        if isinstance(fragment, HexFragment):
            title = f"Hex Preview (first {fragment.preview_bytes} bytes)"
            return Panel(Text(fragment.dump), title=title)
        if isinstance(fragment, (MediaFragment, DocumentFragment)):
            return Text(
                f"Embedded {result.category.value} resource {fragment.source}; "
                "use --html to write a viewable page.",
                style="dim",
            )
        return None


__all__ = ["ConsoleSink"]
