"""Presentation sink contract."""

from __future__ import annotations

from typing import Protocol

from cidview.rendering import RenderOutcome


class PresentationSink(Protocol):
    """Display surface that receives render outcomes."""

    def show_loading(self, locator: str) -> None:
        """Indicate that ``locator`` is being retrieved."""

    def show(self, outcome: RenderOutcome) -> None:
        """Display a render result or an inline render error."""

    def show_error(self, message: str) -> None:
        """Display an inline error message in place of content."""


__all__ = ["PresentationSink"]
