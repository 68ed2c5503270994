"""Presentation sinks that display render outcomes."""

from .base import PresentationSink
from .console import ConsoleSink
from .html import HtmlSink, render_html, render_page

__all__ = ["ConsoleSink", "HtmlSink", "PresentationSink", "render_html", "render_page"]
