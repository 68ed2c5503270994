"""Tests for the HTML and console presentation sinks."""

from rich.console import Console

from cidview.ingestion import Payload
from cidview.presentation import ConsoleSink, HtmlSink, render_html, render_page
from cidview.rendering import RenderDispatcher, RenderError, RenderStage


def test_markup_is_embedded_in_sandboxed_frame() -> None:
    result = RenderDispatcher().render(Payload(b'<p onclick="x()">hi</p>'), "text/html")

    fragment = render_html(result)

    assert '<iframe sandbox="" srcdoc="&lt;p onclick=&quot;x()&quot;&gt;hi&lt;/p&gt;">' in fragment
    assert "<p onclick" not in fragment


def test_media_fragment_uses_handle_reference() -> None:
    result = RenderDispatcher().render(Payload(b"GIF89a"), "image/gif")

    fragment = render_html(result)

    assert f'src="{result.handle.reference}"' in fragment
    assert 'download="image.gif"' in fragment


def test_standalone_page_inlines_media() -> None:
    result = RenderDispatcher().render(Payload(b"%PDF-1.4"), "application/pdf")

    page = render_page(result, title="doc")

    assert page.startswith("<!DOCTYPE html>")
    assert "data:application/pdf;base64,JVBERi0xLjQ=" in page
    assert 'download="document.pdf"' in page


def test_render_error_fragment() -> None:
    error = RenderError(stage=RenderStage.RENDERING, message="<boom>")

    assert render_html(error) == (
        '<div class="error">Error rendering content (rendering): &lt;boom&gt;</div>'
    )


def test_html_sink_tracks_latest_fragment() -> None:
    sink = HtmlSink()
    sink.show_loading("ipfs://cid")
    assert "Loading ipfs://cid" in sink.fragment

    sink.show_error("Error loading content: gone")
    assert sink.fragment == '<div class="error">Error loading content: gone</div>'


def test_console_sink_prints_unescaped_text() -> None:
    console = Console(record=True, width=100)
    sink = ConsoleSink(console)

    sink.show(RenderDispatcher().render(Payload(b"a < b [bold]x[/bold]"), "text/plain"))

    output = console.export_text()
    assert "Text (text/plain)" in output
    assert "a < b [bold]x[/bold]" in output


def test_console_sink_shows_warnings_and_errors() -> None:
    console = Console(record=True, width=100)
    sink = ConsoleSink(console)

    sink.show(RenderDispatcher().render(Payload(b"PK"), "application/zip"))
    sink.show(RenderError(stage=RenderStage.RENDERING, message="bad"))

    output = console.export_text()
    assert "Cannot preview archive contents" in output
    assert "Error rendering content (rendering): bad" in output


def test_console_sink_prints_bracketed_types_literally() -> None:
    console = Console(record=True, width=100)
    sink = ConsoleSink(console)

    sink.show(RenderDispatcher().render(Payload(b"abc"), "application/[/x]"))
    sink.show(RenderDispatcher().render(Payload(b"[1, [/b]"), "application/json"))

    output = console.export_text()
    assert "Binary (application/[/x])" in output
    assert "Invalid JSON" in output
    assert "[1, [/b]" in output
