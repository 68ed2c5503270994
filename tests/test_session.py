"""Tests for the pipeline and the single-slot render session."""

import asyncio

from conftest import MemorySource, RecordingSink, StaticDetector

from cidview.ingestion import FetchResponse, Payload, TypeResolver
from cidview.rendering import HandleRegistry, RenderDispatcher, RenderError, RenderResult
from cidview.viewer import ViewPipeline, ViewSession


def _pipeline(source, *, detected=None, registry=None) -> ViewPipeline:
    return ViewPipeline(
        source,
        TypeResolver(StaticDetector(detected)),
        RenderDispatcher(registry=registry or HandleRegistry()),
    )


def test_pipeline_uses_declared_content_type() -> None:
    source = MemorySource({"ipfs://cid": (b'{"a":1}', "application/json; charset=utf-8")})

    outcome = asyncio.run(_pipeline(source).run("ipfs://cid"))

    assert isinstance(outcome, RenderResult)
    assert outcome.mime_type == "application/json"
    assert outcome.fragment.text == '{\n  "a": 1\n}'


def test_pipeline_caller_type_overrides_transport() -> None:
    source = MemorySource({"ipfs://cid": (b"hello", "application/octet-stream")})

    outcome = asyncio.run(_pipeline(source).run("ipfs://cid", declared_type="text/plain"))

    assert outcome.label == "Text (text/plain)"


def test_pipeline_detects_when_nothing_declared() -> None:
    source = MemorySource({"file.bin": (b"GIF89a", None)})

    outcome = asyncio.run(_pipeline(source, detected="image/gif").run("file.bin"))

    assert outcome.mime_type == "image/gif"


def test_pipeline_resolution_failure_is_tagged() -> None:
    class BrokenDetector:
        def detect(self, data: bytes):
            raise RuntimeError("detector crashed")

    pipeline = ViewPipeline(
        MemorySource({}), TypeResolver(BrokenDetector()), RenderDispatcher()
    )
    response = FetchResponse(locator="x", payload=Payload(b"?"))

    outcome = pipeline.render_response(response)

    assert isinstance(outcome, RenderError)
    assert outcome.stage.value == "type_resolution"


def test_pipeline_inspect_reports_origin() -> None:
    source = MemorySource({"empty": (b"", None)})

    report = asyncio.run(_pipeline(source).inspect("empty"))

    assert report.resolution.mime_type == "application/octet-stream"
    assert report.resolution.origin == "default"
    assert report.category.value == "binary"
    assert report.size_bytes == 0


def test_session_delivers_and_releases_superseded_results(sink: RecordingSink) -> None:
    registry = HandleRegistry()
    source = MemorySource({"a": (b"\x00" * 4, None), "b": (b"\x01" * 4, None)})
    session = ViewSession(_pipeline(source, registry=registry), sink)

    async def scenario():
        first = await session.show("a")
        assert registry.live_count == 1
        second = await session.show("b")
        assert first.handle.released
        assert registry.live_count == 1
        await session.close()
        assert second.handle.released
        return first, second

    first, second = asyncio.run(scenario())

    assert registry.live_count == 0
    assert [kind for kind, _ in sink.events] == ["loading", "show", "loading", "show"]
    assert session.current is None


def test_session_last_request_wins(sink: RecordingSink) -> None:
    registry = HandleRegistry()

    class SlowSource(MemorySource):
        async def fetch(self, locator, *, follow_redirects=True):
            if locator == "slow":
                await asyncio.sleep(0.05)
            return await super().fetch(locator, follow_redirects=follow_redirects)

    source = SlowSource({"slow": (b"old", "text/plain"), "fast": (b"new", "text/plain")})
    session = ViewSession(_pipeline(source, registry=registry), sink)

    async def scenario():
        slow = session.submit("slow")
        fast = session.submit("fast")
        await asyncio.wait({slow, fast})
        return slow, fast

    slow, fast = asyncio.run(scenario())

    assert slow.cancelled()
    assert session.current is fast.result()
    shown = [outcome for kind, outcome in sink.events if kind == "show"]
    assert len(shown) == 1
    assert shown[0].fragment.text == "new"


def test_session_drops_stale_result_that_ignores_cancellation(sink: RecordingSink) -> None:
    registry = HandleRegistry()

    class StubbornSource(MemorySource):
        def __init__(self, entries):
            super().__init__(entries)
            self.gate = None

        async def fetch(self, locator, *, follow_redirects=True):
            if locator == "stubborn":
                try:
                    await self.gate.wait()
                except asyncio.CancelledError:
                    await self.gate.wait()
            return await super().fetch(locator, follow_redirects=follow_redirects)

    source = StubbornSource({"stubborn": (b"\x00", None), "fresh": (b"\x01", None)})
    session = ViewSession(_pipeline(source, registry=registry), sink)

    async def scenario():
        source.gate = asyncio.Event()
        stale = session.submit("stubborn")
        await asyncio.sleep(0)
        fresh = await session.show("fresh")
        source.gate.set()
        stale_outcome = await stale
        return stale_outcome, fresh

    stale_outcome, fresh = asyncio.run(scenario())

    assert stale_outcome is None
    assert session.current is fresh
    assert registry.live_count == 1


def test_session_reports_fetch_errors_inline(sink: RecordingSink) -> None:
    session = ViewSession(_pipeline(MemorySource({})), sink)

    outcome = asyncio.run(session.show("ipfs://missing"))

    assert outcome is None
    assert session.error is not None and "not found" in session.error
    kind, message = sink.events[-1]
    assert kind == "error"
    assert "ipfs://missing" in message
