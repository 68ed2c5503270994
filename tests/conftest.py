"""Shared fixtures and test doubles."""

from __future__ import annotations

from typing import Dict, Optional

import pytest

from cidview.errors import FetchError
from cidview.ingestion import FetchResponse, Payload


class StaticDetector:
    """Signature detector that returns a fixed answer and counts calls."""

    def __init__(self, answer: Optional[str] = None) -> None:
        self.answer = answer
        self.calls = 0

    def detect(self, data: bytes) -> Optional[str]:
        self.calls += 1
        return self.answer


class MemorySource:
    """Byte source serving canned responses keyed by locator."""

    def __init__(self, entries: Dict[str, tuple[bytes, Optional[str]]]) -> None:
        self.entries = entries
        self.requests: list[str] = []

    async def fetch(self, locator: str, *, follow_redirects: bool = True) -> FetchResponse:
        self.requests.append(locator)
        if locator not in self.entries:
            raise FetchError(locator, "not found")
        data, declared = self.entries[locator]
        return FetchResponse(locator=locator, payload=Payload(data), declared_type=declared)


class RecordingSink:
    """Presentation sink that records every call."""

    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []

    def show_loading(self, locator: str) -> None:
        self.events.append(("loading", locator))

    def show(self, outcome) -> None:
        self.events.append(("show", outcome))

    def show_error(self, message: str) -> None:
        self.events.append(("error", message))


@pytest.fixture
def detector() -> StaticDetector:
    return StaticDetector()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
