"""Single-slot render session with last-request-wins supersession."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from cidview.errors import FetchError
from cidview.presentation.base import PresentationSink
from cidview.rendering import RenderOutcome

from .pipeline import ViewPipeline

LOGGER = logging.getLogger(__name__)


class ViewSession:
    """Own the "current render" slot of one presentation sink.

    Each request gets a generation number. Submitting a new request cancels the
    previous in-flight task, and an outcome is only delivered while its
    generation is still the newest one, so a slow earlier request can never
    overwrite a later result. Delivering an outcome releases the resources of the
    outcome it replaces.
    """

    def __init__(self, pipeline: ViewPipeline, sink: PresentationSink) -> None:
        self.pipeline = pipeline
        self.sink = sink
        self._generation = 0
        self._task: Optional[asyncio.Task[Optional[RenderOutcome]]] = None
        self._current: Optional[RenderOutcome] = None
        self.error: Optional[str] = None

    @property
    def current(self) -> Optional[RenderOutcome]:
        """Return the outcome currently shown by the sink."""
        return self._current

    def submit(
        self, locator: str, *, declared_type: Optional[str] = None
    ) -> asyncio.Task[Optional[RenderOutcome]]:
        """Start rendering ``locator``, superseding any request still in flight."""
        self._generation += 1
        generation = self._generation
        if self._task is not None and not self._task.done():
            LOGGER.debug("Cancelling superseded request (generation %d)", generation - 1)
            self._task.cancel()

        self.sink.show_loading(locator)
        self._task = asyncio.create_task(self._run(generation, locator, declared_type))
        return self._task

    async def show(
        self, locator: str, *, declared_type: Optional[str] = None
    ) -> Optional[RenderOutcome]:
        """Render ``locator`` and wait for it.

        Returns:
            The delivered outcome, or None when the request failed to fetch or was
            superseded before it finished.
        """
        task = self.submit(locator, declared_type=declared_type)
        await asyncio.wait({task})
        if task.cancelled():
            return None
        return task.result()

    async def close(self) -> None:
        """Cancel pending work and release the current outcome."""
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
            await asyncio.wait({self._task})
        self._task = None
        if self._current is not None:
            self._current.release()
            self._current = None

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def _run(
        self, generation: int, locator: str, declared_type: Optional[str]
    ) -> Optional[RenderOutcome]:
        try:
            outcome = await self.pipeline.run(locator, declared_type=declared_type)
        except FetchError as exc:
            if not self._is_current(generation):
                LOGGER.debug("Ignoring fetch failure from superseded request: %s", exc)
                return None
            LOGGER.info("Fetch failed: %s", exc)
            self._replace(None)
            self.error = str(exc)
            self.sink.show_error(f"Error loading content: {exc}")
            return None

        if not self._is_current(generation):
            LOGGER.debug("Dropping stale result for %s", locator)
            outcome.release()
            return None

        self._replace(outcome)
        self.error = None
        self.sink.show(outcome)
        return outcome

    def _replace(self, outcome: Optional[RenderOutcome]) -> None:
        previous, self._current = self._current, outcome
        if previous is not None and previous is not outcome:
            previous.release()


__all__ = ["ViewSession"]
