"""Fetch, resolve, classify, and render a single locator."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from cidview.classification import Category
from cidview.ingestion.detectors import Resolution, TypeResolver
from cidview.ingestion.models import FetchResponse
from cidview.ingestion.sources import ByteSource
from cidview.rendering import RenderDispatcher, RenderError, RenderOutcome, RenderStage

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Inspection:
    """Type diagnostics for a fetched payload.

    Attributes:
        locator: Requested locator.
        declared_type: Content type asserted by the transport or the caller.
        resolution: Resolved MIME type and its origin.
        category: Rendering category for the resolved type.
        size_bytes: Payload length.
    """

    locator: str
    declared_type: Optional[str]
    resolution: Resolution
    category: Category
    size_bytes: int


class ViewPipeline:
    """Compose a byte source, type resolver, and render dispatcher.

    Only :class:`~cidview.errors.FetchError` escapes :meth:`run`; every later
    failure is returned as a :class:`RenderError`.
    """

    def __init__(
        self,
        source: ByteSource,
        resolver: TypeResolver,
        dispatcher: RenderDispatcher,
        *,
        follow_redirects: bool = True,
    ) -> None:
        self.source = source
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.follow_redirects = follow_redirects

    async def run(self, locator: str, *, declared_type: Optional[str] = None) -> RenderOutcome:
        """Fetch ``locator`` and render it.

        Args:
            locator: Content-addressed locator, URL, or local path.
            declared_type: Caller-supplied type that overrides the transport's header.

        Raises:
            FetchError: If the byte source cannot retrieve the payload.
        """
        response = await self.source.fetch(locator, follow_redirects=self.follow_redirects)
        return self.render_response(response, declared_type=declared_type)

    def render_response(
        self, response: FetchResponse, *, declared_type: Optional[str] = None
    ) -> RenderOutcome:
        """Resolve the type of an already-fetched response and render it."""
        declared = declared_type or response.declared_type
        try:
            mime = self.resolver.resolve(declared, response.payload)
        except Exception as exc:
            LOGGER.warning("Type resolution failed for %s: %s", response.locator, exc)
            return RenderError(stage=RenderStage.TYPE_RESOLUTION, message=str(exc))
        return self.dispatcher.render(response.payload, mime)

    async def inspect(self, locator: str, *, declared_type: Optional[str] = None) -> Inspection:
        """Fetch ``locator`` and report how its type resolves without rendering."""
        response = await self.source.fetch(locator, follow_redirects=self.follow_redirects)
        declared = declared_type or response.declared_type
        resolution = self.resolver.explain(declared, response.payload)
        return Inspection(
            locator=locator,
            declared_type=declared,
            resolution=resolution,
            category=self.dispatcher.classifier.classify(resolution.mime_type),
            size_bytes=response.payload.size,
        )


__all__ = ["Inspection", "ViewPipeline"]
