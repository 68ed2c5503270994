"""Route classified payloads to renderers behind a failure boundary."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from cidview.classification import Category, Classifier
from cidview.config.models import RenderingSettings
from cidview.ingestion.models import Payload

from .handles import HandleRegistry, ResourceHandle
from .models import RenderError, RenderOutcome, RenderStage
from .renderers import DEFAULT_RENDERERS, HANDLE_CATEGORIES, RenderContext, Renderer

LOGGER = logging.getLogger(__name__)


class RenderDispatcher:
    """Classify a payload's MIME type and invoke the matching renderer.

    The dispatcher never raises for classification or rendering problems; they
    come back as :class:`RenderError` values tagged with the failing stage.
    """

    def __init__(
        self,
        settings: RenderingSettings | None = None,
        *,
        registry: HandleRegistry | None = None,
        classifier: Classifier | None = None,
        renderers: Mapping[Category, Renderer] | None = None,
    ) -> None:
        self.settings = settings or RenderingSettings()
        self.registry = registry or HandleRegistry()
        self.classifier = classifier or Classifier(self.settings.archive_types)
        self.renderers = dict(DEFAULT_RENDERERS)
        if renderers:
            self.renderers.update(renderers)

    def render(self, payload: Payload, mime: str) -> RenderOutcome:
        """Return a render result for ``payload``, or a render error."""
        try:
            category = self.classifier.classify(mime)
        except Exception as exc:
            LOGGER.warning("Classification failed for %r: %s", mime, exc)
            return RenderError(stage=RenderStage.CLASSIFICATION, message=str(exc), mime_type=mime)

        renderer = self.renderers[category]
        handle: Optional[ResourceHandle] = None
        if category in HANDLE_CATEGORIES:
            handle = self.registry.create(payload.data, mime)

        try:
            result = renderer(payload, mime, RenderContext(settings=self.settings, handle=handle))
        except Exception as exc:
            if handle is not None:
                handle.release()
            LOGGER.warning("Rendering %s payload failed: %s", category.value, exc)
            return RenderError(
                stage=RenderStage.RENDERING,
                message=str(exc) or type(exc).__name__,
                mime_type=mime,
            )

        LOGGER.debug("Rendered %s as %s (%d bytes)", mime, category.value, result.size_bytes)
        return result.attach(handle)


__all__ = ["RenderDispatcher"]
