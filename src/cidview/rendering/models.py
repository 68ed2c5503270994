"""Render result and error models."""

from __future__ import annotations

import enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, PrivateAttr

from cidview.classification import Category

from .handles import ResourceHandle


class MediaFragment(BaseModel):
    """Media element (image, video, or audio) pointing at a resource handle."""

    kind: Literal["media"] = "media"
    element: Literal["img", "video", "audio"]
    source: str
    mime_type: str


class MarkupFragment(BaseModel):
    """Sandboxed document view plus escaped raw source.

    Attributes:
        srcdoc: Escaped document, safe to place in a ``srcdoc`` attribute.
        source_view: Escaped raw markup for a preformatted source listing.
        sandbox: Sandbox policy for the isolated frame; empty means fully restricted.
    """

    kind: Literal["markup"] = "markup"
    srcdoc: str
    source_view: str
    sandbox: str = ""


class TextFragment(BaseModel):
    """Escaped preformatted text."""

    kind: Literal["text"] = "text"
    text: str


class DocumentFragment(BaseModel):
    """Embedded portable document."""

    kind: Literal["document"] = "document"
    source: str


class ArchiveFragment(BaseModel):
    """Archive placeholder; contents are never listed."""

    kind: Literal["archive"] = "archive"
    source: str


class StructuredFragment(BaseModel):
    """Escaped JSON text, pretty-printed when the payload parsed."""

    kind: Literal["structured"] = "structured"
    text: str
    valid: bool = True
    error: Optional[str] = None


class HexFragment(BaseModel):
    """Hex dump of the leading payload bytes."""

    kind: Literal["hex"] = "hex"
    dump: str
    preview_bytes: int


Fragment = Annotated[
    Union[
        MediaFragment,
        MarkupFragment,
        TextFragment,
        DocumentFragment,
        ArchiveFragment,
        StructuredFragment,
        HexFragment,
    ],
    Field(discriminator="kind"),
]


class DownloadDescriptor(BaseModel):
    """Suggested download for the rendered payload."""

    filename: str
    extension: str
    reference: Optional[str] = None


class RenderResult(BaseModel):
    """Human-viewable description of a rendered payload.

    The result owns at most one resource handle. Call :meth:`release` when the
    result is discarded or superseded.
    """

    label: str
    category: Category
    mime_type: str
    size_bytes: int
    size_label: str
    fragment: Fragment
    download: Optional[DownloadDescriptor] = None
    warnings: List[str] = Field(default_factory=list)
    metadata: Dict[str, str] = Field(default_factory=dict)

    _handle: Optional[ResourceHandle] = PrivateAttr(default=None)

    @property
    def handle(self) -> Optional[ResourceHandle]:
        return self._handle

    def attach(self, handle: Optional[ResourceHandle]) -> "RenderResult":
        """Bind the resource handle whose lifetime follows this result."""
        self._handle = handle
        return self

    def release(self) -> None:
        """Release the owned resource handle, if any."""
        if self._handle is not None:
            self._handle.release()


class RenderStage(str, enum.Enum):
    """Pipeline stage a render error originated from."""

    TYPE_RESOLUTION = "type_resolution"
    CLASSIFICATION = "classification"
    RENDERING = "rendering"


class RenderError(BaseModel):
    """Tagged failure handed to the presentation sink instead of an exception."""

    stage: RenderStage
    message: str
    mime_type: Optional[str] = None

    def release(self) -> None:
        """Errors own no resources; present for symmetry with :class:`RenderResult`."""


RenderOutcome = Union[RenderResult, RenderError]


__all__ = [
    "ArchiveFragment",
    "DocumentFragment",
    "DownloadDescriptor",
    "Fragment",
    "HexFragment",
    "MarkupFragment",
    "MediaFragment",
    "RenderError",
    "RenderOutcome",
    "RenderResult",
    "RenderStage",
    "StructuredFragment",
    "TextFragment",
]
