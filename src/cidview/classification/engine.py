"""MIME type classification into rendering categories.

Classification is an ordered predicate chain. Earlier rules are more specific and
must not be shadowed by the prefix and catch-all rules that follow them.
"""

from __future__ import annotations

import enum
from typing import Callable, Iterable, Sequence, Tuple

from cidview.config.models import DEFAULT_ARCHIVE_TYPES

MARKUP_TYPES = frozenset({"text/html", "application/xhtml+xml"})
JSON_TYPES = frozenset({"application/json", "text/json"})
PDF_TYPE = "application/pdf"


class Category(str, enum.Enum):
    """Closed set of rendering strategies."""

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    MARKUP_DOCUMENT = "markup_document"
    PLAIN_TEXT = "plain_text"
    PORTABLE_DOCUMENT = "portable_document"
    ARCHIVE = "archive"
    STRUCTURED_DATA = "structured_data"
    BINARY = "binary"


Rule = Tuple[Callable[[str], bool], Category]


class Classifier:
    """Map MIME type strings onto exactly one :class:`Category`."""

    def __init__(self, archive_types: Iterable[str] | None = None) -> None:
        archives = DEFAULT_ARCHIVE_TYPES if archive_types is None else archive_types
        self.archive_types = frozenset(mime.lower() for mime in archives)
        self._rules: Sequence[Rule] = (
            (lambda mime: mime.startswith("image/"), Category.IMAGE),
            (lambda mime: mime.startswith("video/"), Category.VIDEO),
            (lambda mime: mime.startswith("audio/"), Category.AUDIO),
            (lambda mime: mime in MARKUP_TYPES, Category.MARKUP_DOCUMENT),
            # text/json is a text/* subtype with its own renderer.
            (lambda mime: mime == "text/json", Category.STRUCTURED_DATA),
            (lambda mime: mime.startswith("text/"), Category.PLAIN_TEXT),
            (lambda mime: mime == PDF_TYPE, Category.PORTABLE_DOCUMENT),
            (lambda mime: mime in self.archive_types, Category.ARCHIVE),
            (lambda mime: mime in JSON_TYPES, Category.STRUCTURED_DATA),
        )

    def classify(self, mime: str) -> Category:
        """Return the category for ``mime``; unmatched types are :attr:`Category.BINARY`."""
        normalized = mime.strip().lower()
        for predicate, category in self._rules:
            if predicate(normalized):
                return category
        return Category.BINARY


_DEFAULT_CLASSIFIER = Classifier()


def classify(mime: str) -> Category:
    """Classify ``mime`` using the built-in archive set."""
    return _DEFAULT_CLASSIFIER.classify(mime)


__all__ = ["Category", "Classifier", "classify", "MARKUP_TYPES", "JSON_TYPES", "PDF_TYPE"]
