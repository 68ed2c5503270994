"""MIME type classification package."""

from .engine import Category, Classifier, classify

__all__ = ["Category", "Classifier", "classify"]
