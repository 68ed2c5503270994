"""Request orchestration for the viewer."""

from .pipeline import Inspection, ViewPipeline
from .session import ViewSession

__all__ = ["Inspection", "ViewPipeline", "ViewSession"]
