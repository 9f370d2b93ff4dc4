"""Data models for the Fitting Room pipeline."""

from .image import SourceFile, PreparedImage
from .result import TryOnResult, TryOnState, OrchestratorSnapshot

__all__ = [
    "SourceFile",
    "PreparedImage",
    "TryOnResult",
    "TryOnState",
    "OrchestratorSnapshot",
]
