"""External services."""

from .gemini_client import GeminiTryOnClient, MODEL_NAME, TRYON_DIRECTIVE

__all__ = ["GeminiTryOnClient", "MODEL_NAME", "TRYON_DIRECTIVE"]
