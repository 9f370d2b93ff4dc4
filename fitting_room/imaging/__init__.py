"""Client-side image preparation."""

from .normalizer import ImageNormalizer, RotateDirection, normalize_quarters, prepare_image
from .previews import PreviewStore

__all__ = [
    "ImageNormalizer",
    "RotateDirection",
    "normalize_quarters",
    "prepare_image",
    "PreviewStore",
]
