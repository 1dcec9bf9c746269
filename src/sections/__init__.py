"""
Public API for the sections package.
Usage:
    from sections import SectionRegistry, ResponseNormalizer
"""
from .registry import SectionRegistry
from .response import ResponseNormalizer, DetectedShape, detect_shape, normalize, denormalize, extract_metadata

__all__ = [
    "SectionRegistry",
    "ResponseNormalizer", "DetectedShape",
    "detect_shape", "normalize", "denormalize", "extract_metadata",
]
