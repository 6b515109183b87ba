"""
Clink Module
============

Clinkcode marker decoding from the per-frame clink data buffer.
"""

from .code import ClinkCode, decode_clinkcode, read_code
from .detector import ClinkDetector, DetectionResult
from .layout import GridLayout
from .tags import ExtractedTag, OppositeTagPair, extract_tags_by_type

__all__ = [
    "ClinkCode",
    "ClinkDetector",
    "DetectionResult",
    "ExtractedTag",
    "GridLayout",
    "OppositeTagPair",
    "decode_clinkcode",
    "extract_tags_by_type",
    "read_code",
]
