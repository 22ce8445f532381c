"""
Content extraction module for roasting.

Provides HTML content extraction and minimal-content detection.
"""

from roasting.extractor.content import ContentExtractor
from roasting.extractor.quality_analyzer import QualityClassifier

__all__ = [
    "ContentExtractor",
    "QualityClassifier",
]
