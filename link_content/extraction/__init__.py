"""
Content extraction module.

Pulls clean article text, metadata and a quality score out of arbitrary
web pages using a layered fallback chain.
"""

from .engine import ContentExtractor, build_fallback_content
from .strategies import ExtractionStrategy, RenderedPageStrategy, StaticFetchStrategy

__all__ = [
    'ContentExtractor',
    'build_fallback_content',
    'ExtractionStrategy',
    'RenderedPageStrategy',
    'StaticFetchStrategy'
]
