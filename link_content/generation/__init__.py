"""
Content generation module.

Provider selection, prompt construction, response parsing and quality
scoring around the configured AI providers.
"""

from .engine import GenerationEngine
from .images import ImageEnricher
from .selection import ProviderSelector, calculate_complexity

__all__ = [
    'GenerationEngine',
    'ImageEnricher',
    'ProviderSelector',
    'calculate_complexity'
]
