"""
LLM integration module.

This module provides a unified interface for interacting with
the AI providers used for content generation.
"""

from .providers import ModelParams, ProviderClient, ProviderRegistry, ProviderResponse
from .litellm_client import LiteLLMProvider
from .retry_handler import is_retryable_error
from .rate_limiter import RateLimiter

__all__ = [
    'ModelParams',
    'ProviderClient',
    'ProviderRegistry',
    'ProviderResponse',
    'LiteLLMProvider',
    'is_retryable_error',
    'RateLimiter'
]
