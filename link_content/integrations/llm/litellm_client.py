"""
LiteLLM provider client.

This module provides the litellm-backed ProviderClient used for every
configured AI provider.
"""

import logging
from typing import Optional, Tuple

import litellm
from litellm import acompletion
from litellm.exceptions import (
    APIConnectionError,
    APIError,
    AuthenticationError,
    BadRequestError,
    RateLimitError,
    ServiceUnavailableError,
    Timeout,
)

from ...core.models.errors import GenerationError
from .providers import ModelParams, ProviderClient, ProviderResponse
from .rate_limiter import RateLimiter
from .retry_handler import is_retryable_error


logger = logging.getLogger(__name__)

litellm.drop_params = True  # Drop parameters a provider does not support

# USD per 1K tokens (prompt, completion), used when litellm cannot price a response
FALLBACK_PRICING = {
    "openai": (0.01, 0.03),
    "gemini": (0.000075, 0.0003),
    "anthropic": (0.0008, 0.004),
}


def estimate_cost(provider: str, prompt_tokens: int, completion_tokens: int) -> float:
    prompt_price, completion_price = FALLBACK_PRICING.get(provider, (0.0, 0.0))
    return (prompt_tokens / 1000) * prompt_price + (completion_tokens / 1000) * completion_price


class LiteLLMProvider(ProviderClient):
    """
    ProviderClient over litellm ``acompletion``.

    litellm exceptions are mapped to GenerationError with ``retryable`` set,
    so the engine can decide whether to fail over to another provider.
    """

    def __init__(
        self,
        name: str,
        model: str,
        api_key: Optional[str] = None,
        api_base: Optional[str] = None,
        rate_limiter: Optional[RateLimiter] = None
    ):
        self.name = name
        self.model = model
        self.api_key = api_key
        self.api_base = api_base
        self.rate_limiter = rate_limiter

    async def generate(self, prompt: str, params: ModelParams) -> ProviderResponse:
        messages = []
        if params.system_prompt:
            messages.append({"role": "system", "content": params.system_prompt})
        messages.append({"role": "user", "content": prompt})

        request = {
            "model": self.model,
            "messages": messages,
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,
            "timeout": params.timeout,
        }
        if self.api_key:
            request["api_key"] = self.api_key
        if self.api_base:
            request["api_base"] = self.api_base

        if self.rate_limiter:
            await self.rate_limiter.wait_if_needed()

        try:
            response = await acompletion(**request)
        except AuthenticationError as e:
            raise self._error(f"Authentication failed: {str(e)}", retryable=False) from e
        except BadRequestError as e:
            raise self._error(f"Bad request: {str(e)}", retryable=False) from e
        except RateLimitError as e:
            raise self._error(f"Rate limit exceeded: {str(e)}", retryable=True) from e
        except Timeout as e:
            raise self._error(f"Request timeout: {str(e)}", retryable=True) from e
        except ServiceUnavailableError as e:
            raise self._error(f"Service unavailable (503): {str(e)}", retryable=True) from e
        except APIConnectionError as e:
            raise self._error(f"Connection error: {str(e)}", retryable=True) from e
        except APIError as e:
            status = getattr(e, "status_code", None)
            retryable = status in (429, 500, 502, 503, 504) or is_retryable_error(e)
            raise self._error(f"API error ({status}): {str(e)}", retryable=retryable) from e
        except Exception as e:
            raise self._error(f"Unexpected error: {str(e)}", retryable=is_retryable_error(e)) from e

        choice = response.choices[0]
        text = choice.message.content or ""
        prompt_tokens, completion_tokens = self._usage(response)

        return ProviderResponse(
            text=text,
            model=getattr(response, "model", None) or self.model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            cost=self._cost(response, prompt_tokens, completion_tokens),
        )

    def _error(self, message: str, retryable: bool) -> GenerationError:
        logger.error(f"{self.name} error: {message}")
        return GenerationError(message, provider=self.name, model=self.model, retryable=retryable)

    @staticmethod
    def _usage(response) -> Tuple[int, int]:
        usage = getattr(response, "usage", None)
        if not usage:
            return 0, 0
        return usage.prompt_tokens or 0, usage.completion_tokens or 0

    def _cost(self, response, prompt_tokens: int, completion_tokens: int) -> float:
        cost = (getattr(response, "_hidden_params", None) or {}).get("response_cost")
        if cost:
            return float(cost)
        return estimate_cost(self.name, prompt_tokens, completion_tokens)
