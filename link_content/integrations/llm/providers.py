"""
Provider client interface and registry.

Each AI backend is a ProviderClient reached by name through an explicitly
constructed ProviderRegistry that is handed to the generation engine.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


class ModelParams(BaseModel):
    """Sampling parameters for one provider call."""

    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=4096, ge=1, le=100000)
    timeout: int = Field(default=120, ge=1, le=600, description="Request timeout in seconds")
    system_prompt: Optional[str] = None


class ProviderResponse(BaseModel):
    """Raw text returned by a provider."""

    model_config = {"protected_namespaces": ()}

    text: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    cost: float = 0.0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class ProviderClient(ABC):
    """An AI text-generation backend."""

    name: str
    model: str

    @abstractmethod
    async def generate(self, prompt: str, params: ModelParams) -> ProviderResponse:
        """
        Generate text for a prompt.

        Raises:
            GenerationError: With ``retryable`` set for transient failures
        """


class ProviderRegistry:
    """Configured provider clients, keyed by provider name."""

    def __init__(self, clients: Iterable[ProviderClient] = ()):
        self._clients: Dict[str, ProviderClient] = {}
        for client in clients:
            self.register(client)

    def register(self, client: ProviderClient):
        self._clients[client.name] = client
        logger.info(f"Provider registered: {client.name} ({client.model})")

    def get(self, name: str) -> Optional[ProviderClient]:
        return self._clients.get(name)

    def is_available(self, name: str) -> bool:
        return name in self._clients

    def available(self) -> List[str]:
        return list(self._clients)

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, name: str) -> bool:
        return name in self._clients

    @classmethod
    def from_config(cls, config) -> 'ProviderRegistry':
        """
        Build a registry with one litellm-backed client per configured key.

        Args:
            config: Application configuration

        Returns:
            Registry holding only providers whose key is set and not a placeholder
        """
        from .litellm_client import LiteLLMProvider
        from .rate_limiter import RateLimiter
        from ...utils.config import is_configured_key

        entries = [
            ("openai", config.OPENAI_API_KEY, config.OPENAI_MODEL),
            ("gemini", config.GEMINI_API_KEY, config.GEMINI_MODEL),
            ("anthropic", config.ANTHROPIC_API_KEY, config.ANTHROPIC_MODEL),
        ]

        registry = cls()
        for name, api_key, model in entries:
            if not is_configured_key(api_key):
                logger.info(f"Provider {name} not configured")
                continue
            registry.register(LiteLLMProvider(
                name=name,
                model=model,
                api_key=api_key,
                rate_limiter=RateLimiter(requests_per_minute=config.LLM_REQUESTS_PER_MINUTE),
            ))

        if not registry:
            logger.warning("No AI providers configured")
        return registry
