"""
Multi-provider generation engine.

Single entry point ``generate``: selects a provider, builds the prompt,
fails over once to another provider on transient errors, parses the
response and scores the result. Either returns content or raises.
"""

import logging
import threading
import time
from typing import Any, Dict, List, Optional

from ..core.models.errors import AllProvidersFailedError, ContentWorkflowError, GenerationError
from ..core.models.generation import (
    GeneratedContent,
    GenerationMetadata,
    GenerationRequest,
    ProviderStats,
    SelectionReason,
)
from ..integrations.llm.providers import ModelParams, ProviderRegistry
from ..integrations.llm.retry_handler import classify_error, is_retryable_error
from .metrics import compute_metrics
from .parsing import make_excerpt, parse_response
from .prompts import build_prompt
from .selection import ProviderSelector


logger = logging.getLogger(__name__)


def error_message(error: BaseException) -> str:
    if isinstance(error, ContentWorkflowError):
        return error.message
    return str(error) or type(error).__name__


class GenerationEngine:
    """
    Generates content through the providers of an injected registry.

    Per-provider statistics live on the engine instance, start at zero and
    are updated after every attempt under a lock, so one engine can be
    shared by coroutines and by the thread hosting the background runner.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        selector: Optional[ProviderSelector] = None,
        params: Optional[ModelParams] = None,
        complexity_threshold: float = 0.8
    ):
        self.registry = registry
        self.selector = selector or ProviderSelector(registry, complexity_threshold=complexity_threshold)
        self.params = params or ModelParams()
        self._stats: Dict[str, ProviderStats] = {}
        self._stats_lock = threading.Lock()

        logger.info(f"GenerationEngine initialized with providers: {registry.available()}")

    @classmethod
    def from_config(cls, config, registry: Optional[ProviderRegistry] = None) -> 'GenerationEngine':
        return cls(
            registry or ProviderRegistry.from_config(config),
            params=ModelParams(
                temperature=config.LLM_TEMPERATURE,
                max_tokens=config.LLM_MAX_TOKENS,
                timeout=config.LLM_TIMEOUT,
            ),
            complexity_threshold=config.COMPLEXITY_THRESHOLD,
        )

    async def generate(self, request: GenerationRequest) -> GeneratedContent:
        """
        Generate content for a request.

        Args:
            request: Generation request

        Returns:
            Generated content with quality metadata

        Raises:
            NoProviderAvailableError: If no provider is configured
            AllProvidersFailedError: If the primary and any fallback attempt failed
        """
        selection = self.selector.select(request, self.stats_snapshot())
        primary = selection.provider
        prompt = build_prompt(request)

        try:
            return await self._attempt(primary, prompt, request, SelectionReason.PRIMARY_CHOICE)
        except Exception as primary_error:
            primary_message = error_message(primary_error)

            if not is_retryable_error(primary_error):
                logger.error(f"Non-retryable error from {primary}: {primary_message}")
                raise AllProvidersFailedError([(primary, primary_message)]) from primary_error

            alternative = self.selector.fallback_for(primary)
            if alternative is None:
                logger.error(f"{primary} failed ({classify_error(primary_error)}) and no alternative is configured")
                raise AllProvidersFailedError([(primary, primary_message)]) from primary_error

            logger.warning(
                f"{primary} failed ({classify_error(primary_error)}): {primary_message}. "
                f"Retrying with {alternative}"
            )
            try:
                return await self._attempt(
                    alternative,
                    prompt,
                    request,
                    SelectionReason.FALLBACK_AFTER_ERROR,
                    original_error=f"{primary}: {primary_message}",
                )
            except Exception as fallback_error:
                fallback_message = error_message(fallback_error)
                logger.error(f"Fallback provider {alternative} also failed: {fallback_message}")
                raise AllProvidersFailedError([
                    (primary, primary_message),
                    (alternative, fallback_message),
                ]) from fallback_error

    async def _attempt(
        self,
        provider: str,
        prompt: str,
        request: GenerationRequest,
        reason: SelectionReason,
        original_error: Optional[str] = None
    ) -> GeneratedContent:
        client = self.registry.get(provider)
        start = time.monotonic()
        try:
            response = await client.generate(prompt, self.params)
            if not response.text or not response.text.strip():
                raise GenerationError("Provider returned no content", provider=provider,
                                      model=client.model, retryable=False)
        except Exception:
            self._record(provider, False, time.monotonic() - start)
            raise

        elapsed = time.monotonic() - start
        self._record(provider, True, elapsed, response.cost)

        parsed = parse_response(response.text, fallback_title=request.topic)
        metrics = compute_metrics(parsed.title, parsed.body, request.keywords)

        logger.info(
            f"Generated '{parsed.title}' with {provider} in {elapsed:.2f}s "
            f"({metrics['word_count']} words, {reason.value})"
        )
        return GeneratedContent(
            title=parsed.title,
            body=parsed.body,
            excerpt=parsed.excerpt or make_excerpt(parsed.body),
            content_type=request.content_type,
            metadata=GenerationMetadata(
                provider=provider,
                model=response.model,
                cost=response.cost,
                word_count=metrics["word_count"],
                seo_score=metrics["seo_score"],
                readability_score=metrics["readability_score"],
                engagement_score=metrics["engagement_score"],
                tokens_used=response.total_tokens,
                selection_reason=reason,
                requested_provider=request.preferred_provider,
                response_time=elapsed,
                original_error=original_error,
            ),
        )

    def _record(self, provider: str, success: bool, response_time: float, cost: float = 0.0):
        with self._stats_lock:
            self._stats.setdefault(provider, ProviderStats()).record(success, response_time, cost)

    def stats_snapshot(self) -> Dict[str, ProviderStats]:
        with self._stats_lock:
            return {name: stats.model_copy() for name, stats in self._stats.items()}

    def get_usage_stats(self) -> Dict[str, Any]:
        """Totals, per-provider statistics and recommendations."""
        stats = self.stats_snapshot()
        total = sum(s.total_requests for s in stats.values())
        successful = sum(s.successful_requests for s in stats.values())
        return {
            "total_requests": total,
            "successful_requests": successful,
            "success_rate": round(successful / total, 3) if total else 0.0,
            "total_cost": round(sum(s.total_cost for s in stats.values()), 6),
            "available_providers": self.registry.available(),
            "providers": {name: s.to_summary() for name, s in stats.items()},
            "recommendations": self.selector.recommendations(stats),
        }

    def available_providers(self) -> List[str]:
        return self.registry.available()

    async def health_check(self) -> Dict[str, Any]:
        providers = {
            name: {"available": True, "model": self.registry.get(name).model}
            for name in self.registry.available()
        }
        return {
            "status": "healthy" if providers else "unhealthy",
            "providers": providers,
        }
