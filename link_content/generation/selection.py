"""
Provider selection.

Honours an available preferred provider; otherwise scores request
complexity, prefers the fast/cheap provider for ordinary requests and the
high-capability provider for complex ones, and lets running success rates
override a choice that has been clearly unreliable.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from ..core.models.errors import NoProviderAvailableError
from ..core.models.generation import (
    ContentType,
    GenerationRequest,
    ProviderName,
    ProviderPreference,
    ProviderStats,
)
from ..integrations.llm.providers import ProviderRegistry


logger = logging.getLogger(__name__)

# Fixed priority order; also the fast/cheap preference order.
PRIORITY_ORDER = (ProviderName.GEMINI.value, ProviderName.OPENAI.value, ProviderName.ANTHROPIC.value)
CAPABLE_ORDER = (ProviderName.OPENAI.value, ProviderName.ANTHROPIC.value, ProviderName.GEMINI.value)

CONTENT_TYPE_WEIGHTS = {
    ContentType.BLOG_POST: 0.4,
    ContentType.EMAIL: 0.3,
    ContentType.AD_COPY: 0.2,
    ContentType.SOCIAL_MEDIA: 0.1,
}
VOCABULARY_WEIGHTS = {
    "industry-specific": 0.3,
    "advanced": 0.15,
}
COMPREHENSIVE_LENGTH_WEIGHT = 0.2
TECHNICAL_STYLE_WEIGHT = 0.2
LONG_CONTEXT_WEIGHT = 0.1
LONG_CONTEXT_CHARS = 100


def calculate_complexity(request: GenerationRequest) -> float:
    """
    Composite complexity score of a request.

    Args:
        request: Generation request

    Returns:
        Score between 0 and 1, rounded to two decimals
    """
    voice = request.brand_voice
    score = CONTENT_TYPE_WEIGHTS.get(ContentType(request.content_type), 0.0)
    score += VOCABULARY_WEIGHTS.get((voice.vocabulary or "").lower(), 0.0)
    if (voice.length or "").lower() == "comprehensive":
        score += COMPREHENSIVE_LENGTH_WEIGHT
    if (voice.style or "").lower() == "technical":
        score += TECHNICAL_STYLE_WEIGHT
    if len(request.context or "") > LONG_CONTEXT_CHARS:
        score += LONG_CONTEXT_WEIGHT
    return round(min(score, 1.0), 2)


@dataclass
class ProviderSelection:
    """Outcome of provider selection for one request."""

    provider: str
    requested: ProviderPreference
    complexity: float
    reason: str


class ProviderSelector:
    """Chooses the primary provider and the fallback for a request."""

    def __init__(
        self,
        registry: ProviderRegistry,
        complexity_threshold: float = 0.8,
        reliability_margin: float = 0.2,
        min_samples: int = 5
    ):
        self.registry = registry
        self.complexity_threshold = complexity_threshold
        self.reliability_margin = reliability_margin
        self.min_samples = min_samples

    def ordered(self, order) -> List[str]:
        """Available providers in ``order``, then any others in registration order."""
        names = [name for name in order if self.registry.is_available(name)]
        names.extend(name for name in self.registry.available() if name not in names)
        return names

    def select(
        self,
        request: GenerationRequest,
        stats: Optional[Mapping[str, ProviderStats]] = None
    ) -> ProviderSelection:
        """
        Select the primary provider.

        Raises:
            NoProviderAvailableError: If no provider is configured
        """
        if not self.registry.available():
            raise NoProviderAvailableError()

        requested = ProviderPreference(request.preferred_provider)
        if requested != ProviderPreference.AUTO:
            if self.registry.is_available(requested.value):
                return ProviderSelection(requested.value, requested, calculate_complexity(request), "preferred")
            logger.warning(f"Preferred provider {requested.value} not configured, using automatic selection")

        complexity = calculate_complexity(request)
        if complexity > self.complexity_threshold:
            candidates, reason = self.ordered(CAPABLE_ORDER), "high_complexity"
        else:
            candidates, reason = self.ordered(PRIORITY_ORDER), "fast_default"

        choice = candidates[0]
        adjusted = self._adjust_for_reliability(choice, candidates, stats or {})
        if adjusted != choice:
            choice, reason = adjusted, "reliability"

        logger.debug(f"Selected provider {choice} ({reason}, complexity {complexity})")
        return ProviderSelection(choice, requested, complexity, reason)

    def _adjust_for_reliability(
        self,
        choice: str,
        candidates: List[str],
        stats: Mapping[str, ProviderStats]
    ) -> str:
        current = stats.get(choice)
        if current is None or current.total_requests < self.min_samples:
            return choice

        best = choice
        best_rate = current.success_rate
        for name in candidates:
            other = stats.get(name)
            if name == choice or other is None or other.total_requests < self.min_samples:
                continue
            if other.success_rate > current.success_rate + self.reliability_margin and other.success_rate > best_rate:
                best, best_rate = name, other.success_rate
        return best

    def fallback_for(self, failed: str) -> Optional[str]:
        """Next available provider in priority order, skipping the failed one."""
        for name in self.ordered(PRIORITY_ORDER):
            if name != failed:
                return name
        return None

    def recommendations(self, stats: Dict[str, ProviderStats]) -> List[str]:
        """Human-readable hints derived from the running statistics."""
        hints = []
        sampled = {name: s for name, s in stats.items() if s.total_requests >= self.min_samples}
        for name, s in sampled.items():
            if s.success_rate < 0.8:
                hints.append(f"{name} success rate is {s.success_rate:.0%}; check its quota and API key")
        if len(sampled) > 1:
            fastest = min(sampled, key=lambda name: sampled[name].average_response_time)
            cheapest = min(sampled, key=lambda name: sampled[name].total_cost / sampled[name].total_requests)
            hints.append(f"{fastest} has the lowest average response time")
            hints.append(f"{cheapest} has the lowest cost per request")
        if not self.registry.available():
            hints.append("No AI providers configured; set OPENAI_API_KEY, GEMINI_API_KEY or ANTHROPIC_API_KEY")
        return hints
