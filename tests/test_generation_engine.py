"""
Tests for provider selection and the multi-provider generation engine.
"""

import asyncio

import pytest

from helpers import FakeProvider, make_engine
from link_content.core.models.errors import (
    AllProvidersFailedError,
    GenerationError,
    NoProviderAvailableError,
)
from link_content.core.models.generation import (
    BrandVoice,
    ContentType,
    GenerationRequest,
    ProviderPreference,
    ProviderStats,
    SelectionReason,
)
from link_content.generation.prompts import build_prompt
from link_content.generation.selection import ProviderSelector, calculate_complexity
from link_content.integrations.llm.providers import ProviderRegistry
from link_content.integrations.llm.retry_handler import classify_error, is_retryable_error


def make_request(**kwargs):
    kwargs.setdefault("topic", "Wedding traditions")
    return GenerationRequest(**kwargs)


def registry(*names):
    return ProviderRegistry([FakeProvider(name) for name in names])


class TestComplexity:

    def test_blog_post_with_long_context(self):
        request = make_request(context="x" * 200)

        assert calculate_complexity(request) == 0.5

    def test_technical_comprehensive_industry_content(self):
        request = make_request(brand_voice=BrandVoice(
            vocabulary="industry-specific", length="comprehensive", style="technical"
        ))

        assert calculate_complexity(request) == 1.0

    def test_short_social_post(self):
        assert calculate_complexity(make_request(content_type=ContentType.SOCIAL_MEDIA)) == 0.1


class TestProviderSelector:

    def test_preferred_provider_wins_when_available(self):
        selector = ProviderSelector(registry("gemini", "openai"))

        selection = selector.select(make_request(preferred_provider=ProviderPreference.OPENAI))

        assert selection.provider == "openai"
        assert selection.reason == "preferred"

    def test_unavailable_preference_falls_back_to_automatic(self):
        selector = ProviderSelector(registry("gemini"))

        selection = selector.select(make_request(preferred_provider=ProviderPreference.ANTHROPIC))

        assert selection.provider == "gemini"
        assert selection.requested == ProviderPreference.ANTHROPIC

    def test_simple_requests_go_to_the_fast_provider(self):
        selector = ProviderSelector(registry("openai", "gemini"))

        selection = selector.select(make_request(context="x" * 200))

        assert selection.provider == "gemini"
        assert selection.reason == "fast_default"

    def test_complex_requests_go_to_the_capable_provider(self):
        selector = ProviderSelector(registry("gemini", "openai"))
        request = make_request(brand_voice=BrandVoice(vocabulary="industry-specific", length="comprehensive"))

        selection = selector.select(request)

        assert selection.provider == "openai"
        assert selection.reason == "high_complexity"

    def test_unreliable_provider_is_avoided(self):
        selector = ProviderSelector(registry("gemini", "openai"))
        stats = {
            "gemini": ProviderStats(total_requests=10, successful_requests=4, failed_requests=6),
            "openai": ProviderStats(total_requests=10, successful_requests=10),
        }

        selection = selector.select(make_request(), stats)

        assert selection.provider == "openai"
        assert selection.reason == "reliability"

    def test_fallback_excludes_failed_provider(self):
        selector = ProviderSelector(registry("openai", "gemini", "anthropic"))

        assert selector.fallback_for("gemini") == "openai"
        assert selector.fallback_for("openai") == "gemini"
        assert ProviderSelector(registry("gemini")).fallback_for("gemini") is None

    def test_no_providers(self):
        with pytest.raises(NoProviderAvailableError):
            ProviderSelector(registry()).select(make_request())


class TestGenerationEngine:

    def test_primary_choice(self):
        gemini = FakeProvider("gemini", cost=0.002)
        engine = make_engine(gemini, FakeProvider("openai"))

        content = asyncio.run(engine.generate(make_request(keywords=["wedding"])))

        assert content.title == "A Fresh Look at Wedding Traditions"
        assert content.excerpt == "Families gather to celebrate."
        assert content.content_type == ContentType.BLOG_POST
        metadata = content.metadata
        assert metadata.provider == "gemini"
        assert metadata.model == "gemini-test-model"
        assert metadata.selection_reason == SelectionReason.PRIMARY_CHOICE
        assert metadata.original_error is None
        assert metadata.tokens_used == 300
        assert metadata.cost == 0.002
        assert 0 <= metadata.seo_score <= 100

    def test_transient_error_falls_back_once(self):
        gemini = FakeProvider("gemini", error=Exception("503 Service Unavailable"))
        openai = FakeProvider("openai")
        engine = make_engine(gemini, openai)

        content = asyncio.run(engine.generate(make_request()))

        assert content.metadata.provider == "openai"
        assert content.metadata.selection_reason == SelectionReason.FALLBACK_AFTER_ERROR
        assert content.metadata.original_error == "gemini: 503 Service Unavailable"
        assert openai.prompts == gemini.prompts

    def test_non_retryable_error_is_not_retried(self):
        gemini = FakeProvider("gemini", error=Exception("invalid api key"))
        openai = FakeProvider("openai")
        engine = make_engine(gemini, openai)

        with pytest.raises(AllProvidersFailedError) as exc_info:
            asyncio.run(engine.generate(make_request()))

        assert exc_info.value.message == "AI content generation failed. Provider (gemini): invalid api key"
        assert openai.calls == 0

    def test_both_providers_failing(self):
        engine = make_engine(
            FakeProvider("gemini", error=TimeoutError("request timed out")),
            FakeProvider("openai", error=Exception("429 Too Many Requests")),
            FakeProvider("anthropic"),
        )

        with pytest.raises(AllProvidersFailedError) as exc_info:
            asyncio.run(engine.generate(make_request()))

        assert exc_info.value.message == (
            "All AI providers failed. Primary (gemini): request timed out. "
            "Alternative (openai): 429 Too Many Requests"
        )
        assert engine.registry.get("anthropic").calls == 0

    def test_empty_response_is_terminal(self):
        gemini = FakeProvider("gemini", text="   ")
        openai = FakeProvider("openai")
        engine = make_engine(gemini, openai)

        with pytest.raises(AllProvidersFailedError) as exc_info:
            asyncio.run(engine.generate(make_request()))

        assert "Provider returned no content" in exc_info.value.message
        assert openai.calls == 0

    def test_usage_stats(self):
        engine = make_engine(
            FakeProvider("gemini", error=Exception("503 Service Unavailable")),
            FakeProvider("openai", cost=0.01),
        )

        asyncio.run(engine.generate(make_request()))
        stats = engine.get_usage_stats()

        assert stats["total_requests"] == 2
        assert stats["successful_requests"] == 1
        assert stats["success_rate"] == 0.5
        assert stats["total_cost"] == 0.01
        assert stats["providers"]["gemini"]["failed_requests"] == 1
        assert stats["available_providers"] == ["gemini", "openai"]

    def test_stats_start_at_zero_per_engine(self):
        first = make_engine(FakeProvider("gemini"))
        asyncio.run(first.generate(make_request()))

        second = make_engine(FakeProvider("gemini"))

        assert second.get_usage_stats()["total_requests"] == 0

    def test_health_check(self):
        assert asyncio.run(make_engine(FakeProvider("gemini")).health_check())["status"] == "healthy"
        assert asyncio.run(make_engine().health_check())["status"] == "unhealthy"


class TestPrompts:

    def test_generic_prompt_asks_for_json(self):
        prompt = build_prompt(make_request(
            keywords=["venue", "budget"],
            special_instructions="Mention spring dates",
            language="vi",
        ))

        assert prompt.startswith("Write a blog post about: Wedding traditions")
        assert "Keywords to include naturally: venue, budget" in prompt
        assert "write entirely in Vietnamese" in prompt
        assert "Mention spring dates" in prompt
        assert '"title"' in prompt

    def test_detailed_instructions_are_sent_verbatim(self):
        context = "Custom block\n### CRITICAL RULES\n1. Be brief"

        assert build_prompt(make_request(context=context)) == context


class TestRetryClassification:

    def test_transient_errors(self):
        assert is_retryable_error(Exception("503 Service Unavailable"))
        assert is_retryable_error(TimeoutError())
        assert is_retryable_error(Exception("Rate limit reached"))
        assert is_retryable_error(GenerationError("upstream", retryable=True))

    def test_terminal_errors(self):
        assert not is_retryable_error(Exception("invalid api key"))
        assert not is_retryable_error(GenerationError("bad request", retryable=False))

    def test_classify(self):
        assert classify_error(Exception("request timed out")) == "timeout"
        assert classify_error(Exception("429 Too Many Requests")) == "rate_limit"
        assert classify_error(Exception("502 Bad Gateway")) == "server_error"
        assert classify_error(Exception("bad prompt")) == "other"
