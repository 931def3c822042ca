"""
Test doubles for the link content workflow tests.

Fake providers, extractors, galleries and publishers stand in for the
network-bound collaborators.
"""

import asyncio
from typing import Callable, Dict, List, Optional, Union

from link_content.core.models.extraction import (
    ExtractedContent,
    ExtractedMetadata,
    ExtractionStrategyName,
)
from link_content.core.models.generation import GalleryImage, GeneratedContent
from link_content.core.models.workflow import PublishResult
from link_content.extraction.engine import build_fallback_content
from link_content.generation.engine import GenerationEngine
from link_content.integrations.collaborators import ImageGallery, Publisher
from link_content.integrations.llm.providers import (
    ModelParams,
    ProviderClient,
    ProviderRegistry,
    ProviderResponse,
)
from link_content.workflow.orchestrator import BatchWorkflowOrchestrator, WorkflowSettings
from link_content.workflow.repository import InMemoryJobRepository

LOREM = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit. Sed do eiusmod tempor "
    "incididunt ut labore et dolore magna aliqua.\n\n"
    "Ut enim ad minim veniam, quis nostrud exercitation ullamco laboris nisi ut aliquip "
    "ex ea commodo consequat."
)

JSON_ARTICLE = (
    '{"title": "A Fresh Look at Wedding Traditions", '
    '"body": "<h2>Why traditions matter</h2><p>Families gather to celebrate.</p>", '
    '"excerpt": "Families gather to celebrate."}'
)


def make_extracted(
    url: str = "https://example.com/article",
    title: str = "Wedding traditions explained",
    body: str = LOREM,
    quality: int = 40,
    language: str = "en"
) -> ExtractedContent:
    return ExtractedContent(
        source_url=url,
        title=title,
        body=body,
        excerpt=body[:100],
        metadata=ExtractedMetadata(
            language=language,
            domain="example.com",
            word_count=len(body.split()),
            read_time=1,
            strategy=ExtractionStrategyName.STATIC,
        ),
        quality_score=quality,
    )


class FakeProvider(ProviderClient):
    """Provider returning canned text, or raising for matching prompts."""

    def __init__(
        self,
        name: str,
        text: str = JSON_ARTICLE,
        error: Optional[Exception] = None,
        fail_when: Optional[Callable[[str], bool]] = None,
        cost: float = 0.001
    ):
        self.name = name
        self.model = f"{name}-test-model"
        self.text = text
        self.error = error
        self.fail_when = fail_when
        self.cost = cost
        self.prompts: List[str] = []

    async def generate(self, prompt: str, params: ModelParams) -> ProviderResponse:
        self.prompts.append(prompt)
        if self.error is not None and (self.fail_when is None or self.fail_when(prompt)):
            raise self.error
        return ProviderResponse(
            text=self.text,
            model=self.model,
            prompt_tokens=100,
            completion_tokens=200,
            cost=self.cost,
        )

    @property
    def calls(self) -> int:
        return len(self.prompts)


class FakeExtractor:
    """Extractor returning prepared results per URL."""

    def __init__(
        self,
        results: Optional[Dict[str, Union[ExtractedContent, Exception]]] = None,
        delay: float = 0.0
    ):
        self.results = results or {}
        self.delay = delay
        self.options = None
        self.calls: List[str] = []
        self.closed = False

    async def extract(self, url: str, options=None) -> ExtractedContent:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        result = self.results.get(url)
        if isinstance(result, Exception):
            raise result
        if result is None:
            return build_fallback_content(url, "no fixture")
        return result

    async def close(self):
        self.closed = True

    async def health_check(self) -> dict:
        return {"status": "healthy", "strategies": []}


class FakeGallery(ImageGallery):

    def __init__(self, images: Optional[List[GalleryImage]] = None, error: Optional[Exception] = None):
        self.images = images or []
        self.error = error
        self.requests = []

    async def images_for_topic(self, topic, purpose, limit, options=None):
        self.requests.append((topic, purpose, limit))
        if self.error is not None:
            raise self.error
        return self.images[:limit]


class FakePublisher(Publisher):

    def __init__(self, fail_titles=()):
        self.fail_titles = set(fail_titles)
        self.published: List[GeneratedContent] = []

    async def publish(self, content, settings):
        if content.title in self.fail_titles:
            raise RuntimeError("publishing target rejected the post")
        self.published.append(content)
        return PublishResult(success=True, external_id=str(len(self.published)),
                             external_url=f"https://blog.example.com/?p={len(self.published)}")


def make_engine(*providers: ProviderClient) -> GenerationEngine:
    return GenerationEngine(ProviderRegistry(providers))


def make_orchestrator(
    extractor: Optional[FakeExtractor] = None,
    providers: Optional[List[ProviderClient]] = None,
    gallery: Optional[ImageGallery] = None,
    repository=None,
    **settings
) -> BatchWorkflowOrchestrator:
    if providers is None:
        providers = [FakeProvider("gemini")]
    workflow_settings = WorkflowSettings(crawl_batch_delay=0.0, generation_batch_delay=0.0)
    for name, value in settings.items():
        setattr(workflow_settings, name, value)
    return BatchWorkflowOrchestrator(
        repository=repository or InMemoryJobRepository(),
        extractor=extractor or FakeExtractor(),
        generator=make_engine(*providers),
        image_gallery=gallery,
        settings=workflow_settings,
    )
