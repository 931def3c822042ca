"""
Batch workflow orchestrator.

Drives every item of a batch job through its state machine::

    pending -> crawling -> {crawled | failed} -> generating -> {generated | failed} -> approved

Crawling and generation run in fixed-size groups: every item of a group
runs concurrently, the whole group (successes and failures) is awaited,
and a fixed delay separates consecutive groups. One item's failure never
affects its siblings.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from ..core.models.errors import (
    ContentWorkflowError,
    InvalidStateError,
    ItemNotFoundError,
    JobConflictError,
    JobNotFoundError,
    ValidationError,
)
from ..core.models.extraction import ExtractedContent, ExtractionOptions
from ..core.models.generation import ContentType, GenerationRequest, SourceReference
from ..core.models.workflow import (
    REGENERATABLE_STATUSES,
    BatchJob,
    BatchJobStatus,
    ContentWorkflowItem,
    GenerationOverrides,
    ItemStatus,
    JobProgress,
    JobSettings,
    JobStatus,
    PublishResult,
)
from ..extraction.engine import ContentExtractor, build_fallback_content
from ..generation.engine import GenerationEngine, error_message
from ..generation.images import ImageEnricher
from ..generation.prompts import (
    build_blog_instructions,
    build_reference_section,
    build_social_instructions,
    build_source_context,
)
from ..integrations.collaborators import ImageGallery, Publisher
from .repository import InMemoryJobRepository, JobRepository, RedisJobRepository


logger = logging.getLogger(__name__)

CRAWL_FAILED_MESSAGE = "Failed to extract content"
NO_ITEMS_READY_MESSAGE = "No items ready for content generation"
NO_CRAWLED_CONTENT_MESSAGE = "No crawled content available for generation"
NOT_READY_FOR_APPROVAL_MESSAGE = "Content item is not ready for approval"

# Items a crawl pass picks up; ``crawling`` covers passes interrupted mid-flight.
CRAWLABLE_STATUSES = frozenset({ItemStatus.PENDING, ItemStatus.CRAWLING})


def chunked(items: List[Any], size: int) -> Iterable[List[Any]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


@dataclass
class WorkflowSettings:
    """Concurrency, pacing and quality threshold of the orchestrator."""

    crawl_concurrency: int = 3
    generation_concurrency: int = 2
    crawl_batch_delay: float = 2.0
    generation_batch_delay: float = 3.0
    min_crawl_quality: int = 0

    @classmethod
    def from_config(cls, config) -> 'WorkflowSettings':
        return cls(
            crawl_concurrency=config.CRAWL_CONCURRENCY,
            generation_concurrency=config.GENERATION_CONCURRENCY,
            crawl_batch_delay=config.CRAWL_BATCH_DELAY,
            generation_batch_delay=config.GENERATION_BATCH_DELAY,
            min_crawl_quality=config.MIN_CRAWL_QUALITY,
        )


class BatchWorkflowOrchestrator:
    """
    Owns batch jobs and drives their items.

    Job and item state is read and written only through the injected
    repository; the extraction and generation engines are injected too.
    A job runs at most one crawl or generation pass at a time, and no item
    of it is regenerated while a pass runs; a conflicting request is
    rejected with JobConflictError. Callers that run operations in the
    background take the key with reserve() before scheduling run_reserved().
    """

    def __init__(
        self,
        repository: JobRepository,
        extractor: ContentExtractor,
        generator: GenerationEngine,
        image_gallery: Optional[ImageGallery] = None,
        settings: Optional[WorkflowSettings] = None,
        extraction_options: Optional[ExtractionOptions] = None
    ):
        self.repository = repository
        self.extractor = extractor
        self.generator = generator
        self.image_enricher = ImageEnricher(image_gallery)
        self.settings = settings or WorkflowSettings()
        self.extraction_options = extraction_options

        self._active: Dict[str, str] = {}
        self._active_lock = threading.Lock()

    # -- bookkeeping -------------------------------------------------------

    def _require_job(self, job_id: str) -> BatchJob:
        job = self.repository.get_job(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def _require_item(self, job_id: str, item_id: str) -> ContentWorkflowItem:
        item = self.repository.get_item(job_id, item_id)
        if item is None:
            raise ItemNotFoundError(item_id, job_id)
        return item

    def _key(self, job_id: str, item_id: str = None) -> str:
        self._require_job(job_id)
        if item_id is None:
            return job_id
        self._require_item(job_id, item_id)
        return f"{job_id}:{item_id}"

    def _raise_if_held(self, job_id: str, key: str, operation: str = None):
        # A job-wide pass also covers every single-item operation of the job.
        held = self._active.get(job_id) or self._active.get(key)
        if held is not None:
            raise JobConflictError(job_id, operation, held)

    def is_processing(self, job_id: str) -> bool:
        with self._active_lock:
            return job_id in self._active

    def check_available(self, job_id: str, item_id: str = None):
        """
        Raise if a pass cannot start now.

        Raises:
            JobNotFoundError: Unknown job
            ItemNotFoundError: Unknown item
            JobConflictError: A pass is already running for the job or item
        """
        key = self._key(job_id, item_id)
        with self._active_lock:
            self._raise_if_held(job_id, key)

    def reserve(self, operation: str, job_id: str, item_id: str = None) -> str:
        """
        Hold a job, or one item of it, for an operation.

        The returned key must be passed to run_reserved, which releases it.

        Raises:
            JobNotFoundError: Unknown job
            ItemNotFoundError: Unknown item
            JobConflictError: A pass is already running for the job or item
        """
        key = self._key(job_id, item_id)
        with self._active_lock:
            self._raise_if_held(job_id, key, operation)
            self._active[key] = operation
        return key

    def release(self, key: str):
        with self._active_lock:
            self._active.pop(key, None)

    async def run_reserved(
        self,
        key: str,
        operation: str,
        job_id: str,
        item_id: str = None,
        overrides: Optional[GenerationOverrides] = None
    ):
        """Run an operation held by reserve() and release its key."""
        try:
            if operation == "crawl":
                return await self._crawl(job_id)
            if operation == "generate":
                return await self._run_generation(job_id, None)
            if operation == "generate_with_settings":
                return await self._run_generation(job_id, overrides or GenerationOverrides())
            if operation == "regenerate":
                return await self._regenerate(job_id, item_id, overrides)
            raise ValidationError(f"Unknown operation: {operation}", "operation", operation)
        finally:
            self.release(key)

    def _refresh_progress(self, job_id: str) -> BatchJob:
        """Recompute progress counters from the items and store the job."""
        job = self._require_job(job_id)
        job.progress = JobProgress.from_items(self.repository.get_items(job_id))
        job.update_status(job.status)
        self.repository.save_job(job)
        return job

    def _save_item(self, item: ContentWorkflowItem):
        self.repository.save_item(item)
        self._refresh_progress(item.job_id)

    def _finish_job(self, job_id: str, status: JobStatus, error_message: str = None) -> BatchJob:
        job = self._refresh_progress(job_id)
        job.update_status(status, error_message)
        self.repository.save_job(job)
        return job

    async def _run_groups(self, items: List[ContentWorkflowItem], size: int, delay: float, handler):
        for index, group in enumerate(chunked(items, size)):
            if index > 0 and delay > 0:
                await asyncio.sleep(delay)
            results = await asyncio.gather(*(handler(item) for item in group), return_exceptions=True)
            errors = [result for result in results if isinstance(result, BaseException)]
            if errors:
                raise errors[0]

    # -- jobs --------------------------------------------------------------

    async def create_batch_job(
        self,
        project_id: str,
        urls: List[str],
        settings: Optional[JobSettings] = None
    ) -> BatchJob:
        """
        Create a job with one pending item per URL.

        Raises:
            ValidationError: Missing project id or no usable URLs
        """
        if not project_id or not str(project_id).strip():
            raise ValidationError("project_id is required", "project_id", project_id)
        if not urls:
            raise ValidationError("At least one URL is required", "urls", urls)

        cleaned = [url.strip() for url in urls if isinstance(url, str) and url.strip()]
        if not cleaned:
            raise ValidationError("No valid URLs provided", "urls", urls)

        job = BatchJob(
            project_id=str(project_id).strip(),
            settings=settings or JobSettings(),
            progress=JobProgress(total=len(cleaned)),
        )
        items = [ContentWorkflowItem(job_id=job.id, source_url=url) for url in cleaned]

        self.repository.save_job(job)
        self.repository.save_items(items)

        logger.info(f"Batch job {job.id} created for project {job.project_id} with {len(items)} URLs")
        return job

    async def get_batch_job_status(self, job_id: str) -> BatchJobStatus:
        """Job, items and per-status counts. Pure read."""
        job = self._require_job(job_id)
        return BatchJobStatus.build(job, self.repository.get_items(job_id))

    async def list_batch_jobs(self, project_id: Optional[str] = None) -> List[BatchJob]:
        return self.repository.list_jobs(project_id)

    # -- crawling ----------------------------------------------------------

    async def start_crawling(self, job_id: str) -> BatchJob:
        """
        Crawl every pending item of a job.

        Raises:
            JobNotFoundError: Unknown job
            JobConflictError: A pass is already running for the job
        """
        return await self.run_reserved(self.reserve("crawl", job_id), "crawl", job_id)

    async def _crawl(self, job_id: str) -> BatchJob:
        job = self._require_job(job_id)
        job.update_status(JobStatus.PROCESSING)
        self.repository.save_job(job)
        items = [item for item in self.repository.get_items(job_id) if item.status in CRAWLABLE_STATUSES]
        logger.info(f"Crawling {len(items)} items for job {job_id}")

        try:
            await self._run_groups(
                items,
                self.settings.crawl_concurrency,
                self.settings.crawl_batch_delay,
                self._crawl_item,
            )
        except Exception as e:
            logger.error(f"Crawling failed for job {job_id}: {str(e)}", exc_info=True)
            self._finish_job(job_id, JobStatus.FAILED, f"Crawling failed: {error_message(e)}")
            raise

        job = self._finish_job(job_id, JobStatus.COMPLETED)
        logger.info(
            f"Crawling completed for job {job_id}: {job.progress.crawled} crawled, "
            f"{job.progress.failed} failed of {job.progress.total}"
        )
        return job

    async def _crawl_item(self, item: ContentWorkflowItem):
        item.update_status(ItemStatus.CRAWLING)
        self._save_item(item)

        try:
            content = await self.extractor.extract(item.source_url, self.extraction_options)
        except Exception as e:
            logger.error(f"Extractor raised for {item.source_url}: {str(e)}", exc_info=True)
            content = build_fallback_content(item.source_url, str(e))

        item.extracted_content = content
        if content.quality_score > self.settings.min_crawl_quality:
            item.update_status(ItemStatus.CRAWLED)
        else:
            item.update_status(ItemStatus.FAILED, CRAWL_FAILED_MESSAGE)
        self._save_item(item)

    # -- generation --------------------------------------------------------

    async def generate_content(self, job_id: str) -> BatchJob:
        """Generate content for every crawled item using the job settings."""
        return await self.run_reserved(self.reserve("generate", job_id), "generate", job_id)

    async def generate_batch_content_with_settings(
        self,
        job_id: str,
        overrides: Optional[GenerationOverrides] = None
    ) -> BatchJob:
        """Generate content for every crawled item with per-call overrides."""
        return await self.run_reserved(
            self.reserve("generate_with_settings", job_id), "generate_with_settings", job_id, overrides=overrides
        )

    @staticmethod
    def _awaiting_generation(item: Optional[ContentWorkflowItem]) -> bool:
        return item is not None and item.status == ItemStatus.CRAWLED and item.extracted_content is not None

    async def _run_generation(self, job_id: str, overrides: Optional[GenerationOverrides]) -> BatchJob:
        job = self._require_job(job_id)
        items = self.repository.get_items(job_id)
        eligible = [item for item in items if self._awaiting_generation(item)]
        if not eligible:
            message = NO_ITEMS_READY_MESSAGE if overrides is None else NO_CRAWLED_CONTENT_MESSAGE
            raise ValidationError(message, "job_id", job_id)

        references = [
            item.extracted_content for item in items
            if item.extracted_content is not None and not item.extracted_content.is_placeholder
        ]

        job.update_status(JobStatus.PROCESSING)
        self.repository.save_job(job)
        logger.info(f"Generating content for {len(eligible)} items of job {job_id}")

        async def handler(item):
            # Later groups wait out the batch delay; the stored item may have moved on since.
            current = self.repository.get_item(job_id, item.id)
            if not self._awaiting_generation(current):
                logger.info(f"Skipping item {item.id} of job {job_id}: no longer awaiting generation")
                return
            await self._generate_item(current, job.settings, overrides, references)

        try:
            await self._run_groups(
                eligible,
                self.settings.generation_concurrency,
                self.settings.generation_batch_delay,
                handler,
            )
        except Exception as e:
            logger.error(f"Generation failed for job {job_id}: {str(e)}", exc_info=True)
            self._finish_job(job_id, JobStatus.FAILED, f"Generation failed: {error_message(e)}")
            raise

        job = self._finish_job(job_id, JobStatus.COMPLETED)
        logger.info(
            f"Generation completed for job {job_id}: {job.progress.generated} generated, "
            f"{job.progress.failed} failed of {job.progress.total}"
        )
        return job

    def build_generation_request(
        self,
        item: ContentWorkflowItem,
        settings: JobSettings,
        overrides: Optional[GenerationOverrides] = None,
        references: Optional[List[ExtractedContent]] = None
    ) -> GenerationRequest:
        """Merge job settings, overrides and the item's source into a request."""
        source = item.extracted_content
        o = overrides or GenerationOverrides()

        content_type = o.content_type or settings.content_type
        topic = o.topic or settings.topic or source.title
        keywords = o.keywords if o.keywords is not None else settings.keywords
        language = o.language or settings.language
        brand_voice = o.brand_voice or settings.brand_voice
        audience = o.target_audience or settings.target_audience

        reference_section = None
        if o.use_reference_content:
            siblings = [ref for ref in (references or []) if ref.source_url != source.source_url]
            reference_section = build_reference_section(source, siblings[:2], o.rewrite_style)

        extra_context = "\n\n".join(part for part in (o.context, o.special_instructions) if part) or None

        if content_type == ContentType.BLOG_POST:
            context = build_blog_instructions(
                source, topic, brand_voice, audience, keywords, language, reference_section, extra_context
            )
        elif content_type == ContentType.SOCIAL_MEDIA:
            context = build_social_instructions(
                source, topic, brand_voice, audience, keywords, language, reference_section, extra_context
            )
        else:
            context = "\n\n".join(
                part for part in (build_source_context(source), reference_section, o.context) if part
            )

        return GenerationRequest(
            content_type=content_type,
            topic=topic,
            context=context,
            target_audience=audience,
            keywords=keywords,
            brand_voice=brand_voice,
            language=language,
            image_settings=o.image_settings or settings.image_settings,
            preferred_provider=o.preferred_provider or settings.preferred_provider,
            special_instructions=o.special_instructions,
        )

    async def _generate_item(
        self,
        item: ContentWorkflowItem,
        settings: JobSettings,
        overrides: Optional[GenerationOverrides],
        references: List[ExtractedContent]
    ):
        request = self.build_generation_request(item, settings, overrides, references)
        rewrite_style = (overrides or GenerationOverrides()).rewrite_style

        item.update_status(ItemStatus.GENERATING)
        self._save_item(item)

        try:
            content = await self.generator.generate(request)
            content = await self.image_enricher.enrich(content, request.image_settings, request.topic)
            content = content.model_copy(update={
                "source_reference": SourceReference(
                    url=item.source_url,
                    title=item.extracted_content.title,
                    rewrite_style=rewrite_style,
                ),
            })
        except ContentWorkflowError as e:
            logger.error(f"Generation failed for item {item.id} ({item.source_url}): {e.message}")
            item.update_status(ItemStatus.FAILED, e.message)
        except Exception as e:
            logger.error(f"Unexpected generation error for item {item.id}: {str(e)}", exc_info=True)
            item.update_status(ItemStatus.FAILED, error_message(e))
        else:
            item.generated_content = content
            item.update_status(ItemStatus.GENERATED)

        self._save_item(item)

    # -- review ------------------------------------------------------------

    async def approve_content_item(self, job_id: str, item_id: str) -> ContentWorkflowItem:
        """
        Approve generated content.

        Raises:
            InvalidStateError: The item is not in ``generated``
        """
        self._require_job(job_id)
        item = self._require_item(job_id, item_id)
        if item.status != ItemStatus.GENERATED or item.generated_content is None:
            raise InvalidStateError(NOT_READY_FOR_APPROVAL_MESSAGE, item_id, ItemStatus(item.status).value)

        item.update_status(ItemStatus.APPROVED)
        self._save_item(item)
        logger.info(f"Item {item_id} of job {job_id} approved")
        return item

    async def regenerate_content(
        self,
        job_id: str,
        item_id: str,
        overrides: Optional[GenerationOverrides] = None
    ) -> ContentWorkflowItem:
        """
        Rerun generation for one item.

        On success the new content replaces the old one; on failure the item
        is ``failed`` and keeps its previous content.

        Raises:
            InvalidStateError: No extracted content, or the item is approved or in flight
            JobConflictError: The item is already being regenerated, or a pass
                is running for the job
        """
        return await self.run_reserved(
            self.reserve("regenerate", job_id, item_id), "regenerate", job_id, item_id, overrides
        )

    async def _regenerate(
        self,
        job_id: str,
        item_id: str,
        overrides: Optional[GenerationOverrides]
    ) -> ContentWorkflowItem:
        job = self._require_job(job_id)
        item = self._require_item(job_id, item_id)
        if item.extracted_content is None:
            raise InvalidStateError("No scraped content available for regeneration", item_id,
                                    ItemStatus(item.status).value)
        if item.status not in REGENERATABLE_STATUSES:
            raise InvalidStateError(
                f"Content item cannot be regenerated while {ItemStatus(item.status).value}",
                item_id,
                ItemStatus(item.status).value,
            )

        siblings = [
            other.extracted_content for other in self.repository.get_items(job_id)
            if other.extracted_content is not None and not other.extracted_content.is_placeholder
        ]
        await self._generate_item(item, job.settings, overrides, siblings)
        return self._require_item(job_id, item_id)

    async def get_approved_content(self, job_id: str) -> List[ContentWorkflowItem]:
        """Items with status ``approved``."""
        self._require_job(job_id)
        return [item for item in self.repository.get_items(job_id) if item.status == ItemStatus.APPROVED]

    async def publish_approved_content(
        self,
        job_id: str,
        publisher: Publisher,
        settings: Optional[Dict[str, Any]] = None
    ) -> List[PublishResult]:
        """Publish every approved item; failures are reported per item."""
        results = []
        for item in await self.get_approved_content(job_id):
            try:
                result = await publisher.publish(item.generated_content, settings or {})
                result = result.model_copy(update={"item_id": item.id})
            except Exception as e:
                logger.error(f"Publishing item {item.id} failed: {str(e)}")
                result = PublishResult(item_id=item.id, success=False, error=str(e))
            results.append(result)

        published = sum(1 for result in results if result.success)
        logger.info(f"Published {published} of {len(results)} approved items for job {job_id}")
        return results

    # -- lifecycle ---------------------------------------------------------

    async def health_check(self) -> Dict[str, Any]:
        extraction = await self.extractor.health_check()
        generation = await self.generator.health_check()
        storage = self.repository.health_check()
        components = {"extraction": extraction, "generation": generation, "storage": storage}

        status = "healthy"
        if any(component.get("status") != "healthy" for component in components.values()):
            status = "degraded"
        with self._active_lock:
            active = dict(self._active)
        return {"status": status, "components": components, "active_jobs": active}

    async def close(self):
        await self.extractor.close()


def create_orchestrator(
    config,
    repository: Optional[JobRepository] = None,
    generator: Optional[GenerationEngine] = None,
    extractor: Optional[ContentExtractor] = None,
    image_gallery: Optional[ImageGallery] = None
) -> BatchWorkflowOrchestrator:
    """
    Build an orchestrator from configuration.

    Args:
        config: Application configuration
        repository: Job store, defaults to the one named by ``JOB_STORE``
        generator: Generation engine, defaults to one over the configured providers
        extractor: Extraction engine, defaults to the configured strategies
        image_gallery: Optional gallery collaborator

    Returns:
        Orchestrator ready to use
    """
    if repository is None:
        if config.JOB_STORE == 'redis':
            repository = RedisJobRepository.from_url(config.REDIS_URL, ttl_seconds=config.JOB_TTL_SECONDS)
        else:
            repository = InMemoryJobRepository()

    extractor = extractor or ContentExtractor.from_config(config)
    return BatchWorkflowOrchestrator(
        repository=repository,
        extractor=extractor,
        generator=generator or GenerationEngine.from_config(config),
        image_gallery=image_gallery,
        settings=WorkflowSettings.from_config(config),
        extraction_options=extractor.options,
    )
