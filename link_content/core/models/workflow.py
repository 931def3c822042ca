"""
Batch workflow data models.

This module defines batch jobs, their per-URL workflow items, and the
records returned by orchestrator and task runner operations.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any
from uuid import uuid4
from pydantic import BaseModel, Field

from .extraction import ExtractedContent
from .generation import (
    BrandVoice,
    ContentType,
    GeneratedContent,
    ImageSettings,
    ProviderPreference,
    RewriteStyle,
)


class JobStatus(str, Enum):
    """Batch job status."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ItemStatus(str, Enum):
    """Workflow item status."""
    PENDING = "pending"
    CRAWLING = "crawling"
    CRAWLED = "crawled"
    GENERATING = "generating"
    GENERATED = "generated"
    APPROVED = "approved"
    FAILED = "failed"


# Statuses counted as "crawled" in job progress: the item got past crawling.
CRAWLED_STATUSES = frozenset({
    ItemStatus.CRAWLED, ItemStatus.GENERATING, ItemStatus.GENERATED, ItemStatus.APPROVED
})
GENERATED_STATUSES = frozenset({ItemStatus.GENERATED, ItemStatus.APPROVED})
REGENERATABLE_STATUSES = frozenset({ItemStatus.CRAWLED, ItemStatus.GENERATED, ItemStatus.FAILED})


class JobSettings(BaseModel):
    """Generation settings shared by every item of a job."""

    content_type: ContentType = Field(default=ContentType.BLOG_POST, description="Content type")
    brand_voice: BrandVoice = Field(default_factory=BrandVoice, description="Brand voice")
    target_audience: str = Field(default="general audience", description="Target audience")
    preferred_provider: ProviderPreference = Field(default=ProviderPreference.AUTO, description="Provider hint")
    image_settings: Optional[ImageSettings] = Field(None, description="Image inclusion settings")
    keywords: List[str] = Field(default_factory=list, description="SEO keywords")
    language: str = Field(default="en", description="Output language code")
    topic: Optional[str] = Field(None, description="Topic override, defaults to the source title")


class GenerationOverrides(BaseModel):
    """Per-call overrides for a generation pass."""

    content_type: Optional[ContentType] = None
    topic: Optional[str] = None
    context: Optional[str] = Field(None, description="Extra context appended to the source material")
    keywords: Optional[List[str]] = None
    language: Optional[str] = None
    target_audience: Optional[str] = None
    preferred_provider: Optional[ProviderPreference] = None
    brand_voice: Optional[BrandVoice] = None
    image_settings: Optional[ImageSettings] = None
    rewrite_style: RewriteStyle = Field(default=RewriteStyle.SIMILAR)
    use_reference_content: bool = Field(default=False, description="Show sibling articles as references")
    special_instructions: Optional[str] = None


class JobProgress(BaseModel):
    """Aggregate item counts for a job."""

    total: int = Field(default=0, ge=0)
    crawled: int = Field(default=0, ge=0)
    generated: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)

    @classmethod
    def from_items(cls, items: List['ContentWorkflowItem']) -> 'JobProgress':
        statuses = [item.status for item in items]
        return cls(
            total=len(statuses),
            crawled=sum(1 for status in statuses if status in CRAWLED_STATUSES),
            generated=sum(1 for status in statuses if status in GENERATED_STATUSES),
            failed=sum(1 for status in statuses if status == ItemStatus.FAILED),
        )


class BatchJob(BaseModel):
    """A batch of source URLs driven through crawl, generate and approve."""

    id: str = Field(default_factory=lambda: str(uuid4()), description="Job id")
    project_id: str = Field(..., min_length=1, description="Owning project")
    status: JobStatus = Field(default=JobStatus.PENDING)
    progress: JobProgress = Field(default_factory=JobProgress)
    settings: JobSettings = Field(default_factory=JobSettings)
    error_message: Optional[str] = Field(None, description="Set when the job failed")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def update_status(self, status: JobStatus, error_message: str = None):
        """Update job status."""
        self.status = status
        if error_message is not None:
            self.error_message = error_message
        self.updated_at = datetime.utcnow()


class ContentWorkflowItem(BaseModel):
    """Per-URL state machine within a batch job."""

    id: str = Field(default_factory=lambda: str(uuid4()), description="Item id")
    job_id: str = Field(..., description="Owning job")
    source_url: str = Field(..., description="Source URL")
    status: ItemStatus = Field(default=ItemStatus.PENDING)
    extracted_content: Optional[ExtractedContent] = None
    generated_content: Optional[GeneratedContent] = None
    error_message: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def update_status(self, status: ItemStatus, error_message: str = None):
        """Move to a new status, keeping error_message consistent with it."""
        self.status = status
        if status == ItemStatus.FAILED:
            self.error_message = error_message or self.error_message or "Unknown error"
        else:
            self.error_message = None
        self.updated_at = datetime.utcnow()


class BatchJobStatus(BaseModel):
    """Snapshot of a job and its items."""

    job: BatchJob
    items: List[ContentWorkflowItem]
    summary: Dict[str, int]

    @classmethod
    def build(cls, job: BatchJob, items: List[ContentWorkflowItem]) -> 'BatchJobStatus':
        summary = {status.value: 0 for status in ItemStatus}
        for item in items:
            summary[ItemStatus(item.status).value] += 1
        summary["total"] = len(items)
        return cls(job=job, items=items, summary=summary)


class PublishResult(BaseModel):
    """Outcome of publishing one content item."""

    item_id: Optional[str] = None
    success: bool
    external_id: Optional[str] = None
    external_url: Optional[str] = None
    error: Optional[str] = None


class TaskState(str, Enum):
    """Background task state."""
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class TaskHandle(BaseModel):
    """Handle returned when a workflow operation is submitted."""

    task_id: str = Field(default_factory=lambda: str(uuid4()))
    operation: str
    job_id: str
    item_id: Optional[str] = None
    state: TaskState = TaskState.PENDING
    error: Optional[str] = None
    submitted_at: datetime = Field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None
    details: Dict[str, Any] = Field(default_factory=dict)
