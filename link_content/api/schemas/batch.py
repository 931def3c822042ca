"""
Batch API schemas.

This module contains Pydantic schemas for batch workflow endpoints.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List

from ...core.models.workflow import GenerationOverrides, JobSettings


class CreateBatchJobSchema(BaseModel):
    """Schema for batch job creation."""

    project_id: str = Field(..., min_length=1, max_length=200)
    urls: List[str] = Field(..., min_length=1, max_length=500)
    settings: Optional[JobSettings] = None

    @field_validator('urls')
    @classmethod
    def strip_urls(cls, urls: List[str]) -> List[str]:
        cleaned = [url.strip() for url in urls if url and url.strip()]
        if not cleaned:
            raise ValueError("At least one URL is required")
        return cleaned


class GenerateContentSchema(GenerationOverrides):
    """Schema for a generation pass; an empty body uses the job settings."""


class TaskHandleSchema(BaseModel):
    """Schema for the response of a submitted operation."""

    task_id: str
    operation: str
    job_id: str
    item_id: Optional[str] = None
    state: str
    status_url: str
    job_url: str
