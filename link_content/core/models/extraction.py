"""
Extraction-related data models.

This module defines the artifacts produced by the content extraction
engine and the options that tune it.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field


class ExtractionStrategyName(str, Enum):
    """Strategy that produced an extraction result."""
    RENDERED = "rendered"
    STATIC = "static"
    FALLBACK = "fallback"


class ExtractionOptions(BaseModel):
    """Options for a single extraction."""

    use_browser: bool = Field(default=True, description="Try the headless browser first")
    timeout_ms: int = Field(default=60000, ge=1000, description="Browser navigation timeout")
    settle_ms: int = Field(default=3000, ge=0, description="Delay after network idle")
    interstitial_wait_ms: int = Field(default=7000, ge=0, description="Extra wait on anti-bot pages")
    static_timeout: float = Field(default=10.0, gt=0, description="Static fetch timeout in seconds")
    max_images: int = Field(default=8, ge=0, le=20, description="Maximum images kept")
    min_body_length: int = Field(default=50, ge=0, description="Shortest body accepted from a strategy")
    target_language: str = Field(default="vi", description="Locale detected by lexical heuristics")


class ExtractedMetadata(BaseModel):
    """Structured metadata recovered from a page."""

    model_config = ConfigDict(frozen=True)

    description: str = ""
    author: Optional[str] = None
    publish_date: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    language: str = "unknown"
    domain: str = ""
    word_count: int = Field(default=0, ge=0)
    read_time: int = Field(default=0, ge=0, description="Estimated minutes to read")
    strategy: ExtractionStrategyName = ExtractionStrategyName.FALLBACK


class ExtractedContent(BaseModel):
    """Clean article content extracted from one URL."""

    model_config = ConfigDict(frozen=True)

    source_url: str = Field(..., description="URL the content came from")
    title: str = Field(..., description="Article title")
    body: str = Field(..., description="Article text, paragraphs separated by blank lines")
    excerpt: str = Field(default="", description="Short excerpt")
    metadata: ExtractedMetadata = Field(default_factory=ExtractedMetadata)
    quality_score: int = Field(default=0, ge=0, le=100, description="Heuristic quality score")
    extracted_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_placeholder(self) -> bool:
        return self.metadata.strategy == ExtractionStrategyName.FALLBACK
