"""
Generation-related data models and schemas.

This module defines the request handed to the generation engine, the
content it produces, and the per-provider running statistics.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field


class ContentType(str, Enum):
    """Kinds of content the engine can produce."""
    BLOG_POST = "blog_post"
    SOCIAL_MEDIA = "social_media"
    EMAIL = "email"
    AD_COPY = "ad_copy"


class ProviderName(str, Enum):
    """AI text-generation backends."""
    OPENAI = "openai"
    GEMINI = "gemini"
    ANTHROPIC = "anthropic"


class ProviderPreference(str, Enum):
    """Provider hint on a request."""
    AUTO = "auto"
    OPENAI = "openai"
    GEMINI = "gemini"
    ANTHROPIC = "anthropic"


class SelectionReason(str, Enum):
    """Why a provider produced the returned content."""
    PRIMARY_CHOICE = "primary_choice"
    FALLBACK_AFTER_ERROR = "fallback_after_error"


class RewriteStyle(str, Enum):
    """How far a rewrite may depart from its source article."""
    SIMILAR = "similar"
    IMPROVED = "improved"
    DIFFERENT_ANGLE = "different_angle"
    EXPANDED = "expanded"


class ImageSelection(str, Enum):
    """Image lookup modes understood by the gallery."""
    AUTO_CATEGORY = "auto-category"
    SPECIFIC_FOLDER = "specific-folder"
    MANUAL = "manual"


class BrandVoice(BaseModel):
    """Brand-voice descriptor."""

    tone: str = Field(default="professional", description="Tone, e.g. professional, friendly")
    style: str = Field(default="informative", description="Style, e.g. informative, technical")
    vocabulary: str = Field(default="general", description="Vocabulary level, e.g. general, industry-specific")
    length: str = Field(default="detailed", description="Length, one of concise, detailed, comprehensive")
    brand_name: Optional[str] = Field(None, description="Brand name to mention")


class ImageSettings(BaseModel):
    """Image inclusion settings."""

    include_images: bool = Field(default=False, description="Insert gallery images into content")
    image_selection: ImageSelection = Field(default=ImageSelection.AUTO_CATEGORY, description="Lookup mode")
    image_category: Optional[str] = Field(None, description="Category name, 'auto' picks from the topic")
    specific_folder: Optional[str] = Field(None, description="Folder for specific-folder mode")
    max_images: Optional[int] = Field(None, ge=1, le=10, description="Maximum number of images")
    ensure_consistency: bool = Field(default=True, description="Keep images from one coherent set")

    def image_limit(self) -> int:
        """Number of images to request from the gallery."""
        if self.image_category == "auto":
            return 5
        return self.max_images or 3


class GalleryImage(BaseModel):
    """Image returned by the gallery collaborator."""

    url: str = Field(..., description="Public image URL")
    alt_text: str = Field(default="", description="Alternative text")
    caption: Optional[str] = Field(None, description="Caption")
    category: Optional[str] = Field(None, description="Gallery category")


class GenerationRequest(BaseModel):
    """Structured content request for the generation engine."""

    content_type: ContentType = Field(default=ContentType.BLOG_POST, description="Content type")
    topic: str = Field(..., min_length=1, description="Topic of the content")
    context: str = Field(default="", description="Free-text context or a full instruction block")
    target_audience: str = Field(default="general audience", description="Target audience")
    keywords: List[str] = Field(default_factory=list, description="SEO keywords")
    brand_voice: BrandVoice = Field(default_factory=BrandVoice, description="Brand voice")
    language: str = Field(default="en", description="Output language code")
    image_settings: Optional[ImageSettings] = Field(None, description="Image inclusion settings")
    preferred_provider: ProviderPreference = Field(
        default=ProviderPreference.AUTO, description="Provider hint"
    )
    special_instructions: Optional[str] = Field(None, description="Extra instructions")


class SourceReference(BaseModel):
    """Source article a piece of content was rewritten from."""

    model_config = ConfigDict(frozen=True)

    url: str
    title: str
    used_as_reference: bool = True
    rewrite_style: RewriteStyle = RewriteStyle.SIMILAR


class GenerationMetadata(BaseModel):
    """Metadata attached to generated content."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    provider: str = Field(..., description="Provider that produced the content")
    model: str = Field(..., description="Model id")
    cost: float = Field(default=0.0, ge=0.0, description="Estimated cost in USD")
    generated_at: datetime = Field(default_factory=datetime.utcnow, description="Generation timestamp")
    word_count: int = Field(default=0, ge=0)
    seo_score: int = Field(default=0, ge=0, le=100)
    readability_score: int = Field(default=0, ge=0, le=100)
    engagement_score: int = Field(default=0, ge=0, le=100)
    tokens_used: int = Field(default=0, ge=0)
    selection_reason: SelectionReason = Field(default=SelectionReason.PRIMARY_CHOICE)
    requested_provider: ProviderPreference = Field(default=ProviderPreference.AUTO)
    response_time: float = Field(default=0.0, ge=0.0, description="Provider response time in seconds")
    original_error: Optional[str] = Field(None, description="Primary provider error when a fallback was used")
    featured_image: Optional[GalleryImage] = None
    gallery_images: List[GalleryImage] = Field(default_factory=list)


class GeneratedContent(BaseModel):
    """Content produced by the generation engine."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Content title")
    body: str = Field(..., description="Content body")
    excerpt: str = Field(default="", description="Short excerpt")
    content_type: ContentType = Field(..., description="Content type")
    status: str = Field(default="draft", description="Publishing status")
    metadata: GenerationMetadata = Field(..., description="Generation metadata")
    source_reference: Optional[SourceReference] = Field(None, description="Source article reference")


class ProviderStats(BaseModel):
    """Running statistics for one provider."""

    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_cost: float = 0.0
    average_response_time: float = 0.0
    last_used: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests

    def record(self, success: bool, response_time: float, cost: float = 0.0):
        """Fold one attempt into the running aggregates."""
        self.total_requests += 1
        if success:
            self.successful_requests += 1
        else:
            self.failed_requests += 1
        self.total_cost += cost
        self.average_response_time += (response_time - self.average_response_time) / self.total_requests
        self.last_used = datetime.utcnow()

    def to_summary(self) -> Dict[str, Any]:
        return {
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "success_rate": round(self.success_rate, 3),
            "total_cost": round(self.total_cost, 6),
            "average_response_time": round(self.average_response_time, 3),
            "last_used": self.last_used.isoformat() if self.last_used else None,
        }
