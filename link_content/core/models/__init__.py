"""
Data models and schemas for the link content workflow.

This module contains all the data models, validation schemas, and
type definitions used throughout the system.
"""

from .extraction import (
    ExtractedContent,
    ExtractedMetadata,
    ExtractionOptions,
    ExtractionStrategyName
)

from .generation import (
    BrandVoice,
    ContentType,
    GalleryImage,
    GeneratedContent,
    GenerationMetadata,
    GenerationRequest,
    ImageSelection,
    ImageSettings,
    ProviderName,
    ProviderPreference,
    ProviderStats,
    RewriteStyle,
    SelectionReason,
    SourceReference
)

from .workflow import (
    BatchJob,
    BatchJobStatus,
    ContentWorkflowItem,
    GenerationOverrides,
    ItemStatus,
    JobProgress,
    JobSettings,
    JobStatus,
    PublishResult,
    TaskHandle,
    TaskState
)

from .errors import (
    ContentWorkflowError,
    ValidationError,
    JobNotFoundError,
    ItemNotFoundError,
    InvalidStateError,
    JobConflictError,
    ExtractionError,
    GenerationError,
    AllProvidersFailedError,
    NoProviderAvailableError,
    TaskError,
    ConfigurationError
)

__all__ = [
    # Extraction models
    'ExtractedContent',
    'ExtractedMetadata',
    'ExtractionOptions',
    'ExtractionStrategyName',

    # Generation models
    'BrandVoice',
    'ContentType',
    'GalleryImage',
    'GeneratedContent',
    'GenerationMetadata',
    'GenerationRequest',
    'ImageSelection',
    'ImageSettings',
    'ProviderName',
    'ProviderPreference',
    'ProviderStats',
    'RewriteStyle',
    'SelectionReason',
    'SourceReference',

    # Workflow models
    'BatchJob',
    'BatchJobStatus',
    'ContentWorkflowItem',
    'GenerationOverrides',
    'ItemStatus',
    'JobProgress',
    'JobSettings',
    'JobStatus',
    'PublishResult',
    'TaskHandle',
    'TaskState',

    # Errors
    'ContentWorkflowError',
    'ValidationError',
    'JobNotFoundError',
    'ItemNotFoundError',
    'InvalidStateError',
    'JobConflictError',
    'ExtractionError',
    'GenerationError',
    'AllProvidersFailedError',
    'NoProviderAvailableError',
    'TaskError',
    'ConfigurationError'
]
