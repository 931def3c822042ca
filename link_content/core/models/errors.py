"""
Error models and exception classes.

This module defines custom exception classes and error models
for the link content workflow.
"""

from datetime import datetime
from typing import Optional, Dict, Any, List, Tuple
from pydantic import BaseModel, Field


class ContentWorkflowError(Exception):
    """Base exception for the link content workflow."""

    def __init__(self, message: str, error_code: str = None, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(ContentWorkflowError):
    """Bad input to a workflow operation."""

    def __init__(self, message: str, field: str = None, value: Any = None,
                 error_code: str = "VALIDATION_ERROR"):
        self.field = field
        self.value = value
        super().__init__(message, error_code, {"field": field, "value": value})


class JobNotFoundError(ValidationError):
    """Unknown batch job id."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Batch job not found: {job_id}", "job_id", job_id, "JOB_NOT_FOUND")


class ItemNotFoundError(ValidationError):
    """Unknown workflow item id."""

    def __init__(self, item_id: str, job_id: str = None):
        self.item_id = item_id
        self.job_id = job_id
        super().__init__(f"Content item not found: {item_id}", "item_id", item_id, "ITEM_NOT_FOUND")


class InvalidStateError(ValidationError):
    """Operation not allowed in the item's current status."""

    def __init__(self, message: str, item_id: str = None, status: str = None):
        self.item_id = item_id
        self.status = status
        super().__init__(message, "status", status, "INVALID_STATE")


class JobConflictError(ContentWorkflowError):
    """A crawl or generation pass is already running for the job."""

    def __init__(self, job_id: str, operation: str = None, active_operation: str = None):
        self.job_id = job_id
        self.operation = operation
        self.active_operation = active_operation
        super().__init__(
            f"Batch job {job_id} is already processing",
            "JOB_CONFLICT",
            {"job_id": job_id, "operation": operation, "active_operation": active_operation}
        )


class ExtractionError(ContentWorkflowError):
    """A single extraction strategy could not produce content."""

    def __init__(self, message: str, url: str = None, strategy: str = None):
        self.url = url
        self.strategy = strategy
        super().__init__(
            message,
            "EXTRACTION_ERROR",
            {"url": url, "strategy": strategy}
        )


class GenerationError(ContentWorkflowError):
    """AI provider error."""

    def __init__(self, message: str, provider: str = None, model: str = None, retryable: bool = True,
                 error_code: str = "GENERATION_ERROR"):
        self.provider = provider
        self.model = model
        self.retryable = retryable
        super().__init__(
            message,
            error_code,
            {"provider": provider, "model": model, "retryable": retryable}
        )


class AllProvidersFailedError(GenerationError):
    """Every attempted provider failed for one request."""

    def __init__(self, attempts: List[Tuple[str, str]]):
        self.attempts = list(attempts)
        if len(self.attempts) > 1:
            (primary, primary_error), (alternative, alternative_error) = self.attempts[0], self.attempts[1]
            message = (
                f"All AI providers failed. Primary ({primary}): {primary_error}. "
                f"Alternative ({alternative}): {alternative_error}"
            )
        elif self.attempts:
            provider, error = self.attempts[0]
            message = f"AI content generation failed. Provider ({provider}): {error}"
        else:
            message = "AI content generation failed"
        super().__init__(
            message,
            provider=self.attempts[0][0] if self.attempts else None,
            retryable=False,
            error_code="ALL_PROVIDERS_FAILED"
        )
        self.details["attempts"] = [
            {"provider": provider, "error": error} for provider, error in self.attempts
        ]


class NoProviderAvailableError(GenerationError):
    """No AI provider is configured."""

    def __init__(self, message: str = "No AI providers available"):
        super().__init__(message, retryable=False, error_code="NO_PROVIDER_AVAILABLE")


class TaskError(ContentWorkflowError):
    """Background task error."""

    def __init__(self, message: str, task_id: str = None, operation: str = None):
        self.task_id = task_id
        self.operation = operation
        super().__init__(
            message,
            "TASK_ERROR",
            {"task_id": task_id, "operation": operation}
        )


class ConfigurationError(ContentWorkflowError):
    """Configuration error."""

    def __init__(self, message: str, config_key: str = None):
        self.config_key = config_key
        super().__init__(
            message,
            "CONFIGURATION_ERROR",
            {"config_key": config_key}
        )


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    error_code: str = Field(default="UNKNOWN_ERROR", description="Error code")
    status: int = Field(..., description="HTTP status code")

    # Optional Details
    details: Optional[Dict[str, Any]] = Field(None, description="Error details")
    field: Optional[str] = Field(None, description="Field that caused error")
    value: Optional[Any] = Field(None, description="Value that caused error")

    # Request Information
    request_id: Optional[str] = Field(None, description="Request ID")
    task_id: Optional[str] = Field(None, description="Task ID")

    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")

    @classmethod
    def from_exception(cls, exc: ContentWorkflowError, status: int = 500) -> 'ErrorResponse':
        """Create error response from exception."""
        return cls(
            error=exc.__class__.__name__,
            message=exc.message,
            error_code=exc.error_code or "UNKNOWN_ERROR",
            status=status,
            details=exc.details
        )


class ValidationErrorResponse(BaseModel):
    """Validation error response model."""

    error: str = Field(default="validation_error", description="Error type")
    message: str = Field(default="Validation failed", description="Error message")
    status: int = Field(default=400, description="HTTP status code")

    validation_errors: List[Dict[str, Any]] = Field(default_factory=list, description="Validation errors")

    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")

    def add_validation_error(self, field: str, message: str, value: Any = None):
        """Add a validation error."""
        error = {
            "field": field,
            "message": message
        }
        if value is not None:
            error["value"] = value

        self.validation_errors.append(error)

    def has_errors(self) -> bool:
        """Check if there are validation errors."""
        return len(self.validation_errors) > 0
