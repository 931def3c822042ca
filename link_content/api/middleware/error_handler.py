"""
Error handling middleware for the link content workflow.

This module provides centralized error handling and
response formatting for the API.
"""

import logging
from flask import jsonify, g

from ...core.models.errors import (
    ContentWorkflowError,
    ErrorResponse,
    GenerationError,
    InvalidStateError,
    ItemNotFoundError,
    JobConflictError,
    JobNotFoundError,
    TaskError,
    ValidationError,
)


logger = logging.getLogger(__name__)


def _respond(error: ContentWorkflowError, status: int, **fields):
    body = ErrorResponse.from_exception(error, status)
    for name, value in fields.items():
        setattr(body, name, value)
    body.request_id = getattr(g, 'request_id', None)
    return jsonify(body.model_dump(mode='json')), status


class ErrorHandler:
    """Centralized error handling for the API."""

    @staticmethod
    def register_handlers(app):
        """Register error handlers with Flask app."""

        @app.errorhandler(JobNotFoundError)
        @app.errorhandler(ItemNotFoundError)
        def handle_not_found_error(error):
            return ErrorHandler.handle_not_found_error(error)

        @app.errorhandler(JobConflictError)
        @app.errorhandler(InvalidStateError)
        def handle_conflict_error(error):
            return ErrorHandler.handle_conflict_error(error)

        @app.errorhandler(ValidationError)
        def handle_validation_error(error):
            return ErrorHandler.handle_validation_error(error)

        @app.errorhandler(GenerationError)
        def handle_generation_error(error):
            return ErrorHandler.handle_generation_error(error)

        @app.errorhandler(TaskError)
        def handle_task_error(error):
            return ErrorHandler.handle_task_error(error)

        @app.errorhandler(ContentWorkflowError)
        def handle_workflow_error(error):
            return ErrorHandler.handle_workflow_error(error)

        @app.errorhandler(Exception)
        def handle_generic_error(error):
            return ErrorHandler.handle_generic_error(error)

    @staticmethod
    def handle_not_found_error(error: ValidationError):
        """Handle unknown job or item ids."""
        logger.info(f"Not found: {error.message}")
        return _respond(error, 404)

    @staticmethod
    def handle_conflict_error(error: ContentWorkflowError):
        """Handle concurrent passes and invalid state transitions."""
        logger.warning(f"Conflict: {error.message}")
        return _respond(error, 409)

    @staticmethod
    def handle_validation_error(error: ValidationError):
        """Handle validation errors."""
        logger.warning(f"Validation error: {error.message}")
        value = error.value if isinstance(error.value, (str, int, float, bool, list, type(None))) else str(error.value)
        return _respond(error, 400, field=error.field, value=value)

    @staticmethod
    def handle_generation_error(error: GenerationError):
        """Handle AI provider failures."""
        logger.error(f"Generation error: {error.message}")
        return _respond(error, 502)

    @staticmethod
    def handle_task_error(error: TaskError):
        """Handle task errors."""
        logger.error(f"Task error: {error.message}")
        return _respond(error, 500, task_id=error.task_id)

    @staticmethod
    def handle_workflow_error(error: ContentWorkflowError):
        """Handle remaining workflow errors."""
        logger.error(f"Workflow error: {error.message}")
        return _respond(error, 500)

    @staticmethod
    def handle_generic_error(error: Exception):
        """Handle generic errors."""
        request_id = getattr(g, 'request_id', 'unknown')

        logger.error(
            f"Unhandled error in request {request_id}: {str(error)}",
            exc_info=True
        )

        return jsonify(ErrorResponse(
            error="internal_server_error",
            message="An unexpected error occurred",
            error_code="INTERNAL_SERVER_ERROR",
            status=500,
            details={
                "request_id": request_id,
                "error_type": type(error).__name__
            }
        ).model_dump(mode='json')), 500
