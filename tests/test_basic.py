"""
Basic tests for the link content workflow.

This module contains basic tests to verify the system structure
and basic functionality.
"""

import pytest

from link_content.core.models.errors import ValidationError
from link_content.core.models.workflow import BatchJob, ContentWorkflowItem, ItemStatus
from link_content.utils.config import get_config


def test_workflow_item_creation():
    """Test creating a workflow item."""
    item = ContentWorkflowItem(job_id="job-1", source_url="https://example.com/a")

    assert item.status == ItemStatus.PENDING
    assert item.extracted_content is None
    assert item.generated_content is None
    assert item.error_message is None
    assert item.id


def test_batch_job_validation():
    """Test batch job validation."""
    job = BatchJob(project_id="project-1")
    assert job.progress.total == 0

    with pytest.raises(Exception):  # Pydantic validation error
        BatchJob(project_id="")


def test_config_loading():
    """Test configuration loading."""
    config = get_config('testing')

    assert config.TESTING is True
    assert config.DEBUG is True
    assert config.LOG_LEVEL == 'CRITICAL'
    assert config.TASK_BACKEND == 'inprocess'


def test_imports():
    """Test that all modules can be imported."""
    # Test core models
    from link_content.core.models import BatchJob, ExtractedContent, GeneratedContent
    from link_content.core.models.errors import ContentWorkflowError

    # Test engines
    from link_content.extraction import ContentExtractor
    from link_content.generation import GenerationEngine
    from link_content.integrations.llm import LiteLLMProvider, ProviderRegistry
    from link_content.workflow import BatchWorkflowOrchestrator, BackgroundTaskRunner

    # Test API
    from link_content.api.app import create_app

    # Test tasks
    from link_content.tasks.celery_app import celery_app

    # Test utils
    from link_content.utils.config import get_config
    from link_content.utils.logging import setup_logging
    from link_content.utils.health import HealthChecker

    # If we get here, all imports succeeded
    assert ValidationError is not None


def test_flask_app_creation():
    """Test Flask app creation."""
    from link_content.api.app import create_app

    app = create_app('testing')
    try:
        assert app is not None
        assert app.config['TESTING'] is True
        assert app.config['DEBUG'] is True
        assert 'link_content' in app.extensions
    finally:
        app.extensions['link_content']['task_runner'].shutdown()


def test_celery_app_creation():
    """Test Celery app creation."""
    from link_content.tasks.celery_app import celery_app

    assert celery_app is not None
    assert celery_app.main == 'link_content'


if __name__ == '__main__':
    pytest.main([__file__])
