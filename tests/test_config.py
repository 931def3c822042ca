"""
Tests for configuration loading and validation.
"""

from link_content.utils.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    get_config,
    is_configured_key,
    validate_config,
)
from link_content.workflow.orchestrator import WorkflowSettings


def test_get_config_by_name():
    assert isinstance(get_config('testing'), TestingConfig)
    assert isinstance(get_config('production'), ProductionConfig)
    assert isinstance(get_config('unknown'), DevelopmentConfig)


def test_placeholder_keys_are_not_configured():
    assert is_configured_key("sk-real-looking-key")
    assert not is_configured_key("your-openai-api-key-here")
    assert not is_configured_key("   ")
    assert not is_configured_key(None)


def test_configured_providers():
    config = TestingConfig(GEMINI_API_KEY="gm-key", OPENAI_API_KEY="changeme")

    assert config.configured_providers() == ['gemini']


def test_validate_config_reports_missing_providers():
    errors = validate_config(TestingConfig())

    assert any("GEMINI_API_KEY" in error for error in errors)


def test_validate_config_accepts_complete_setup():
    config = TestingConfig(OPENAI_API_KEY="sk-test")

    assert validate_config(config) == []


def test_celery_requires_redis_store():
    config = TestingConfig(OPENAI_API_KEY="sk-test", TASK_BACKEND='celery', JOB_STORE='memory')

    assert "TASK_BACKEND 'celery' requires JOB_STORE 'redis'" in validate_config(config)


def test_workflow_settings_from_config():
    config = TestingConfig(CRAWL_CONCURRENCY=5, MIN_CRAWL_QUALITY=20)

    settings = WorkflowSettings.from_config(config)

    assert settings.crawl_concurrency == 5
    assert settings.crawl_batch_delay == 0.0
    assert settings.min_crawl_quality == 20
