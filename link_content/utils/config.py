"""
Configuration management for the link content workflow.

This module provides configuration loading and management
for the application.
"""

import os
from typing import Optional, List
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Values shipped in example .env files; a key set to one of these is unconfigured.
PLACEHOLDER_KEYS = frozenset([
    'your-openai-api-key-here',
    'your-gemini-api-key-here',
    'your-anthropic-api-key-here',
    'your-api-key-here',
    'changeme',
])


def is_configured_key(value: Optional[str]) -> bool:
    """True for a real-looking API key."""
    if not value or not value.strip():
        return False
    return value.strip().lower() not in PLACEHOLDER_KEYS


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == 'true'


@dataclass
class Config:
    """Base configuration class."""

    # Flask settings
    SECRET_KEY: str = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG: bool = _env_bool('DEBUG', 'false')
    TESTING: bool = _env_bool('TESTING', 'false')

    # API settings
    API_TITLE: str = 'Link Content Workflow'
    API_VERSION: str = '1.0.0'

    # Authentication
    API_KEY_HEADER: str = 'X-API-Key'
    API_KEYS: frozenset = field(default_factory=lambda: frozenset([
        key.strip() for key in os.environ.get('API_KEYS', '').split(',') if key.strip()
    ]))

    # Rate limiting
    RATELIMIT_ENABLED: bool = _env_bool('RATELIMIT_ENABLED', 'true')
    RATELIMIT_STORAGE_URI: str = os.environ.get('RATELIMIT_STORAGE_URL', 'memory://')

    # Logging
    LOG_LEVEL: str = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE: str = os.environ.get('LOG_FILE', 'logs/app.log')
    LOG_MAX_BYTES: int = int(os.environ.get('LOG_MAX_BYTES', 10485760))  # 10MB
    LOG_BACKUP_COUNT: int = int(os.environ.get('LOG_BACKUP_COUNT', 5))
    LOG_REQUESTS: bool = _env_bool('LOG_REQUESTS', 'true')

    # AI providers
    OPENAI_API_KEY: Optional[str] = os.environ.get('OPENAI_API_KEY')
    OPENAI_MODEL: str = os.environ.get('OPENAI_MODEL', 'gpt-4o-mini')
    GEMINI_API_KEY: Optional[str] = os.environ.get('GEMINI_API_KEY')
    GEMINI_MODEL: str = os.environ.get('GEMINI_MODEL', 'gemini/gemini-1.5-flash')
    ANTHROPIC_API_KEY: Optional[str] = os.environ.get('ANTHROPIC_API_KEY')
    ANTHROPIC_MODEL: str = os.environ.get('ANTHROPIC_MODEL', 'anthropic/claude-3-5-haiku-latest')
    LLM_TIMEOUT: int = int(os.environ.get('LLM_TIMEOUT', '120'))
    LLM_MAX_TOKENS: int = int(os.environ.get('LLM_MAX_TOKENS', '4096'))
    LLM_TEMPERATURE: float = float(os.environ.get('LLM_TEMPERATURE', '0.7'))
    LLM_REQUESTS_PER_MINUTE: int = int(os.environ.get('LLM_REQUESTS_PER_MINUTE', '60'))
    COMPLEXITY_THRESHOLD: float = float(os.environ.get('COMPLEXITY_THRESHOLD', '0.8'))

    # Extraction
    EXTRACTION_USE_BROWSER: bool = _env_bool('EXTRACTION_USE_BROWSER', 'true')
    EXTRACTION_TIMEOUT_MS: int = int(os.environ.get('EXTRACTION_TIMEOUT_MS', '60000'))
    EXTRACTION_SETTLE_MS: int = int(os.environ.get('EXTRACTION_SETTLE_MS', '3000'))
    STATIC_FETCH_TIMEOUT: float = float(os.environ.get('STATIC_FETCH_TIMEOUT', '10'))
    TARGET_LANGUAGE: str = os.environ.get('TARGET_LANGUAGE', 'vi')

    # Workflow
    CRAWL_CONCURRENCY: int = int(os.environ.get('CRAWL_CONCURRENCY', '3'))
    GENERATION_CONCURRENCY: int = int(os.environ.get('GENERATION_CONCURRENCY', '2'))
    CRAWL_BATCH_DELAY: float = float(os.environ.get('CRAWL_BATCH_DELAY', '2.0'))
    GENERATION_BATCH_DELAY: float = float(os.environ.get('GENERATION_BATCH_DELAY', '3.0'))
    MIN_CRAWL_QUALITY: int = int(os.environ.get('MIN_CRAWL_QUALITY', '0'))
    DEFAULT_CONTENT_LANGUAGE: str = os.environ.get('DEFAULT_CONTENT_LANGUAGE', 'en')

    # Storage and background tasks
    JOB_STORE: str = os.environ.get('JOB_STORE', 'memory')
    REDIS_URL: str = os.environ.get('REDIS_URL', 'redis://localhost:6379/1')
    JOB_TTL_SECONDS: int = int(os.environ.get('JOB_TTL_SECONDS', '604800'))  # 7 days
    TASK_BACKEND: str = os.environ.get('TASK_BACKEND', 'inprocess')

    # Celery configuration
    CELERY_BROKER_URL: str = os.environ.get('CELERY_BROKER_URL', 'redis://localhost:6379/0')
    CELERY_RESULT_BACKEND: str = os.environ.get('CELERY_RESULT_BACKEND', 'redis://localhost:6379/0')
    CELERY_TASK_TIME_LIMIT: int = int(os.environ.get('CELERY_TASK_TIME_LIMIT', '3600'))  # 1 hour
    CELERY_TASK_SOFT_TIME_LIMIT: int = int(os.environ.get('CELERY_TASK_SOFT_TIME_LIMIT', '3300'))  # 55 minutes
    CELERY_WORKER_PREFETCH_MULTIPLIER: int = int(os.environ.get('CELERY_WORKER_PREFETCH_MULTIPLIER', '1'))
    CELERY_WORKER_MAX_TASKS_PER_CHILD: int = int(os.environ.get('CELERY_WORKER_MAX_TASKS_PER_CHILD', '1000'))

    # Request settings
    MAX_CONTENT_LENGTH: int = int(os.environ.get('MAX_CONTENT_LENGTH', 1048576))  # 1MB

    # CORS settings
    CORS_ORIGINS: List[str] = field(default_factory=lambda: os.environ.get('CORS_ORIGINS', '*').split(','))

    def configured_providers(self) -> List[str]:
        """Names of providers with a usable API key."""
        keys = {
            'openai': self.OPENAI_API_KEY,
            'gemini': self.GEMINI_API_KEY,
            'anthropic': self.ANTHROPIC_API_KEY,
        }
        return [name for name, key in keys.items() if is_configured_key(key)]


@dataclass
class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG: bool = True
    LOG_LEVEL: str = 'DEBUG'


@dataclass
class ProductionConfig(Config):
    """Production configuration."""
    DEBUG: bool = False
    LOG_LEVEL: str = 'WARNING'
    JOB_STORE: str = os.environ.get('JOB_STORE', 'redis')


@dataclass
class TestingConfig(Config):
    """Testing configuration."""
    TESTING: bool = True
    DEBUG: bool = True
    LOG_LEVEL: str = 'CRITICAL'
    LOG_FILE: str = ''
    API_KEYS: frozenset = field(default_factory=lambda: frozenset(['test-api-key']))
    RATELIMIT_ENABLED: bool = False
    EXTRACTION_USE_BROWSER: bool = False
    CRAWL_BATCH_DELAY: float = 0.0
    GENERATION_BATCH_DELAY: float = 0.0
    JOB_STORE: str = 'memory'
    TASK_BACKEND: str = 'inprocess'
    OPENAI_API_KEY: Optional[str] = None
    GEMINI_API_KEY: Optional[str] = None
    ANTHROPIC_API_KEY: Optional[str] = None


def get_config(config_name: str = None) -> Config:
    """
    Get configuration based on environment.

    Args:
        config_name: Configuration name (development, production, testing)

    Returns:
        Configuration object
    """
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development').lower()

    config_map = {
        'development': DevelopmentConfig,
        'production': ProductionConfig,
        'testing': TestingConfig
    }

    config_class = config_map.get(config_name, DevelopmentConfig)
    return config_class()


def validate_config(config: Config) -> List[str]:
    """
    Validate configuration.

    Args:
        config: Configuration to validate

    Returns:
        List of validation errors
    """
    errors = []

    if not config.API_KEYS:
        errors.append("API_KEYS must be configured")

    if config.SECRET_KEY == 'dev-secret-key-change-in-production' and config.DEBUG is False:
        errors.append("SECRET_KEY must be changed in production")

    if not config.configured_providers():
        errors.append("At least one of OPENAI_API_KEY, GEMINI_API_KEY or ANTHROPIC_API_KEY must be configured")

    if config.JOB_STORE not in ('memory', 'redis'):
        errors.append(f"JOB_STORE must be 'memory' or 'redis', got '{config.JOB_STORE}'")

    if config.TASK_BACKEND not in ('inprocess', 'celery'):
        errors.append(f"TASK_BACKEND must be 'inprocess' or 'celery', got '{config.TASK_BACKEND}'")

    if config.TASK_BACKEND == 'celery' and config.JOB_STORE != 'redis':
        errors.append("TASK_BACKEND 'celery' requires JOB_STORE 'redis'")

    if config.JOB_STORE == 'redis' and not config.REDIS_URL:
        errors.append("REDIS_URL must be configured when JOB_STORE is 'redis'")

    if config.TASK_BACKEND == 'celery':
        if not config.CELERY_BROKER_URL:
            errors.append("CELERY_BROKER_URL must be configured")
        if not config.CELERY_RESULT_BACKEND:
            errors.append("CELERY_RESULT_BACKEND must be configured")

    if config.CRAWL_CONCURRENCY < 1 or config.GENERATION_CONCURRENCY < 1:
        errors.append("CRAWL_CONCURRENCY and GENERATION_CONCURRENCY must be at least 1")

    if not 0.0 <= config.COMPLEXITY_THRESHOLD <= 1.0:
        errors.append("COMPLEXITY_THRESHOLD must be between 0 and 1")

    return errors
