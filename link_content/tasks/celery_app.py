"""
Celery application configuration for the link content workflow.

Workers run crawling and generation passes against the shared Redis
job store.
"""

from celery import Celery
from ..utils.config import get_config

# Get configuration
config = get_config()

# Create Celery app
celery_app = Celery('link_content')

# Configure Celery
celery_app.conf.update(
    broker_url=config.CELERY_BROKER_URL,
    result_backend=config.CELERY_RESULT_BACKEND,
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_track_started=True,
    task_time_limit=config.CELERY_TASK_TIME_LIMIT,
    task_soft_time_limit=config.CELERY_TASK_SOFT_TIME_LIMIT,
    worker_prefetch_multiplier=config.CELERY_WORKER_PREFETCH_MULTIPLIER,
    worker_max_tasks_per_child=config.CELERY_WORKER_MAX_TASKS_PER_CHILD,
    task_routes={
        'link_content.tasks.workflow.*': {'queue': 'workflow'},
    }
)

# Tasks will be imported when needed to avoid circular imports
