"""
Workflow tasks for the link content workflow.

Each task builds its own orchestrator over the configured job store, runs
one pass to completion and reports a summary as its result.
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from .celery_app import celery_app, config
from ..core.models.errors import TaskError
from ..core.models.workflow import GenerationOverrides
from ..generation.engine import error_message
from ..utils.logging import TaskLogger
from ..workflow.orchestrator import create_orchestrator
from ..workflow.runner import summarize_result

logger = logging.getLogger(__name__)
task_logger = TaskLogger()


async def _with_orchestrator(operation: Callable):
    orchestrator = create_orchestrator(config)
    try:
        return await operation(orchestrator)
    finally:
        await orchestrator.close()


def _run_operation(task, operation: str, job_id: str, call: Callable,
                   item_id: Optional[str] = None) -> Dict[str, Any]:
    task_id = task.request.id
    started = time.time()
    task_logger.log_task_start(task_id, operation, job_id, item_id)

    task.update_state(
        state='PROGRESS',
        meta={
            'operation': operation,
            'job_id': job_id,
            'item_id': item_id,
            'stage': 'running',
        }
    )

    try:
        result = asyncio.run(_with_orchestrator(call))
    except Exception as e:
        error_msg = f"{operation} failed for job {job_id}: {error_message(e)}"
        logger.error(error_msg, exc_info=True)
        task_logger.log_task_error(task_id, operation, error_msg, job_id, item_id)
        raise TaskError(
            message=error_msg,
            task_id=task_id,
            operation=operation
        )

    task_logger.log_task_complete(task_id, operation, time.time() - started, job_id, item_id)
    return {
        'status': 'completed',
        'task_id': task_id,
        'operation': operation,
        'job_id': job_id,
        'item_id': item_id,
        'result': summarize_result(result),
        'completed_at': datetime.utcnow().isoformat(),
    }


def _overrides(data: Optional[Dict[str, Any]]) -> Optional[GenerationOverrides]:
    return GenerationOverrides(**data) if data is not None else None


@celery_app.task(bind=True, name='link_content.tasks.workflow.crawl_batch_job')
def crawl_batch_job(self, job_id: str) -> Dict[str, Any]:
    """Crawl every pending item of a job."""
    return _run_operation(
        self, 'crawl', job_id,
        lambda orchestrator: orchestrator.start_crawling(job_id)
    )


@celery_app.task(bind=True, name='link_content.tasks.workflow.generate_batch_content')
def generate_batch_content(self, job_id: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Generate content for every crawled item of a job.

    Args:
        job_id: Batch job id
        overrides: Serialized GenerationOverrides, None for the job settings
    """
    if overrides is None:
        return _run_operation(
            self, 'generate', job_id,
            lambda orchestrator: orchestrator.generate_content(job_id)
        )
    return _run_operation(
        self, 'generate_with_settings', job_id,
        lambda orchestrator: orchestrator.generate_batch_content_with_settings(job_id, _overrides(overrides))
    )


@celery_app.task(bind=True, name='link_content.tasks.workflow.regenerate_item')
def regenerate_item(self, job_id: str, item_id: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Rerun generation for one item."""
    return _run_operation(
        self, 'regenerate', job_id,
        lambda orchestrator: orchestrator.regenerate_content(job_id, item_id, _overrides(overrides)),
        item_id=item_id
    )
