"""
Background execution of long-running workflow operations.

Crawling and generation passes take minutes, so the API submits them to a
TaskRunner and returns a TaskHandle immediately. BackgroundTaskRunner runs
them on an event loop hosted by a daemon thread of the API process;
CeleryTaskRunner hands them to Celery workers sharing a Redis job store.
"""

import asyncio
import logging
import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.models.errors import ValidationError
from ..core.models.workflow import (
    BatchJob,
    ContentWorkflowItem,
    GenerationOverrides,
    TaskHandle,
    TaskState,
)
from ..generation.engine import error_message
from ..utils.logging import TaskLogger
from .orchestrator import BatchWorkflowOrchestrator


logger = logging.getLogger(__name__)
task_logger = TaskLogger()

OPERATIONS = ('crawl', 'generate', 'generate_with_settings', 'regenerate')

CELERY_STATES = {
    'PENDING': TaskState.PENDING,
    'RECEIVED': TaskState.PENDING,
    'STARTED': TaskState.RUNNING,
    'PROGRESS': TaskState.RUNNING,
    'RETRY': TaskState.RUNNING,
    'SUCCESS': TaskState.SUCCEEDED,
    'FAILURE': TaskState.FAILED,
    'REVOKED': TaskState.FAILED,
}


def validate_operation(operation: str, item_id: Optional[str] = None):
    if operation not in OPERATIONS:
        raise ValidationError(f"Unknown operation: {operation}", "operation", operation)
    if operation == 'regenerate' and not item_id:
        raise ValidationError("item_id is required for regeneration", "item_id")


def summarize_result(result: Any) -> Dict[str, Any]:
    """Small JSON-friendly summary of an operation result for the task handle."""
    if isinstance(result, BatchJob):
        return {
            "job_status": result.status.value,
            "progress": result.progress.model_dump(),
        }
    if isinstance(result, ContentWorkflowItem):
        return {
            "item_status": result.status.value,
            "error_message": result.error_message,
        }
    return {}


class TaskRunner(ABC):
    """Submits workflow operations and reports their state."""

    def __init__(self, orchestrator: BatchWorkflowOrchestrator):
        self.orchestrator = orchestrator

    @abstractmethod
    def submit(
        self,
        operation: str,
        job_id: str,
        item_id: Optional[str] = None,
        overrides: Optional[GenerationOverrides] = None
    ) -> TaskHandle:
        """
        Start an operation in the background.

        Raises:
            ValidationError: Unknown operation or missing item id
            JobNotFoundError: Unknown job
            JobConflictError: A pass is already running for the job
        """

    @abstractmethod
    def get(self, task_id: str) -> Optional[TaskHandle]:
        """Current handle of a submitted task, or None."""

    def run(self, coro):
        """Run a short orchestrator coroutine to completion and return its result."""
        return asyncio.run(coro)

    def shutdown(self):
        pass


class BackgroundTaskRunner(TaskRunner):
    """
    In-process runner.

    One event loop runs in a daemon thread for the lifetime of the runner;
    every orchestrator coroutine, short or long, executes on it so browser
    and HTTP sessions stay bound to a single loop.
    """

    def __init__(self, orchestrator: BatchWorkflowOrchestrator):
        super().__init__(orchestrator)
        self._handles: Dict[str, TaskHandle] = {}
        self._lock = threading.Lock()
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, name="workflow-runner", daemon=True)
        self._thread.start()

    def _run_loop(self):
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def submit(
        self,
        operation: str,
        job_id: str,
        item_id: Optional[str] = None,
        overrides: Optional[GenerationOverrides] = None
    ) -> TaskHandle:
        validate_operation(operation, item_id)
        item_key = item_id if operation == 'regenerate' else None
        # Held from submission, so a second request conflicts before it is accepted
        key = self.orchestrator.reserve(operation, job_id, item_key)

        handle = TaskHandle(operation=operation, job_id=job_id, item_id=item_id)
        with self._lock:
            self._handles[handle.task_id] = handle

        coro = self.orchestrator.run_reserved(key, operation, job_id, item_key, overrides)
        asyncio.run_coroutine_threadsafe(self._execute(handle.task_id, coro), self._loop)

        logger.info(f"Submitted {operation} task {handle.task_id} for job {job_id}")
        return handle.model_copy()

    async def _execute(self, task_id: str, coro):
        handle = self._update(task_id, state=TaskState.RUNNING)
        started = time.time()
        task_logger.log_task_start(task_id, handle.operation, handle.job_id, handle.item_id)
        try:
            result = await coro
        except Exception as e:
            task_logger.log_task_error(task_id, handle.operation, error_message(e), handle.job_id, handle.item_id)
            self._update(task_id, state=TaskState.FAILED, error=error_message(e), finished_at=datetime.utcnow())
        else:
            self._update(
                task_id,
                state=TaskState.SUCCEEDED,
                details=summarize_result(result),
                finished_at=datetime.utcnow(),
            )
            task_logger.log_task_complete(
                task_id, handle.operation, time.time() - started, handle.job_id, handle.item_id
            )

    def _update(self, task_id: str, **changes):
        with self._lock:
            handle = self._handles.get(task_id)
            if handle is not None:
                handle = handle.model_copy(update=changes)
                self._handles[task_id] = handle
            return handle

    def get(self, task_id: str) -> Optional[TaskHandle]:
        with self._lock:
            handle = self._handles.get(task_id)
            return handle.model_copy() if handle else None

    def run(self, coro):
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result()

    def shutdown(self, timeout: float = 5.0):
        if not self._loop.is_running():
            return
        try:
            self.run(self.orchestrator.close())
        finally:
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(timeout)


class CeleryTaskRunner(TaskRunner):
    """
    Runner backed by Celery workers.

    Workers build their own orchestrator over the shared Redis job store, so
    the conflict check made here only sees passes started by this process.
    """

    def __init__(self, orchestrator: BatchWorkflowOrchestrator, celery_app=None):
        super().__init__(orchestrator)
        if celery_app is None:
            # Import here to avoid loading Celery config for in-process use
            from ..tasks.celery_app import celery_app
        self.celery_app = celery_app
        self._handles: Dict[str, TaskHandle] = {}
        self._lock = threading.Lock()

    def submit(
        self,
        operation: str,
        job_id: str,
        item_id: Optional[str] = None,
        overrides: Optional[GenerationOverrides] = None
    ) -> TaskHandle:
        from ..tasks.workflow import crawl_batch_job, generate_batch_content, regenerate_item

        validate_operation(operation, item_id)
        self.orchestrator.check_available(job_id, item_id if operation == 'regenerate' else None)

        payload = overrides.model_dump(mode='json') if overrides is not None else None
        if operation == 'crawl':
            task = crawl_batch_job.delay(job_id)
        elif operation == 'regenerate':
            task = regenerate_item.delay(job_id, item_id, payload)
        else:
            if operation == 'generate_with_settings' and payload is None:
                payload = GenerationOverrides().model_dump(mode='json')
            task = generate_batch_content.delay(job_id, payload)

        handle = TaskHandle(task_id=task.id, operation=operation, job_id=job_id, item_id=item_id)
        with self._lock:
            self._handles[handle.task_id] = handle

        logger.info(f"Queued {operation} task {task.id} for job {job_id}")
        return handle.model_copy()

    def get(self, task_id: str) -> Optional[TaskHandle]:
        with self._lock:
            handle = self._handles.get(task_id)

        result = self.celery_app.AsyncResult(task_id)
        state = CELERY_STATES.get(result.state, TaskState.RUNNING)
        info = result.info if isinstance(result.info, dict) else {}

        if handle is None:
            # Celery reports unknown ids as PENDING
            if state == TaskState.PENDING or not info.get('job_id'):
                return None
            handle = TaskHandle(
                task_id=task_id,
                operation=info.get('operation', 'unknown'),
                job_id=info['job_id'],
                item_id=info.get('item_id'),
            )

        changes: Dict[str, Any] = {"state": state}
        if state == TaskState.SUCCEEDED:
            changes["details"] = info.get('result', {})
        elif state == TaskState.FAILED:
            changes["error"] = str(result.info) if result.info else "Task failed"
        return handle.model_copy(update=changes)


def create_task_runner(config, orchestrator: BatchWorkflowOrchestrator) -> TaskRunner:
    if config.TASK_BACKEND == 'celery':
        return CeleryTaskRunner(orchestrator)
    return BackgroundTaskRunner(orchestrator)
