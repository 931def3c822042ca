"""
Batch workflow module.

Job storage, the batch orchestrator and the runners executing its
long-running passes.
"""

from .orchestrator import BatchWorkflowOrchestrator, WorkflowSettings, create_orchestrator
from .repository import InMemoryJobRepository, JobRepository, RedisJobRepository
from .runner import BackgroundTaskRunner, CeleryTaskRunner, TaskRunner, create_task_runner

__all__ = [
    'BatchWorkflowOrchestrator',
    'WorkflowSettings',
    'create_orchestrator',
    'JobRepository',
    'InMemoryJobRepository',
    'RedisJobRepository',
    'TaskRunner',
    'BackgroundTaskRunner',
    'CeleryTaskRunner',
    'create_task_runner'
]
