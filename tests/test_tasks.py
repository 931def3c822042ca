"""
Tests for the Celery workflow task bodies.
"""

import asyncio
from types import SimpleNamespace

import pytest

from helpers import FakeExtractor, make_extracted, make_orchestrator
from link_content.core.models.errors import TaskError
from link_content.tasks import workflow as workflow_tasks

URL = "https://example.com/article"


class FakeTask:

    def __init__(self, task_id="task-1"):
        self.request = SimpleNamespace(id=task_id)
        self.states = []

    def update_state(self, state, meta):
        self.states.append((state, meta))


@pytest.fixture
def orchestrator(monkeypatch):
    orchestrator = make_orchestrator(FakeExtractor({URL: make_extracted(URL)}))
    monkeypatch.setattr(workflow_tasks, 'create_orchestrator', lambda config: orchestrator)
    return orchestrator


def test_crawl_operation_reports_summary(orchestrator):
    job = asyncio.run(orchestrator.create_batch_job("project-1", [URL]))
    task = FakeTask()

    result = workflow_tasks._run_operation(
        task, 'crawl', job.id, lambda o: o.start_crawling(job.id)
    )

    assert result['status'] == 'completed'
    assert result['operation'] == 'crawl'
    assert result['job_id'] == job.id
    assert result['result']['job_status'] == 'completed'
    assert result['result']['progress']['crawled'] == 1
    assert task.states[0][0] == 'PROGRESS'
    assert task.states[0][1]['job_id'] == job.id
    assert orchestrator.extractor.closed


def test_failed_operation_raises_task_error(orchestrator):
    job = asyncio.run(orchestrator.create_batch_job("project-1", [URL]))

    with pytest.raises(TaskError) as exc_info:
        workflow_tasks._run_operation(
            FakeTask(), 'generate', job.id, lambda o: o.generate_content(job.id)
        )

    assert exc_info.value.operation == 'generate'
    assert "No items ready for content generation" in exc_info.value.message


def test_overrides_are_rebuilt_from_json():
    overrides = workflow_tasks._overrides({"content_type": "social_media", "rewrite_style": "expanded"})

    assert overrides.content_type.value == "social_media"
    assert overrides.rewrite_style.value == "expanded"
    assert workflow_tasks._overrides(None) is None
