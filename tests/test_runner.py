"""
Tests for the background task runners.
"""

import time
from types import SimpleNamespace

import pytest

from helpers import FakeExtractor, make_extracted, make_orchestrator
from link_content.core.models.errors import JobConflictError, JobNotFoundError, ValidationError
from link_content.core.models.workflow import TaskState
from link_content.workflow.runner import BackgroundTaskRunner, CeleryTaskRunner, summarize_result

URL = "https://example.com/article"


def wait_for(runner, task_id, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        handle = runner.get(task_id)
        if handle.state in (TaskState.SUCCEEDED, TaskState.FAILED):
            return handle
        time.sleep(0.01)
    raise AssertionError(f"task {task_id} did not finish")


@pytest.fixture
def runner():
    orchestrator = make_orchestrator(FakeExtractor({URL: make_extracted(URL)}, delay=0.05))
    runner = BackgroundTaskRunner(orchestrator)
    yield runner
    runner.shutdown()


class TestBackgroundTaskRunner:

    def test_crawl_then_generate(self, runner):
        job = runner.run(runner.orchestrator.create_batch_job("project-1", [URL]))

        handle = runner.submit('crawl', job.id)
        assert handle.operation == 'crawl'
        finished = wait_for(runner, handle.task_id)

        assert finished.state == TaskState.SUCCEEDED
        assert finished.details["job_status"] == "completed"
        assert finished.details["progress"]["crawled"] == 1
        assert finished.finished_at is not None

        generated = wait_for(runner, runner.submit('generate', job.id).task_id)
        assert generated.state == TaskState.SUCCEEDED
        assert generated.details["progress"]["generated"] == 1

    def test_failed_operation_is_reported_on_the_handle(self, runner):
        job = runner.run(runner.orchestrator.create_batch_job("project-1", [URL]))

        finished = wait_for(runner, runner.submit('generate', job.id).task_id)

        assert finished.state == TaskState.FAILED
        assert finished.error == "No items ready for content generation"

    def test_second_submission_conflicts_while_running(self, runner):
        job = runner.run(runner.orchestrator.create_batch_job("project-1", [URL]))

        handle = runner.submit('crawl', job.id)
        deadline = time.monotonic() + 5
        while not runner.orchestrator.is_processing(job.id) and time.monotonic() < deadline:
            time.sleep(0.001)

        with pytest.raises(JobConflictError):
            runner.submit('crawl', job.id)
        assert wait_for(runner, handle.task_id).state == TaskState.SUCCEEDED

    def test_regenerate_reports_item_status(self, runner):
        orchestrator = runner.orchestrator
        job = runner.run(orchestrator.create_batch_job("project-1", [URL]))
        runner.run(orchestrator.start_crawling(job.id))
        runner.run(orchestrator.generate_content(job.id))
        item = orchestrator.repository.get_items(job.id)[0]

        finished = wait_for(runner, runner.submit('regenerate', job.id, item.id).task_id)

        assert finished.state == TaskState.SUCCEEDED
        assert finished.details == {"item_status": "generated", "error_message": None}

    def test_back_to_back_submissions_conflict(self, runner):
        job = runner.run(runner.orchestrator.create_batch_job("project-1", [URL]))

        handle = runner.submit('crawl', job.id)
        with pytest.raises(JobConflictError):
            runner.submit('crawl', job.id)
        with pytest.raises(JobConflictError):
            runner.submit('generate', job.id)

        assert wait_for(runner, handle.task_id).state == TaskState.SUCCEEDED
        assert not runner.orchestrator.is_processing(job.id)

    def test_failed_operation_releases_the_job(self, runner):
        job = runner.run(runner.orchestrator.create_batch_job("project-1", [URL]))

        assert wait_for(runner, runner.submit('generate', job.id).task_id).state == TaskState.FAILED

        assert not runner.orchestrator.is_processing(job.id)
        assert wait_for(runner, runner.submit('crawl', job.id).task_id).state == TaskState.SUCCEEDED

    def test_rejects_bad_submissions(self, runner):
        job = runner.run(runner.orchestrator.create_batch_job("project-1", [URL]))

        with pytest.raises(ValidationError):
            runner.submit('publish', job.id)
        with pytest.raises(ValidationError):
            runner.submit('regenerate', job.id)
        with pytest.raises(JobNotFoundError):
            runner.submit('crawl', 'missing')

    def test_unknown_task(self, runner):
        assert runner.get('missing') is None

    def test_shutdown_closes_extractor(self):
        extractor = FakeExtractor()
        runner = BackgroundTaskRunner(make_orchestrator(extractor))

        runner.shutdown()

        assert extractor.closed
        runner.shutdown()


class FakeCeleryApp:

    def __init__(self, results):
        self.results = results

    def AsyncResult(self, task_id):
        state, info = self.results.get(task_id, ('PENDING', None))
        return SimpleNamespace(state=state, info=info)


class TestCeleryTaskRunner:

    def test_unknown_task_is_none(self):
        runner = CeleryTaskRunner(make_orchestrator(), celery_app=FakeCeleryApp({}))

        assert runner.get('missing') is None

    def test_reads_progress_and_result_from_celery(self):
        app = FakeCeleryApp({
            'running': ('PROGRESS', {'job_id': 'job-1', 'operation': 'crawl'}),
            'done': ('SUCCESS', {'job_id': 'job-1', 'operation': 'generate', 'result': {'job_status': 'completed'}}),
            'broken': ('FAILURE', RuntimeError('worker lost')),
        })
        runner = CeleryTaskRunner(make_orchestrator(), celery_app=app)

        running = runner.get('running')
        assert running.state == TaskState.RUNNING
        assert running.operation == 'crawl'

        done = runner.get('done')
        assert done.state == TaskState.SUCCEEDED
        assert done.details == {'job_status': 'completed'}

        # failures without a locally known handle carry no job id
        assert runner.get('broken') is None


def test_summarize_result_ignores_other_values():
    assert summarize_result(None) == {}
    assert summarize_result([1, 2]) == {}
