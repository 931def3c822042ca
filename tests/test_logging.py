"""
Tests for structured and task logging.
"""

import logging

from link_content.utils.logging import TaskLogger, get_logger


def last_record(caplog, name):
    return [record for record in caplog.records if record.name == name][-1]


def test_task_completion_carries_job_and_item(caplog):
    caplog.set_level(logging.INFO)

    TaskLogger().log_task_complete("task-1", "regenerate", 1.5, "job-1", "item-1")

    record = last_record(caplog, "link_content.tasks")
    assert record.getMessage() == "Task completed: regenerate for item item-1 of job job-1 in 1.50s"
    assert record.task_id == "task-1"
    assert record.operation == "regenerate"
    assert record.job_id == "job-1"
    assert record.item_id == "item-1"
    assert record.duration == 1.5


def test_unknown_fields_are_left_out(caplog):
    caplog.set_level(logging.INFO)

    TaskLogger().log_task_start("task-2", "crawl", "job-1")

    record = last_record(caplog, "link_content.tasks")
    assert record.getMessage() == "Task started: crawl for job job-1"
    assert record.job_id == "job-1"
    assert not hasattr(record, "item_id")


def test_task_error_is_logged_at_error_level(caplog):
    caplog.set_level(logging.INFO)

    TaskLogger().log_task_error("task-3", "generate", "No items ready for content generation", "job-2")

    record = last_record(caplog, "link_content.tasks")
    assert record.levelno == logging.ERROR
    assert record.error == "No items ready for content generation"
    assert record.getMessage() == "Task error: generate for job job-2: No items ready for content generation"


def test_bound_fields_are_merged(caplog):
    caplog.set_level(logging.INFO)

    logger = get_logger("link_content.workflow", job_id="job-1").bind(item_id="item-7")
    logger.warning("Item skipped", reason="stale")

    record = last_record(caplog, "link_content.workflow")
    assert record.levelno == logging.WARNING
    assert (record.job_id, record.item_id, record.reason) == ("job-1", "item-7", "stale")
    assert record.timestamp
