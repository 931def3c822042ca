"""
Batch workflow API endpoints.

Short operations (create, status, approve, listings) run to completion
inside the request. Crawling, generation and regeneration are submitted to
the task runner and answered with 202 and a task handle; callers poll the
job status or the task until the pass ends.
"""

import logging
from flask import Blueprint, request, jsonify, current_app, url_for
from pydantic import ValidationError as SchemaValidationError

from ...core.models.errors import ErrorResponse, ValidationError, ValidationErrorResponse
from ...core.models.workflow import ItemStatus, TaskHandle
from ...workflow.orchestrator import NO_ITEMS_READY_MESSAGE
from ..limiter import limiter
from ..middleware.auth import require_api_key
from ..schemas.batch import CreateBatchJobSchema, GenerateContentSchema, TaskHandleSchema


logger = logging.getLogger(__name__)

# Create blueprint
batch_bp = Blueprint('batch', __name__, url_prefix='/api/v1')


def _workflow():
    return current_app.extensions['link_content']


def _orchestrator():
    return _workflow()['orchestrator']


def _runner():
    return _workflow()['task_runner']


def _schema_error(error: SchemaValidationError):
    response = ValidationErrorResponse()
    for detail in error.errors():
        response.add_validation_error(
            field=".".join(str(part) for part in detail.get('loc', ())) or "request_data",
            message=detail.get('msg', 'Invalid value')
        )
    return jsonify(response.model_dump(mode='json')), 400


def _json_body(required: bool = True):
    if not request.data:
        if required:
            raise ValidationError("Request body is required", "body")
        return {}
    if not request.is_json:
        raise ValidationError("Content-Type must be application/json", "Content-Type")
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object", "body")
    return data


def _accepted(handle: TaskHandle):
    body = TaskHandleSchema(
        task_id=handle.task_id,
        operation=handle.operation,
        job_id=handle.job_id,
        item_id=handle.item_id,
        state=handle.state.value,
        status_url=url_for('batch.get_task_status', task_id=handle.task_id),
        job_url=url_for('batch.get_batch_job', job_id=handle.job_id),
    )
    return jsonify(body.model_dump()), 202


@batch_bp.route('/batch-jobs', methods=['POST'])
@require_api_key
@limiter.limit("30 per minute")
def create_batch_job():
    """
    Create a batch job.

    Expected JSON body:
    {
        "project_id": "Owning project",
        "urls": ["https://example.com/article", ...],
        "settings": {"content_type": "blog_post", "language": "en", ...}
    }
    """
    data = _json_body()
    try:
        payload = CreateBatchJobSchema(**data)
    except SchemaValidationError as e:
        return _schema_error(e)

    job = _runner().run(_orchestrator().create_batch_job(payload.project_id, payload.urls, payload.settings))
    logger.info(f"Batch job created: {job.id} for {request.remote_addr}")
    return jsonify(job.model_dump(mode='json')), 201


@batch_bp.route('/batch-jobs', methods=['GET'])
@require_api_key
def list_batch_jobs():
    """List jobs, newest first, optionally filtered by ``project_id``."""
    jobs = _runner().run(_orchestrator().list_batch_jobs(request.args.get('project_id')))
    return jsonify({
        "jobs": [job.model_dump(mode='json') for job in jobs],
        "count": len(jobs)
    }), 200


@batch_bp.route('/batch-jobs/<job_id>', methods=['GET'])
@require_api_key
def get_batch_job(job_id):
    """Job, its items and per-status counts."""
    status = _runner().run(_orchestrator().get_batch_job_status(job_id))
    return jsonify(status.model_dump(mode='json')), 200


@batch_bp.route('/batch-jobs/<job_id>/crawl', methods=['POST'])
@require_api_key
@limiter.limit("10 per minute")
def start_crawling(job_id):
    """Start crawling every pending item of a job."""
    handle = _runner().submit('crawl', job_id)
    return _accepted(handle)


@batch_bp.route('/batch-jobs/<job_id>/generate', methods=['POST'])
@require_api_key
@limiter.limit("10 per minute")
def generate_content(job_id):
    """
    Start generating content for every crawled item.

    An empty body uses the job settings; otherwise the body holds overrides:
    {
        "content_type": "social_media",
        "topic": "...",
        "rewrite_style": "improved",
        "use_reference_content": true,
        ...
    }
    """
    data = _json_body(required=False)
    try:
        overrides = GenerateContentSchema(**data) if data else None
    except SchemaValidationError as e:
        return _schema_error(e)

    status = _runner().run(_orchestrator().get_batch_job_status(job_id))
    if not status.summary.get(ItemStatus.CRAWLED.value):
        raise ValidationError(NO_ITEMS_READY_MESSAGE, "job_id", job_id)

    if overrides is None:
        handle = _runner().submit('generate', job_id)
    else:
        handle = _runner().submit('generate_with_settings', job_id, overrides=overrides)
    return _accepted(handle)


@batch_bp.route('/batch-jobs/<job_id>/items/<item_id>/approve', methods=['POST'])
@require_api_key
def approve_content_item(job_id, item_id):
    """Approve generated content of one item."""
    item = _runner().run(_orchestrator().approve_content_item(job_id, item_id))
    return jsonify(item.model_dump(mode='json')), 200


@batch_bp.route('/batch-jobs/<job_id>/items/<item_id>/regenerate', methods=['POST'])
@require_api_key
@limiter.limit("20 per minute")
def regenerate_content(job_id, item_id):
    """Start regenerating one item, optionally with overrides."""
    data = _json_body(required=False)
    try:
        overrides = GenerateContentSchema(**data) if data else None
    except SchemaValidationError as e:
        return _schema_error(e)

    handle = _runner().submit('regenerate', job_id, item_id=item_id, overrides=overrides)
    return _accepted(handle)


@batch_bp.route('/batch-jobs/<job_id>/approved', methods=['GET'])
@require_api_key
def get_approved_content(job_id):
    """Approved items of a job."""
    items = _runner().run(_orchestrator().get_approved_content(job_id))
    return jsonify({
        "job_id": job_id,
        "items": [item.model_dump(mode='json') for item in items],
        "count": len(items)
    }), 200


@batch_bp.route('/tasks/<task_id>', methods=['GET'])
@require_api_key
def get_task_status(task_id):
    """State of a submitted operation."""
    handle = _runner().get(task_id)
    if handle is None:
        return jsonify(ErrorResponse(
            error="not_found",
            message=f"Task {task_id} not found",
            error_code="TASK_NOT_FOUND",
            status=404
        ).model_dump(mode='json')), 404
    return jsonify(handle.model_dump(mode='json')), 200


@batch_bp.route('/usage', methods=['GET'])
@require_api_key
def get_usage_stats():
    """Provider usage statistics and recommendations."""
    return jsonify(_orchestrator().generator.get_usage_stats()), 200
