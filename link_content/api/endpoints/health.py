"""
Health check endpoints for the link content workflow.

This module provides health check and monitoring endpoints
for the system.
"""

import logging
import psutil
from datetime import datetime
from flask import Blueprint, jsonify, current_app

from ... import __version__
from ...core.models.errors import ErrorResponse
from ...utils.health import HealthChecker


logger = logging.getLogger(__name__)

# Create blueprint
health_bp = Blueprint('health', __name__, url_prefix='/api/v1')

SERVICE_NAME = "link-content-workflow"


def _error(error: str, message: str):
    return jsonify(ErrorResponse(
        error=error,
        message=message,
        status=500
    ).model_dump(mode='json')), 500


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Basic health check endpoint.

    Returns:
        Service health status
    """
    return jsonify({
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "version": __version__,
        "service": SERVICE_NAME
    }), 200


@health_bp.route('/health/detailed', methods=['GET'])
def detailed_health_check():
    """
    Detailed health check endpoint.

    Returns:
        Workflow components plus infrastructure health
    """
    try:
        workflow = current_app.extensions['link_content']
        components = workflow['task_runner'].run(workflow['orchestrator'].health_check())
        infrastructure = HealthChecker(workflow['config']).get_detailed_status()

        overall_status = components["status"]
        for name in ("redis", "celery"):
            if infrastructure[name]["status"] == "unhealthy":
                overall_status = "unhealthy"

        return jsonify({
            "status": overall_status,
            "timestamp": datetime.utcnow().isoformat(),
            "version": __version__,
            "service": SERVICE_NAME,
            "components": components["components"],
            "active_jobs": components["active_jobs"],
            "infrastructure": infrastructure
        }), 200 if overall_status in ["healthy", "degraded"] else 503

    except Exception as e:
        logger.error(f"Detailed health check failed: {str(e)}")
        return _error("detailed_health_check_failed", "Detailed health check failed")


@health_bp.route('/health/ready', methods=['GET'])
def readiness_check():
    """
    Readiness check endpoint.

    Returns:
        Ready when the job store and, under Celery, the workers respond
    """
    try:
        workflow = current_app.extensions['link_content']
        storage = workflow['orchestrator'].repository.health_check()
        celery_status = HealthChecker(workflow['config']).check_celery()

        issues = [
            status for status in (storage, celery_status)
            if status["status"] not in ("healthy", "not_configured")
        ]
        if not issues:
            return jsonify({
                "status": "ready",
                "timestamp": datetime.utcnow().isoformat()
            }), 200
        return jsonify({
            "status": "not_ready",
            "timestamp": datetime.utcnow().isoformat(),
            "issues": issues
        }), 503

    except Exception as e:
        logger.error(f"Readiness check failed: {str(e)}")
        return _error("readiness_check_failed", "Readiness check failed")


@health_bp.route('/health/live', methods=['GET'])
def liveness_check():
    """
    Liveness check endpoint.

    Returns:
        Liveness status
    """
    return jsonify({
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat(),
        "started_at": psutil.Process().create_time()
    }), 200


@health_bp.route('/metrics', methods=['GET'])
def get_metrics():
    """
    Get system metrics.

    Returns:
        Infrastructure metrics and active configuration
    """
    try:
        metrics = HealthChecker(current_app.extensions['link_content']['config']).get_metrics()
        return jsonify({
            "timestamp": datetime.utcnow().isoformat(),
            "metrics": metrics
        }), 200

    except Exception as e:
        logger.error(f"Metrics collection failed: {str(e)}")
        return _error("metrics_collection_failed", "Failed to collect metrics")
