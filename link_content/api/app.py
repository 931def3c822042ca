"""
Main Flask application for the link content workflow.

This module creates and configures the Flask application
with all necessary middleware, blueprints, and error handlers.
"""

import logging
from datetime import datetime
from flask import Flask, jsonify
from flask_cors import CORS

from .. import __version__
from .endpoints import batch_bp, health_bp
from .limiter import limiter
from .middleware.auth import AuthMiddleware
from .middleware.logging import LoggingMiddleware
from .middleware.error_handler import ErrorHandler
from ..core.models.errors import ErrorResponse
from ..utils.config import get_config
from ..utils.logging import setup_logging
from ..workflow.orchestrator import BatchWorkflowOrchestrator, create_orchestrator
from ..workflow.runner import TaskRunner, create_task_runner


def create_app(
    config_name: str = None,
    orchestrator: BatchWorkflowOrchestrator = None,
    task_runner: TaskRunner = None
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config_name: Configuration name (development, production, testing)
        orchestrator: Orchestrator to serve, built from the configuration if omitted
        task_runner: Runner for long operations, built from the configuration if omitted

    Returns:
        Configured Flask application
    """
    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    config = get_config(config_name)
    app.config.from_object(config)

    # Setup logging
    setup_logging(app.config)

    # Workflow services
    if orchestrator is None:
        orchestrator = create_orchestrator(config)
    if task_runner is None:
        task_runner = create_task_runner(config, orchestrator)
    app.extensions['link_content'] = {
        'config': config,
        'orchestrator': orchestrator,
        'task_runner': task_runner,
    }

    # Initialize extensions
    CORS(app, origins=app.config.get('CORS_ORIGINS', ['*']))
    limiter.init_app(app)

    # Register middleware
    app.before_request(LoggingMiddleware.before_request)
    app.before_request(AuthMiddleware.before_request)
    app.after_request(LoggingMiddleware.after_request)

    # Register blueprints
    app.register_blueprint(batch_bp)
    app.register_blueprint(health_bp)

    # Register error handlers
    ErrorHandler.register_handlers(app)

    @app.errorhandler(404)
    def not_found(error):
        return jsonify(ErrorResponse(
            error="not_found",
            message="The requested resource was not found",
            error_code="NOT_FOUND",
            status=404
        ).model_dump(mode='json')), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify(ErrorResponse(
            error="method_not_allowed",
            message="The method is not allowed for the requested URL",
            error_code="METHOD_NOT_ALLOWED",
            status=405
        ).model_dump(mode='json')), 405

    @app.errorhandler(429)
    def rate_limited(error):
        return jsonify(ErrorResponse(
            error="rate_limit_exceeded",
            message=f"Rate limit exceeded: {error.description}",
            error_code="RATE_LIMIT_EXCEEDED",
            status=429
        ).model_dump(mode='json')), 429

    @app.route('/')
    def root():
        return jsonify({
            "service": "link-content-workflow",
            "version": __version__,
            "status": "running",
            "timestamp": datetime.utcnow().isoformat(),
            "endpoints": {
                "health": "/api/v1/health",
                "batch_jobs": "/api/v1/batch-jobs",
                "docs": "/api/v1/docs"
            }
        })

    @app.route('/api/v1/docs')
    def api_docs():
        return jsonify({
            "title": "Link Content Workflow API",
            "version": __version__,
            "description": "Turns batches of source URLs into reviewed AI-generated content",
            "endpoints": {
                "batch_jobs": {
                    "create": {"method": "POST", "path": "/api/v1/batch-jobs",
                               "description": "Create a job from project_id and urls"},
                    "list": {"method": "GET", "path": "/api/v1/batch-jobs",
                             "description": "List jobs, optionally by project_id"},
                    "status": {"method": "GET", "path": "/api/v1/batch-jobs/{job_id}",
                               "description": "Job, items and per-status counts"},
                    "crawl": {"method": "POST", "path": "/api/v1/batch-jobs/{job_id}/crawl",
                              "description": "Start crawling pending items"},
                    "generate": {"method": "POST", "path": "/api/v1/batch-jobs/{job_id}/generate",
                                 "description": "Start generating content, optional overrides in the body"},
                    "approve": {"method": "POST", "path": "/api/v1/batch-jobs/{job_id}/items/{item_id}/approve",
                                "description": "Approve generated content"},
                    "regenerate": {"method": "POST",
                                   "path": "/api/v1/batch-jobs/{job_id}/items/{item_id}/regenerate",
                                   "description": "Start regenerating one item"},
                    "approved": {"method": "GET", "path": "/api/v1/batch-jobs/{job_id}/approved",
                                 "description": "Approved items"}
                },
                "tasks": {
                    "status": {"method": "GET", "path": "/api/v1/tasks/{task_id}",
                               "description": "State of a submitted operation"}
                },
                "usage": {"method": "GET", "path": "/api/v1/usage",
                          "description": "Provider usage statistics"},
                "health": {
                    "basic": {"method": "GET", "path": "/api/v1/health"},
                    "detailed": {"method": "GET", "path": "/api/v1/health/detailed"},
                    "ready": {"method": "GET", "path": "/api/v1/health/ready"},
                    "live": {"method": "GET", "path": "/api/v1/health/live"}
                }
            },
            "authentication": {
                "type": "API Key",
                "header": app.config.get('API_KEY_HEADER', 'X-API-Key'),
                "description": "API key authentication required for all endpoints except health checks"
            }
        })

    logger = logging.getLogger(__name__)
    logger.info(f"Flask application created with config: {config_name or 'default'}")

    return app


def run_app(host: str = '0.0.0.0', port: int = 5001, debug: bool = False):
    """
    Run the Flask application.

    Args:
        host: Host to bind to
        port: Port to bind to
        debug: Enable debug mode
    """
    app = create_app()

    logger = logging.getLogger(__name__)
    logger.info(f"Starting link content workflow on {host}:{port}")

    try:
        app.run(host=host, port=port, debug=debug, use_reloader=False)
    finally:
        app.extensions['link_content']['task_runner'].shutdown()


if __name__ == '__main__':
    run_app()
