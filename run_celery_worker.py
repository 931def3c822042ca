#!/usr/bin/env python3
"""
Celery worker runner for the link content workflow.

This script starts a Celery worker to process crawling and
generation passes.
"""

import os
import sys
import logging

from link_content.tasks.celery_app import celery_app

# Import tasks to register them
from link_content.tasks import workflow  # noqa: F401

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='[%(asctime)s: %(levelname)s/%(processName)s] %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    """Start the Celery worker."""
    try:
        logger.info("Starting link content workflow Celery worker...")
        logger.info("Worker will process tasks from the 'workflow' queue")

        worker = celery_app.Worker(
            queues=['workflow'],
            concurrency=int(os.environ.get('CELERY_WORKER_CONCURRENCY', '2')),
            loglevel='info',
            hostname='link-content-worker@%h'
        )

        worker.start()

    except KeyboardInterrupt:
        logger.info("Worker stopped by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Worker failed to start: {str(e)}")
        sys.exit(1)


if __name__ == '__main__':
    main()
