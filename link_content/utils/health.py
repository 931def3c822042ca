"""
Health check utilities for the link content workflow.

This module provides health check functionality for
monitoring infrastructure components.
"""

import logging
import time
from datetime import datetime
from typing import Dict, Any
import psutil
import redis

from ..utils.config import Config, get_config


logger = logging.getLogger(__name__)


class HealthChecker:
    """Health checker for infrastructure components."""

    def __init__(self, config: Config = None):
        self.config = config or get_config()
        self._redis_client = None
        self._celery_app = None

    def check_redis(self) -> Dict[str, Any]:
        """Check Redis connectivity when a Redis job store is configured."""
        if self.config.JOB_STORE != 'redis' and self.config.TASK_BACKEND != 'celery':
            return {"status": "not_configured"}

        try:
            if not self._redis_client:
                self._redis_client = redis.Redis.from_url(self.config.REDIS_URL)

            self._redis_client.ping()
            info = self._redis_client.info()

            return {
                "status": "healthy",
                "version": info.get("redis_version", "unknown"),
                "uptime": info.get("uptime_in_seconds", 0),
                "memory_used": info.get("used_memory_human", "unknown"),
                "connected_clients": info.get("connected_clients", 0)
            }

        except Exception as e:
            logger.error(f"Redis health check failed: {str(e)}")
            return {
                "status": "unhealthy",
                "error": str(e)
            }

    def check_celery(self) -> Dict[str, Any]:
        """Check Celery worker status when Celery runs the workflow."""
        if self.config.TASK_BACKEND != 'celery':
            return {"status": "not_configured"}

        try:
            if not self._celery_app:
                from ..tasks.celery_app import celery_app
                self._celery_app = celery_app

            stats = self._celery_app.control.inspect(timeout=1.0).stats()

            if not stats:
                return {
                    "status": "unhealthy",
                    "error": "No Celery workers found"
                }

            return {
                "status": "healthy",
                "workers": len(stats),
                "total_tasks": sum(sum(worker.get('total', {}).values()) for worker in stats.values())
            }

        except Exception as e:
            logger.error(f"Celery health check failed: {str(e)}")
            return {
                "status": "unhealthy",
                "error": str(e)
            }

    def get_system_metrics(self) -> Dict[str, Any]:
        """Get system metrics."""
        try:
            memory = psutil.virtual_memory()
            disk = psutil.disk_usage('/')

            return {
                "status": "healthy",
                "cpu_percent": psutil.cpu_percent(interval=0.1),
                "memory_percent": memory.percent,
                "memory_available": memory.available,
                "disk_percent": disk.percent,
                "disk_free": disk.free,
                "uptime": time.time() - psutil.boot_time()
            }

        except Exception as e:
            logger.error(f"System metrics collection failed: {str(e)}")
            return {
                "status": "unhealthy",
                "error": str(e)
            }

    def get_detailed_status(self) -> Dict[str, Any]:
        """Get detailed health status for infrastructure components."""
        return {
            "redis": self.check_redis(),
            "celery": self.check_celery(),
            "system": self.get_system_metrics()
        }

    def get_metrics(self) -> Dict[str, Any]:
        """Get infrastructure metrics and the active configuration."""
        return {
            "timestamp": datetime.utcnow().isoformat(),
            "health": self.get_detailed_status(),
            "configuration": {
                "debug": self.config.DEBUG,
                "log_level": self.config.LOG_LEVEL,
                "job_store": self.config.JOB_STORE,
                "task_backend": self.config.TASK_BACKEND,
                "providers": self.config.configured_providers(),
                "crawl_concurrency": self.config.CRAWL_CONCURRENCY,
                "generation_concurrency": self.config.GENERATION_CONCURRENCY
            }
        }
