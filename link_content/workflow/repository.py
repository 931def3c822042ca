"""
Job storage.

The orchestrator reads and writes jobs and items only through
JobRepository. InMemoryJobRepository serves tests and single-process use;
RedisJobRepository shares state between the API and Celery workers.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import redis

from ..core.models.workflow import BatchJob, ContentWorkflowItem


logger = logging.getLogger(__name__)


class JobRepository(ABC):
    """Storage for batch jobs and their items."""

    @abstractmethod
    def get_job(self, job_id: str) -> Optional[BatchJob]:
        """Job by id, or None."""

    @abstractmethod
    def save_job(self, job: BatchJob):
        """Insert or replace a job."""

    @abstractmethod
    def get_items(self, job_id: str) -> List[ContentWorkflowItem]:
        """Items of a job in creation order."""

    @abstractmethod
    def save_item(self, item: ContentWorkflowItem):
        """Insert or replace one item."""

    @abstractmethod
    def list_jobs(self, project_id: Optional[str] = None) -> List[BatchJob]:
        """Jobs, newest first, optionally for one project."""

    def get_item(self, job_id: str, item_id: str) -> Optional[ContentWorkflowItem]:
        for item in self.get_items(job_id):
            if item.id == item_id:
                return item
        return None

    def save_items(self, items: List[ContentWorkflowItem]):
        for item in items:
            self.save_item(item)

    def health_check(self) -> Dict[str, str]:
        return {"status": "healthy", "backend": type(self).__name__}


class InMemoryJobRepository(JobRepository):
    """
    Process-local repository.

    Stored records are deep copies, so callers never share mutable state
    with the store or with each other.
    """

    def __init__(self):
        self._jobs: Dict[str, BatchJob] = {}
        self._items: Dict[str, Dict[str, ContentWorkflowItem]] = {}
        self._lock = threading.RLock()

    def get_job(self, job_id: str) -> Optional[BatchJob]:
        with self._lock:
            job = self._jobs.get(job_id)
            return job.model_copy(deep=True) if job else None

    def save_job(self, job: BatchJob):
        with self._lock:
            self._jobs[job.id] = job.model_copy(deep=True)
            self._items.setdefault(job.id, {})

    def get_items(self, job_id: str) -> List[ContentWorkflowItem]:
        with self._lock:
            return [item.model_copy(deep=True) for item in self._items.get(job_id, {}).values()]

    def save_item(self, item: ContentWorkflowItem):
        with self._lock:
            self._items.setdefault(item.job_id, {})[item.id] = item.model_copy(deep=True)

    def list_jobs(self, project_id: Optional[str] = None) -> List[BatchJob]:
        with self._lock:
            jobs = [
                job.model_copy(deep=True) for job in self._jobs.values()
                if project_id is None or job.project_id == project_id
            ]
        return sorted(jobs, key=lambda job: job.created_at, reverse=True)


class RedisJobRepository(JobRepository):
    """
    Redis-backed repository.

    Layout under ``prefix``: ``job:<id>`` holds the job JSON,
    ``job:<id>:items`` a hash of item JSON, ``job:<id>:order`` the item ids in
    creation order and ``jobs`` a sorted set of job ids by creation time.
    """

    def __init__(self, client: redis.Redis, prefix: str = "link_content", ttl_seconds: Optional[int] = None):
        self.client = client
        self.prefix = prefix
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_url(cls, url: str, ttl_seconds: Optional[int] = None) -> 'RedisJobRepository':
        return cls(redis.Redis.from_url(url, decode_responses=True), ttl_seconds=ttl_seconds)

    def _job_key(self, job_id: str) -> str:
        return f"{self.prefix}:job:{job_id}"

    def _items_key(self, job_id: str) -> str:
        return f"{self.prefix}:job:{job_id}:items"

    def _order_key(self, job_id: str) -> str:
        return f"{self.prefix}:job:{job_id}:order"

    def _expire(self, pipe, job_id: str):
        if self.ttl_seconds:
            for key in (self._job_key(job_id), self._items_key(job_id), self._order_key(job_id)):
                pipe.expire(key, self.ttl_seconds)

    def get_job(self, job_id: str) -> Optional[BatchJob]:
        raw = self.client.get(self._job_key(job_id))
        return BatchJob.model_validate_json(raw) if raw else None

    def save_job(self, job: BatchJob):
        pipe = self.client.pipeline()
        pipe.set(self._job_key(job.id), job.model_dump_json())
        pipe.zadd(f"{self.prefix}:jobs", {job.id: job.created_at.timestamp()})
        self._expire(pipe, job.id)
        pipe.execute()

    def get_items(self, job_id: str) -> List[ContentWorkflowItem]:
        order = self.client.lrange(self._order_key(job_id), 0, -1)
        if not order:
            return []
        raw_items = self.client.hmget(self._items_key(job_id), order)
        return [ContentWorkflowItem.model_validate_json(raw) for raw in raw_items if raw]

    def get_item(self, job_id: str, item_id: str) -> Optional[ContentWorkflowItem]:
        raw = self.client.hget(self._items_key(job_id), item_id)
        return ContentWorkflowItem.model_validate_json(raw) if raw else None

    def save_item(self, item: ContentWorkflowItem):
        self.save_items([item])

    def save_items(self, items: List[ContentWorkflowItem]):
        if not items:
            return
        pipe = self.client.pipeline()
        for item in items:
            is_new = not self.client.hexists(self._items_key(item.job_id), item.id)
            pipe.hset(self._items_key(item.job_id), item.id, item.model_dump_json())
            if is_new:
                pipe.rpush(self._order_key(item.job_id), item.id)
        for job_id in {item.job_id for item in items}:
            self._expire(pipe, job_id)
        pipe.execute()

    def list_jobs(self, project_id: Optional[str] = None) -> List[BatchJob]:
        job_ids = self.client.zrevrange(f"{self.prefix}:jobs", 0, -1)
        jobs = []
        for job_id in job_ids:
            job = self.get_job(job_id)
            if job is None:
                # expired, drop the dangling index entry
                self.client.zrem(f"{self.prefix}:jobs", job_id)
                continue
            if project_id is None or job.project_id == project_id:
                jobs.append(job)
        return jobs

    def health_check(self) -> Dict[str, str]:
        try:
            self.client.ping()
            return {"status": "healthy", "backend": "redis"}
        except redis.RedisError as e:
            logger.error(f"Redis health check failed: {str(e)}")
            return {"status": "unhealthy", "backend": "redis", "error": str(e)}
