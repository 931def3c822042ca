"""
Tests for the job repositories.
"""

import time

import redis

from helpers import make_extracted
from link_content.core.models.workflow import BatchJob, ContentWorkflowItem, ItemStatus
from link_content.workflow.repository import InMemoryJobRepository, RedisJobRepository


class FakePipeline:

    def __init__(self, client):
        self.client = client
        self.commands = []

    def __getattr__(self, name):
        def queue(*args):
            self.commands.append((name, args))
            return self
        return queue

    def execute(self):
        results = [getattr(self.client, name)(*args) for name, args in self.commands]
        self.commands = []
        return results


class FakeRedis:
    """Dict-backed subset of the redis client used by the repository."""

    def __init__(self, healthy=True):
        self.strings = {}
        self.hashes = {}
        self.lists = {}
        self.zsets = {}
        self.expiry = {}
        self.healthy = healthy

    def pipeline(self):
        return FakePipeline(self)

    def ping(self):
        if not self.healthy:
            raise redis.ConnectionError("connection refused")
        return True

    def get(self, key):
        return self.strings.get(key)

    def set(self, key, value):
        self.strings[key] = value

    def expire(self, key, seconds):
        self.expiry[key] = seconds

    def hset(self, key, field, value):
        self.hashes.setdefault(key, {})[field] = value

    def hget(self, key, field):
        return self.hashes.get(key, {}).get(field)

    def hmget(self, key, fields):
        values = self.hashes.get(key, {})
        return [values.get(field) for field in fields]

    def hexists(self, key, field):
        return field in self.hashes.get(key, {})

    def rpush(self, key, value):
        self.lists.setdefault(key, []).append(value)

    def lrange(self, key, start, end):
        values = self.lists.get(key, [])
        return values[start:] if end == -1 else values[start:end + 1]

    def zadd(self, key, mapping):
        self.zsets.setdefault(key, {}).update(mapping)

    def zrevrange(self, key, start, end):
        ranked = sorted(self.zsets.get(key, {}).items(), key=lambda pair: pair[1], reverse=True)
        return [member for member, _ in ranked]

    def zrem(self, key, member):
        self.zsets.get(key, {}).pop(member, None)


class TestInMemoryJobRepository:

    def test_round_trip_keeps_item_order(self):
        repository = InMemoryJobRepository()
        job = BatchJob(project_id="project-1")
        items = [ContentWorkflowItem(job_id=job.id, source_url=f"https://example.com/{i}") for i in range(3)]

        repository.save_job(job)
        repository.save_items(items)

        assert repository.get_job(job.id) == job
        assert [item.id for item in repository.get_items(job.id)] == [item.id for item in items]
        assert repository.get_item(job.id, items[1].id) == items[1]
        assert repository.get_item(job.id, "missing") is None
        assert repository.get_job("missing") is None

    def test_returns_copies(self):
        repository = InMemoryJobRepository()
        job = BatchJob(project_id="project-1")
        item = ContentWorkflowItem(job_id=job.id, source_url="https://example.com/a")
        repository.save_job(job)
        repository.save_item(item)

        loaded = repository.get_item(job.id, item.id)
        loaded.update_status(ItemStatus.FAILED, "changed locally")

        assert repository.get_item(job.id, item.id).status == ItemStatus.PENDING
        item.update_status(ItemStatus.CRAWLING)
        assert repository.get_item(job.id, item.id).status == ItemStatus.PENDING

    def test_list_jobs_filters_by_project_newest_first(self):
        repository = InMemoryJobRepository()
        older = BatchJob(project_id="project-1")
        time.sleep(0.001)
        newer = BatchJob(project_id="project-1")
        other = BatchJob(project_id="project-2")
        for job in (older, newer, other):
            repository.save_job(job)

        assert [job.id for job in repository.list_jobs("project-1")] == [newer.id, older.id]
        assert len(repository.list_jobs()) == 3

    def test_health_check(self):
        assert InMemoryJobRepository().health_check()["status"] == "healthy"


class TestRedisJobRepository:

    def test_round_trip(self):
        client = FakeRedis()
        repository = RedisJobRepository(client, ttl_seconds=3600)
        job = BatchJob(project_id="project-1")
        items = [ContentWorkflowItem(job_id=job.id, source_url=f"https://example.com/{i}") for i in range(3)]

        repository.save_job(job)
        repository.save_items(items)

        assert repository.get_job(job.id) == job
        assert [item.id for item in repository.get_items(job.id)] == [item.id for item in items]
        assert client.expiry[f"link_content:job:{job.id}:items"] == 3600

    def test_saving_an_item_again_updates_in_place(self):
        client = FakeRedis()
        repository = RedisJobRepository(client)
        job = BatchJob(project_id="project-1")
        item = ContentWorkflowItem(job_id=job.id, source_url="https://example.com/a")
        repository.save_job(job)
        repository.save_item(item)

        item.extracted_content = make_extracted("https://example.com/a")
        item.update_status(ItemStatus.CRAWLED)
        repository.save_item(item)

        stored = repository.get_items(job.id)
        assert len(stored) == 1
        assert stored[0].status == ItemStatus.CRAWLED
        assert stored[0].extracted_content.title == "Wedding traditions explained"

    def test_list_jobs_drops_expired_entries(self):
        client = FakeRedis()
        repository = RedisJobRepository(client)
        kept = BatchJob(project_id="project-1")
        expired = BatchJob(project_id="project-1")
        repository.save_job(kept)
        repository.save_job(expired)
        del client.strings[f"link_content:job:{expired.id}"]

        assert [job.id for job in repository.list_jobs("project-1")] == [kept.id]
        assert expired.id not in client.zsets["link_content:jobs"]

    def test_health_check_reports_unreachable_server(self):
        repository = RedisJobRepository(FakeRedis(healthy=False))

        health = repository.health_check()

        assert health["status"] == "unhealthy"
        assert "connection refused" in health["error"]
