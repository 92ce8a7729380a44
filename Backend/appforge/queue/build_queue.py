# appforge/queue/build_queue.py
"""
Build dedup queue on Redis + RQ.

At most one non-terminal (queued, started, scheduled or deferred) build per
project key. Check-then-insert runs under a per-process lock; two API
processes racing on the same key can still both insert.
"""
import asyncio
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional

import redis
from rq import Queue, Retry
from rq.job import Job
from rq.registry import DeferredJobRegistry, ScheduledJobRegistry, StartedJobRegistry

from appforge.core.config import settings, QueueSettings
from appforge.core.exceptions import QueueError
from appforge.core.logging import log
from appforge.core.types import BuildJob


@dataclass(frozen=True)
class EnqueueResult:
    job_id: str
    exists: bool
    status: Optional[str] = None


def job_status(job: Job) -> Optional[str]:
    """RQ status as its plain name ("queued", "scheduled", ...)."""
    status = job.get_status()
    if status is None:
        return None
    return str(getattr(status, "value", status))


def backoff_intervals(attempts: int, base: int) -> List[int]:
    """Exponential delays between attempts: base, 2*base, 4*base, ..."""
    return [base * (2 ** i) for i in range(max(attempts - 1, 0))]


class BuildQueue:
    def __init__(
        self,
        queue: Optional[Queue] = None,
        config: Optional[QueueSettings] = None,
    ):
        self.config = config or settings.queue
        self._queue = queue
        self._lock = asyncio.Lock()

    @property
    def queue(self) -> Queue:
        if self._queue is None:
            connection = redis.Redis.from_url(self.config.redis_url)
            self._queue = Queue(self.config.queue_name, connection=connection)
        return self._queue

    # ═══════════════════════════════════════════════════════════════════════
    # SYNC (run in a worker thread)
    # ═══════════════════════════════════════════════════════════════════════

    def _pending_job_ids(self) -> List[str]:
        queue = self.queue
        job_ids = list(queue.get_job_ids())
        for registry_cls in (StartedJobRegistry, ScheduledJobRegistry, DeferredJobRegistry):
            job_ids.extend(registry_cls(queue=queue).get_job_ids())
        return job_ids

    def _find_sync(self, project_key: str) -> Optional[Job]:
        job_ids = self._pending_job_ids()
        if not job_ids:
            return None
        for job in Job.fetch_many(job_ids, connection=self.queue.connection):
            if job is not None and job.meta.get("project_key") == project_key:
                return job
        return None

    def _enqueue_sync(self, job: BuildJob) -> EnqueueResult:
        existing = self._find_sync(job.project_key)
        if existing is not None:
            log("BUILD-QUEUE", f"Build for {job.project_key} already pending: {existing.id}")
            return EnqueueResult(job_id=existing.id, exists=True, status=job_status(existing))

        options = dict(
            job_timeout=self.config.job_timeout,
            result_ttl=self.config.result_ttl,
            failure_ttl=self.config.failure_ttl,
            meta={"project_key": job.project_key, "priority": job.priority, **job.meta},
        )
        if job.attempts > 1:
            options["retry"] = Retry(
                max=job.attempts - 1,
                interval=backoff_intervals(job.attempts, self.config.backoff_base),
            )

        if job.delay > 0:
            rq_job = self.queue.enqueue_in(timedelta(seconds=job.delay), self.config.job_func, job.payload, **options)
        else:
            rq_job = self.queue.enqueue(self.config.job_func, job.payload, **options)

        log("BUILD-QUEUE", f"Queued build {rq_job.id} for {job.project_key}")
        return EnqueueResult(job_id=rq_job.id, exists=False, status=job_status(rq_job))

    # ═══════════════════════════════════════════════════════════════════════
    # ASYNC API
    # ═══════════════════════════════════════════════════════════════════════

    async def enqueue(self, job: BuildJob) -> EnqueueResult:
        """
        Insert a build unless one is already pending for the same project.

        Raises:
            QueueError: Redis unavailable or rejected the operation
        """
        async with self._lock:
            try:
                return await asyncio.to_thread(self._enqueue_sync, job)
            except redis.exceptions.RedisError as e:
                raise QueueError(f"Build queue unavailable: {e}", {"project_key": job.project_key}) from e

    async def find(self, project_key: str) -> Optional[str]:
        """ID of the pending build for a project, if any."""
        try:
            job = await asyncio.to_thread(self._find_sync, project_key)
        except redis.exceptions.RedisError as e:
            raise QueueError(f"Build queue unavailable: {e}", {"project_key": project_key}) from e
        return job.id if job is not None else None
