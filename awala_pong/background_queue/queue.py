"""Redis-backed queue of pings awaiting a pong."""

import logging
from time import time
from typing import NamedTuple, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..config.base import BaseSettings
from ..messaging.models.base import BaseModelError
from .error import QueueError
from .models import PingJob, QueuedPing

LOGGER = logging.getLogger(__name__)

DEFAULT_QUEUE_NAME = "pong"
DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_REDIS_PORT = 6379

RETRY_INTERVAL = 5
RETRY_BACKOFF = 0.25
PROMOTION_BATCH_SIZE = 10


class QueueEntry(NamedTuple):
    """A job reserved by a worker, as stored and as parsed."""

    raw: str
    job: Optional[PingJob]


class PingQueue:
    """
    At-least-once job queue.

    Jobs wait in a list, are moved atomically to an "active" list when a
    worker reserves them, and are removed from it once handled. Failed jobs
    are parked in a sorted set scored by the time they become due again.
    """

    def __init__(
        self,
        redis: Redis,
        name: str = DEFAULT_QUEUE_NAME,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        """Initialize the queue."""
        self.redis = redis
        self.name = name
        self.max_attempts = max_attempts
        self.wait_key = f"{name}:wait"
        self.active_key = f"{name}:active"
        self.delayed_key = f"{name}:delayed"

    @classmethod
    def from_settings(cls, settings: BaseSettings) -> "PingQueue":
        """Create the queue configured in `settings`."""
        redis = Redis(
            host=settings.require_str("queue.redis_host"),
            port=settings.get_int("queue.redis_port", default=DEFAULT_REDIS_PORT),
            decode_responses=True,
        )
        return cls(
            redis,
            settings.get_str("queue.name", default=DEFAULT_QUEUE_NAME),
            settings.get_int("queue.max_attempts", default=DEFAULT_MAX_ATTEMPTS),
        )

    async def close(self):
        """Close the connection to Redis."""
        await self.redis.aclose()

    async def is_ready(self) -> bool:
        """Check whether Redis answers."""
        try:
            return bool(await self.redis.ping())
        except RedisError:
            LOGGER.warning("Redis is unreachable", exc_info=True)
            return False

    async def add(self, queued_ping: QueuedPing) -> PingJob:
        """
        Queue a ping.

        Raises:
            QueueError: If Redis failed

        """
        job = PingJob(data=queued_ping)
        try:
            await self.redis.rpush(self.wait_key, job.to_json())
        except RedisError as err:
            raise QueueError("Failed to queue ping") from err
        return job

    async def reserve(self, timeout: float = 1.0) -> Optional[QueueEntry]:
        """
        Wait up to `timeout` seconds for a job and move it to the active list.

        Returns:
            The reserved entry, with `job` set to None if it is malformed, or
            None if no job arrived in time

        Raises:
            QueueError: If Redis failed

        """
        try:
            raw = await self.redis.blmove(
                self.wait_key, self.active_key, timeout, "LEFT", "RIGHT"
            )
        except RedisError as err:
            raise QueueError("Failed to reserve job") from err
        if raw is None:
            return None
        try:
            job = PingJob.from_json(raw)
        except BaseModelError:
            job = None
        return QueueEntry(raw, job)

    async def complete(self, entry: QueueEntry):
        """Remove a handled job from the active list."""
        try:
            await self.redis.lrem(self.active_key, 1, entry.raw)
        except RedisError as err:
            raise QueueError("Failed to complete job") from err

    def get_retry_delay(self, attempts: int) -> float:
        """Return how many seconds to wait before the next attempt."""
        return pow(RETRY_INTERVAL, 1 + (RETRY_BACKOFF * (attempts - 1)))

    async def retry(self, entry: QueueEntry) -> bool:
        """
        Park a failed job until its next attempt is due.

        Returns:
            False if the job exhausted its attempts and was dropped instead

        """
        job = entry.job
        attempts = job.attempts + 1
        retried = attempts < self.max_attempts
        try:
            if retried:
                retry_job = PingJob(job_id=job.job_id, attempts=attempts, data=job.data)
                due_time = time() + self.get_retry_delay(attempts)
                await self.redis.zadd(self.delayed_key, {retry_job.to_json(): due_time})
            await self.redis.lrem(self.active_key, 1, entry.raw)
        except RedisError as err:
            raise QueueError("Failed to reschedule job") from err
        return retried

    async def promote_delayed(self) -> int:
        """
        Move due delayed jobs back to the wait list.

        Returns:
            The number of jobs moved

        """
        try:
            rows = await self.redis.zrangebyscore(
                self.delayed_key, min=0, max=time(), start=0, num=PROMOTION_BATCH_SIZE
            )
            promoted = 0
            for raw in rows:
                if not await self.redis.zrem(self.delayed_key, raw):
                    # taken by another worker
                    continue
                await self.redis.rpush(self.wait_key, raw)
                promoted += 1
        except RedisError as err:
            raise QueueError("Failed to promote delayed jobs") from err
        return promoted

    async def recover_active(self) -> int:
        """
        Requeue the jobs left in the active list by a worker that died.

        Only call this when no other worker is running.
        """
        recovered = 0
        try:
            while await self.redis.lmove(self.active_key, self.wait_key, "LEFT", "RIGHT"):
                recovered += 1
        except RedisError as err:
            raise QueueError("Failed to recover active jobs") from err
        if recovered:
            LOGGER.warning("Requeued %d interrupted jobs", recovered)
        return recovered
