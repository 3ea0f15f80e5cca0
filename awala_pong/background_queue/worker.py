"""Queue worker."""

import asyncio
import logging

from .error import InvalidJobError, QueueError
from .processor import PingProcessor
from .queue import PingQueue, QueueEntry

LOGGER = logging.getLogger(__name__)


class PingWorker:
    """Pull jobs off the queue and hand them to the processor."""

    def __init__(
        self,
        queue: PingQueue,
        processor: PingProcessor,
        reserve_timeout: float = 1.0,
        promotion_interval: float = 1.0,
        error_delay: float = 1.0,
    ):
        """Initialize the worker."""
        self.queue = queue
        self.processor = processor
        self.reserve_timeout = reserve_timeout
        self.promotion_interval = promotion_interval
        self.error_delay = error_delay
        self.running = False

    async def run(self):
        """Process jobs until `stop` is called."""
        self.running = True
        await asyncio.gather(self.process_jobs(), self.process_delayed())

    def stop(self):
        """Stop after the current job."""
        self.running = False

    async def process_jobs(self):
        """Reserve and handle jobs one at a time."""
        while self.running:
            try:
                entry = await self.queue.reserve(self.reserve_timeout)
            except QueueError:
                LOGGER.exception("Unexpected error reserving job")
                await asyncio.sleep(self.error_delay)
                continue
            if entry:
                await self.handle_entry(entry)

    async def handle_entry(self, entry: QueueEntry):
        """Handle one reserved job, rescheduling it on failure."""
        job = entry.job
        try:
            if job is None:
                raise InvalidJobError("Job is malformed")
            await self.processor.process(job)
        except InvalidJobError as err:
            LOGGER.error(
                "Dropping invalid job",
                extra={"err": err.roll_up, "jobId": job and job.job_id},
            )
        except asyncio.CancelledError:
            raise
        except Exception:
            LOGGER.exception("Failed to process job", extra={"jobId": job.job_id})
            try:
                if not await self.queue.retry(entry):
                    LOGGER.error(
                        "Exceeded max attempts for job", extra={"jobId": job.job_id}
                    )
            except QueueError:
                LOGGER.exception("Failed to reschedule job", extra={"jobId": job.job_id})
            return

        try:
            await self.queue.complete(entry)
        except QueueError:
            LOGGER.exception("Failed to complete job", extra={"jobId": job and job.job_id})

    async def process_delayed(self):
        """Move due retries back to the queue."""
        while self.running:
            try:
                promoted = await self.queue.promote_delayed()
            except QueueError:
                LOGGER.exception("Unexpected error promoting delayed jobs")
                promoted = 0
            if not promoted:
                await asyncio.sleep(self.promotion_interval)
