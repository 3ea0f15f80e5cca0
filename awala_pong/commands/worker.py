"""Entrypoint for the ping queue worker."""

import asyncio
import logging
import signal
from typing import Sequence

from configargparse import ArgumentParser

from ..background_queue.processor import PingProcessor
from ..background_queue.queue import PingQueue
from ..background_queue.worker import PingWorker
from ..config import argparse as arg
from ..config.base import BaseSettings
from ..config.settings import Settings
from ..config.store import ConfigStore
from ..config.util import common_config
from ..keys.vault import VaultPrivateKeyStore
from ..messaging.ping.codecs import get_ping_codec
from ..transport.parcel import load_parcel_format
from ..transport.pohttp import DEFAULT_TIMEOUT, PoHTTPClient
from . import PROG
from .runner import run_service

LOGGER = logging.getLogger(__name__)


class WorkerService:
    """The queue worker with the backends it needs."""

    def __init__(self, settings: BaseSettings):
        """Build the service; the processor is created on startup."""
        self.settings = settings
        self.config_store = ConfigStore.from_url(settings.require_str("config.url"))
        self.key_store = VaultPrivateKeyStore.from_settings(settings)
        self.queue = PingQueue.from_settings(settings)
        self.pohttp_client = PoHTTPClient(
            settings.get_float("delivery.timeout", default=DEFAULT_TIMEOUT)
        )
        self.parcel_format = load_parcel_format(settings)
        self.codec = get_ping_codec(
            settings.get_str("endpoint.ping_codec", default=arg.DEFAULT_PING_CODEC)
        )
        self.worker: PingWorker = None
        self.worker_task: asyncio.Task = None

    async def start(self):
        """
        Start processing the queue.

        Raises:
            StartupError: If the endpoint has not been provisioned
            QueueError: If jobs left active by a previous worker cannot be requeued

        """
        await self.key_store.open()
        await self.pohttp_client.start()
        processor = await PingProcessor.create(
            self.settings,
            self.config_store,
            self.parcel_format,
            self.key_store,
            self.pohttp_client,
            self.codec,
        )
        await self.queue.recover_active()
        self.worker = PingWorker(self.queue, processor)
        self.worker_task = asyncio.ensure_future(self.worker.run())
        self.worker_task.add_done_callback(self._worker_done)
        LOGGER.info("Worker started on queue %s", self.queue.name)

    def _worker_done(self, task: asyncio.Task):
        if task.cancelled() or not task.exception():
            return
        LOGGER.error("Worker stopped unexpectedly", exc_info=task.exception())
        signal.raise_signal(signal.SIGTERM)

    async def stop(self):
        """Finish the current job and release the backends."""
        if self.worker:
            self.worker.stop()
            await asyncio.gather(self.worker_task, return_exceptions=True)
        await self.pohttp_client.stop()
        await self.queue.close()
        await self.config_store.close()
        await self.key_store.close()


def init_argument_parser(parser: ArgumentParser):
    """Initialize an argument parser with the module's arguments."""
    return arg.load_argument_groups(parser, *arg.group.get_registered(arg.CAT_WORKER))


def execute(argv: Sequence[str] = None):
    """Entrypoint."""
    parser = arg.create_argument_parser(prog=PROG)
    parser.prog += " worker"
    get_settings = init_argument_parser(parser)
    args = parser.parse_args(argv)
    settings = Settings(get_settings(args))
    common_config(settings)

    service = WorkerService(settings)
    run_service(service)


def main():
    """Execute the main line."""
    if __name__ == "__main__":
        execute()


main()
