"""Entrypoint for the PoHTTP ingress server."""

from typing import Sequence

from configargparse import ArgumentParser

from ..background_queue.queue import PingQueue
from ..config import argparse as arg
from ..config.base import BaseSettings
from ..config.settings import Settings
from ..config.util import common_config
from ..keys.vault import VaultPrivateKeyStore
from ..pohttp_endpoint.routes import PoHTTPRoutes
from ..pohttp_endpoint.server import PoHTTPServer
from ..transport.parcel import load_parcel_format
from . import PROG
from .runner import run_service


class PoHTTPService:
    """The PoHTTP server with its queue and key store."""

    def __init__(self, settings: BaseSettings):
        """Build the service."""
        self.key_store = VaultPrivateKeyStore.from_settings(settings)
        self.queue = PingQueue.from_settings(settings)
        routes = PoHTTPRoutes(
            load_parcel_format(settings),
            self.key_store,
            self.queue,
            settings.require_str("endpoint.internet_address"),
        )
        self.server = PoHTTPServer.from_settings(settings, routes)

    async def start(self):
        """Open the key store and start listening."""
        await self.key_store.open()
        await self.server.start()

    async def stop(self):
        """Stop listening and release the backends."""
        await self.server.stop()
        await self.queue.close()
        await self.key_store.close()


def init_argument_parser(parser: ArgumentParser):
    """Initialize an argument parser with the module's arguments."""
    return arg.load_argument_groups(parser, *arg.group.get_registered(arg.CAT_POHTTP))


def execute(argv: Sequence[str] = None):
    """Entrypoint."""
    parser = arg.create_argument_parser(prog=PROG)
    parser.prog += " pohttp"
    get_settings = init_argument_parser(parser)
    args = parser.parse_args(argv)
    settings = Settings(get_settings(args))
    common_config(settings)

    service = PoHTTPService(settings)
    run_service(service)


def main():
    """Execute the main line."""
    if __name__ == "__main__":
        execute()


main()
