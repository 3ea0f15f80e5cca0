"""Entrypoint for the CloudEvents pong server."""

from typing import Sequence

from configargparse import ArgumentParser

from ..config import argparse as arg
from ..config.base import BaseSettings
from ..config.settings import Settings
from ..config.util import common_config
from ..messaging.ping.codecs import get_ping_codec
from ..messaging.ping.dispatch import EventReplyDispatcher
from ..messaging.ping.handlers.ping_handler import PingHandler
from ..messaging.ping.unwrapping import CloudEventUnwrapper
from ..server.server import EventServer
from ..transport.eventing.emitter import Emitter
from . import PROG
from .runner import run_service


class EventService:
    """The event server and the emitter it replies through."""

    def __init__(self, settings: BaseSettings):
        """
        Build the service.

        Raises:
            ConfigError: If the emitter or the ping codec is misconfigured

        """
        self.emitter = Emitter.from_settings(settings)
        handler = PingHandler(
            CloudEventUnwrapper(),
            EventReplyDispatcher(self.emitter),
            get_ping_codec(
                settings.get_str("endpoint.ping_codec", default=arg.DEFAULT_PING_CODEC)
            ),
        )
        self.server = EventServer.from_settings(settings, handler)

    async def start(self):
        """Start emitting and listening."""
        await self.emitter.start()
        await self.server.start()

    async def stop(self):
        """Stop listening, then stop emitting."""
        await self.server.stop()
        await self.emitter.stop()


def init_argument_parser(parser: ArgumentParser):
    """Initialize an argument parser with the module's arguments."""
    return arg.load_argument_groups(parser, *arg.group.get_registered(arg.CAT_START))


def execute(argv: Sequence[str] = None):
    """Entrypoint."""
    parser = arg.create_argument_parser(prog=PROG)
    parser.prog += " start"
    get_settings = init_argument_parser(parser)
    args = parser.parse_args(argv)
    settings = Settings(get_settings(args))
    common_config(settings)

    service = EventService(settings)
    run_service(service)


def main():
    """Execute the main line."""
    if __name__ == "__main__":
        execute()


main()
