"""Base HTTP server."""

import logging
from abc import ABC, abstractmethod
from typing import Coroutine
from uuid import uuid4

from aiohttp import web

from ..core.error import BaseError

LOGGER = logging.getLogger(__name__)

DEFAULT_REQUEST_ID_HEADER = "X-Request-Id"
REQUEST_ID_KEY = "request_id"


class ServerSetupError(BaseError):
    """The web server could not be started."""


def make_request_id_middleware(header_name: str = DEFAULT_REQUEST_ID_HEADER):
    """Return a middleware that assigns every request an id.

    The id is taken from the `header_name` header when the client sets it.
    """

    @web.middleware
    async def request_id_middleware(request: web.Request, handler: Coroutine):
        request[REQUEST_ID_KEY] = request.headers.get(header_name) or str(uuid4())
        return await handler(request)

    return request_id_middleware


@web.middleware
async def debug_middleware(request: web.BaseRequest, handler: Coroutine):
    """Show request detail in debug log."""

    if LOGGER.isEnabledFor(logging.DEBUG):
        LOGGER.debug(f"Incoming request: {request.method} {request.path_qs}")
        LOGGER.debug(f"Request id: {request.get(REQUEST_ID_KEY)}")

    return await handler(request)


def get_request_id(request: web.BaseRequest) -> str:
    """Accessor for the id assigned to `request`."""
    return request.get(REQUEST_ID_KEY)


class BaseHttpServer(ABC):
    """aiohttp server bound to a host and port."""

    def __init__(
        self,
        host: str,
        port: int,
        *,
        request_id_header: str = DEFAULT_REQUEST_ID_HEADER,
        max_message_size: int = None,
    ):
        """
        Initialize the server.

        Args:
            host: Host to listen on
            port: Port to listen on
            request_id_header: Header clients can set the request id with
            max_message_size: Largest request body accepted, in octets

        """
        self.host = host
        self.port = port
        self.request_id_header = request_id_header
        self.max_message_size = max_message_size
        self.runner: web.AppRunner = None
        self.site: web.BaseSite = None

    @abstractmethod
    def add_routes(self, app: web.Application):
        """Register the routes of this server."""

    async def make_application(self) -> web.Application:
        """Construct the aiohttp application."""
        app_args = {}
        if self.max_message_size:
            app_args["client_max_size"] = self.max_message_size
        app = web.Application(
            middlewares=[
                make_request_id_middleware(self.request_id_header),
                debug_middleware,
            ],
            **app_args,
        )
        self.add_routes(app)
        return app

    async def start(self):
        """
        Start the webserver.

        Raises:
            ServerSetupError: If there was an error starting the webserver

        """
        app = await self.make_application()
        self.runner = web.AppRunner(app)
        await self.runner.setup()
        self.site = web.TCPSite(self.runner, host=self.host, port=self.port)
        try:
            await self.site.start()
        except OSError:
            await self.runner.cleanup()
            raise ServerSetupError(
                "Unable to start webserver with host "
                + f"'{self.host}' and port '{self.port}'\n"
            )
        LOGGER.info("Listening on %s:%s", self.host, self.port)

    async def stop(self):
        """Stop the webserver."""
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
            self.site = None
