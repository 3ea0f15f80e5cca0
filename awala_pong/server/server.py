"""Server answering pings delivered as CloudEvents."""

from aiohttp import web

from ..config.base import BaseSettings
from ..messaging.ping.handlers.ping_handler import PingHandler
from .base import DEFAULT_REQUEST_ID_HEADER, BaseHttpServer
from .routes.healthcheck import healthcheck_handler
from .routes.pong import PongRoute

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080


class EventServer(BaseHttpServer):
    """HTTP server receiving incoming service message events."""

    def __init__(
        self,
        host: str,
        port: int,
        ping_handler: PingHandler,
        *,
        endpoint_id: str = None,
        **kwargs,
    ):
        """Initialize the server; `kwargs` go to `BaseHttpServer`."""
        super().__init__(host, port, **kwargs)
        self.pong_route = PongRoute(ping_handler, endpoint_id)

    @classmethod
    def from_settings(
        cls, settings: BaseSettings, ping_handler: PingHandler
    ) -> "EventServer":
        """Create the server configured in `settings`."""
        return cls(
            settings.get_str("server.host", default=DEFAULT_HOST),
            settings.get_int("server.port", default=DEFAULT_PORT),
            ping_handler,
            endpoint_id=settings.get_str("endpoint.id"),
            request_id_header=settings.get_str(
                "server.request_id_header", default=DEFAULT_REQUEST_ID_HEADER
            ),
            max_message_size=settings.get_int("server.max_message_size"),
        )

    def add_routes(self, app: web.Application):
        """Register the health check and the event route."""
        app.add_routes(
            [
                web.get("/", healthcheck_handler),
                web.post("/", self.pong_route.receive_event),
            ]
        )
