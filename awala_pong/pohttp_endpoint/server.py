"""PoHTTP ingress server."""

from aiohttp import web

from ..config.base import BaseSettings
from ..server.base import DEFAULT_REQUEST_ID_HEADER, BaseHttpServer
from ..server.server import DEFAULT_HOST, DEFAULT_PORT
from .routes import PoHTTPRoutes


class PoHTTPServer(BaseHttpServer):
    """HTTP server receiving ping parcels."""

    def __init__(self, host: str, port: int, routes: PoHTTPRoutes, **kwargs):
        """Initialize the server; `kwargs` go to `BaseHttpServer`."""
        super().__init__(host, port, **kwargs)
        self.routes = routes

    @classmethod
    def from_settings(cls, settings: BaseSettings, routes: PoHTTPRoutes) -> "PoHTTPServer":
        """Create the server configured in `settings`."""
        return cls(
            settings.get_str("server.host", default=DEFAULT_HOST),
            settings.get_int("server.port", default=DEFAULT_PORT),
            routes,
            request_id_header=settings.get_str(
                "server.request_id_header", default=DEFAULT_REQUEST_ID_HEADER
            ),
            max_message_size=settings.get_int("server.max_message_size"),
        )

    def add_routes(self, app: web.Application):
        """Register the health check and the parcel route."""
        app.add_routes(
            [
                web.get("/", self.routes.healthcheck),
                web.post("/", self.routes.receive_parcel),
            ]
        )
