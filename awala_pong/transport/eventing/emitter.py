"""CloudEvents emitter."""

import asyncio
import logging

from aiohttp import ClientError, ClientSession, ClientTimeout, DummyCookieJar
from cloudevents.conversion import to_binary
from cloudevents.http import CloudEvent

from ...config.base import BaseSettings
from ..error import EmitterConfigurationError, EmitterError

LOGGER = logging.getLogger(__name__)

CE_HTTP_BINARY = "ce-http-binary"
SUPPORTED_TRANSPORTS = (CE_HTTP_BINARY,)
DEFAULT_TIMEOUT = 5.0


def _keep_bytes(data):
    return data


class Emitter:
    """Emit CloudEvents onto a channel."""

    def __init__(
        self,
        channel: str,
        transport: str = CE_HTTP_BINARY,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize an emitter.

        Raises:
            EmitterConfigurationError: If the channel is missing or the
                transport is unsupported

        """
        if not channel:
            raise EmitterConfigurationError("CloudEvents channel is not set")
        if transport not in SUPPORTED_TRANSPORTS:
            raise EmitterConfigurationError(
                f"Unsupported CloudEvents transport ({transport})"
            )
        self.channel = channel
        self.transport = transport
        self.timeout = timeout
        self.client_session: ClientSession = None

    @classmethod
    def from_settings(cls, settings: BaseSettings) -> "Emitter":
        """Build the emitter configured in `settings`."""
        return cls(
            settings.get_str("eventing.channel"),
            settings.get_str("eventing.transport", default=CE_HTTP_BINARY),
            settings.get_float("eventing.timeout", default=DEFAULT_TIMEOUT),
        )

    async def start(self):
        """Open the connection pool."""
        self.client_session = ClientSession(
            cookie_jar=DummyCookieJar(),
            timeout=ClientTimeout(total=self.timeout),
        )
        return self

    async def stop(self):
        """Close the connection pool."""
        if self.client_session:
            await self.client_session.close()
            self.client_session = None

    async def __aenter__(self):
        """Async context manager enter."""
        return await self.start()

    async def __aexit__(self, err_type, err_value, err_t):
        """Async context manager exit."""
        await self.stop()

    async def emit(self, event: CloudEvent):
        """
        Send `event` to the channel in binary content mode.

        Raises:
            EmitterError: If the channel did not accept the event

        """
        if not self.client_session:
            raise EmitterError("Emitter is not started")
        headers, body = to_binary(event, data_marshaller=_keep_bytes)
        try:
            async with self.client_session.post(
                self.channel, data=body, headers=headers
            ) as response:
                status = response.status
        except (ClientError, asyncio.TimeoutError) as err:
            raise EmitterError(f"Failed to emit event {event['id']}") from err
        if status < 200 or 300 <= status:
            raise EmitterError(
                f"Channel refused event {event['id']} (HTTP {status})"
            )
        LOGGER.debug("Emitted event %s", event["id"])
