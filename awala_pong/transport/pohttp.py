"""PoHTTP client."""

import asyncio
import logging

from aiohttp import ClientError, ClientSession, ClientTimeout, DummyCookieJar, TCPConnector

from .error import PoHTTPError, PoHTTPInvalidParcelError
from .parcel import PARCEL_CONTENT_TYPE

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
REFUSAL_STATUSES = (403, 422)


class PoHTTPClient:
    """Deliver parcels to gateways over PoHTTP."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        """Initialize a `PoHTTPClient` instance."""
        self.timeout = timeout
        self.client_session: ClientSession = None
        self.connector: TCPConnector = None

    async def start(self):
        """Open the connection pool."""
        self.connector = TCPConnector(limit=200, limit_per_host=50)
        self.client_session = ClientSession(
            cookie_jar=DummyCookieJar(),
            connector=self.connector,
            timeout=ClientTimeout(total=self.timeout),
            trust_env=True,
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

    @staticmethod
    def get_endpoint_url(gateway_address: str) -> str:
        """Return the URL of the PoHTTP endpoint at `gateway_address`."""
        if gateway_address.startswith(("http://", "https://")):
            return gateway_address
        return f"https://{gateway_address}"

    async def deliver_parcel(self, gateway_address: str, parcel_serialized: bytes):
        """
        Deliver a parcel to a gateway.

        Raises:
            PoHTTPInvalidParcelError: If the gateway refused the parcel
            PoHTTPError: If the parcel could not be delivered for any other reason

        """
        if not self.client_session:
            raise PoHTTPError("PoHTTP client is not started")
        url = self.get_endpoint_url(gateway_address)
        LOGGER.debug("Delivering parcel to %s", url)
        try:
            async with self.client_session.post(
                url,
                data=parcel_serialized,
                headers={"Content-Type": PARCEL_CONTENT_TYPE},
            ) as response:
                status = response.status
        except (ClientError, asyncio.TimeoutError) as err:
            raise PoHTTPError(f"Failed to deliver parcel to {url}") from err

        if status in REFUSAL_STATUSES:
            raise PoHTTPInvalidParcelError(
                f"Server refused parcel as invalid (HTTP {status})"
            )
        if status < 200 or 300 <= status:
            raise PoHTTPError(f"Unexpected response status (HTTP {status})")
