"""PoHTTP ingress routes."""

import logging
from urllib.parse import urlparse

from aiohttp import web

from ..background_queue.error import QueueError
from ..background_queue.models import QueuedPing
from ..background_queue.queue import PingQueue
from ..keys.base import BasePrivateKeyStore
from ..keys.error import UnknownKeyError
from ..server.base import get_request_id
from ..transport.error import InvalidParcelError, ParcelParseError
from ..transport.parcel import PARCEL_CONTENT_TYPE, BaseParcelFormat

LOGGER = logging.getLogger(__name__)

GATEWAY_HEADER = "X-Awala-Gateway"

HEALTHY_MESSAGE = "Success! This PoHTTP endpoint for the pong service works."
UNHEALTHY_MESSAGE = (
    "This PoHTTP endpoint for the pong service is currently unavailable."
)


def _json_message(message: str, status: int) -> web.Response:
    return web.json_response({"message": message}, status=status)


def is_valid_gateway_address(address: str) -> bool:
    """Check that `address` is an absolute http(s) URL."""
    parsed = urlparse(address)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class PoHTTPRoutes:
    """Accept ping parcels over PoHTTP and queue them."""

    def __init__(
        self,
        parcel_format: BaseParcelFormat,
        key_store: BasePrivateKeyStore,
        queue: PingQueue,
        internet_address: str,
    ):
        """
        Initialize the routes.

        Args:
            parcel_format: Parcel deserialization and validation
            key_store: Identity keys of the endpoints served here
            queue: Where valid parcels are queued
            internet_address: Internet address of this endpoint

        """
        self.parcel_format = parcel_format
        self.key_store = key_store
        self.queue = queue
        self.internet_address = internet_address

    async def receive_parcel(self, request: web.BaseRequest):
        """
        Request handler for parcels.

        Args:
            request: aiohttp request object

        Returns:
            The web response

        """
        if request.content_type != PARCEL_CONTENT_TYPE:
            raise web.HTTPUnsupportedMediaType()

        log_extra = {"requestId": get_request_id(request)}
        gateway_address = request.headers.get(GATEWAY_HEADER)
        if gateway_address is not None and not is_valid_gateway_address(
            gateway_address
        ):
            LOGGER.info(
                "Refused invalid gateway address",
                extra={"gatewayAddress": gateway_address, **log_extra},
            )
            return _json_message(
                f"{GATEWAY_HEADER} should be an http(s) URL", status=400
            )

        body = await request.read()
        try:
            parcel = self.parcel_format.deserialize_parcel(body)
        except ParcelParseError as err:
            LOGGER.info(
                "Refusing malformed parcel", extra={"err": err.roll_up, **log_extra}
            )
            return _json_message(
                "Payload is not a valid RAMF-serialized parcel", status=403
            )

        log_extra["parcelId"] = parcel.id
        try:
            self.parcel_format.validate_parcel(parcel)
        except InvalidParcelError as err:
            LOGGER.info(
                "Refusing invalid parcel", extra={"err": err.roll_up, **log_extra}
            )
            return _json_message("Parcel is well-formed but invalid", status=403)

        try:
            await self.key_store.retrieve_identity_key(parcel.recipient.id)
        except UnknownKeyError:
            LOGGER.info(
                "Parcel is bound for recipient with different id",
                extra={"recipientId": parcel.recipient.id, **log_extra},
            )
            return web.json_response({}, status=202)

        if parcel.recipient.internet_address != self.internet_address:
            LOGGER.info(
                "Parcel is bound for recipient with different Internet address",
                extra={
                    "recipientInternetAddress": parcel.recipient.internet_address,
                    **log_extra,
                },
            )
            return _json_message("Invalid parcel recipient", status=403)

        try:
            job = await self.queue.add(QueuedPing.from_parcel(body, gateway_address))
        except QueueError as err:
            LOGGER.error(
                "Failed to queue ping message", extra={"err": err.roll_up, **log_extra}
            )
            return _json_message(
                "Could not queue ping message for processing", status=500
            )

        LOGGER.info(
            "Parcel is valid and has been queued",
            extra={"jobId": job.job_id, **log_extra},
        )
        return web.json_response({}, status=202)

    async def healthcheck(self, request: web.BaseRequest):
        """
        Request handler for the health check.

        Args:
            request: aiohttp request object

        Returns:
            The web response, 503 if the queue is unreachable

        """
        if await self.queue.is_ready():
            return web.Response(text=HEALTHY_MESSAGE)
        return web.Response(text=UNHEALTHY_MESSAGE, status=503)
