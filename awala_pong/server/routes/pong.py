"""Route answering pings delivered as CloudEvents."""

import logging

from aiohttp import web

from ...messaging.ping.handlers.ping_handler import PingHandler, PingOutcome
from ...transport.error import MalformedEventError
from ...transport.eventing.receiver import convert_message_to_event
from ..base import get_request_id

LOGGER = logging.getLogger(__name__)


def _bad_request(message: str) -> web.Response:
    return web.json_response({"message": message}, status=400)


class PongRoute:
    """Receive incoming service message events and reply to pings."""

    def __init__(self, ping_handler: PingHandler, endpoint_id: str = None):
        """
        Initialize the route.

        Args:
            ping_handler: Handler for the events
            endpoint_id: Id events must be addressed to; any id when absent

        """
        self.ping_handler = ping_handler
        self.endpoint_id = endpoint_id

    async def receive_event(self, request: web.BaseRequest):
        """
        Request handler for incoming service message events.

        Args:
            request: aiohttp request object

        Returns:
            The web response

        """
        request_id = get_request_id(request)
        body = await request.read()
        try:
            event = convert_message_to_event(request.headers, body)
        except MalformedEventError:
            LOGGER.warning("Refused malformed event", extra={"requestId": request_id})
            return _bad_request("Malformed event")

        if self.endpoint_id and event.get("subject") != self.endpoint_id:
            LOGGER.info(
                "Refused ping for another recipient",
                extra={"requestId": request_id, "recipientId": event.get("subject")},
            )
            return web.json_response({"message": "Invalid ping recipient"}, status=403)

        result = await self.ping_handler.handle(event, requestId=request_id)

        if result.outcome is PingOutcome.INVALID_SERVICE_MESSAGE:
            return _bad_request(
                "CloudEvent is incompatible with the Awala Internet Endpoint"
            )
        if result.outcome is PingOutcome.INVALID_MESSAGE_TYPE:
            return _bad_request(
                f"Invalid ping content type ({result.message.content_type})"
            )
        if result.outcome is PingOutcome.INVALID_PING:
            return _bad_request("Invalid ping message")
        return web.Response(status=204)
