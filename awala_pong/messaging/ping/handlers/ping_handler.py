"""Ping handler."""

import logging
from enum import Enum
from typing import Optional

from ....transport.error import ServiceMessageError
from ....transport.messages import IncomingServiceMessage
from ..codecs import BasePingCodec
from ..dispatch import BaseReplyDispatcher, DeliveryReceipt
from ..error import PingSerializationError, PongDeliveryRefusedError
from ..message_types import PING_CONTENT_TYPE
from ..messages.pong import Pong, derive_pong
from ..unwrapping import BaseMessageUnwrapper

LOGGER = logging.getLogger(__name__)


class PingOutcome(Enum):
    """What became of an inbound message."""

    REPLIED = "replied"
    INVALID_SERVICE_MESSAGE = "invalid_service_message"
    INVALID_MESSAGE_TYPE = "invalid_message_type"
    INVALID_PING = "invalid_ping"
    DELIVERY_REFUSED = "delivery_refused"


class PingHandlingResult:
    """Outcome of handling one inbound message."""

    def __init__(
        self,
        outcome: PingOutcome,
        message: Optional[IncomingServiceMessage] = None,
        pong: Optional[Pong] = None,
        receipt: Optional[DeliveryReceipt] = None,
    ):
        """Initialize the result."""
        self.outcome = outcome
        self.message = message
        self.pong = pong
        self.receipt = receipt

    def __repr__(self) -> str:
        """Return a human readable representation of the result."""
        return f"<PingHandlingResult(outcome={self.outcome.value})>"


class PingHandler:
    """Answer pings with pongs."""

    def __init__(
        self,
        unwrapper: BaseMessageUnwrapper,
        dispatcher: BaseReplyDispatcher,
        codec: BasePingCodec,
    ):
        """
        Initialize the handler.

        Args:
            unwrapper: Extracts service messages from raw inbound messages
            dispatcher: Sends pongs back
            codec: Decodes ping envelopes

        """
        self.unwrapper = unwrapper
        self.dispatcher = dispatcher
        self.codec = codec

    async def handle(self, raw, **log_fields) -> PingHandlingResult:
        """
        Handle one inbound message.

        Problems with the message itself are logged and reported in the
        result. Any other error propagates so that the caller can retry.

        Args:
            raw: The message as received (a CloudEvent or a serialized parcel)
            log_fields: Extra fields for every log record, such as a job id

        Returns:
            The outcome of the handling

        """
        try:
            message = await self.unwrapper.unwrap(raw)
        except ServiceMessageError as err:
            LOGGER.info("Invalid service message", extra={"err": err.roll_up, **log_fields})
            return PingHandlingResult(PingOutcome.INVALID_SERVICE_MESSAGE)

        log_fields = {"peerId": message.sender_id, **log_fields}
        if message.content_type != PING_CONTENT_TYPE:
            LOGGER.info(
                "Invalid service message type",
                extra={"messageType": message.content_type, **log_fields},
            )
            return PingHandlingResult(PingOutcome.INVALID_MESSAGE_TYPE, message)

        try:
            ping = self.codec.deserialize(message.content)
        except PingSerializationError as err:
            LOGGER.info("Invalid ping message", extra={"err": err.roll_up, **log_fields})
            return PingHandlingResult(PingOutcome.INVALID_PING, message)

        pong = derive_pong(ping)

        try:
            receipt = await self.dispatcher.dispatch(pong, ping, message)
        except PongDeliveryRefusedError as err:
            LOGGER.info(
                "Discarding pong delivery because server refused parcel",
                extra={"err": err.roll_up, **log_fields},
            )
            return PingHandlingResult(PingOutcome.DELIVERY_REFUSED, message, pong)

        LOGGER.info(
            "Replied to ping message",
            extra={
                "destination": receipt.destination,
                "pingParcelId": message.parcel_id,
                "pongParcelId": receipt.pong_id,
                **log_fields,
            },
        )
        return PingHandlingResult(PingOutcome.REPLIED, message, pong, receipt)
