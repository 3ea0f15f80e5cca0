"""Delivery of pongs back to the originator of a ping."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import NamedTuple

from ...keys.base import BasePrivateKeyStore
from ...transport.error import PoHTTPInvalidParcelError
from ...transport.eventing.emitter import Emitter
from ...transport.eventing.service_messages import make_outgoing_cloud_event
from ...transport.messages import IncomingServiceMessage, OriginatorKeyKind, ServiceMessage
from ...transport.parcel import BaseParcelFormat, Parcel, Recipient
from ...transport.pohttp import PoHTTPClient
from .error import PongDeliveryRefusedError, PongDispatchError
from .messages.ping import Ping
from .messages.pong import Pong

LOGGER = logging.getLogger(__name__)

# Tolerate clock drift between this endpoint and the peer
PONG_CLOCK_DRIFT_TOLERANCE = timedelta(minutes=5)
PONG_TTL = timedelta(days=14)


class DeliveryReceipt(NamedTuple):
    """Where a pong was sent and the id it was sent with."""

    destination: str
    pong_id: str


class BaseReplyDispatcher(ABC):
    """Send a pong to the originator of a ping."""

    @abstractmethod
    async def dispatch(
        self, pong: Pong, ping: Ping, message: IncomingServiceMessage
    ) -> DeliveryReceipt:
        """
        Send `pong` in reply to `ping`, which arrived in `message`.

        Raises:
            PongDeliveryRefusedError: If the recipient refused the pong
            PongDispatchError: If the pong could not be built

        """


class EventReplyDispatcher(BaseReplyDispatcher):
    """Emit pongs as outgoing service message CloudEvents."""

    def __init__(self, emitter: Emitter):
        """Initialize the dispatcher."""
        self.emitter = emitter

    async def dispatch(
        self, pong: Pong, ping: Ping, message: IncomingServiceMessage
    ) -> DeliveryReceipt:
        """Emit the pong event with sender and recipient swapped."""
        event = make_outgoing_cloud_event(
            recipient_id=message.sender_id,
            sender_id=message.recipient_id,
            content_type=pong.content_type,
            content=pong.content,
        )
        await self.emitter.emit(event)
        return DeliveryReceipt(message.sender_id, event["id"])


class PoHTTPReplyDispatcher(BaseReplyDispatcher):
    """Wrap pongs in parcels and deliver them to a gateway over PoHTTP."""

    def __init__(
        self,
        parcel_format: BaseParcelFormat,
        key_store: BasePrivateKeyStore,
        pohttp_client: PoHTTPClient,
        *,
        identity_private_key,
        current_id: str,
        gateway_address: str,
    ):
        """
        Initialize the dispatcher.

        Args:
            parcel_format: Parcel serialization and encryption
            key_store: Where new session keys are saved
            pohttp_client: Client for the gateway
            identity_private_key: Key pongs are signed with
            current_id: Id of this endpoint
            gateway_address: Where pongs are delivered

        """
        self.parcel_format = parcel_format
        self.key_store = key_store
        self.pohttp_client = pohttp_client
        self.identity_private_key = identity_private_key
        self.current_id = current_id
        self.gateway_address = gateway_address

    async def _encrypt(self, plaintext: bytes, message: IncomingServiceMessage) -> bytes:
        originator_key = message.originator_key
        if originator_key is None:
            raise PongDispatchError(
                f"Parcel {message.parcel_id} has no key to encrypt the pong with"
            )

        if originator_key.kind is OriginatorKeyKind.SESSION_KEY:
            result = await self.parcel_format.encrypt_for_session(
                plaintext, originator_key.session_key
            )
            await self.key_store.save_session_key(
                result.dh_private_key,
                result.dh_key_id,
                self.current_id,
                peer_id=message.sender_id,
            )
            return result.envelope

        return await self.parcel_format.encrypt_for_certificate(
            plaintext, originator_key.certificate
        )

    async def dispatch(
        self, pong: Pong, ping: Ping, message: IncomingServiceMessage
    ) -> DeliveryReceipt:
        """Encrypt, sign and deliver the pong parcel."""
        service_message = ServiceMessage(pong.content_type, pong.content)
        plaintext = self.parcel_format.serialize_service_message(service_message)
        envelope = await self._encrypt(plaintext, message)

        now = datetime.now(timezone.utc)
        creation_date = now - PONG_CLOCK_DRIFT_TOLERANCE
        expiry_date = now + PONG_TTL
        parcel = Parcel(
            Recipient(message.sender_id),
            envelope,
            ping.pda_path.leaf,
            creation_date=creation_date,
            ttl=int((expiry_date - creation_date).total_seconds()),
            sender_ca_certificate_chain=ping.pda_path.authorities,
        )
        parcel_serialized = self.parcel_format.serialize_parcel(
            parcel, self.identity_private_key
        )

        try:
            await self.pohttp_client.deliver_parcel(self.gateway_address, parcel_serialized)
        except PoHTTPInvalidParcelError as err:
            raise PongDeliveryRefusedError(
                f"Gateway refused pong parcel {parcel.id}"
            ) from err
        LOGGER.debug("Delivered pong parcel %s to %s", parcel.id, self.gateway_address)
        return DeliveryReceipt(self.gateway_address, parcel.id)
