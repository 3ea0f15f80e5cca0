"""Conversion of inbound messages into incoming service messages."""

from abc import ABC, abstractmethod

from cloudevents.http import CloudEvent

from ...keys.base import BasePrivateKeyStore
from ...keys.error import UnknownKeyError
from ...transport.error import ParcelParseError, ServiceMessageError
from ...transport.eventing.service_messages import make_incoming_service_message
from ...transport.messages import IncomingServiceMessage
from ...transport.parcel import BaseParcelFormat


class BaseMessageUnwrapper(ABC):
    """Turn a raw inbound message into an `IncomingServiceMessage`."""

    @abstractmethod
    async def unwrap(self, raw) -> IncomingServiceMessage:
        """
        Unwrap `raw`.

        Raises:
            ServiceMessageError: If `raw` does not hold a service message this
                endpoint can read

        """


class CloudEventUnwrapper(BaseMessageUnwrapper):
    """Unwrap CloudEvents produced by the Awala Internet Endpoint."""

    async def unwrap(self, raw: CloudEvent) -> IncomingServiceMessage:
        """Extract the service message carried by a CloudEvent."""
        return make_incoming_service_message(raw)


class ParcelUnwrapper(BaseMessageUnwrapper):
    """Unwrap serialized parcels with the private keys of this endpoint."""

    def __init__(self, parcel_format: BaseParcelFormat, key_store: BasePrivateKeyStore):
        """Initialize the unwrapper."""
        self.parcel_format = parcel_format
        self.key_store = key_store

    async def unwrap(self, raw: bytes) -> IncomingServiceMessage:
        """
        Decrypt the service message inside a serialized parcel.

        The parcel is expected to have been validated on receipt.

        Raises:
            ServiceMessageError: If the parcel or its payload cannot be read,
                or the payload is bound to a session key this endpoint lacks
            KeyStoreError: If the key store failed

        """
        try:
            parcel = self.parcel_format.deserialize_parcel(raw)
        except ParcelParseError as err:
            raise ServiceMessageError("Queued parcel is malformed") from err

        try:
            service_message, originator_key = await self.parcel_format.unwrap_payload(
                parcel, self.key_store
            )
        except UnknownKeyError as err:
            raise ServiceMessageError("Parcel payload is bound to an unknown key") from err

        return IncomingServiceMessage(
            parcel_id=parcel.id,
            sender_id=parcel.sender_id,
            recipient_id=parcel.recipient.id,
            content_type=service_message.content_type,
            content=service_message.content,
            creation_date=parcel.creation_date,
            expiry_date=parcel.expiry_date,
            originator_key=originator_key,
        )
