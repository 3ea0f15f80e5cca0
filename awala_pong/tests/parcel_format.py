"""Parcel format for tests: JSON documents instead of RAMF, no real crypto."""

import binascii
import json
import os
from base64 import b64decode, b64encode
from datetime import datetime, timezone

from cryptography.hazmat.primitives.serialization import load_der_public_key

from ..keys.error import UnknownKeyError
from ..pki.certificates import (
    deserialize_certificate,
    get_subject_id,
    serialize_certificate,
)
from ..pki.keys import generate_ecdh_key_pair, serialize_public_key
from ..transport.error import InvalidParcelError, ParcelParseError, ServiceMessageError
from ..transport.messages import OriginatorKey, ServiceMessage, SessionKey
from ..transport.parcel import (
    BaseParcelFormat,
    Parcel,
    Recipient,
    SessionEncryptionResult,
)
from .pki import make_certificate


def _b64(value: bytes) -> str:
    return b64encode(value).decode("ascii")


def make_payload(
    message: ServiceMessage,
    session_key_id: bytes = None,
    originator_session_key: SessionKey = None,
) -> bytes:
    """Build the payload of an inbound parcel.

    The payload is bound to `session_key_id` when set, and tells the
    recipient to reply with `originator_session_key` when set.
    """
    envelope = {"plaintext": _b64(JsonParcelFormat().serialize_service_message(message))}
    if session_key_id is not None:
        envelope["sessionKeyId"] = session_key_id.hex()
    if originator_session_key is not None:
        envelope["originatorSessionKey"] = {
            "keyId": originator_session_key.key_id.hex(),
            "publicKey": _b64(serialize_public_key(originator_session_key.public_key)),
        }
    return json.dumps(envelope).encode("utf-8")


def read_envelope(envelope: bytes) -> dict:
    """Decode a payload produced by `encrypt_for_*` or `make_payload`."""
    return json.loads(envelope)


class JsonParcelFormat(BaseParcelFormat):
    """Parcels as JSON documents; "signatures" and "encryption" are no-ops."""

    def deserialize_parcel(self, serialized: bytes) -> Parcel:
        try:
            document = json.loads(serialized)
            return Parcel(
                Recipient(document["recipientId"], document.get("internetAddress")),
                b64decode(document["payload"]),
                deserialize_certificate(b64decode(document["senderCertificate"])),
                parcel_id=document["id"],
                creation_date=datetime.fromisoformat(document["creationDate"]),
                ttl=document["ttl"],
                sender_ca_certificate_chain=[
                    deserialize_certificate(b64decode(cert))
                    for cert in document.get("senderCaCertificateChain", [])
                ],
            )
        except (ValueError, KeyError, TypeError, binascii.Error) as err:
            raise ParcelParseError("Parcel is malformed") from err

    def validate_parcel(self, parcel: Parcel):
        if parcel.expiry_date < datetime.now(timezone.utc):
            raise InvalidParcelError("Parcel already expired")

    def serialize_parcel(self, parcel: Parcel, signer_private_key) -> bytes:
        document = {
            "id": parcel.id,
            "recipientId": parcel.recipient.id,
            "payload": _b64(parcel.payload_serialized),
            "senderCertificate": _b64(serialize_certificate(parcel.sender_certificate)),
            "creationDate": parcel.creation_date.isoformat(),
            "ttl": parcel.ttl,
            "senderCaCertificateChain": [
                _b64(serialize_certificate(cert))
                for cert in parcel.sender_ca_certificate_chain
            ],
        }
        if parcel.recipient.internet_address:
            document["internetAddress"] = parcel.recipient.internet_address
        return json.dumps(document).encode("utf-8")

    async def unwrap_payload(self, parcel: Parcel, key_store):
        try:
            envelope = json.loads(parcel.payload_serialized)
            plaintext = b64decode(envelope["plaintext"])
            message = json.loads(plaintext)
            service_message = ServiceMessage(
                message["contentType"], b64decode(message["content"])
            )
        except (ValueError, KeyError, TypeError, binascii.Error) as err:
            raise ServiceMessageError("Payload is malformed") from err

        if "sessionKeyId" in envelope:
            # Raises UnknownKeyError when the key is missing or bound elsewhere
            await key_store.retrieve_session_key(
                bytes.fromhex(envelope["sessionKeyId"]),
                parcel.recipient.id,
                parcel.sender_id,
            )

        if "originatorSessionKey" in envelope:
            session_key = envelope["originatorSessionKey"]
            originator_key = OriginatorKey.from_session_key(
                SessionKey(
                    bytes.fromhex(session_key["keyId"]),
                    load_der_public_key(b64decode(session_key["publicKey"])),
                )
            )
        else:
            originator_key = OriginatorKey.from_certificate(parcel.sender_certificate)
        return service_message, originator_key

    def serialize_service_message(self, message: ServiceMessage) -> bytes:
        return json.dumps(
            {"contentType": message.content_type, "content": _b64(message.content)}
        ).encode("utf-8")

    async def encrypt_for_session(self, plaintext: bytes, session_key: SessionKey):
        dh_private_key = generate_ecdh_key_pair()
        envelope = {
            "sessionKeyId": session_key.key_id.hex(),
            "plaintext": _b64(plaintext),
        }
        return SessionEncryptionResult(
            json.dumps(envelope).encode("utf-8"), os.urandom(8), dh_private_key
        )

    async def encrypt_for_certificate(self, plaintext: bytes, certificate):
        envelope = {
            "certificateId": get_subject_id(certificate),
            "plaintext": _b64(plaintext),
        }
        return json.dumps(envelope).encode("utf-8")


class UnknownKeyParcelFormat(JsonParcelFormat):
    """Format whose payloads are always bound to keys nobody holds."""

    async def unwrap_payload(self, parcel: Parcel, key_store):
        raise UnknownKeyError("Session key does not exist")


def build_parcel(
    recipient_id: str,
    payload: bytes,
    sender_certificate=None,
    *,
    internet_address: str = None,
    creation_date: datetime = None,
    ttl: int = 3600,
) -> Parcel:
    """Build an inbound parcel; a self-issued sender certificate is made if absent."""
    if sender_certificate is None:
        _, sender_certificate = make_certificate()
    return Parcel(
        Recipient(recipient_id, internet_address),
        payload,
        sender_certificate,
        creation_date=creation_date,
        ttl=ttl,
    )
