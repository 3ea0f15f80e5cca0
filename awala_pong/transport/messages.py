"""Service messages exchanged with peers."""

from datetime import datetime
from enum import Enum
from typing import Optional

from cryptography import x509


class ServiceMessage:
    """Plaintext payload of a parcel."""

    def __init__(self, content_type: str, content: bytes):
        """Initialize a service message."""
        self.content_type = content_type
        self.content = content

    def __eq__(self, other) -> bool:
        """Compare service messages by value."""
        return (
            isinstance(other, ServiceMessage)
            and self.content_type == other.content_type
            and self.content == other.content
        )

    def __repr__(self) -> str:
        """Return a human readable representation of the message."""
        return f"<ServiceMessage(content_type={self.content_type!r})>"


class SessionKey:
    """Public half of a peer's session key."""

    def __init__(self, key_id: bytes, public_key):
        """Initialize a session key."""
        self.key_id = key_id
        self.public_key = public_key


class OriginatorKeyKind(Enum):
    """Kinds of key a reply can be encrypted with."""

    CERTIFICATE = "certificate"
    SESSION_KEY = "session_key"


class OriginatorKey:
    """Key the originator of a message expects replies to be encrypted with."""

    def __init__(
        self,
        kind: OriginatorKeyKind,
        certificate: x509.Certificate = None,
        session_key: SessionKey = None,
    ):
        """Initialize the key; use the `from_*` constructors instead."""
        self.kind = kind
        self.certificate = certificate
        self.session_key = session_key

    @classmethod
    def from_certificate(cls, certificate: x509.Certificate) -> "OriginatorKey":
        """Wrap the originator's certificate."""
        return cls(OriginatorKeyKind.CERTIFICATE, certificate=certificate)

    @classmethod
    def from_session_key(cls, session_key: SessionKey) -> "OriginatorKey":
        """Wrap the originator's session key."""
        return cls(OriginatorKeyKind.SESSION_KEY, session_key=session_key)

    def __repr__(self) -> str:
        """Return a human readable representation of the key."""
        return f"<OriginatorKey(kind={self.kind.value})>"


class IncomingServiceMessage:
    """A service message received by this endpoint, with its routing data."""

    def __init__(
        self,
        *,
        parcel_id: str,
        sender_id: str,
        recipient_id: str,
        content_type: str,
        content: bytes,
        creation_date: datetime = None,
        expiry_date: datetime = None,
        originator_key: Optional[OriginatorKey] = None,
    ):
        """Initialize an incoming service message."""
        self.parcel_id = parcel_id
        self.sender_id = sender_id
        self.recipient_id = recipient_id
        self.content_type = content_type
        self.content = content
        self.creation_date = creation_date
        self.expiry_date = expiry_date
        self.originator_key = originator_key

    def __repr__(self) -> str:
        """Return a human readable representation of the message."""
        return (
            f"<IncomingServiceMessage(parcel_id={self.parcel_id!r}, "
            f"sender_id={self.sender_id!r}, content_type={self.content_type!r})>"
        )
