"""Parcels and the interface to the library that (de)serializes them."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Sequence, Tuple
from uuid import uuid4

from cryptography import x509

from ..config.base import BaseSettings
from ..pki.certificates import get_subject_id
from ..utils.classloader import ClassLoader
from .messages import OriginatorKey, ServiceMessage, SessionKey

PARCEL_CONTENT_TYPE = "application/vnd.awala.parcel"

DEFAULT_PARCEL_TTL = timedelta(minutes=5)


class Recipient:
    """Addressee of a parcel."""

    def __init__(self, recipient_id: str, internet_address: str = None):
        """Initialize the recipient."""
        self.id = recipient_id
        self.internet_address = internet_address

    def __eq__(self, other) -> bool:
        """Compare recipients by value."""
        return (
            isinstance(other, Recipient)
            and self.id == other.id
            and self.internet_address == other.internet_address
        )

    def __repr__(self) -> str:
        """Return a human readable representation of the recipient."""
        return f"<Recipient(id={self.id!r}, internet_address={self.internet_address!r})>"


class Parcel:
    """Signed envelope carrying an encrypted service message."""

    def __init__(
        self,
        recipient: Recipient,
        payload_serialized: bytes,
        sender_certificate: x509.Certificate,
        *,
        parcel_id: str = None,
        creation_date: datetime = None,
        ttl: int = None,
        sender_ca_certificate_chain: Sequence[x509.Certificate] = (),
    ):
        """
        Initialize a parcel.

        Args:
            recipient: Addressee of the parcel
            payload_serialized: Encrypted service message
            sender_certificate: Certificate of the key the parcel is signed with
            parcel_id: Parcel id; a random UUID4 is used when absent
            creation_date: Defaults to now
            ttl: Time to live in seconds, counted from `creation_date`
            sender_ca_certificate_chain: Certificates chaining the sender's to
                a certificate issued by the recipient

        """
        self.recipient = recipient
        self.payload_serialized = payload_serialized
        self.sender_certificate = sender_certificate
        self.id = parcel_id or str(uuid4())
        self.creation_date = creation_date or datetime.now(timezone.utc)
        self.ttl = int(DEFAULT_PARCEL_TTL.total_seconds()) if ttl is None else ttl
        self.sender_ca_certificate_chain = tuple(sender_ca_certificate_chain)

    @property
    def expiry_date(self) -> datetime:
        """Accessor for the date after which the parcel must be dropped."""
        return self.creation_date + timedelta(seconds=self.ttl)

    @property
    def sender_id(self) -> str:
        """Accessor for the id of the sender."""
        return get_subject_id(self.sender_certificate)

    def __repr__(self) -> str:
        """Return a human readable representation of the parcel."""
        return f"<Parcel(id={self.id!r}, recipient={self.recipient!r})>"


class SessionEncryptionResult(NamedTuple):
    """Ciphertext produced with a session key and the new key pair behind it."""

    envelope: bytes
    dh_key_id: bytes
    dh_private_key: object


class BaseParcelFormat(ABC):
    """Parcel serialization, validation and enveloped data."""

    @abstractmethod
    def deserialize_parcel(self, serialized: bytes) -> Parcel:
        """
        Deserialize a parcel without validating it.

        Raises:
            ParcelParseError: If `serialized` is not a parcel

        """

    @abstractmethod
    def validate_parcel(self, parcel: Parcel):
        """
        Check the signature and validity period of `parcel`.

        Raises:
            InvalidParcelError: If the parcel is invalid

        """

    @abstractmethod
    def serialize_parcel(self, parcel: Parcel, signer_private_key) -> bytes:
        """Sign and serialize `parcel`."""

    @abstractmethod
    async def unwrap_payload(
        self, parcel: Parcel, key_store
    ) -> Tuple[ServiceMessage, OriginatorKey]:
        """
        Decrypt the service message in `parcel`.

        Args:
            parcel: The parcel
            key_store: `BasePrivateKeyStore` holding the keys of this endpoint

        Returns:
            The service message and the key replies should be encrypted with

        Raises:
            ServiceMessageError: If the payload cannot be decrypted or parsed
            UnknownKeyError: If the payload is bound to a key this endpoint
                does not hold

        """

    @abstractmethod
    def serialize_service_message(self, message: ServiceMessage) -> bytes:
        """Serialize a service message ahead of its encryption."""

    @abstractmethod
    async def encrypt_for_session(
        self, plaintext: bytes, session_key: SessionKey
    ) -> SessionEncryptionResult:
        """Encrypt `plaintext` with a new key pair agreed with `session_key`."""

    @abstractmethod
    async def encrypt_for_certificate(
        self, plaintext: bytes, certificate: x509.Certificate
    ) -> bytes:
        """Encrypt `plaintext` with the public key in `certificate`."""


def load_parcel_format(settings: BaseSettings) -> BaseParcelFormat:
    """Instantiate the parcel format named in the settings.

    Raises:
        SettingsError: If no parcel format is configured
        ClassNotFoundError: If the class cannot be loaded

    """
    class_path = settings.require_str("endpoint.parcel_format")
    return ClassLoader.load_subclass(BaseParcelFormat, class_path)()
