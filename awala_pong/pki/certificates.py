"""X.509 certificates and certification paths."""

from datetime import datetime, timedelta, timezone
from typing import Sequence

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.x509.oid import NameOID

from .keys import get_id_from_public_key


def serialize_certificate(certificate: x509.Certificate) -> bytes:
    """Serialize a certificate as DER."""
    return certificate.public_bytes(serialization.Encoding.DER)


def deserialize_certificate(serialized: bytes) -> x509.Certificate:
    """Load a DER certificate.

    Raises:
        ValueError: If the certificate is malformed

    """
    return x509.load_der_x509_certificate(serialized)


def get_subject_id(certificate: x509.Certificate) -> str:
    """Return the id of the node that owns `certificate`."""
    return get_id_from_public_key(certificate.public_key())


def issue_endpoint_certificate(
    subject_public_key,
    issuer_private_key,
    validity_end_date: datetime,
    issuer_certificate: x509.Certificate = None,
    validity_start_date: datetime = None,
) -> x509.Certificate:
    """Issue a certificate for an endpoint.

    The certificate is self-issued when `issuer_certificate` is absent.
    """
    # Node ids span 65 characters, one more than X.520 allows in a common name
    subject = x509.Name(
        [
            x509.NameAttribute(
                NameOID.COMMON_NAME,
                get_id_from_public_key(subject_public_key),
                _validate=False,
            )
        ]
    )
    issuer = issuer_certificate.subject if issuer_certificate else subject
    start_date = validity_start_date or datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(subject_public_key)
        .serial_number(x509.random_serial_number())
        .not_valid_before(start_date)
        .not_valid_after(validity_end_date)
        .add_extension(x509.BasicConstraints(ca=True, path_length=0), critical=True)
        .sign(private_key=issuer_private_key, algorithm=hashes.SHA256())
    )


class CertificationPath:
    """A leaf certificate and the authorities that chain it to a trust anchor."""

    def __init__(
        self,
        leaf: x509.Certificate,
        authorities: Sequence[x509.Certificate] = (),
    ):
        """Initialize the path; `authorities` are ordered from the leaf's issuer up."""
        self.leaf = leaf
        self.authorities = tuple(authorities)

    def serialize(self) -> bytes:
        """Serialize the path as a PEM bundle, leaf first."""
        return b"".join(
            certificate.public_bytes(serialization.Encoding.PEM)
            for certificate in (self.leaf, *self.authorities)
        )

    @classmethod
    def deserialize(cls, serialized: bytes) -> "CertificationPath":
        """Load a path produced by `serialize`.

        Raises:
            ValueError: If the bundle holds no certificates or any of them
                is malformed

        """
        certificates = x509.load_pem_x509_certificates(serialized)
        return cls(certificates[0], certificates[1:])

    def __eq__(self, other) -> bool:
        """Compare paths certificate by certificate."""
        if not isinstance(other, CertificationPath):
            return False
        return self.leaf == other.leaf and self.authorities == other.authorities

    def __repr__(self) -> str:
        """Return a human readable representation of the path."""
        return "<CertificationPath(leaf={}, authorities={})>".format(
            self.leaf.subject.rfc4514_string(), len(self.authorities)
        )
