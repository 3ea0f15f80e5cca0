"""Key pair generation and DER (de)serialization."""

from hashlib import sha256

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

RSA_MODULUS = 2048


def generate_rsa_key_pair(modulus: int = RSA_MODULUS) -> rsa.RSAPrivateKey:
    """Generate an identity key pair."""
    return rsa.generate_private_key(public_exponent=65537, key_size=modulus)


def generate_ecdh_key_pair() -> ec.EllipticCurvePrivateKey:
    """Generate a session key pair on curve P-256."""
    return ec.generate_private_key(ec.SECP256R1())


def serialize_private_key(private_key) -> bytes:
    """Serialize a private key as unencrypted PKCS#8 DER."""
    return private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def deserialize_private_key(serialized: bytes):
    """Load a PKCS#8 DER private key.

    Raises:
        ValueError: If the key is malformed

    """
    return serialization.load_der_private_key(serialized, password=None)


def serialize_public_key(public_key) -> bytes:
    """Serialize a public key as SubjectPublicKeyInfo DER."""
    return public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def get_id_from_public_key(public_key) -> str:
    """Compute the node id that corresponds to `public_key`.

    The id is the hex SHA-256 digest of the DER public key prefixed with "0".
    """
    return "0" + sha256(serialize_public_key(public_key)).hexdigest()
