"""Binary serialization of pings, as used by the first ping protocol version."""

import struct
from uuid import uuid4

from cryptography import x509

from ....pki.certificates import (
    CertificationPath,
    deserialize_certificate,
    serialize_certificate,
)
from ..error import PingSerializationError
from .ping import Ping

PING_ID_LENGTH = 36
MAX_PDA_LENGTH = 2**16 - 1

# id || pda length; the PDA follows
FRAME_HEADER = struct.Struct(f"<{PING_ID_LENGTH}sH")


def serialize_legacy_ping(pda: x509.Certificate, ping_id: bytes = None) -> bytes:
    """
    Serialize a ping with the binary framing.

    Args:
        pda: Delivery authorization for the pong
        ping_id: 36-octet ping id; a random UUID4 is used when absent

    Raises:
        PingSerializationError: If `ping_id` does not span 36 octets

    """
    if ping_id is None:
        ping_id = str(uuid4()).encode("ascii")
    elif len(ping_id) != PING_ID_LENGTH:
        raise PingSerializationError(
            f"Ping id should span {PING_ID_LENGTH} octets (got {len(ping_id)})"
        )

    pda_serialized = serialize_certificate(pda)
    if MAX_PDA_LENGTH < len(pda_serialized):
        raise PingSerializationError(
            f"PDA should not span more than {MAX_PDA_LENGTH} octets "
            f"(got {len(pda_serialized)})"
        )
    return FRAME_HEADER.pack(bytes(ping_id), len(pda_serialized)) + pda_serialized


def deserialize_legacy_ping(serialized: bytes) -> Ping:
    """
    Deserialize a ping with the binary framing.

    Octets following the PDA are ignored.

    Raises:
        PingSerializationError: If the frame or the PDA is malformed

    """
    try:
        ping_id, pda_length = FRAME_HEADER.unpack_from(serialized)
    except struct.error as err:
        raise PingSerializationError(f"Invalid ping serialization: {err}") from err

    pda_serialized = serialized[FRAME_HEADER.size : FRAME_HEADER.size + pda_length]
    if len(pda_serialized) < pda_length:
        raise PingSerializationError(
            "Invalid ping serialization: PDA should span "
            f"{pda_length} octets (got {len(pda_serialized)})"
        )

    try:
        pda = deserialize_certificate(pda_serialized)
    except ValueError as err:
        raise PingSerializationError(f"Invalid PDA serialization: {err}") from err

    return Ping(ping_id, CertificationPath(pda))
