"""JSON serialization of pings."""

import binascii
import json
from base64 import b64decode, b64encode
from typing import Union
from uuid import uuid4

from marshmallow import EXCLUDE, Schema, ValidationError, fields

from ....pki.certificates import CertificationPath
from ..error import PingSerializationError


class Ping:
    """A request for a pong."""

    def __init__(self, ping_id: Union[str, bytes], pda_path: CertificationPath):
        """
        Initialize a ping.

        Args:
            ping_id: Identifier chosen by the sender, as text or raw octets
            pda_path: Delivery authorization the pong must be sent with

        """
        self._id = ping_id
        self._pda_path = pda_path

    @property
    def id(self) -> Union[str, bytes]:
        """Accessor for the ping id."""
        return self._id

    @property
    def id_bytes(self) -> bytes:
        """Accessor for the ping id as octets."""
        return self._id.encode("utf-8") if isinstance(self._id, str) else bytes(self._id)

    @property
    def pda_path(self) -> CertificationPath:
        """Accessor for the delivery authorization."""
        return self._pda_path

    def __eq__(self, other) -> bool:
        """Compare pings by value."""
        if not isinstance(other, Ping):
            return False
        return self._id == other._id and self._pda_path == other._pda_path

    def __repr__(self) -> str:
        """Return a human readable representation of the ping."""
        return f"<Ping(id={self._id!r})>"


class PingSchema(Schema):
    """JSON envelope of a ping."""

    class Meta:
        """PingSchema metadata."""

        unknown = EXCLUDE

    id = fields.String(required=True)
    pda_path = fields.String(required=True)


def serialize_ping(pda_path: CertificationPath, ping_id: str = None) -> bytes:
    """
    Serialize a ping as JSON.

    Args:
        pda_path: Delivery authorization for the pong
        ping_id: Ping id; a random UUID4 is used when absent

    Raises:
        PingSerializationError: If `ping_id` is empty

    """
    if ping_id is not None and not ping_id:
        raise PingSerializationError("Ping id should not be empty")
    envelope = PingSchema().dump(
        {
            "id": ping_id if ping_id is not None else str(uuid4()),
            "pda_path": b64encode(pda_path.serialize()).decode("ascii"),
        }
    )
    return json.dumps(envelope).encode("utf-8")


def deserialize_ping(serialized: bytes) -> Ping:
    """
    Deserialize a JSON ping.

    Raises:
        PingSerializationError: If the ping is malformed

    """
    try:
        document = json.loads(serialized)
    except ValueError as err:
        raise PingSerializationError("Ping message is not JSON-serialized") from err

    try:
        envelope = PingSchema().load(document)
    except ValidationError as err:
        if "pda_path" in err.messages and "id" not in err.messages:
            raise PingSerializationError("PDA path is absent") from err
        raise PingSerializationError(
            "Ping id is missing or it is not a string"
        ) from err

    try:
        envelope["id"].encode("utf-8")
    except UnicodeEncodeError as err:
        raise PingSerializationError("Ping id is not valid UTF-8") from err

    try:
        pda_path_serialized = b64decode(envelope["pda_path"])
    except (binascii.Error, ValueError) as err:
        raise PingSerializationError("PDA path is not base64-encoded") from err
    if not pda_path_serialized:
        raise PingSerializationError("PDA path is not base64-encoded")

    try:
        pda_path = CertificationPath.deserialize(pda_path_serialized)
    except ValueError as err:
        raise PingSerializationError("Malformed PDA path") from err

    return Ping(envelope["id"], pda_path)
