"""Ping codecs."""

from abc import ABC, abstractmethod
from typing import Mapping, Type

from ...config.base import ConfigError
from .messages.legacy_ping import deserialize_legacy_ping, serialize_legacy_ping
from .messages.ping import Ping, deserialize_ping, serialize_ping


class BasePingCodec(ABC):
    """Wire encoding of pings."""

    name: str = None

    @abstractmethod
    def serialize(self, ping: Ping) -> bytes:
        """Encode `ping`.

        Raises:
            PingSerializationError: If the ping cannot be represented

        """

    @abstractmethod
    def deserialize(self, serialized: bytes) -> Ping:
        """Decode a ping.

        Raises:
            PingSerializationError: If `serialized` is not a valid ping

        """


class JsonPingCodec(BasePingCodec):
    """JSON envelope with a base64-encoded certification path."""

    name = "json"

    def serialize(self, ping: Ping) -> bytes:
        """Encode `ping` as JSON."""
        ping_id = ping.id.decode("utf-8") if isinstance(ping.id, bytes) else ping.id
        return serialize_ping(ping.pda_path, ping_id)

    def deserialize(self, serialized: bytes) -> Ping:
        """Decode a JSON ping."""
        return deserialize_ping(serialized)


class BinaryPingCodec(BasePingCodec):
    """Fixed-width id followed by a length-prefixed certificate."""

    name = "binary"

    def serialize(self, ping: Ping) -> bytes:
        """Encode `ping` with the binary framing; only the PDA leaf is kept."""
        return serialize_legacy_ping(ping.pda_path.leaf, ping.id_bytes)

    def deserialize(self, serialized: bytes) -> Ping:
        """Decode a binary ping."""
        return deserialize_legacy_ping(serialized)


PING_CODECS: Mapping[str, Type[BasePingCodec]] = {
    JsonPingCodec.name: JsonPingCodec,
    BinaryPingCodec.name: BinaryPingCodec,
}


def get_ping_codec(name: str) -> BasePingCodec:
    """Instantiate the codec registered under `name`.

    Raises:
        ConfigError: If no such codec exists

    """
    try:
        return PING_CODECS[name]()
    except KeyError:
        raise ConfigError(f"Unsupported ping codec: {name}") from None
