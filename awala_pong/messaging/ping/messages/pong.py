"""Pong derivation."""

from ..message_types import PONG_CONTENT_TYPE
from .ping import Ping


class Pong:
    """The reply to a ping."""

    content_type = PONG_CONTENT_TYPE

    def __init__(self, content: bytes):
        """Initialize a pong carrying `content`."""
        self._content = content

    @property
    def content(self) -> bytes:
        """Accessor for the pong payload."""
        return self._content

    def __eq__(self, other) -> bool:
        """Compare pongs by payload."""
        return isinstance(other, Pong) and self._content == other._content

    def __repr__(self) -> str:
        """Return a human readable representation of the pong."""
        return f"<Pong(content={self._content!r})>"


def derive_pong(ping: Ping) -> Pong:
    """Build the pong for `ping`: its payload is the ping id, octet for octet."""
    return Pong(ping.id_bytes)
