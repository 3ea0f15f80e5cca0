"""Ping service errors."""

from ...core.error import BaseError


class PingSerializationError(BaseError):
    """A ping could not be serialized or deserialized."""


class PongDispatchError(BaseError):
    """Base error for pong dispatch."""


class PongDeliveryRefusedError(PongDispatchError):
    """The recipient of a pong refused it as invalid."""
