"""Transport-level exceptions."""

from ..config.base import ConfigError
from ..core.error import BaseError


class TransportError(BaseError):
    """Base class for all transport errors."""


class ServiceMessageError(TransportError):
    """An inbound message does not hold a service message this endpoint can read."""


class MalformedEventError(TransportError):
    """An HTTP request does not hold a CloudEvent."""


class IncompatibleEventError(ServiceMessageError):
    """A CloudEvent does not represent an incoming service message."""


class ParcelParseError(TransportError):
    """A parcel could not be deserialized."""


class InvalidParcelError(TransportError):
    """A well-formed parcel failed validation."""


class PoHTTPError(TransportError):
    """A parcel could not be delivered over PoHTTP."""


class PoHTTPInvalidParcelError(PoHTTPError):
    """The PoHTTP server refused a parcel as invalid."""


class EmitterError(TransportError):
    """A CloudEvent could not be emitted."""


class EmitterConfigurationError(ConfigError):
    """The CloudEvents emitter is misconfigured."""
