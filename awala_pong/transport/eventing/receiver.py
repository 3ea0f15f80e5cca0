"""CloudEvents receiver."""

from typing import Mapping

from cloudevents.exceptions import GenericException
from cloudevents.http import CloudEvent, from_http

from ..error import MalformedEventError


def _keep_bytes(data):
    return data


def convert_message_to_event(headers: Mapping[str, str], body: bytes) -> CloudEvent:
    """
    Parse an HTTP request in binary or structured mode into a CloudEvent.

    The event data is kept as received.

    Raises:
        MalformedEventError: If the request does not hold a CloudEvent

    """
    try:
        return from_http(dict(headers), body, data_unmarshaller=_keep_bytes)
    except (GenericException, ValueError) as err:
        raise MalformedEventError("Malformed event") from err
