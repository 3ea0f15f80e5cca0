"""Conversion between CloudEvents and service messages."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from cloudevents.http import CloudEvent

from ..error import IncompatibleEventError
from ..messages import IncomingServiceMessage

INCOMING_SERVICE_MESSAGE_TYPE = (
    "tech.relaycorp.awala.endpoint-internet.incoming-service-message"
)
OUTGOING_SERVICE_MESSAGE_TYPE = (
    "tech.relaycorp.awala.endpoint-internet.outgoing-service-message"
)

DEFAULT_TTL = timedelta(days=14)


def _parse_date(value: str, attribute: str) -> datetime:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError) as err:
        raise IncompatibleEventError(
            f"Event {attribute} is not a valid date ({value})"
        ) from err


def _require(event: CloudEvent, attribute: str):
    value = event.get(attribute)
    if not value:
        raise IncompatibleEventError(f"Event is missing {attribute}")
    return value


def make_incoming_service_message(event: CloudEvent) -> IncomingServiceMessage:
    """
    Extract the service message from an incoming CloudEvent.

    Raises:
        IncompatibleEventError: If the event is not an incoming service message

    """
    if event["type"] != INCOMING_SERVICE_MESSAGE_TYPE:
        raise IncompatibleEventError(f"Invalid event type ({event['type']})")

    data = event.data
    if data is None:
        content = b""
    elif isinstance(data, str):
        content = data.encode("utf-8")
    else:
        content = bytes(data)

    return IncomingServiceMessage(
        parcel_id=event["id"],
        sender_id=event["source"],
        recipient_id=_require(event, "subject"),
        content_type=_require(event, "datacontenttype"),
        content=content,
        creation_date=_parse_date(_require(event, "time"), "time"),
        expiry_date=_parse_date(_require(event, "expiry"), "expiry"),
    )


def make_outgoing_cloud_event(
    *,
    recipient_id: str,
    sender_id: str,
    content_type: str,
    content: bytes,
    creation_date: datetime = None,
    expiry_date: datetime = None,
) -> CloudEvent:
    """Build the CloudEvent for a service message bound for `recipient_id`."""
    creation_date = creation_date or datetime.now(timezone.utc)
    expiry_date = expiry_date or creation_date + DEFAULT_TTL
    attributes = {
        "id": str(uuid4()),
        "type": OUTGOING_SERVICE_MESSAGE_TYPE,
        "source": sender_id,
        "subject": recipient_id,
        "datacontenttype": content_type,
        "time": creation_date.isoformat(),
        "expiry": expiry_date.isoformat(),
    }
    return CloudEvent(attributes, content)
