from unittest import TestCase

import pytest

from cloudevents.conversion import to_binary, to_structured
from cloudevents.http import CloudEvent

from ...error import MalformedEventError
from ..receiver import convert_message_to_event


def _keep_bytes(data):
    return data


class TestConvertMessageToEvent(TestCase):
    def setUp(self):
        self.event = CloudEvent(
            {
                "id": "event-id",
                "type": "com.example.test",
                "source": "0sender",
                "subject": "0recipient",
                "datacontenttype": "application/octet-stream",
            },
            b"\x00\x01binary",
        )

    def test_binary_mode(self):
        headers, body = to_binary(self.event, data_marshaller=_keep_bytes)
        event = convert_message_to_event(headers, body)
        assert event["id"] == "event-id"
        assert event["subject"] == "0recipient"
        assert event.data == b"\x00\x01binary"

    def test_structured_mode(self):
        event = CloudEvent(
            {
                "id": "event-id",
                "type": "com.example.test",
                "source": "0sender",
                "datacontenttype": "application/json",
            },
            {"ping": "pong"},
        )
        headers, body = to_structured(event)
        assert convert_message_to_event(headers, body)["id"] == "event-id"

    def test_malformed(self):
        with pytest.raises(MalformedEventError):
            convert_message_to_event({"Content-Type": "text/plain"}, b"malformed")

    def test_missing_required_attributes(self):
        with pytest.raises(MalformedEventError):
            convert_message_to_event(
                {"ce-specversion": "1.0", "ce-id": "event-id"}, b"data"
            )
