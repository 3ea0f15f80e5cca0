from unittest import IsolatedAsyncioTestCase

import pytest

from aiohttp.test_utils import AioHTTPTestCase
from cloudevents.conversion import to_binary
from cloudevents.http import CloudEvent

from ...config.settings import Settings
from ...messaging.ping.codecs import JsonPingCodec
from ...messaging.ping.dispatch import EventReplyDispatcher
from ...messaging.ping.handlers.ping_handler import PingHandler
from ...messaging.ping.message_types import PING_CONTENT_TYPE, PONG_CONTENT_TYPE
from ...messaging.ping.messages.ping import serialize_ping
from ...messaging.ping.unwrapping import CloudEventUnwrapper
from ...tests.mock import CoroutineMock, MagicMock, patch
from ...tests.pki import make_pda_path
from ...transport.error import EmitterError
from ...transport.eventing.service_messages import (
    INCOMING_SERVICE_MESSAGE_TYPE,
    OUTGOING_SERVICE_MESSAGE_TYPE,
)
from .. import base as base_module
from ..base import ServerSetupError
from ..server import EventServer

ENDPOINT_ID = "0endpoint"
PEER_ID = "0peer"
HANDLER_LOGGER = "awala_pong.messaging.ping.handlers.ping_handler"


def _keep_bytes(data):
    return data


def make_event_request(data, content_type=PING_CONTENT_TYPE, **overrides):
    attributes = {
        "id": "ping-parcel",
        "type": INCOMING_SERVICE_MESSAGE_TYPE,
        "source": PEER_ID,
        "subject": ENDPOINT_ID,
        "datacontenttype": content_type,
        "expiry": "2030-01-01T00:00:00Z",
    }
    attributes.update(overrides)
    return to_binary(CloudEvent(attributes, data), data_marshaller=_keep_bytes)


class TestEventServer(AioHTTPTestCase):
    async def setUpAsync(self):
        self.emitter = MagicMock(emit=CoroutineMock())
        self.pda_path = make_pda_path()
        await super().setUpAsync()

    async def get_application(self):
        handler = PingHandler(
            CloudEventUnwrapper(),
            EventReplyDispatcher(self.emitter),
            JsonPingCodec(),
        )
        self.server_instance = EventServer.from_settings(
            Settings({"endpoint.id": ENDPOINT_ID, "server.request_id_header": "X-Id"}),
            handler,
        )
        return await self.server_instance.make_application()

    async def post_event(self, headers, body):
        return await self.client.post("/", data=body, headers=headers)

    async def test_healthcheck(self):
        for method in ("GET", "HEAD"):
            response = await self.client.request(method, "/")
            assert response.status == 200
            assert response.content_type == "text/plain"
        response = await self.client.get("/")
        assert await response.text() == "Success! It works."

    async def test_unsupported_method(self):
        response = await self.client.put("/")
        assert response.status == 405
        assert set(response.headers["Allow"].split(",")) == {"GET", "HEAD", "POST"}

    async def test_ping_is_answered(self):
        headers, body = make_event_request(serialize_ping(self.pda_path, "the ping id"))
        with self.assertLogs(HANDLER_LOGGER, "INFO"):
            response = await self.post_event(headers, body)

        assert response.status == 204
        self.emitter.emit.assert_awaited_once()
        event = self.emitter.emit.call_args.args[0]
        assert event["type"] == OUTGOING_SERVICE_MESSAGE_TYPE
        assert event["source"] == ENDPOINT_ID
        assert event["subject"] == PEER_ID
        assert event["datacontenttype"] == PONG_CONTENT_TYPE
        assert event.data == b"the ping id"

    async def test_malformed_event(self):
        response = await self.post_event({"Content-Type": "text/plain"}, b"malformed")
        assert response.status == 400
        assert await response.json() == {"message": "Malformed event"}
        self.emitter.emit.assert_not_awaited()

    async def test_other_recipient(self):
        headers, body = make_event_request(
            serialize_ping(self.pda_path), subject="0someone-else"
        )
        response = await self.post_event(headers, body)
        assert response.status == 403
        assert await response.json() == {"message": "Invalid ping recipient"}
        self.emitter.emit.assert_not_awaited()

    async def test_incompatible_event(self):
        headers, body = make_event_request(
            serialize_ping(self.pda_path), type="com.example.other"
        )
        response = await self.post_event(headers, body)
        assert response.status == 400
        assert await response.json() == {
            "message": "CloudEvent is incompatible with the Awala Internet Endpoint"
        }
        self.emitter.emit.assert_not_awaited()

    async def test_invalid_content_type(self):
        headers, body = make_event_request(b"{}", content_type="text/plain")
        response = await self.post_event(headers, body)
        assert response.status == 400
        assert await response.json() == {
            "message": "Invalid ping content type (text/plain)"
        }
        self.emitter.emit.assert_not_awaited()

    async def test_invalid_ping(self):
        headers, body = make_event_request(b"not a ping")
        response = await self.post_event(headers, body)
        assert response.status == 400
        assert await response.json() == {"message": "Invalid ping message"}
        self.emitter.emit.assert_not_awaited()

    async def test_ping_id_with_lone_surrogate(self):
        headers, body = make_event_request(serialize_ping(self.pda_path, "\ud800"))
        response = await self.post_event(headers, body)
        assert response.status == 400
        assert await response.json() == {"message": "Invalid ping message"}
        self.emitter.emit.assert_not_awaited()

    async def test_request_id_header(self):
        headers, body = make_event_request(b"not a ping")
        headers["X-Id"] = "req-42"
        with self.assertLogs("awala_pong.messaging.ping", "INFO") as logs:
            await self.post_event(headers, body)
        assert logs.records[0].requestId == "req-42"

    async def test_emitter_failure(self):
        self.emitter.emit.side_effect = EmitterError("Channel is down")
        headers, body = make_event_request(serialize_ping(self.pda_path))
        response = await self.post_event(headers, body)
        assert response.status == 500


class TestEventServerLifecycle(IsolatedAsyncioTestCase):
    async def test_start_stop(self):
        server = EventServer("127.0.0.1", 0, MagicMock())
        await server.start()
        assert server.site
        await server.stop()
        assert server.runner is None

    async def test_start_x(self):
        server = EventServer("0.0.0.0", 0, MagicMock())
        with patch.object(
            base_module.web,
            "TCPSite",
            MagicMock(return_value=MagicMock(start=CoroutineMock(side_effect=OSError()))),
        ):
            with pytest.raises(ServerSetupError):
                await server.start()
