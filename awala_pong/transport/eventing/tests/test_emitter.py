import pytest

from aiohttp import web
from aiohttp.test_utils import AioHTTPTestCase
from cloudevents.http import CloudEvent

from ....config.settings import Settings
from ...error import EmitterConfigurationError, EmitterError
from ..emitter import CE_HTTP_BINARY, DEFAULT_TIMEOUT, Emitter


class TestEmitter(AioHTTPTestCase):
    async def setUpAsync(self):
        self.received = []
        self.response_status = 202
        await super().setUpAsync()

    async def receive_event(self, request):
        self.received.append((request.headers.copy(), await request.read()))
        return web.Response(status=self.response_status)

    async def get_application(self):
        app = web.Application()
        app.add_routes([web.post("/", self.receive_event)])
        return app

    @property
    def channel(self):
        return f"http://localhost:{self.server.port}/"

    def make_event(self):
        return CloudEvent(
            {
                "id": "event-id",
                "type": "com.example.test",
                "source": "0sender",
                "subject": "0recipient",
                "datacontenttype": "application/vnd.awala.ping-v1.pong",
            },
            b"the ping id",
        )

    async def test_emit_binary_mode(self):
        async with Emitter(self.channel) as emitter:
            await emitter.emit(self.make_event())

        assert len(self.received) == 1
        headers, body = self.received[0]
        assert body == b"the ping id"
        assert headers["ce-id"] == "event-id"
        assert headers["ce-source"] == "0sender"
        assert headers["ce-subject"] == "0recipient"
        assert headers["Content-Type"] == "application/vnd.awala.ping-v1.pong"

    async def test_channel_refused(self):
        self.response_status = 500
        async with Emitter(self.channel) as emitter:
            with pytest.raises(EmitterError):
                await emitter.emit(self.make_event())

    async def test_channel_unreachable(self):
        async with Emitter("http://localhost:1/") as emitter:
            with pytest.raises(EmitterError):
                await emitter.emit(self.make_event())

    async def test_not_started(self):
        with pytest.raises(EmitterError):
            await Emitter(self.channel).emit(self.make_event())

    def test_missing_channel(self):
        with pytest.raises(EmitterConfigurationError):
            Emitter(None)

    def test_unsupported_transport(self):
        with pytest.raises(EmitterConfigurationError):
            Emitter(self.channel, transport="ce-kafka")

    def test_from_settings(self):
        emitter = Emitter.from_settings(Settings({"eventing.channel": "http://ch/"}))
        assert emitter.channel == "http://ch/"
        assert emitter.transport == CE_HTTP_BINARY
        assert emitter.timeout == DEFAULT_TIMEOUT
