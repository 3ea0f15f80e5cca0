import pytest

from aiohttp import web
from aiohttp.test_utils import AioHTTPTestCase

from ..error import PoHTTPError, PoHTTPInvalidParcelError
from ..parcel import PARCEL_CONTENT_TYPE
from ..pohttp import PoHTTPClient


class TestPoHTTPClient(AioHTTPTestCase):
    async def setUpAsync(self):
        self.received = []
        self.response_status = 202
        await super().setUpAsync()

    async def receive_parcel(self, request):
        self.received.append((request.headers.get("Content-Type"), await request.read()))
        return web.Response(status=self.response_status)

    async def get_application(self):
        app = web.Application()
        app.add_routes([web.post("/", self.receive_parcel)])
        return app

    @property
    def gateway_address(self):
        return f"http://localhost:{self.server.port}/"

    async def test_deliver(self):
        async with PoHTTPClient() as client:
            await client.deliver_parcel(self.gateway_address, b"parcel")
        assert self.received == [(PARCEL_CONTENT_TYPE, b"parcel")]

    async def test_refused(self):
        for status in (403, 422):
            self.response_status = status
            async with PoHTTPClient() as client:
                with pytest.raises(PoHTTPInvalidParcelError):
                    await client.deliver_parcel(self.gateway_address, b"parcel")

    async def test_server_error(self):
        self.response_status = 500
        async with PoHTTPClient() as client:
            with pytest.raises(PoHTTPError) as excinfo:
                await client.deliver_parcel(self.gateway_address, b"parcel")
        assert not isinstance(excinfo.value, PoHTTPInvalidParcelError)

    async def test_connection_error(self):
        async with PoHTTPClient() as client:
            with pytest.raises(PoHTTPError):
                await client.deliver_parcel("http://localhost:1/", b"parcel")

    async def test_not_started(self):
        with pytest.raises(PoHTTPError):
            await PoHTTPClient().deliver_parcel(self.gateway_address, b"parcel")

    def test_endpoint_url(self):
        assert PoHTTPClient.get_endpoint_url("gw.example") == "https://gw.example"
        assert PoHTTPClient.get_endpoint_url("http://gw.example") == "http://gw.example"
