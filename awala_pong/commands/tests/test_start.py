from unittest import IsolatedAsyncioTestCase, TestCase

import pytest

from ...config.error import ArgsParseError
from ...config.settings import Settings
from ...tests.mock import CoroutineMock, MagicMock, patch
from .. import start as test_module


class TestStart(TestCase):
    def test_bad_args(self):
        with pytest.raises(ArgsParseError):
            test_module.execute([])

        with pytest.raises(SystemExit):
            test_module.execute(["bad"])

    def test_exec_start(self):
        with patch.object(test_module, "common_config"), patch.object(
            test_module, "run_service"
        ) as run_service:
            test_module.execute(["--ce-channel", "http://broker.example/"])

        run_service.assert_called_once()
        service = run_service.call_args.args[0]
        assert isinstance(service, test_module.EventService)
        assert service.emitter.channel == "http://broker.example/"


class TestEventService(IsolatedAsyncioTestCase):
    async def test_start_stop(self):
        service = test_module.EventService(
            Settings({"eventing.channel": "http://broker.example/"})
        )
        service.emitter = MagicMock(start=CoroutineMock(), stop=CoroutineMock())
        service.server = MagicMock(start=CoroutineMock(), stop=CoroutineMock())

        await service.start()
        await service.stop()

        service.emitter.start.assert_awaited_once()
        service.server.start.assert_awaited_once()
        service.server.stop.assert_awaited_once()
        service.emitter.stop.assert_awaited_once()
