import asyncio
import os
import signal
from unittest import IsolatedAsyncioTestCase, TestCase

from ...tests.mock import CoroutineMock, MagicMock, patch
from .. import runner as test_module


class TestRunner(IsolatedAsyncioTestCase):
    async def test_serve_until_signal(self):
        service = MagicMock(start=CoroutineMock(), stop=CoroutineMock())
        task = asyncio.ensure_future(test_module.serve(service))
        await asyncio.sleep(0.01)
        service.start.assert_awaited_once()
        service.stop.assert_not_awaited()

        os.kill(os.getpid(), signal.SIGTERM)
        await asyncio.wait_for(task, 1)
        service.stop.assert_awaited_once()

    async def test_serve_startup_x(self):
        service = MagicMock(
            start=CoroutineMock(side_effect=Exception("boom")), stop=CoroutineMock()
        )
        with self.assertLogs(test_module.__name__, "ERROR"):
            await asyncio.wait_for(test_module.serve(service), 1)
        service.stop.assert_awaited_once()


class TestRunService(TestCase):
    def test_run_service(self):
        service = MagicMock()
        with patch.object(test_module, "serve", MagicMock()) as serve, patch.object(
            test_module.asyncio, "run"
        ) as run:
            test_module.run_service(service)
        serve.assert_called_once_with(service)
        run.assert_called_once_with(serve.return_value)
