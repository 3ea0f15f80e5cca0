"""Run a long-lived service until the process is told to stop."""

import asyncio
import logging
import signal

LOGGER = logging.getLogger(__name__)

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


async def serve(service):
    """
    Start `service`, wait for SIGINT or SIGTERM, then stop it.

    The service is stopped even if it failed to start, so `stop` must cope
    with partially started services.
    """
    stop_requested = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in STOP_SIGNALS:
        loop.add_signal_handler(signum, stop_requested.set)
    try:
        await service.start()
    except Exception:
        LOGGER.exception("Exception during startup:")
    else:
        await stop_requested.wait()
    finally:
        for signum in STOP_SIGNALS:
            loop.remove_signal_handler(signum)
        LOGGER.info("Shutting down")
        await service.stop()


def run_service(service):
    """Run `service` in a new event loop until it is stopped."""
    asyncio.run(serve(service))
