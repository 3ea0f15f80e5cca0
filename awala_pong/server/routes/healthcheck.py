"""Health check route."""

from aiohttp import web

HEALTHCHECK_MESSAGE = "Success! It works."


async def healthcheck_handler(request: web.BaseRequest):
    """
    Request handler for the health check.

    Args:
        request: aiohttp request object

    Returns:
        The web response

    """
    return web.Response(text=HEALTHCHECK_MESSAGE)
