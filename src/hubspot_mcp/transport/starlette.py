"""Starlette application exposing the SSE transport and a health check."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncIterator, Awaitable, Callable

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from hubspot_mcp.config import Settings
from hubspot_mcp.handlers import create_server
from hubspot_mcp.hubspot import HubSpotClient
from hubspot_mcp.tools import ToolInvoker
from hubspot_mcp.transport.sse import SseSessionRouter

logger = logging.getLogger(__name__)

HEALTH_PATH = "/healthz"


class ASGIEndpoint:
    """Mounts a raw ASGI callable on a ``Route``.

    Starlette wraps plain functions and bound methods as request/response
    endpoints; an instance of a class is passed the ASGI triple untouched.
    """

    def __init__(self, app: Callable[[Scope, Receive, Send], Awaitable[None]]) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.app(scope, receive, send)


async def healthz(request: Request) -> JSONResponse:
    return JSONResponse({"ok": True})


def create_app(settings: Settings, *, hubspot: HubSpotClient | None = None) -> Starlette:
    """Build the ASGI app.

    Args:
        settings: Runtime configuration
        hubspot: HubSpot client to use; one is built from ``settings`` when omitted.
                 The app closes it on shutdown either way.
    """
    if hubspot is None:
        hubspot = HubSpotClient.from_token(
            settings.hubspot_token.get_secret_value(),
            base_url=settings.hubspot_base_url,
            timeout=settings.hubspot_timeout,
        )
    invoker = ToolInvoker(hubspot)
    router = SseSessionRouter(create_server(invoker), message_path=settings.message_path)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        async with hubspot, router.run():
            logger.info(f"Serving SSE on {settings.sse_path}, messages on {settings.message_path}")
            yield

    app = Starlette(
        routes=[
            Route(settings.sse_path, endpoint=ASGIEndpoint(router.handle_sse), methods=["GET"]),
            Route(settings.message_path, endpoint=ASGIEndpoint(router.handle_post_message), methods=["POST"]),
            Route(HEALTH_PATH, endpoint=healthz, methods=["GET"]),
        ],
        lifespan=lifespan,
    )
    app.state.router = router
    app.state.invoker = invoker
    return app
