"""ASGI application for standalone deployment."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from starlette.applications import Starlette
from starlette.middleware import Middleware

from hastebin_core.observability import register_metric_callback
from hastebin_core.server.metrics import record_metric
from hastebin_core.server.middleware import RequestLoggingMiddleware
from hastebin_core.server.routes import create_routes

if TYPE_CHECKING:
    from hastebin_core.service import Hastebin


def create_app(hastebin: "Hastebin") -> Starlette:
    """Create the ASGI application.

    The storage backend is connected during lifespan startup, so an
    unreachable backend aborts the server before it accepts requests.
    Shutdown closes the backend without waiting for in-flight reads.
    Service metric events feed the Prometheus counters served at ``/metrics``.

    Args:
        hastebin: The configured document service

    Returns:
        Starlette application
    """
    register_metric_callback(record_metric)

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        await hastebin.initialize()
        try:
            yield
        finally:
            await hastebin.close()

    return Starlette(
        routes=create_routes(hastebin),
        middleware=[Middleware(RequestLoggingMiddleware)],
        lifespan=lifespan,
    )
