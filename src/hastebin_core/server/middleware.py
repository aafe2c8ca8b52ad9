"""Middleware for the HTTP server."""

from typing import Any, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from hastebin_core.observability import RequestContext, Timer, emit_counter, get_logger

logger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request and binds a request id to the logging context.

    The id comes from the ``X-Request-ID`` header when present and is
    echoed back on the response. Unhandled errors become a 500 response.
    """

    def __init__(self, app: Any, header_name: str = "X-Request-ID") -> None:
        """Initialize request logging middleware.

        Args:
            app: The ASGI application
            header_name: Header carrying the request id
        """
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Any],
    ) -> Response:
        async with RequestContext(request_id=request.headers.get(self.header_name)) as ctx:
            with Timer() as timer:
                try:
                    response = await call_next(request)
                except Exception as e:
                    logger.error(
                        "Unhandled error",
                        context={"method": request.method, "path": request.url.path},
                        error=e,
                    )
                    emit_counter("http.errors")
                    response = JSONResponse(
                        {"message": "Internal server error."},
                        status_code=500,
                    )

            logger.info(
                "Handled request",
                context={
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                },
                duration_ms=timer.duration_ms,
            )
            response.headers[self.header_name] = ctx.request_id
            return response
