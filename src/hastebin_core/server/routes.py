"""HTTP route handlers for documents."""

import time
from typing import TYPE_CHECKING

from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from hastebin_core.exceptions import DocumentNotFoundError, DocumentTooLargeError
from hastebin_core.observability import RequestContext, get_logger
from hastebin_core.server.metrics import metrics
from hastebin_core.service import normalize_key

if TYPE_CHECKING:
    from hastebin_core.service import Hastebin

logger = get_logger(__name__)

NOT_FOUND_MESSAGE = "Document not found."
TOO_LARGE_MESSAGE = "Document exceeds maximum length."


async def read_content(request: Request) -> str:
    """Read document content from a raw body or a multipart ``data`` field."""
    if "multipart/form-data" in request.headers.get("content-type", ""):
        form = await request.form()
        data = form.get("data")
        return data if isinstance(data, str) else ""

    body = await request.body()
    return body.decode("utf-8", errors="replace")


def message(text: str, status_code: int) -> JSONResponse:
    """Build a ``{"message": ...}`` error response."""
    return JSONResponse({"message": text}, status_code=status_code)


def create_routes(hastebin: "Hastebin") -> list[Route]:
    """Create HTTP routes for the document service.

    Args:
        hastebin: The configured document service

    Returns:
        List of Starlette routes
    """

    async def health(request: Request) -> Response:
        """Health check endpoint."""
        return JSONResponse({"status": "ok", "timestamp": time.time()})

    async def _store(request: Request) -> str | Response:
        """Store the request body, returning the new key or an error response."""
        content = await read_content(request)
        try:
            return await hastebin.create_document(content)
        except DocumentTooLargeError as e:
            logger.info("Document exceeds max length", context={"length": e.length})
            return message(TOO_LARGE_MESSAGE, 400)
        except Exception as e:
            logger.error("Failed to store document", error=e)
            return message("Failed to store document.", 500)

    async def _fetch(key: str, record_read: bool) -> str | Response:
        """Fetch a document, returning its content or an error response."""
        try:
            return await hastebin.get_document(key, record_read=record_read)
        except DocumentNotFoundError:
            logger.info("Document not found")
            return message(NOT_FOUND_MESSAGE, 404)
        except Exception as e:
            logger.error("Failed to retrieve document", error=e)
            return message("Failed to retrieve document.", 500)

    async def create_document(request: Request) -> Response:
        """Create a document and return its key as JSON."""
        result = await _store(request)
        if isinstance(result, Response):
            return result
        return JSONResponse({"key": result})

    async def create_log(request: Request) -> Response:
        """Create a document and return a direct link as plain text."""
        result = await _store(request)
        if isinstance(result, Response):
            return result
        host = request.headers.get("host", request.url.netloc)
        return PlainTextResponse(f"\nhttps://{host}/{result}\n\n")

    async def get_document(request: Request) -> Response:
        """Return a document as ``{"data": ..., "key": ...}``."""
        key = normalize_key(request.path_params["id"])
        async with RequestContext(document_key=key):
            result = await _fetch(key, record_read=request.method != "HEAD")
            if isinstance(result, Response):
                return result
            logger.info("Retrieved document")

        if request.method == "HEAD":
            return Response(media_type="application/json")
        return JSONResponse({"data": result, "key": key})

    async def get_raw_document(request: Request) -> Response:
        """Return a document's content as plain text."""
        key = normalize_key(request.path_params["id"])
        async with RequestContext(document_key=key):
            result = await _fetch(key, record_read=request.method != "HEAD")
            if isinstance(result, Response):
                return result
            logger.info("Retrieved raw document")

        media_type = "text/plain; charset=UTF-8"
        if request.method == "HEAD":
            return Response(media_type=media_type)
        return Response(result, media_type=media_type)

    return [
        Route("/health", health, methods=["GET"]),
        Route("/metrics", metrics, methods=["GET"]),
        Route("/documents", create_document, methods=["POST"]),
        Route("/documents/{id}", get_document, methods=["GET", "HEAD"]),
        Route("/raw/{id}", get_raw_document, methods=["GET", "HEAD"]),
        Route("/log", create_log, methods=["POST", "PUT"]),
    ]
