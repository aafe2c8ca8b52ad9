"""HTTP Server module."""

from hastebin_core.server.app import create_app
from hastebin_core.server.middleware import RequestLoggingMiddleware
from hastebin_core.server.routes import create_routes

__all__ = ["RequestLoggingMiddleware", "create_app", "create_routes"]
