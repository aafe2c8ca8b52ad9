"""Hastebin Core - one document store contract over many storage backends."""

from hastebin_core.config import Config
from hastebin_core.exceptions import (
    BackendUnavailableError,
    ConfigError,
    DocumentNotFoundError,
    DocumentTooLargeError,
    HastebinError,
    KeyGenerationError,
    StorageError,
    StorageTimeoutError,
    UnknownBackendError,
)
from hastebin_core.expiration import ExpirationPolicy
from hastebin_core.keygen import PhoneticKeyGenerator, RandomKeyGenerator
from hastebin_core.observability import (
    LogLevel,
    RequestContext,
    StructuredLogger,
    Timer,
    configure_logging,
    emit_counter,
    emit_metric,
    emit_timer,
    get_logger,
    register_metric_callback,
)
from hastebin_core.plugins import create_document_store, create_key_generator
from hastebin_core.protocols import DocumentStore, KeyGenerator
from hastebin_core.service import Hastebin

__version__ = "0.1.0"
__all__ = [
    # Core
    "Config",
    "Hastebin",
    # Storage
    "DocumentStore",
    "ExpirationPolicy",
    "create_document_store",
    # Keys
    "KeyGenerator",
    "PhoneticKeyGenerator",
    "RandomKeyGenerator",
    "create_key_generator",
    # Errors
    "BackendUnavailableError",
    "ConfigError",
    "DocumentNotFoundError",
    "DocumentTooLargeError",
    "HastebinError",
    "KeyGenerationError",
    "StorageError",
    "StorageTimeoutError",
    "UnknownBackendError",
    # Observability
    "LogLevel",
    "RequestContext",
    "StructuredLogger",
    "Timer",
    "configure_logging",
    "emit_counter",
    "emit_metric",
    "emit_timer",
    "get_logger",
    "register_metric_callback",
]
