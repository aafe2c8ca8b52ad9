"""Protocol interfaces for pluggable backends."""

from hastebin_core.protocols.document_store import DocumentStore
from hastebin_core.protocols.key_generator import KeyGenerator

__all__ = [
    "DocumentStore",
    "KeyGenerator",
]
