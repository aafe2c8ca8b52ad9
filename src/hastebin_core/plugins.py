"""Backend and key generator discovery.

Built-in storage backends are registered by name below. Third-party
packages can add more through the ``hastebin_core.backends.storage``
entry point group.
"""

import importlib
from importlib.metadata import entry_points
from typing import Any

from hastebin_core.exceptions import UnknownBackendError
from hastebin_core.keygen import PhoneticKeyGenerator, RandomKeyGenerator
from hastebin_core.protocols import DocumentStore, KeyGenerator

STORAGE_GROUP = "hastebin_core.backends.storage"

BUILTIN_STORAGE_BACKENDS = {
    "file": "hastebin_core.backends.storage.file:FileDocumentStore",
    "memory": "hastebin_core.backends.storage.memory:MemoryDocumentStore",
    "redis": "hastebin_core.backends.storage.redis:RedisDocumentStore",
    "memcached": "hastebin_core.backends.storage.memcached:MemcachedDocumentStore",
    "mongodb": "hastebin_core.backends.storage.mongodb:MongoDBDocumentStore",
    "postgres": "hastebin_core.backends.storage.postgres:PostgresDocumentStore",
    "s3": "hastebin_core.backends.storage.s3:S3DocumentStore",
}


def _load(target: str) -> Any:
    module_name, _, attr = target.partition(":")
    return getattr(importlib.import_module(module_name), attr)


def available_backends() -> list[str]:
    """List the names of all known storage backends."""
    names = set(BUILTIN_STORAGE_BACKENDS)
    names.update(ep.name for ep in entry_points(group=STORAGE_GROUP))
    return sorted(names)


def get_backend(name: str) -> Any:
    """Get a storage backend class by name.

    Built-in names win over entry points with the same name.

    Args:
        name: The backend name (e.g., "file", "redis")

    Returns:
        The backend class

    Raises:
        UnknownBackendError: If no backend is registered under the name
    """
    if name in BUILTIN_STORAGE_BACKENDS:
        return _load(BUILTIN_STORAGE_BACKENDS[name])

    for ep in entry_points(group=STORAGE_GROUP):
        if ep.name == name:
            return ep.load()

    available = ", ".join(available_backends())
    raise UnknownBackendError(
        f"Storage backend '{name}' not found. Available: {available}"
    )


async def create_document_store(backend: str, **kwargs: Any) -> DocumentStore:
    """Create and connect a DocumentStore.

    Connection failures propagate, so a misconfigured backend stops the
    process at startup instead of failing on the first request.

    Args:
        backend: The backend name (e.g., "file", "redis")
        **kwargs: Backend-specific configuration

    Returns:
        A connected DocumentStore implementation
    """
    cls = get_backend(backend)
    store = cls(**kwargs)
    await store.connect()
    return store


def create_key_generator(name: str, key_space: str | None = None) -> KeyGenerator:
    """Create a KeyGenerator.

    Args:
        name: Generator name ("random" or "phonetic")
        key_space: Alphabet for the random generator

    Returns:
        A KeyGenerator implementation

    Raises:
        UnknownBackendError: If the name is unknown
    """
    if name == "random":
        return RandomKeyGenerator(key_space)
    elif name == "phonetic":
        return PhoneticKeyGenerator()
    raise UnknownBackendError(
        f"Key generator '{name}' not found. Available: phonetic, random"
    )
