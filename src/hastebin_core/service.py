"""Document service tying key generation, storage, and static documents together."""

import asyncio
from pathlib import Path
from typing import Any

from hastebin_core.config import Config
from hastebin_core.exceptions import (
    ConfigError,
    DocumentNotFoundError,
    DocumentTooLargeError,
)
from hastebin_core.observability import (
    RequestContext,
    Timer,
    emit_counter,
    emit_timer,
    get_logger,
)
from hastebin_core.plugins import create_document_store, create_key_generator
from hastebin_core.protocols import DocumentStore, KeyGenerator
from hastebin_core.utils.threads import run_blocking

logger = get_logger(__name__)


def normalize_key(document_id: str) -> str:
    """Strip a file extension from a document id (``abc.py`` -> ``abc``)."""
    return document_id.split(".", 1)[0]


class Hastebin:
    """Document service backed by a configurable storage backend.

    Example usage:
        async with Hastebin.from_config("config.yaml") as hastebin:
            key = await hastebin.create_document("hello")
            content = await hastebin.get_document(key)

        # Or start the HTTP server
        Hastebin.from_config("config.yaml").serve()
    """

    def __init__(self, config: Config) -> None:
        """Initialize the service with configuration.

        Backends are connected lazily; use ``initialize()`` or the async
        context manager to connect eagerly.
        """
        self.config = config
        self._store: DocumentStore | None = None
        self._key_generator: KeyGenerator | None = None
        self._static_keys: set[str] = set()
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @classmethod
    def from_config(cls, path: str | Path) -> "Hastebin":
        """Create a service from a YAML or JSON configuration file."""
        return cls(Config.from_file(path))

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "Hastebin":
        """Create a service from a configuration dictionary."""
        return cls(Config.from_dict(config_dict))

    async def initialize(self) -> None:
        """Connect the storage backend and load static documents.

        Safe to call concurrently; only the first call does the work.

        Raises:
            BackendUnavailableError: If the backend cannot be reached
            UnknownBackendError: If the backend or generator name is unknown
            ConfigError: If a static document cannot be read
        """
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:
                return
            await self._do_initialize()

    async def _do_initialize(self) -> None:
        with Timer() as timer:
            logger.info(
                "Initializing storage",
                context={"backend": self.config.storage.type},
            )
            key_generator = create_key_generator(
                self.config.key_generator,
                key_space=self.config.key_space,
            )
            store = await create_document_store(
                self.config.storage.type,
                **self.config.storage_options(),
            )
            try:
                await self._load_static_documents(store)
            except BaseException:
                await store.close()
                raise

            self._store = store
            self._key_generator = key_generator
            self._initialized = True

        logger.info("Storage initialized", duration_ms=timer.duration_ms)
        emit_timer("storage.init", timer.duration_ms)

    async def _load_static_documents(self, store: DocumentStore) -> None:
        for document in self.config.documents:
            path = Path(document.path)
            try:
                content = await run_blocking(path.read_text, encoding="utf-8")
            except OSError as e:
                raise ConfigError(
                    f"Failed to read static document '{document.key}' from {path}: {e}"
                ) from e

            await store.set(document.key, content, skip_expiration=True)
            self._static_keys.add(document.key)
            logger.info(
                "Loaded static document",
                context={"key": document.key, "path": str(path)},
            )

    @property
    def store(self) -> DocumentStore:
        """Get the storage backend."""
        if self._store is None:
            raise RuntimeError("Hastebin not initialized. Call initialize() first.")
        return self._store

    @property
    def key_generator(self) -> KeyGenerator:
        """Get the key generator."""
        if self._key_generator is None:
            raise RuntimeError("Hastebin not initialized. Call initialize() first.")
        return self._key_generator

    def is_static(self, key: str) -> bool:
        """Whether a key belongs to a document loaded from configuration."""
        return key in self._static_keys

    def check_length(self, content: str) -> None:
        """Enforce the maximum document length, counted in UTF-8 bytes.

        Raises:
            DocumentTooLargeError: If content is longer than ``max_length``
        """
        max_length = self.config.max_length
        if max_length <= 0:
            return
        length = len(content.encode("utf-8"))
        if length > max_length:
            raise DocumentTooLargeError(length, max_length)

    async def create_document(self, content: str) -> str:
        """Store new content under a freshly generated key.

        Key collisions are not checked: a colliding key overwrites the
        previous document.

        Returns:
            The generated key

        Raises:
            DocumentTooLargeError: If content exceeds ``max_length``
        """
        await self.initialize()
        self.check_length(content)

        key = self.key_generator.generate(self.config.key_length)
        async with RequestContext(document_key=key):
            await self.store.set(key, content, skip_expiration=False)
            logger.info("Added document", context={"length": len(content)})
        emit_counter("documents.created")
        return key

    async def get_document(self, document_id: str, record_read: bool = True) -> str:
        """Get a document's content, sliding its expiration forward.

        Static documents are read without touching their expiry.

        Args:
            document_id: Document key, optionally with an extension
            record_read: Count the read in the ``documents.read`` metric

        Raises:
            DocumentNotFoundError: If the document is absent or expired
        """
        await self.initialize()
        key = normalize_key(document_id)
        if not key:
            raise DocumentNotFoundError(document_id)
        content = await self.store.get(key, skip_expiration=self.is_static(key))
        if record_read:
            emit_counter("documents.read")
        return content

    async def close(self) -> None:
        """Close the storage backend."""
        if self._store is not None:
            await self._store.close()
            self._store = None
            self._initialized = False
            logger.info("Storage closed")

    def serve(
        self,
        host: str | None = None,
        port: int | None = None,
    ) -> None:
        """Start the HTTP server.

        Args:
            host: Host to bind to (defaults to config value)
            port: Port to bind to (defaults to config value)
        """
        import uvicorn

        from hastebin_core.server.app import create_app

        app = create_app(self)
        uvicorn.run(
            app,
            host=host or self.config.server.host,
            port=port or self.config.server.port,
            log_config=None,
        )

    async def __aenter__(self) -> "Hastebin":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
