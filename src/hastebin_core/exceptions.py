"""Hastebin Core exceptions."""


class HastebinError(Exception):
    """Base exception for hastebin-core."""

    pass


class ConfigError(HastebinError):
    """Configuration error."""

    pass


class UnknownBackendError(ConfigError):
    """No storage backend or key generator is registered under the given name."""

    pass


class StorageError(HastebinError):
    """Storage backend error raised by this layer (not by a driver)."""

    pass


class BackendUnavailableError(StorageError):
    """The backend could not be reached or rejected our credentials."""

    pass


class StorageTimeoutError(StorageError):
    """A backend call did not complete within the configured timeout."""

    pass


class NotFoundError(HastebinError):
    """Resource not found."""

    pass


class DocumentNotFoundError(NotFoundError):
    """No live document exists for the requested key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Document not found: {key}")
        self.key = key


class DocumentTooLargeError(HastebinError):
    """Document content exceeds the configured maximum length."""

    def __init__(self, length: int, max_length: int) -> None:
        super().__init__(
            f"Document length {length} exceeds maximum of {max_length}"
        )
        self.length = length
        self.max_length = max_length


class KeyGenerationError(HastebinError):
    """The secure random source failed while minting a key."""

    pass
