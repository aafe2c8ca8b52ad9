"""Local filesystem document storage."""

import hashlib
import os
import tempfile
from pathlib import Path
from typing import Any

from hastebin_core.backends.storage.base import BaseDocumentStore
from hastebin_core.exceptions import DocumentNotFoundError
from hastebin_core.observability import get_logger
from hastebin_core.utils.threads import run_blocking

logger = get_logger(__name__)


def md5_hex(key: str) -> str:
    """Get the file name used for a key."""
    return hashlib.md5(key.encode("utf-8")).hexdigest()


def write_atomic(path: Path, data: bytes) -> None:
    """Write ``data`` to a temporary file beside ``path``, then rename it into place.

    Readers see either the previous file or the complete new one, never a
    partial write.
    """
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        os.unlink(tmp_name)
        raise


class FileDocumentStore(BaseDocumentStore):
    """Stores each document as one flat file named by the MD5 of its key.

    Files hold the raw value bytes and nothing else, so expiry is not
    tracked: documents live until someone deletes the file.
    """

    name = "file"

    def __init__(self, file_path: str | None = None, **kwargs: Any) -> None:
        """Initialize file store.

        Args:
            file_path: Directory for document files. Defaults to ./data
            **kwargs: Passed to BaseDocumentStore; unknown keys ignored
        """
        super().__init__(**kwargs)
        self.base_path = Path(file_path) if file_path else Path("data")

    def _get_path(self, key: str) -> Path:
        return self.base_path / md5_hex(key)

    async def connect(self) -> None:
        """Create the storage directory if it does not exist."""
        await run_blocking(self.base_path.mkdir, mode=0o700, parents=True, exist_ok=True)
        logger.info("File storage ready", context={"path": str(self.base_path)})

    async def set(self, key: str, value: str, skip_expiration: bool = False) -> None:
        """Write the document file, atomically replacing any previous content."""
        path = self._get_path(key)
        await run_blocking(write_atomic, path, value.encode("utf-8"))

    async def get(self, key: str, skip_expiration: bool = False) -> str:
        """Read the document file."""
        path = self._get_path(key)
        try:
            content = await run_blocking(path.read_bytes)
        except FileNotFoundError:
            raise DocumentNotFoundError(key) from None
        return content.decode("utf-8")
