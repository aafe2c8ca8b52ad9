"""MongoDB document storage using pymongo's async client."""

from datetime import datetime
from typing import Any
from urllib.parse import quote_plus

from pymongo import ASCENDING, AsyncMongoClient

from hastebin_core.backends.storage.base import BaseDocumentStore
from hastebin_core.exceptions import BackendUnavailableError, DocumentNotFoundError
from hastebin_core.expiration import ExpirationPolicy
from hastebin_core.observability import get_logger

logger = get_logger(__name__)

DEFAULT_PORT = 27017
COLLECTION_NAME = "entries"


def build_uri(
    host: str,
    port: int,
    username: str | None = None,
    password: str | None = None,
) -> str:
    """Build a ``mongodb://`` URI, escaping credentials."""
    credentials = ""
    if username:
        credentials += quote_plus(username)
    if password:
        credentials += ":" + quote_plus(password)
    if credentials:
        credentials += "@"
    return f"mongodb://{credentials}{host}:{port}"


class MongoDBDocumentStore(BaseDocumentStore):
    """MongoDB-backed store with application-level expiry.

    Each document carries an ``expiration`` date. A TTL index on that field
    lets MongoDB sweep expired documents in the background, but the sweeper
    runs about once a minute, so reads check the date themselves and delete
    stale documents on the spot. Documents that never expire have no
    ``expiration`` field at all.
    """

    name = "mongodb"

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        username: str | None = None,
        password: str | None = None,
        database: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize MongoDB store.

        Args:
            host: MongoDB host. Defaults to localhost
            port: MongoDB port. Defaults to 27017
            username: Username
            password: Password
            database: Database name. Defaults to "hastebin"
            **kwargs: Passed to BaseDocumentStore; unknown keys ignored
        """
        super().__init__(**kwargs)
        self.host = host or "localhost"
        self.port = port or DEFAULT_PORT
        self.username = username
        self.password = password
        self.database = database or "hastebin"
        self._client: AsyncMongoClient | None = None
        self._collection: Any = None

    @property
    def collection(self) -> Any:
        if self._collection is None:
            raise RuntimeError("MongoDB store not connected. Call connect() first.")
        return self._collection

    async def connect(self) -> None:
        """Connect, ping, and prepare the collection and its indexes."""
        options: dict[str, Any] = {"tz_aware": True}
        if self.timeout:
            options["serverSelectionTimeoutMS"] = int(self.timeout * 1000)
        self._client = AsyncMongoClient(
            build_uri(self.host, self.port, self.username, self.password),
            **options,
        )
        try:
            await self._call(self._client.admin.command("ping"))
        except Exception as e:
            raise BackendUnavailableError(
                f"Failed to connect to MongoDB at {self.host}:{self.port}: {e}"
            ) from e

        db = self._client[self.database]
        if COLLECTION_NAME not in await self._call(db.list_collection_names()):
            await self._call(db.create_collection(COLLECTION_NAME))

        collection = db[COLLECTION_NAME]
        await self._call(
            collection.create_index([("expiration", ASCENDING)], expireAfterSeconds=0)
        )
        await self._call(collection.create_index([("key", ASCENDING)], unique=True))
        self._collection = collection

        logger.info(
            "Connected to MongoDB",
            context={"host": self.host, "port": self.port, "database": self.database},
        )

    async def set(self, key: str, value: str, skip_expiration: bool = False) -> None:
        """Upsert the document, replacing value and expiration."""
        document: dict[str, Any] = {"key": key, "value": value.encode("utf-8")}
        expiration = self.policy.deadline_datetime(skip_expiration)
        if expiration is not None:
            document["expiration"] = expiration

        await self._call(
            self.collection.replace_one({"key": key}, document, upsert=True)
        )

    async def get(self, key: str, skip_expiration: bool = False) -> str:
        """Find the document, lazily deleting it if its date has passed."""
        query = {"key": key}
        document = await self._call(self.collection.find_one(query))
        if document is None:
            raise DocumentNotFoundError(key)

        expiration: datetime | None = document.get("expiration")
        # Writes only apply while the expiration is still the one read here;
        # None also matches a document without the field
        unchanged = {"key": key, "expiration": expiration}
        if ExpirationPolicy.is_expired(expiration):
            await self._call(self.collection.delete_one(unchanged))
            raise DocumentNotFoundError(key)

        if self.policy.should_refresh(skip_expiration):
            await self._call(
                self.collection.update_one(
                    unchanged,
                    {"$set": {"expiration": self.policy.deadline_datetime(skip_expiration)}},
                )
            )

        value = document["value"]
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def close(self) -> None:
        """Disconnect the client."""
        if self._client is not None:
            await self._client.close()
            self._client = None
            self._collection = None
            logger.info("Closed MongoDB connection")
