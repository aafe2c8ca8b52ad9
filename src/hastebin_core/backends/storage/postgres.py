"""PostgreSQL document storage using an ``asyncpg`` connection pool."""

import time
from typing import Any

import asyncpg

from hastebin_core.backends.storage.base import BaseDocumentStore
from hastebin_core.exceptions import BackendUnavailableError, DocumentNotFoundError
from hastebin_core.expiration import ExpirationPolicy
from hastebin_core.observability import get_logger

logger = get_logger(__name__)

DEFAULT_PORT = 5432

CREATE_TABLE_SQL = (
    "CREATE TABLE IF NOT EXISTS entries ("
    "id SERIAL PRIMARY KEY, "
    "key VARCHAR(255) NOT NULL UNIQUE, "
    "value TEXT, "
    "expiration BIGINT)"
)
SET_SQL = (
    "INSERT INTO entries (key, value, expiration) VALUES ($1, $2, $3) "
    "ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value, expiration = EXCLUDED.expiration"
)
GET_SQL = "SELECT id, value, expiration FROM entries WHERE key = $1"
# Both only match the expiration the read saw, so a write that lands in
# between is neither deleted nor has its expiration overwritten
DELETE_SQL = "DELETE FROM entries WHERE id = $1 AND expiration = $2"
UPDATE_EXPIRATION_SQL = (
    "UPDATE entries SET expiration = $1 "
    "WHERE id = $2 AND expiration IS NOT DISTINCT FROM $3"
)


def epoch_deadline(policy: ExpirationPolicy, skip_expiration: bool) -> int:
    """Get the value for the ``expiration`` column (0 means never)."""
    deadline = policy.deadline(skip_expiration, now=time.time())
    return int(deadline) if deadline is not None else 0


class PostgresDocumentStore(BaseDocumentStore):
    """PostgreSQL-backed store with application-level expiry.

    Rows carry an ``expiration`` Unix epoch, 0 meaning "never". There is no
    background sweeper: expired rows are deleted when a read finds them.
    """

    name = "postgres"

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        username: str | None = None,
        password: str | None = None,
        database: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize PostgreSQL store.

        Args:
            host: PostgreSQL host. Defaults to localhost
            port: PostgreSQL port. Defaults to 5432
            username: Role name
            password: Password
            database: Database name
            **kwargs: Passed to BaseDocumentStore; unknown keys ignored
        """
        super().__init__(**kwargs)
        self.host = host or "localhost"
        self.port = port or DEFAULT_PORT
        self.username = username
        self.password = password
        self.database = database
        self._pool: asyncpg.Pool | None = None

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("PostgreSQL store not connected. Call connect() first.")
        return self._pool

    async def connect(self) -> None:
        """Create the pool, check it with a query, and create the table."""
        try:
            self._pool = await self._call(
                asyncpg.create_pool(
                    host=self.host,
                    port=self.port,
                    user=self.username,
                    password=self.password,
                    database=self.database,
                )
            )
            await self._call(self._pool.fetchval("SELECT 1"))
        except Exception as e:
            raise BackendUnavailableError(
                f"Failed to connect to PostgreSQL at {self.host}:{self.port}: {e}"
            ) from e

        await self._call(self._pool.execute(CREATE_TABLE_SQL))
        logger.info(
            "Connected to PostgreSQL",
            context={"host": self.host, "port": self.port, "database": self.database},
        )

    async def set(self, key: str, value: str, skip_expiration: bool = False) -> None:
        """Upsert the row with a fresh expiration epoch."""
        await self._call(
            self.pool.execute(SET_SQL, key, value, epoch_deadline(self.policy, skip_expiration))
        )

    async def get(self, key: str, skip_expiration: bool = False) -> str:
        """Fetch the row, lazily deleting it if its epoch has passed."""
        row = await self._call(self.pool.fetchrow(GET_SQL, key))
        if row is None:
            raise DocumentNotFoundError(key)

        if ExpirationPolicy.is_expired(row["expiration"]):
            await self._call(
                self.pool.execute(DELETE_SQL, row["id"], row["expiration"])
            )
            raise DocumentNotFoundError(key)

        if self.policy.should_refresh(skip_expiration):
            await self._call(
                self.pool.execute(
                    UPDATE_EXPIRATION_SQL,
                    epoch_deadline(self.policy, skip_expiration),
                    row["id"],
                    row["expiration"],
                )
            )

        return row["value"] or ""

    async def close(self) -> None:
        """Close the pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("Closed PostgreSQL pool")
