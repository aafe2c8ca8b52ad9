"""S3-compatible object storage using ``boto3``.

boto3 is synchronous, so every call runs on the shared I/O thread pool.
"""

from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from hastebin_core.backends.storage.base import BaseDocumentStore
from hastebin_core.exceptions import BackendUnavailableError, DocumentNotFoundError
from hastebin_core.observability import get_logger
from hastebin_core.utils.threads import run_blocking

logger = get_logger(__name__)

DEFAULT_PORT = 9000
NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}
BUCKET_EXISTS_CODES = {"BucketAlreadyOwnedByYou", "BucketAlreadyExists"}


def error_code(error: ClientError) -> str:
    """Get the S3 error code from a botocore ClientError."""
    return str(error.response.get("Error", {}).get("Code", ""))


class S3DocumentStore(BaseDocumentStore):
    """Stores each document as an object in a single bucket.

    Object storage has no expiry through this layer: ``skip_expiration`` is
    accepted and ignored, and objects live until deleted. The bucket is
    created on connect if it does not exist yet.
    """

    name = "s3"

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        username: str | None = None,
        password: str | None = None,
        bucket: str | None = None,
        aws_region: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize S3 store.

        Args:
            host: S3 endpoint host. Defaults to localhost
            port: S3 endpoint port. Defaults to 9000
            username: Access key id
            password: Secret access key
            bucket: Bucket name. Defaults to "hastebin"
            aws_region: Region name. Defaults to us-east-1
            **kwargs: Passed to BaseDocumentStore; unknown keys ignored
        """
        super().__init__(**kwargs)
        self.host = host or "localhost"
        self.port = port or DEFAULT_PORT
        self.access_key = username
        self.secret_key = password
        self.bucket = bucket or "hastebin"
        self.region = aws_region or "us-east-1"
        self._client: Any = None

    @property
    def endpoint_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def client(self) -> Any:
        if self._client is None:
            raise RuntimeError("S3 store not connected. Call connect() first.")
        return self._client

    async def connect(self) -> None:
        """Create the client, list buckets, and create ours if missing."""
        config_options: dict[str, Any] = {
            "s3": {"addressing_style": "path"},
            "retries": {"max_attempts": 3, "mode": "standard"},
        }
        if self.timeout:
            config_options["connect_timeout"] = self.timeout
            config_options["read_timeout"] = self.timeout

        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key,
            region_name=self.region,
            config=Config(signature_version="s3v4", **config_options),
        )
        try:
            await self._call(run_blocking(self._client.list_buckets))
        except (BotoCoreError, ClientError) as e:
            raise BackendUnavailableError(
                f"Failed to connect to S3 at {self.endpoint_url}: {e}"
            ) from e

        await self._ensure_bucket()
        logger.info(
            "Connected to S3",
            context={"endpoint": self.endpoint_url, "bucket": self.bucket},
        )

    async def _ensure_bucket(self) -> None:
        params: dict[str, Any] = {"Bucket": self.bucket}
        if self.region != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": self.region}
        try:
            await self._call(run_blocking(self.client.create_bucket, **params))
        except ClientError as e:
            if error_code(e) not in BUCKET_EXISTS_CODES:
                raise
        else:
            logger.info("Created S3 bucket", context={"bucket": self.bucket})

    async def set(self, key: str, value: str, skip_expiration: bool = False) -> None:
        """Upload the object, replacing any previous version."""
        await self._call(
            run_blocking(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=value.encode("utf-8"),
            )
        )

    async def get(self, key: str, skip_expiration: bool = False) -> str:
        """Download the object."""

        def _download() -> bytes:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            with response["Body"] as body:
                return body.read()

        try:
            content = await self._call(run_blocking(_download))
        except ClientError as e:
            if error_code(e) in NOT_FOUND_CODES:
                raise DocumentNotFoundError(key) from None
            raise
        return content.decode("utf-8")

    async def close(self) -> None:
        """Close the client's HTTP connections."""
        if self._client is not None:
            await run_blocking(self._client.close)
            self._client = None
            logger.info("Closed S3 client")
