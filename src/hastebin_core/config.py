"""Configuration loading with environment variable substitution and overrides."""

import json
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from hastebin_core.exceptions import ConfigError

ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)\}")

# Environment variable -> path into the configuration dictionary
ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "HOST": ("server", "host"),
    "PORT": ("server", "port"),
    "KEY_LENGTH": ("key_length",),
    "KEY_SPACE": ("key_space",),
    "MAX_LENGTH": ("max_length",),
    "EXPIRATION": ("expiration",),
    "KEY_GENERATOR": ("key_generator",),
    "STORAGE_TYPE": ("storage", "type"),
    "STORAGE_HOST": ("storage", "host"),
    "STORAGE_PORT": ("storage", "port"),
    "STORAGE_USERNAME": ("storage", "username"),
    "STORAGE_PASSWORD": ("storage", "password"),
    "STORAGE_DATABASE": ("storage", "database"),
    "STORAGE_BUCKET": ("storage", "bucket"),
    "STORAGE_AWS_REGION": ("storage", "aws_region"),
    "STORAGE_FILE_PATH": ("storage", "file_path"),
    "STORAGE_TIMEOUT": ("storage", "timeout"),
    "LOGGING_LEVEL": ("logging", "level"),
    "LOGGING_TYPE": ("logging", "type"),
}

DOCUMENT_ENV_PREFIX = "DOCUMENTS_"


def substitute_env_vars(value: Any) -> Any:
    """Recursively substitute ${VAR_NAME} patterns with environment variables."""
    if isinstance(value, str):
        def replace(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ConfigError(f"Environment variable {var_name} is not set")
            return env_value

        return ENV_VAR_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]
    return value


def apply_env_overrides(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Overlay well-known environment variables onto raw configuration.

    Empty variables are ignored. ``DOCUMENTS_<KEY>=<path>`` variables append
    static documents. Values stay strings; pydantic coerces them later.

    Args:
        data: Raw configuration dictionary (not modified)
        environ: Environment mapping, usually ``os.environ``

    Returns:
        A new dictionary with overrides applied
    """
    result: dict[str, Any] = {
        k: dict(v) if isinstance(v, dict) else v for k, v in data.items()
    }

    for env_name, path in ENV_OVERRIDES.items():
        env_value = environ.get(env_name)
        if not env_value:
            continue
        target = result
        for part in path[:-1]:
            section = target.get(part)
            if not isinstance(section, dict):
                section = {}
                target[part] = section
            target = section
        target[path[-1]] = env_value

    documents = list(result.get("documents") or [])
    for env_name, env_value in sorted(environ.items()):
        if env_name.startswith(DOCUMENT_ENV_PREFIX) and len(env_name) > len(DOCUMENT_ENV_PREFIX):
            key = env_name[len(DOCUMENT_ENV_PREFIX):]
            documents.append({"key": key, "path": env_value})
    if documents:
        result["documents"] = documents

    return result


class StorageConfig(BaseModel):
    """Storage backend configuration.

    Every field is passed to the backend, which ignores what it doesn't use.
    """

    type: str = "file"  # file | memory | redis | memcached | mongodb | postgres | s3
    host: str | None = None
    port: int | None = None
    username: str | None = None
    password: str | None = None
    database: str | None = None
    bucket: str | None = None
    aws_region: str | None = None  # s3 only
    file_path: str = "data"  # file only
    timeout: float | None = 5.0  # Per-call timeout in seconds


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "info"
    type: str = "text"  # text | json

    @field_validator("level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        if value.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return value.lower()

    @field_validator("type")
    @classmethod
    def _check_type(cls, value: str) -> str:
        if value not in ("text", "json"):
            raise ValueError(f"Unknown log type: {value}")
        return value


class DocumentConfig(BaseModel):
    """A static document loaded from disk at startup."""

    key: str
    path: str


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = "0.0.0.0"
    port: int = 7777


class Config(BaseModel):
    """Main configuration for hastebin-core."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    key_length: int = Field(default=10, ge=1)
    key_space: str | None = None  # random generator only
    key_generator: str = "phonetic"  # phonetic | random
    max_length: int = Field(default=4_000_000, ge=0)  # 0 disables the limit
    expiration: int = Field(default=0, ge=0)  # Seconds; 0 disables expiry
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    documents: list[DocumentConfig] = Field(default_factory=list)

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        environ: Mapping[str, str] | None = None,
    ) -> "Config":
        """Load configuration from a YAML or JSON file.

        A missing file yields the defaults (plus environment overrides).

        Raises:
            ConfigError: If the file cannot be parsed or fails validation
        """
        path = Path(path)
        data: Any = {}
        if path.exists():
            try:
                with path.open() as f:
                    if path.suffix in (".yaml", ".yml"):
                        data = yaml.safe_load(f)
                    else:
                        data = json.load(f)
            except (yaml.YAMLError, json.JSONDecodeError) as e:
                raise ConfigError(f"Failed to parse configuration file {path}: {e}") from e

        return cls.from_dict(data or {}, environ=environ)

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        environ: Mapping[str, str] | None = None,
    ) -> "Config":
        """Load configuration from a dictionary.

        Args:
            data: Raw configuration
            environ: Environment for overrides. Pass ``{}`` to disable them;
                defaults to ``os.environ``

        Raises:
            ConfigError: If validation fails
        """
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping")
        data = substitute_env_vars(data)
        data = apply_env_overrides(data, os.environ if environ is None else environ)
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def storage_options(self) -> dict[str, Any]:
        """Get keyword arguments for the configured storage backend."""
        options = self.storage.model_dump(exclude={"type"})
        options["expiration"] = self.expiration
        return options
