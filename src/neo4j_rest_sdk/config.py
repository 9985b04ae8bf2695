"""
Client configuration for the Neo4j REST SDK.

``Configuration`` is an immutable, validated settings container. ``ConfigStore``
caches the configuration for the lifetime of a ``ClientContext``.
"""

import base64
import logging
import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from .exceptions import ConfigError, NotInitializedError

logger = logging.getLogger(__name__)

DEFAULT_POOL_SIZE = 5
DEFAULT_MAX_OVERFLOW = 2
DEFAULT_TIMEOUT = 30.0

INFINITE_TIMEOUTS = ("infinite", "infinity")


class BasicAuth(BaseModel):
    """Username/password pair for HTTP basic authentication."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: str


class Configuration(BaseModel):
    """
    Immutable configuration for a Neo4j server.

    Attributes:
        url: Server base URL (e.g. "http://localhost:7474")
        pool_size: Number of steady-state pooled connections
        max_overflow: Extra connections created under burst load
        timeout: Request and checkout timeout in seconds, None for infinite
        basic_auth: Username/password credentials
        token_auth: Pre-encoded basic credential token
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str
    pool_size: int = DEFAULT_POOL_SIZE
    max_overflow: int = DEFAULT_MAX_OVERFLOW
    timeout: float | None = DEFAULT_TIMEOUT
    basic_auth: BasicAuth | None = None
    token_auth: str | None = None

    @field_validator("url")
    @classmethod
    def _normalize_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("url must not be empty")
        return value

    @field_validator("pool_size")
    @classmethod
    def _check_pool_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"pool_size must be > 0, got {value}")
        return value

    @field_validator("max_overflow")
    @classmethod
    def _check_max_overflow(cls, value: int) -> int:
        if value < 0:
            raise ValueError(f"max_overflow must be >= 0, got {value}")
        return value

    @field_validator("timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().lower() in INFINITE_TIMEOUTS:
            return None
        return value

    @field_validator("timeout")
    @classmethod
    def _check_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError(f"timeout must be > 0 or 'infinite', got {value}")
        return value

    @model_validator(mode="after")
    def _check_credentials(self) -> "Configuration":
        if self.basic_auth is not None and self.token_auth is not None:
            raise ValueError("basic_auth and token_auth are mutually exclusive")
        return self

    def auth_header(self) -> str | None:
        """Build the Authorization header value, or None without credentials."""
        if self.basic_auth is not None:
            pair = f"{self.basic_auth.username}:{self.basic_auth.password}".encode()
            return f"Basic {base64.b64encode(pair).decode('ascii')}"
        if self.token_auth is not None:
            return f"Basic {self.token_auth}"
        return None

    @classmethod
    def from_env(cls, prefix: str = "NEO4J_") -> "Configuration":
        """
        Build a configuration from environment variables.

        Reads ``<prefix>URL``, ``<prefix>POOL_SIZE``, ``<prefix>MAX_OVERFLOW``,
        ``<prefix>TIMEOUT``, ``<prefix>USERNAME`` with ``<prefix>PASSWORD``,
        and ``<prefix>TOKEN``.
        """
        options: dict[str, Any] = {"url": os.getenv(f"{prefix}URL", "")}
        for key in ("pool_size", "max_overflow", "timeout"):
            value = os.getenv(f"{prefix}{key.upper()}")
            if value is not None:
                options[key] = value

        username = os.getenv(f"{prefix}USERNAME")
        if username is not None:
            options["basic_auth"] = {"username": username, "password": os.getenv(f"{prefix}PASSWORD", "")}
        token = os.getenv(f"{prefix}TOKEN")
        if token is not None:
            options["token_auth"] = token

        return load_config(options)


def load_config(options: Mapping[str, Any] | Configuration) -> Configuration:
    """
    Validate configuration options.

    Raises:
        ConfigError: If ``url`` is missing, both credentials are given,
            or an option is out of range.
    """
    if isinstance(options, Configuration):
        return options
    if not options.get("url"):
        raise ConfigError("Missing required option 'url'")

    try:
        return Configuration.model_validate(dict(options))
    except ValidationError as e:
        details = "; ".join(f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}" for err in e.errors())
        raise ConfigError(f"Invalid configuration: {details}") from e


class ConfigStore:
    """
    Holds the configuration of a client context.

    ``load`` may be called again to replace the cached value; the last write wins.
    """

    def __init__(self) -> None:
        self._config: Configuration | None = None

    @property
    def is_loaded(self) -> bool:
        return self._config is not None

    def load(self, options: Mapping[str, Any] | Configuration) -> Configuration:
        """Validate and cache the configuration."""
        config = load_config(options)
        self._config = config
        logger.debug(f"Configuration loaded for {config.url} (pool_size={config.pool_size})")
        return config

    def get(self) -> Configuration:
        """
        Return the cached configuration.

        Raises:
            NotInitializedError: If ``load`` was never called.
        """
        if self._config is None:
            raise NotInitializedError("Configuration not loaded. Call load() first.")
        return self._config

    def value(self, key: str, default: Any = None) -> Any:
        """Return a single configuration option, or ``default`` when unset."""
        value = getattr(self.get(), key, None)
        return default if value is None else value
