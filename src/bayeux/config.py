"""Client configuration and Bayeux protocol constants."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import orjson

from bayeux.transport.types import TransportConfig

# The version of the Bayeux protocol spoken by the client
BAYEUX_VERSION = "1.0"
# Only long-polling is negotiated
SUPPORTED_CONNECTION_TYPES = ("long-polling",)

DEFAULT_AUTH_SCHEME = "OAuth"
DEFAULT_MAX_RETRIES = 3
DEFAULT_TIMEOUT = 120.0


@dataclass
class CometdConfig:
    """Configuration for a Bayeux client session."""

    url: str
    """Endpoint the client POSTs every message to."""

    access_token: str
    """Token sent in the Authorization header."""

    auth_scheme: str = DEFAULT_AUTH_SCHEME
    """Authorization scheme prefix, e.g. ``OAuth`` or ``Bearer``."""

    max_retries: int = DEFAULT_MAX_RETRIES
    """Retries allowed per operation when the server advises reconnection."""

    timeout: float = DEFAULT_TIMEOUT
    """Per-request timeout in seconds; must exceed the server's long-poll timeout."""

    connect_timeout: float = 10.0
    """Connection establishment timeout in seconds."""

    headers: dict[str, str] = field(default_factory=dict)
    """Additional HTTP headers to include in requests."""

    verify_ssl: bool = True
    """Whether to verify SSL certificates."""

    minimum_version: str | None = None
    """Optional ``minimumVersion`` sent with the handshake."""

    ext: dict[str, Any] | None = None
    """Optional ``ext`` object sent with the handshake."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.url:
            raise ValueError("url is required")
        if not self.access_token:
            raise ValueError("access_token is required")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.connect_timeout <= 0:
            raise ValueError("connect_timeout must be positive")

    @property
    def authorization(self) -> str:
        """Value of the Authorization header."""
        return f"{self.auth_scheme} {self.access_token}"

    def to_transport_config(self) -> TransportConfig:
        """Derive the HTTP transport configuration."""
        return TransportConfig(
            url=self.url,
            timeout=self.timeout,
            connect_timeout=self.connect_timeout,
            headers=dict(self.headers),
            verify_ssl=self.verify_ssl,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CometdConfig":
        """Create from config dict (camelCase keys)."""
        return cls(
            url=data.get("url", ""),
            access_token=data.get("accessToken", ""),
            auth_scheme=data.get("authScheme", DEFAULT_AUTH_SCHEME),
            max_retries=data.get("maxRetries", DEFAULT_MAX_RETRIES),
            timeout=data.get("timeout", DEFAULT_TIMEOUT),
            connect_timeout=data.get("connectTimeout", 10.0),
            headers=data.get("headers", {}),
            verify_ssl=data.get("verifySsl", True),
            minimum_version=data.get("minimumVersion"),
            ext=data.get("ext"),
        )


def load_config(path: Path) -> CometdConfig:
    """Load a client config from a JSON file.

    Raises:
        ValueError: If the file is not a JSON object or fails validation.
    """
    try:
        data = orjson.loads(path.read_bytes())
    except orjson.JSONDecodeError as e:
        raise ValueError(f"Invalid config file {path}: {e}")

    if not isinstance(data, dict):
        raise ValueError(f"Invalid config file {path}: expected an object")

    return CometdConfig.from_dict(data)
