"""Transport layer types and configuration."""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class TransportEventType(Enum):
    """Types of transport events for observability."""

    CONNECTING = auto()
    CONNECTED = auto()
    DISCONNECTING = auto()
    DISCONNECTED = auto()
    MESSAGE_SENT = auto()
    MESSAGE_RECEIVED = auto()
    ERROR = auto()


@dataclass
class TransportEvent:
    """Event emitted by transport for observability."""

    type: TransportEventType
    timestamp: float
    data: dict[str, Any] | None = None
    error: Exception | None = None

    def __str__(self) -> str:
        base = f"[{self.type.name}]"
        if self.data:
            base += f" {self.data}"
        if self.error:
            base += f" error={self.error}"
        return base


@dataclass(frozen=True)
class TransportReply:
    """Raw result of one HTTP exchange."""

    status_code: int
    text: str
    cookies: list[str] = field(default_factory=list)
    """``name=value`` cookies set by the response."""


@dataclass
class TransportConfig:
    """Configuration for the HTTP transport."""

    url: str
    """Bayeux endpoint URL (must be https:// for remote servers)."""

    timeout: float = 120.0
    """Request timeout in seconds."""

    connect_timeout: float = 10.0
    """Connection establishment timeout in seconds."""

    headers: dict[str, str] = field(default_factory=dict)
    """Additional HTTP headers to include in requests."""

    verify_ssl: bool = True
    """Whether to verify SSL certificates (always True for production)."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.url:
            raise ValueError("url is required")
        # Allow http:// only for localhost development
        if self.url.startswith("http://") and not self._is_localhost():
            raise ValueError("Remote connections must use https://")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.connect_timeout <= 0:
            raise ValueError("connect_timeout must be positive")

    def _is_localhost(self) -> bool:
        """Check if URL points to localhost."""
        from urllib.parse import urlparse

        parsed = urlparse(self.url)
        host = parsed.hostname or ""
        return host in ("localhost", "127.0.0.1", "::1", "[::1]")
