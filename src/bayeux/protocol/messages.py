"""Bayeux request and response message types."""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from bayeux.config import BAYEUX_VERSION, SUPPORTED_CONNECTION_TYPES
from bayeux.protocol.advice import Advice

# Meta channels
HANDSHAKE_CHANNEL = "/meta/handshake"
CONNECT_CHANNEL = "/meta/connect"
DISCONNECT_CHANNEL = "/meta/disconnect"
SUBSCRIBE_CHANNEL = "/meta/subscribe"
UNSUBSCRIBE_CHANNEL = "/meta/unsubscribe"

META_PREFIX = "/meta/"

LONG_POLLING = "long-polling"


def _compact(message: dict[str, Any]) -> dict[str, Any]:
    """Drop absent optional fields."""
    return {key: value for key, value in message.items() if value is not None}


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HandshakeRequest:
    """Handshake request; the only request sent without a client id."""

    version: str = BAYEUX_VERSION
    supported_connection_types: list[str] = field(
        default_factory=lambda: list(SUPPORTED_CONNECTION_TYPES)
    )
    minimum_version: str | None = None
    ext: dict[str, Any] | None = None
    id: str | None = None
    channel: ClassVar[str] = HANDSHAKE_CHANNEL

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return _compact({
            "channel": self.channel,
            "version": self.version,
            "minimumVersion": self.minimum_version,
            "supportedConnectionTypes": list(self.supported_connection_types),
            "ext": self.ext,
            "id": self.id,
        })


@dataclass(frozen=True)
class ConnectRequest:
    """Connect request."""

    client_id: str
    connection_type: str = LONG_POLLING
    ext: dict[str, Any] | None = None
    id: str | None = None
    channel: ClassVar[str] = CONNECT_CHANNEL

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return _compact({
            "channel": self.channel,
            "clientId": self.client_id,
            "connectionType": self.connection_type,
            "ext": self.ext,
            "id": self.id,
        })


@dataclass(frozen=True)
class DisconnectRequest:
    """Disconnect request."""

    client_id: str
    ext: dict[str, Any] | None = None
    id: str | None = None
    channel: ClassVar[str] = DISCONNECT_CHANNEL

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return _compact({
            "channel": self.channel,
            "clientId": self.client_id,
            "ext": self.ext,
            "id": self.id,
        })


@dataclass(frozen=True)
class SubscribeRequest:
    """Subscribe request for a single channel pattern."""

    client_id: str
    subscription: str
    ext: dict[str, Any] | None = None
    id: str | None = None
    channel: ClassVar[str] = SUBSCRIBE_CHANNEL

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return _compact({
            "channel": self.channel,
            "clientId": self.client_id,
            "subscription": self.subscription,
            "ext": self.ext,
            "id": self.id,
        })


@dataclass(frozen=True)
class UnsubscribeRequest(SubscribeRequest):
    """Unsubscribe request; same shape as subscribe."""

    channel: ClassVar[str] = UNSUBSCRIBE_CHANNEL


@dataclass(frozen=True)
class PublishRequest:
    """Publish request. ``data`` is passed through unexamined."""

    channel: str
    client_id: str
    data: Any = None
    ext: dict[str, Any] | None = None
    id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        message = _compact({
            "channel": self.channel,
            "clientId": self.client_id,
            "ext": self.ext,
            "id": self.id,
        })
        # null is a legal payload and must stay on the wire
        message["data"] = self.data
        return message


Request = Union[
    HandshakeRequest,
    ConnectRequest,
    DisconnectRequest,
    SubscribeRequest,
    UnsubscribeRequest,
    PublishRequest,
]


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


def _advice(data: dict[str, Any]) -> Advice | None:
    raw = data.get("advice")
    return Advice.from_dict(raw) if raw is not None else None


def _error(data: dict[str, Any]) -> str | None:
    # Some servers send numeric error codes
    raw = data.get("error")
    return str(raw) if raw is not None else None


def _advice_dict(advice: Advice | None) -> dict[str, Any] | None:
    return advice.to_dict() if advice is not None else None


@dataclass(frozen=True)
class HandshakeResponse:
    """Reply to a handshake request."""

    channel: str
    successful: bool
    version: str
    client_id: str
    supported_connection_types: list[str]
    error: str | None = None
    minimum_version: str | None = None
    advice: Advice | None = None
    auth_successful: bool | None = None
    ext: dict[str, Any] | None = None
    id: str | None = None

    @property
    def is_failure(self) -> bool:
        return not self.successful

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HandshakeResponse":
        """Create from JSON dict."""
        return cls(
            channel=data["channel"],
            successful=data["successful"],
            version=data["version"],
            client_id=data["clientId"],
            supported_connection_types=list(data["supportedConnectionTypes"]),
            error=_error(data),
            minimum_version=data.get("minimumVersion"),
            advice=_advice(data),
            auth_successful=data.get("authSuccessful"),
            ext=data.get("ext"),
            id=data.get("id"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return _compact({
            "channel": self.channel,
            "successful": self.successful,
            "error": self.error,
            "version": self.version,
            "minimumVersion": self.minimum_version,
            "clientId": self.client_id,
            "supportedConnectionTypes": list(self.supported_connection_types),
            "advice": _advice_dict(self.advice),
            "authSuccessful": self.auth_successful,
            "ext": self.ext,
            "id": self.id,
        })


@dataclass(frozen=True)
class PublishResponse:
    """Reply to a publish request that echoes the published data."""

    channel: str
    client_id: str
    successful: bool
    data: Any = None
    error: str | None = None
    advice: Advice | None = None
    ext: dict[str, Any] | None = None
    id: str | None = None

    @property
    def is_failure(self) -> bool:
        return not self.successful

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PublishResponse":
        """Create from JSON dict."""
        return cls(
            channel=data["channel"],
            client_id=data["clientId"],
            successful=data["successful"],
            data=data["data"],
            error=_error(data),
            advice=_advice(data),
            ext=data.get("ext"),
            id=data.get("id"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        message = _compact({
            "channel": self.channel,
            "clientId": self.client_id,
            "successful": self.successful,
            "error": self.error,
            "advice": _advice_dict(self.advice),
            "ext": self.ext,
            "id": self.id,
        })
        message["data"] = self.data
        return message


@dataclass(frozen=True)
class DeliveryResponse:
    """
    Message pushed by the server on a subscribed channel.

    Deliveries carry no ``successful`` flag and are always accepted.
    """

    channel: str
    data: Any = None
    advice: Advice | None = None
    ext: dict[str, Any] | None = None
    id: str | None = None

    @property
    def is_failure(self) -> bool:
        return False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeliveryResponse":
        """Create from JSON dict."""
        return cls(
            channel=data["channel"],
            data=data["data"],
            advice=_advice(data),
            ext=data.get("ext"),
            id=data.get("id"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        message = _compact({
            "channel": self.channel,
            "advice": _advice_dict(self.advice),
            "ext": self.ext,
            "id": self.id,
        })
        message["data"] = self.data
        return message


@dataclass(frozen=True)
class BasicResponse:
    """Acknowledgement for connect, disconnect, subscribe and unsubscribe."""

    channel: str
    successful: bool
    error: str | None = None
    advice: Advice | None = None
    client_id: str | None = None
    subscription: str | None = None
    ext: dict[str, Any] | None = None
    id: str | None = None

    @property
    def is_failure(self) -> bool:
        return not self.successful

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BasicResponse":
        """Create from JSON dict."""
        return cls(
            channel=data["channel"],
            successful=data["successful"],
            error=_error(data),
            advice=_advice(data),
            client_id=data.get("clientId"),
            subscription=data.get("subscription"),
            ext=data.get("ext"),
            id=data.get("id"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return _compact({
            "channel": self.channel,
            "successful": self.successful,
            "error": self.error,
            "advice": _advice_dict(self.advice),
            "clientId": self.client_id,
            "subscription": self.subscription,
            "ext": self.ext,
            "id": self.id,
        })


@dataclass(frozen=True)
class ErroredResponse:
    """Response that explicitly carries a failure reason."""

    channel: str
    error: str
    successful: bool = False
    client_id: str | None = None
    subscription: str | None = None
    advice: Advice | None = None
    ext: dict[str, Any] | None = None
    id: str | None = None

    @property
    def is_failure(self) -> bool:
        return True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ErroredResponse":
        """Create from JSON dict."""
        return cls(
            channel=data["channel"],
            error=data["error"],
            client_id=data.get("clientId"),
            subscription=data.get("subscription"),
            advice=_advice(data),
            ext=data.get("ext"),
            id=data.get("id"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return _compact({
            "channel": self.channel,
            "successful": False,
            "error": self.error,
            "clientId": self.client_id,
            "subscription": self.subscription,
            "advice": _advice_dict(self.advice),
            "ext": self.ext,
            "id": self.id,
        })


Response = Union[
    ErroredResponse,
    HandshakeResponse,
    PublishResponse,
    DeliveryResponse,
    BasicResponse,
]


def error_of(response: Response) -> str | None:
    """Server error string of a response, if it has one."""
    return getattr(response, "error", None)


def is_meta_channel(channel: str) -> bool:
    """Check if channel is a reserved ``/meta/*`` channel."""
    return channel.startswith(META_PREFIX)
