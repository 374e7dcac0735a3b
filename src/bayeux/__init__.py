"""
Bayeux/CometD long-polling client.

Submodules:
- protocol: messages, response classification, advice, session and the
  reconnection engine
- transport: HTTP long-polling transport
- config: client configuration and protocol constants
"""

# Protocol layer (imported first: the transport errors derive from it)
from bayeux.protocol import (
    CometdClient,
    ReconnectionEngine,
    Session,
    EngineState,
    EngineEvent,
    EngineEventType,
    LoggingObserver,
    Advice,
    Reconnect,
    Decision,
    CometdError,
    EncodeError,
    ParseError,
    SessionError,
    ProtocolError,
    RetryExhausted,
    JSONCodec,
    HandshakeResponse,
    PublishResponse,
    DeliveryResponse,
    BasicResponse,
    ErroredResponse,
)

# Transport layer
from bayeux.transport import (
    HTTPTransport,
    Transport,
    TransportConfig,
    TransportReply,
    TransportError,
    ConnectionError,
    TimeoutError,
)

# Configuration
from bayeux.config import (
    CometdConfig,
    load_config,
    BAYEUX_VERSION,
    SUPPORTED_CONNECTION_TYPES,
)

__all__ = [
    # Protocol
    "CometdClient",
    "ReconnectionEngine",
    "Session",
    "EngineState",
    "EngineEvent",
    "EngineEventType",
    "LoggingObserver",
    "Advice",
    "Reconnect",
    "Decision",
    "JSONCodec",
    "HandshakeResponse",
    "PublishResponse",
    "DeliveryResponse",
    "BasicResponse",
    "ErroredResponse",
    # Errors
    "CometdError",
    "EncodeError",
    "ParseError",
    "SessionError",
    "ProtocolError",
    "RetryExhausted",
    "TransportError",
    "ConnectionError",
    "TimeoutError",
    # Transport
    "HTTPTransport",
    "Transport",
    "TransportConfig",
    "TransportReply",
    # Config
    "CometdConfig",
    "load_config",
    "BAYEUX_VERSION",
    "SUPPORTED_CONNECTION_TYPES",
]
