"""
Bayeux Protocol Core.

Message types and the response classifier, reconnection advice,
session state, and the engine that follows advice across retries.
"""

from bayeux.protocol.errors import (
    CometdError,
    EncodeError,
    ParseError,
    SessionError,
    ProtocolError,
    RetryExhausted,
)
from bayeux.protocol.advice import Advice, Reconnect, Decision, decide
from bayeux.protocol.messages import (
    HandshakeRequest,
    ConnectRequest,
    DisconnectRequest,
    SubscribeRequest,
    UnsubscribeRequest,
    PublishRequest,
    HandshakeResponse,
    PublishResponse,
    DeliveryResponse,
    BasicResponse,
    ErroredResponse,
    Request,
    Response,
)
from bayeux.protocol.codec import Codec, JSONCodec, classify, classify_batch
from bayeux.protocol.session import Session
from bayeux.protocol.state import (
    EngineState,
    EngineStateMachine,
    InvalidStateTransition,
)
from bayeux.protocol.events import EngineEvent, EngineEventType, LoggingObserver
from bayeux.protocol.engine import ReconnectionEngine
from bayeux.protocol.client import CometdClient

__all__ = [
    # Errors
    "CometdError",
    "EncodeError",
    "ParseError",
    "SessionError",
    "ProtocolError",
    "RetryExhausted",
    # Advice
    "Advice",
    "Reconnect",
    "Decision",
    "decide",
    # Messages
    "HandshakeRequest",
    "ConnectRequest",
    "DisconnectRequest",
    "SubscribeRequest",
    "UnsubscribeRequest",
    "PublishRequest",
    "HandshakeResponse",
    "PublishResponse",
    "DeliveryResponse",
    "BasicResponse",
    "ErroredResponse",
    "Request",
    "Response",
    # Codec
    "Codec",
    "JSONCodec",
    "classify",
    "classify_batch",
    # Session and state
    "Session",
    "EngineState",
    "EngineStateMachine",
    "InvalidStateTransition",
    # Events
    "EngineEvent",
    "EngineEventType",
    "LoggingObserver",
    # Engine and client
    "ReconnectionEngine",
    "CometdClient",
]
