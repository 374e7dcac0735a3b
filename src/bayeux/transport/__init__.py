"""
Bayeux Transport Layer.

HTTP long-polling transport; one POST per exchange.
"""

from bayeux.transport.types import (
    TransportConfig,
    TransportEvent,
    TransportEventType,
    TransportReply,
)
from bayeux.transport.base import Transport, TransportError, ConnectionError, TimeoutError
from bayeux.transport.http import HTTPTransport

__all__ = [
    "Transport",
    "TransportConfig",
    "TransportEvent",
    "TransportEventType",
    "TransportReply",
    "TransportError",
    "ConnectionError",
    "TimeoutError",
    "HTTPTransport",
]
