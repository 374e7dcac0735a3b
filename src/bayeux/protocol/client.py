"""Bayeux client operations."""

from __future__ import annotations

import logging
from typing import Any, Callable

from bayeux.config import CometdConfig
from bayeux.protocol.codec import Codec
from bayeux.protocol.engine import ReconnectionEngine
from bayeux.protocol.events import EngineEvent
from bayeux.protocol.messages import (
    ConnectRequest,
    DisconnectRequest,
    PublishRequest,
    Response,
    SubscribeRequest,
    UnsubscribeRequest,
    is_meta_channel,
)
from bayeux.protocol.session import Session
from bayeux.protocol.state import EngineState, StateTransitionCallback
from bayeux.transport.base import Transport
from bayeux.transport.http import HTTPTransport

logger = logging.getLogger(__name__)


def _check_channel(channel: str) -> None:
    if not channel or not channel.startswith("/"):
        raise ValueError(f"Invalid channel name: {channel!r}")


class CometdClient:
    """
    Bayeux long-polling client for a single session.

    Each operation sends one request and waits for the reply batch;
    reconnection advice in failed replies is followed before the call
    returns. Deliveries that arrive in a reply batch are returned with
    the acknowledgements.

    Example::

        config = CometdConfig(url="https://example.com/cometd/44.0", access_token="...")
        async with CometdClient(config) as client:
            await client.init()
            await client.subscribe("/topic/orders")
            messages = await client.connect()
    """

    def __init__(
        self,
        config: CometdConfig,
        transport: Transport | None = None,
        codec: Codec | None = None,
        session: Session | None = None,
    ):
        """
        Initialize the client.

        Args:
            config: Client configuration.
            transport: Transport to use; an ``HTTPTransport`` built from
                the config by default.
            codec: Serialization collaborator; JSON by default.
            session: Session to drive; a fresh one by default. Its retry
                budget must match ``config.max_retries``.
        """
        self.config = config
        self.transport = transport or HTTPTransport(config.to_transport_config())
        self.engine = ReconnectionEngine(
            config,
            self.transport,
            session=session,
            codec=codec,
        )

    @property
    def session(self) -> Session:
        return self.engine.session

    @property
    def client_id(self) -> str | None:
        """Client id assigned by the last successful handshake."""
        return self.engine.session.client_id

    @property
    def state(self) -> EngineState:
        """Current engine state."""
        return self.engine.state

    def on_event(self, handler: Callable[[EngineEvent], None]) -> None:
        """Register a handler for engine events."""
        self.engine.on_event(handler)

    def on_state_change(self, callback: StateTransitionCallback) -> None:
        """Register callback for engine state changes."""
        self.engine.on_state_change(callback)

    async def open(self) -> None:
        """Prepare the transport."""
        await self.transport.connect()

    async def close(self) -> None:
        """Release the transport. The session is left as is."""
        await self.transport.disconnect()

    async def handshake(self) -> list[Response]:
        """Negotiate a new session and bind its client id and cookies."""
        responses = await self.engine.handshake()
        logger.info(f"Handshake complete, client id {self.client_id}")
        return responses

    async def connect(self) -> list[Response]:
        """
        Send ``/meta/connect``.

        Returns:
            The connect acknowledgement and any deliveries in the batch.
        """
        return await self.engine.perform(lambda client_id: ConnectRequest(client_id=client_id))

    async def init(self) -> list[Response]:
        """Handshake followed by the first connect."""
        responses = await self.handshake()
        responses.extend(await self.connect())
        return responses

    async def subscribe(self, subscription: str) -> list[Response]:
        """Subscribe to a channel or channel pattern."""
        _check_channel(subscription)
        return await self.engine.perform(
            lambda client_id: SubscribeRequest(client_id=client_id, subscription=subscription)
        )

    async def unsubscribe(self, subscription: str) -> list[Response]:
        """Cancel a subscription."""
        _check_channel(subscription)
        return await self.engine.perform(
            lambda client_id: UnsubscribeRequest(client_id=client_id, subscription=subscription)
        )

    async def publish(self, channel: str, data: Any) -> list[Response]:
        """
        Publish ``data`` on ``channel``.

        Args:
            channel: Application channel; ``/meta/*`` is reserved.
            data: JSON-serializable payload, sent as is.
        """
        _check_channel(channel)
        if is_meta_channel(channel):
            raise ValueError(f"Cannot publish to meta channel: {channel}")
        return await self.engine.perform(
            lambda client_id: PublishRequest(channel=channel, client_id=client_id, data=data)
        )

    async def disconnect(self) -> list[Response]:
        """
        Send ``/meta/disconnect``; never retried.

        On success the session is forgotten and the client can handshake
        again.
        """
        responses = await self.engine.perform(
            lambda client_id: DisconnectRequest(client_id=client_id),
            follow_advice=False,
        )
        self.engine.reset()
        logger.info("Disconnected")
        return responses

    async def __aenter__(self) -> "CometdClient":
        """Async context manager entry."""
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
