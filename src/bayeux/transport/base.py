"""Abstract base transport and error types."""

from abc import ABC, abstractmethod
from typing import Callable

from bayeux.protocol.errors import CometdError
from bayeux.transport.types import TransportConfig, TransportEvent, TransportReply


class TransportError(CometdError):
    """Request could not be sent or no body was received."""

    pass


class ConnectionError(TransportError):
    """Failed to establish connection to server."""

    pass


class TimeoutError(TransportError):
    """Request or connection timed out."""

    pass


class Transport(ABC):
    """
    Abstract base class for Bayeux transports.

    A transport performs one request/response exchange at a time. It
    never inspects message content; headers and body are supplied by
    the engine.
    """

    def __init__(self, config: TransportConfig):
        self.config = config
        self._event_handlers: list[Callable[[TransportEvent], None]] = []

    def on_event(self, handler: Callable[[TransportEvent], None]) -> None:
        """
        Register an event handler for transport events.

        Args:
            handler: Callback invoked when transport events occur.
        """
        self._event_handlers.append(handler)

    def _emit_event(self, event: TransportEvent) -> None:
        """Emit an event to all registered handlers."""
        for handler in self._event_handlers:
            try:
                handler(event)
            except Exception:
                # Don't let handler errors affect transport
                pass

    @abstractmethod
    async def connect(self) -> None:
        """
        Prepare the transport for exchanges.

        Raises:
            ConnectionError: If the transport cannot be initialized.
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """
        Release all resources.

        This method should be safe to call multiple times.
        """
        pass

    @abstractmethod
    async def send(self, url: str, headers: dict[str, str], body: bytes) -> TransportReply:
        """
        POST a request body and return the raw reply.

        The HTTP status is reported but not judged; a non-2xx reply
        with a Bayeux body is still a reply.

        Args:
            url: Endpoint URL.
            headers: Request headers built by the engine.
            body: Encoded request.

        Returns:
            The reply text and the cookies it set.

        Raises:
            TransportError: If no reply body could be obtained.
        """
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """
        Check if transport is ready for exchanges.

        Returns:
            True if connected and ready for communication.
        """
        pass

    async def __aenter__(self) -> "Transport":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.disconnect()
