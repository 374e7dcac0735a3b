"""HTTP long-polling transport built on httpx."""

from __future__ import annotations

import logging
import time

import httpx

from bayeux.transport.base import (
    Transport,
    TransportError,
    ConnectionError,
    TimeoutError,
)
from bayeux.transport.types import (
    TransportConfig,
    TransportEvent,
    TransportEventType,
    TransportReply,
)

logger = logging.getLogger(__name__)


class HTTPTransport(Transport):
    """
    Long-polling transport: one POST per Bayeux exchange.

    Cookie persistence is owned by the session, not by httpx: cookies set
    by a reply are handed back to the caller and the client-side jar is
    cleared after every exchange.
    """

    def __init__(
        self,
        config: TransportConfig,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize HTTP transport.

        Args:
            config: Transport configuration.
            http_transport: Optional httpx transport, e.g. ``httpx.MockTransport``.
        """
        super().__init__(config)
        self._http_transport = http_transport
        self._client: httpx.AsyncClient | None = None
        self._connected: bool = False

    async def connect(self) -> None:
        """Create the underlying httpx client."""
        if self._connected:
            return

        self._emit_event(
            TransportEvent(
                type=TransportEventType.CONNECTING,
                timestamp=time.time(),
                data={"url": self.config.url},
            )
        )

        try:
            timeout = httpx.Timeout(
                connect=self.config.connect_timeout,
                read=self.config.timeout,
                write=self.config.timeout,
                pool=self.config.timeout,
            )

            self._client = httpx.AsyncClient(
                timeout=timeout,
                headers=self.config.headers,
                verify=self.config.verify_ssl,
                transport=self._http_transport,
            )
            self._connected = True

            self._emit_event(
                TransportEvent(
                    type=TransportEventType.CONNECTED,
                    timestamp=time.time(),
                )
            )

        except Exception as e:
            raise ConnectionError(f"Failed to initialize HTTP client: {e}", cause=e)

    async def disconnect(self) -> None:
        """Close the httpx client."""
        if not self._connected and self._client is None:
            return

        self._emit_event(
            TransportEvent(
                type=TransportEventType.DISCONNECTING,
                timestamp=time.time(),
            )
        )

        if self._client:
            await self._client.aclose()
            self._client = None

        self._connected = False

        self._emit_event(
            TransportEvent(
                type=TransportEventType.DISCONNECTED,
                timestamp=time.time(),
            )
        )

    async def send(self, url: str, headers: dict[str, str], body: bytes) -> TransportReply:
        """POST the body and return the reply text and cookies."""
        if not self._client or not self._connected:
            raise TransportError("Transport not connected")

        self._emit_event(
            TransportEvent(
                type=TransportEventType.MESSAGE_SENT,
                timestamp=time.time(),
                data={"url": url, "bytes": len(body)},
            )
        )

        try:
            response = await self._client.post(url, content=body, headers=headers)
        except httpx.TimeoutException as e:
            self._emit_error(e)
            raise TimeoutError(f"Request timed out: {e}", cause=e)
        except httpx.ConnectError as e:
            self._emit_error(e)
            raise ConnectionError(f"Could not send request to server: {e}", cause=e)
        except httpx.HTTPError as e:
            self._emit_error(e)
            raise TransportError(f"HTTP error: {e}", cause=e)
        except (httpx.InvalidURL, httpx.StreamError, UnicodeEncodeError) as e:
            # Request could not be built (bad URL, non-ASCII header value)
            self._emit_error(e)
            raise TransportError(f"Invalid request: {e}", cause=e)
        finally:
            self._client.cookies.clear()

        cookies = [f"{cookie.name}={cookie.value}" for cookie in response.cookies.jar]

        text = response.text
        if response.status_code >= 400:
            logger.debug(f"HTTP {response.status_code} from {url}: {text[:200]}")

        self._emit_event(
            TransportEvent(
                type=TransportEventType.MESSAGE_RECEIVED,
                timestamp=time.time(),
                data={"status": response.status_code, "bytes": len(response.content)},
            )
        )

        return TransportReply(
            status_code=response.status_code,
            text=text,
            cookies=cookies,
        )

    def is_connected(self) -> bool:
        """Check if transport is connected."""
        return self._connected

    def _emit_error(self, error: Exception) -> None:
        self._emit_event(
            TransportEvent(
                type=TransportEventType.ERROR,
                timestamp=time.time(),
                error=error,
            )
        )
