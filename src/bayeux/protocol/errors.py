"""Protocol error types."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bayeux.protocol.advice import Advice


class CometdError(Exception):
    """Base exception for all Bayeux client errors."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ParseError(CometdError):
    """Response batch could not be decoded or classified."""

    def __init__(
        self,
        message: str,
        payload: Any = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause=cause)
        self.payload = payload


class EncodeError(CometdError):
    """Request could not be serialized, e.g. unsupported publish data."""

    pass


class SessionError(CometdError):
    """Operation attempted without a bound session."""

    pass


class ProtocolError(CometdError):
    """
    Server reported a failed exchange.

    The server's error string is kept on ``message`` unchanged so callers
    can match on Bayeux error codes such as ``402::Unknown client``.
    """

    def __init__(
        self,
        message: str,
        response: Any = None,
        advice: "Advice | None" = None,
    ):
        super().__init__(message)
        self.response = response
        self.advice = advice

    @property
    def channel(self) -> str | None:
        """Channel of the failing response, if any."""
        return getattr(self.response, "channel", None)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"channel={self.channel!r}, advice={self.advice!r})"
        )


class RetryExhausted(ProtocolError):
    """Server kept advising reconnection but the retry budget ran out."""

    def __init__(
        self,
        message: str,
        response: Any = None,
        advice: "Advice | None" = None,
        retry_count: int = 0,
    ):
        super().__init__(message, response=response, advice=advice)
        self.retry_count = retry_count
