"""Server reconnection advice and the retry decision."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from bayeux.protocol.errors import ParseError

MAX_RETRIES_REACHED = "max retries reached"
RECONNECTION_DECLINED = "server declined reconnection"
NO_ADVICE = "no reconnection advice"


class Reconnect(Enum):
    """Values of the ``advice.reconnect`` field."""

    RETRY = "retry"
    HANDSHAKE = "handshake"
    NONE = "none"

    def __str__(self) -> str:
        return self.value


class Decision(Enum):
    """What the engine does after a failed response."""

    FOLLOW_HANDSHAKE = auto()
    FOLLOW_RETRY = auto()
    GIVE_UP = auto()

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Advice:
    """
    Reconnection advice attached to a response.

    ``timeout`` and ``interval`` are informational; the engine never sleeps
    on them.
    """

    reconnect: Reconnect | None = None
    timeout: int | None = None
    interval: int | None = None
    multiple_clients: bool | None = None
    hosts: list[str] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "Advice":
        """Create from the wire ``advice`` object."""
        if not isinstance(data, dict):
            raise ParseError("advice must be an object", payload=data)

        reconnect = None
        if data.get("reconnect") is not None:
            try:
                reconnect = Reconnect(data["reconnect"])
            except ValueError:
                raise ParseError(
                    f"Unknown reconnect advice: {data['reconnect']!r}",
                    payload=data,
                )

        return cls(
            reconnect=reconnect,
            timeout=data.get("timeout"),
            interval=data.get("interval"),
            multiple_clients=data.get("multiple-clients"),
            hosts=data.get("hosts"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to wire format."""
        result: dict[str, Any] = {}
        if self.reconnect is not None:
            result["reconnect"] = self.reconnect.value
        if self.timeout is not None:
            result["timeout"] = self.timeout
        if self.interval is not None:
            result["interval"] = self.interval
        if self.multiple_clients is not None:
            result["multiple-clients"] = self.multiple_clients
        if self.hosts is not None:
            result["hosts"] = self.hosts
        return result


def decide(advice: Advice | None, retry_count: int, max_retries: int) -> Decision:
    """
    Map server advice and the retry budget to an action.

    Args:
        advice: Advice from the failing response, if any.
        retry_count: Retry counter after counting the current failure.
        max_retries: Retry budget of the session.

    Returns:
        The decision for the engine.
    """
    if advice is None or advice.reconnect in (None, Reconnect.NONE):
        return Decision.GIVE_UP

    if retry_count > max_retries:
        return Decision.GIVE_UP

    if advice.reconnect is Reconnect.HANDSHAKE:
        return Decision.FOLLOW_HANDSHAKE
    return Decision.FOLLOW_RETRY


def budget_exhausted(advice: Advice | None, retry_count: int, max_retries: int) -> bool:
    """True when the server wanted a reconnect but the budget is spent."""
    if advice is None or advice.reconnect in (None, Reconnect.NONE):
        return False
    return retry_count > max_retries


def give_up_reason(
    error: str | None,
    advice: Advice | None,
    retry_count: int,
    max_retries: int,
) -> str:
    """Message surfaced to the caller when the engine gives up."""
    if error:
        return error
    if budget_exhausted(advice, retry_count, max_retries):
        return MAX_RETRIES_REACHED
    if advice is not None and advice.reconnect is Reconnect.NONE:
        return RECONNECTION_DECLINED
    return NO_ADVICE
