"""Engine events for observability."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any


class EngineEventType(Enum):
    """Points in the exchange cycle at which handlers are called."""

    EXCHANGE_STARTED = auto()
    EXCHANGE_COMPLETED = auto()
    EXCHANGE_FAILED = auto()
    RETRY_DECISION = auto()
    SESSION_BOUND = auto()


@dataclass
class EngineEvent:
    """Event emitted by the reconnection engine."""

    type: EngineEventType
    timestamp: float
    channel: str | None = None
    data: dict[str, Any] | None = None
    error: Exception | None = None

    def __str__(self) -> str:
        base = f"[{self.type.name}]"
        if self.channel:
            base += f" {self.channel}"
        if self.data:
            base += f" {self.data}"
        if self.error:
            base += f" error={self.error}"
        return base


class LoggingObserver:
    """
    Event handler that writes engine events to a logger.

    Register with ``client.on_event(LoggingObserver())``.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("bayeux.exchange")

    def __call__(self, event: EngineEvent) -> None:
        if event.type == EngineEventType.SESSION_BOUND:
            self.logger.info(str(event))
        elif event.type == EngineEventType.EXCHANGE_FAILED:
            self.logger.warning(str(event))
        elif event.type == EngineEventType.RETRY_DECISION and event.data and (
            event.data.get("decision") == "GIVE_UP"
        ):
            self.logger.warning(str(event))
        else:
            self.logger.debug(str(event))
