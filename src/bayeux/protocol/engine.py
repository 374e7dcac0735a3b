"""Advice-driven reconnection engine."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from bayeux.config import CometdConfig
from bayeux.protocol.advice import Decision, budget_exhausted, decide, give_up_reason
from bayeux.protocol.codec import Codec, JSONCodec
from bayeux.protocol.errors import CometdError, ProtocolError, RetryExhausted, SessionError
from bayeux.protocol.events import EngineEvent, EngineEventType
from bayeux.protocol.messages import (
    HandshakeRequest,
    HandshakeResponse,
    Request,
    Response,
    error_of,
)
from bayeux.protocol.session import Session
from bayeux.protocol.state import EngineState, EngineStateMachine, StateTransitionCallback
from bayeux.transport.base import Transport

logger = logging.getLogger(__name__)

# Builds the request of a logical operation for the current client id
RequestFactory = Callable[[str], Request]

HANDSHAKE_MISSING = "handshake response missing"

_IN_FLIGHT = (
    EngineState.AWAITING_HANDSHAKE,
    EngineState.AWAITING_OPERATION,
    EngineState.RETRYING,
)


@dataclass
class Exchange:
    """One classified round trip."""

    responses: list[Response]
    cookies: list[str]


class ReconnectionEngine:
    """
    Drives handshake, operation and retry sequencing for one session.

    Every top-level call is a bounded loop of send, classify and decide.
    Failed responses are resolved with the server's advice until the
    session's retry budget is spent; transport and parse failures are
    never retried.
    """

    def __init__(
        self,
        config: CometdConfig,
        transport: Transport,
        session: Session | None = None,
        codec: Codec | None = None,
    ):
        """
        Initialize the engine.

        Args:
            config: Client configuration (endpoint, credentials, budget).
            transport: Transport used for every exchange.
            session: Session to drive; a fresh one by default. Its retry
                budget must match ``config.max_retries``.
            codec: Serialization collaborator; orjson-backed by default.

        Raises:
            ValueError: If the session's budget differs from the config's.
        """
        if session is not None and session.max_retries != config.max_retries:
            raise ValueError(
                f"Session max_retries ({session.max_retries}) does not match "
                f"config max_retries ({config.max_retries})"
            )
        self.config = config
        self.transport = transport
        self.session = session or Session(max_retries=config.max_retries)
        self.codec = codec or JSONCodec()
        self._state = EngineStateMachine()
        self._event_handlers: list[Callable[[EngineEvent], None]] = []

    @property
    def state(self) -> EngineState:
        """Current engine state."""
        return self._state.state

    def on_event(self, handler: Callable[[EngineEvent], None]) -> None:
        """Register a handler for engine events."""
        self._event_handlers.append(handler)

    def on_state_change(self, callback: StateTransitionCallback) -> None:
        """Register callback for state changes."""
        self._state.on_transition(callback)

    def build_headers(self) -> dict[str, str]:
        """Headers sent with every exchange."""
        headers = {
            "Authorization": self.config.authorization,
            "Content-Type": "application/json",
        }
        cookies = self.session.cookies
        if cookies:
            headers["Cookie"] = "; ".join(cookies)
        return headers

    def build_handshake(self) -> HandshakeRequest:
        return HandshakeRequest(
            minimum_version=self.config.minimum_version,
            ext=self.config.ext,
        )

    async def handshake(self) -> list[Response]:
        """
        Negotiate a session, following advice on failure.

        Returns:
            Responses accepted during the handshake.

        Raises:
            ProtocolError: The server refused and advised no reconnection.
            RetryExhausted: The retry budget ran out.
        """
        self._recover()
        self.session.begin_operation()
        try:
            return await self._handshake_until_bound()
        finally:
            self.session.end_operation()

    async def perform(
        self,
        build: RequestFactory,
        follow_advice: bool = True,
    ) -> list[Response]:
        """
        Run a session operation, following advice on failure.

        Args:
            build: Builds the operation's request for a client id. It is
                called again for every retry so a re-handshake's new
                client id is used.
            follow_advice: False for single-attempt operations.

        Returns:
            Responses accepted across all attempts.

        Raises:
            SessionError: No session is bound; nothing is sent.
            ProtocolError: The server refused and no retry is possible.
            RetryExhausted: The retry budget ran out.
        """
        client_id = self.session.client_id
        if client_id is None:
            raise SessionError("No client id set; handshake first")

        self._recover()
        self.session.begin_operation()
        accepted: list[Response] = []
        try:
            while True:
                self._state.transition(EngineState.AWAITING_OPERATION)
                exchange = await self._exchange(build(client_id))
                failure = self._scan(exchange.responses, accepted)
                if failure is None:
                    self._state.transition(EngineState.OPERATION_SUCCEEDED)
                    return accepted

                if not follow_advice:
                    self._state.transition(EngineState.FAILED)
                    raise ProtocolError(
                        error_of(failure) or f"{failure.channel} failed",
                        response=failure,
                        advice=failure.advice,
                    )

                decision = self._consult(failure)
                if decision is Decision.FOLLOW_HANDSHAKE:
                    # Same budget unit as the operation retry that follows
                    await self._handshake_until_bound()
                    client_id = self.session.client_id
        finally:
            self.session.end_operation()

    def reset(self) -> None:
        """Forget the session and return to IDLE."""
        self.session.reset()
        self._state.reset()

    async def _handshake_until_bound(self) -> list[Response]:
        accepted: list[Response] = []
        while True:
            self._state.transition(EngineState.AWAITING_HANDSHAKE)
            exchange = await self._exchange(self.build_handshake())
            failure = self._scan(exchange.responses, accepted)
            if failure is None:
                self._bind(exchange)
                return accepted
            self._consult(failure)

    async def _exchange(self, request: Request) -> Exchange:
        """Send one request and classify the reply batch."""
        retry_count = self.session.retry_count
        self._emit(
            EngineEventType.EXCHANGE_STARTED,
            channel=request.channel,
            data={"retry_count": retry_count},
        )

        try:
            if not self.transport.is_connected():
                await self.transport.connect()
            body = self.codec.encode(request)
            reply = await self.transport.send(self.config.url, self.build_headers(), body)
            responses = self.codec.decode_batch(reply.text)
        except Exception as e:
            # Every exchange failure is terminal
            self._state.transition(EngineState.FAILED)
            self._emit(EngineEventType.EXCHANGE_FAILED, channel=request.channel, error=e)
            if not isinstance(e, CometdError):
                logger.error(f"Unexpected error during {request.channel} exchange: {e}")
            raise

        self._emit(
            EngineEventType.EXCHANGE_COMPLETED,
            channel=request.channel,
            data={"status": reply.status_code, "responses": len(responses)},
        )
        return Exchange(responses=responses, cookies=reply.cookies)

    def _scan(self, responses: list[Response], accepted: list[Response]) -> Response | None:
        """Accept responses in order up to the first failure, which is returned."""
        for response in responses:
            if response.is_failure:
                return response
            accepted.append(response)
        return None

    def _consult(self, failure: Response) -> Decision:
        """Count the failure and ask the advice what to do; raise on give-up."""
        retry_count = self.session.record_retry()
        max_retries = self.session.max_retries
        advice = failure.advice
        decision = decide(advice, retry_count, max_retries)

        self._emit(
            EngineEventType.RETRY_DECISION,
            channel=failure.channel,
            data={
                "decision": decision.name,
                "retry_count": retry_count,
                "max_retries": max_retries,
                "error": error_of(failure),
            },
        )

        if decision is Decision.GIVE_UP:
            self._state.transition(EngineState.FAILED)
            message = give_up_reason(error_of(failure), advice, retry_count, max_retries)
            if budget_exhausted(advice, retry_count, max_retries):
                raise RetryExhausted(
                    message,
                    response=failure,
                    advice=advice,
                    retry_count=retry_count - 1,
                )
            raise ProtocolError(message, response=failure, advice=advice)

        logger.info(
            f"{failure.channel} failed ({error_of(failure)}), "
            f"{decision} {retry_count}/{max_retries}"
        )
        self._state.transition(EngineState.RETRYING)
        return decision

    def _bind(self, exchange: Exchange) -> None:
        reply = next(
            (r for r in exchange.responses if isinstance(r, HandshakeResponse)),
            None,
        )
        if reply is None:
            self._state.transition(EngineState.FAILED)
            raise ProtocolError(HANDSHAKE_MISSING)

        self.session.bind(reply.client_id, exchange.cookies)
        self._state.transition(EngineState.HANDSHAKED)
        self._emit(
            EngineEventType.SESSION_BOUND,
            channel=reply.channel,
            data={"client_id": reply.client_id, "cookies": len(exchange.cookies)},
        )

    def _recover(self) -> None:
        """Leave a state abandoned by an interrupted call."""
        state = self._state.state
        if state in _IN_FLIGHT:
            logger.warning(f"Previous exchange interrupted in {state}")
            self._state.force_state(EngineState.FAILED)
        elif state == EngineState.IDLE and self.session.is_bound:
            self._state.force_state(EngineState.HANDSHAKED)

    def _emit(
        self,
        event_type: EngineEventType,
        channel: str | None = None,
        data: dict[str, Any] | None = None,
        error: Exception | None = None,
    ) -> None:
        event = EngineEvent(
            type=event_type,
            timestamp=time.time(),
            channel=channel,
            data=data,
            error=error,
        )
        for handler in self._event_handlers:
            try:
                handler(event)
            except Exception:
                # Don't let handler errors affect the exchange
                pass
