"""Reconnection engine state machine."""

from enum import Enum, auto
from typing import Callable


class EngineState(Enum):
    """
    Engine lifecycle states.

    State transitions:
        IDLE -> AWAITING_HANDSHAKE -> HANDSHAKED -> AWAITING_OPERATION
                      ^    |                              |
                      |    v                              v
                      +- RETRYING <----------- OPERATION_SUCCEEDED
                                                  | FAILED

    FAILED is reached from either awaiting state when the engine gives up
    or the exchange itself fails. A bound session can leave FAILED with a
    new operation; reset() returns to IDLE.
    """

    IDLE = auto()
    AWAITING_HANDSHAKE = auto()
    HANDSHAKED = auto()
    AWAITING_OPERATION = auto()
    OPERATION_SUCCEEDED = auto()
    RETRYING = auto()
    FAILED = auto()

    def __str__(self) -> str:
        return self.name


class InvalidStateTransition(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_state: EngineState, to_state: EngineState):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid state transition: {from_state.name} -> {to_state.name}"
        )


# Type for state transition callbacks
StateTransitionCallback = Callable[[EngineState, EngineState], None]


class EngineStateMachine:
    """
    Tracks where the engine is in the handshake/operation cycle.

    Enforces valid state transitions and notifies listeners
    when transitions occur.
    """

    VALID_TRANSITIONS: dict[EngineState, list[EngineState]] = {
        EngineState.IDLE: [EngineState.AWAITING_HANDSHAKE],
        EngineState.AWAITING_HANDSHAKE: [
            EngineState.HANDSHAKED,
            EngineState.RETRYING,
            EngineState.FAILED,
        ],
        EngineState.HANDSHAKED: [
            EngineState.AWAITING_OPERATION,
            EngineState.AWAITING_HANDSHAKE,
        ],
        EngineState.AWAITING_OPERATION: [
            EngineState.OPERATION_SUCCEEDED,
            EngineState.RETRYING,
            EngineState.FAILED,
        ],
        EngineState.OPERATION_SUCCEEDED: [
            EngineState.AWAITING_OPERATION,
            EngineState.AWAITING_HANDSHAKE,
        ],
        EngineState.RETRYING: [
            EngineState.AWAITING_HANDSHAKE,
            EngineState.AWAITING_OPERATION,
        ],
        EngineState.FAILED: [
            EngineState.AWAITING_HANDSHAKE,
            EngineState.AWAITING_OPERATION,
        ],
    }

    def __init__(self, initial_state: EngineState = EngineState.IDLE):
        self._state = initial_state
        self._listeners: list[StateTransitionCallback] = []

    @property
    def state(self) -> EngineState:
        """Current engine state."""
        return self._state

    def can_transition_to(self, new_state: EngineState) -> bool:
        """Check if transition to new_state is valid."""
        return new_state in self.VALID_TRANSITIONS.get(self._state, [])

    def transition(self, new_state: EngineState) -> None:
        """
        Transition to a new state.

        Raises:
            InvalidStateTransition: If the transition is not valid.
        """
        if not self.can_transition_to(new_state):
            raise InvalidStateTransition(self._state, new_state)
        self._set(new_state)

    def force_state(self, new_state: EngineState) -> None:
        """
        Force transition to a state without validation.

        Only for recovering from an exchange that was interrupted
        (e.g. cancelled) while awaiting the transport.
        """
        self._set(new_state)

    def reset(self) -> None:
        """Return to IDLE, e.g. after a disconnect."""
        self._set(EngineState.IDLE)

    def on_transition(self, callback: StateTransitionCallback) -> None:
        """Register a callback for state transitions."""
        self._listeners.append(callback)

    def _set(self, new_state: EngineState) -> None:
        old_state = self._state
        self._state = new_state

        for listener in self._listeners:
            try:
                listener(old_state, new_state)
            except Exception:
                # Don't let listener errors affect state machine
                pass

    def __str__(self) -> str:
        return f"EngineStateMachine({self._state.name})"

    def __repr__(self) -> str:
        return f"EngineStateMachine(state={self._state!r})"
