"""Process Lifecycle States — explicit state machine for startup and shutdown.

Invariants:
    - Initializing → ValidatingConfig → Connecting → Listening → ShuttingDown → Terminated
    - Fatal is absorbing and reachable from every non-terminal state
    - Connecting → ShuttingDown only for the listener-bind-failure teardown
    - Terminated and Fatal have no outgoing transitions
    - Illegal moves raise InvalidTransitionError (never silently ignored)

Design Decisions:
    - Transition table as data: the whole lifecycle is readable in one place
    - history kept on the machine: tests assert ordering without mocking time
"""

from enum import Enum

from bookhive.core.errors import InvalidTransitionError


class LifecycleState(str, Enum):
    """Process lifecycle states."""
    INITIALIZING = "initializing"
    VALIDATING_CONFIG = "validating_config"
    CONNECTING = "connecting"
    LISTENING = "listening"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"
    FATAL = "fatal"


TRANSITIONS: dict[LifecycleState, frozenset[LifecycleState]] = {
    LifecycleState.INITIALIZING: frozenset({
        LifecycleState.VALIDATING_CONFIG, LifecycleState.FATAL,
    }),
    LifecycleState.VALIDATING_CONFIG: frozenset({
        LifecycleState.CONNECTING, LifecycleState.FATAL,
    }),
    LifecycleState.CONNECTING: frozenset({
        LifecycleState.LISTENING, LifecycleState.SHUTTING_DOWN,
        LifecycleState.FATAL,
    }),
    LifecycleState.LISTENING: frozenset({
        LifecycleState.SHUTTING_DOWN, LifecycleState.FATAL,
    }),
    LifecycleState.SHUTTING_DOWN: frozenset({
        LifecycleState.TERMINATED, LifecycleState.FATAL,
    }),
    LifecycleState.TERMINATED: frozenset(),
    LifecycleState.FATAL: frozenset(),
}


class LifecycleStateMachine:
    """Tracks the current lifecycle state and the path taken to reach it."""

    def __init__(self):
        self.state = LifecycleState.INITIALIZING
        self.history: list[LifecycleState] = [self.state]

    def can_advance(self, target: LifecycleState) -> bool:
        return target in TRANSITIONS[self.state]

    def advance(self, target: LifecycleState) -> LifecycleState:
        if not self.can_advance(target):
            raise InvalidTransitionError(self.state.value, target.value)
        self.state = target
        self.history.append(target)
        return target

    @property
    def is_final(self) -> bool:
        return not TRANSITIONS[self.state]
