"""Pose selection as a pure state machine.

The displayed pose moves to the requested index as soon as a generation is
started (``Pending``) and either stays there (``Committed``) or returns to the
previous index (``RolledBack``). The reducer does no I/O, so every transition
can be tested without timing concerns.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Idle:
    index: int = 0


@dataclass(frozen=True)
class Pending:
    target: int
    previous: int


@dataclass(frozen=True)
class Committed:
    index: int


@dataclass(frozen=True)
class RolledBack:
    index: int
    message: str


PoseState = Union[Idle, Pending, Committed, RolledBack]


@dataclass(frozen=True)
class PoseRequested:
    target: int
    cached: bool


@dataclass(frozen=True)
class PoseResolved:
    pass


@dataclass(frozen=True)
class PoseFailed:
    message: str


@dataclass(frozen=True)
class PoseReset:
    index: int = 0


PoseEvent = Union[PoseRequested, PoseResolved, PoseFailed, PoseReset]


def displayed_index(state: PoseState) -> int:
    """Pose index the UI should show for a state."""
    if isinstance(state, Pending):
        return state.target
    return state.index


def reduce(state: PoseState, event: PoseEvent) -> PoseState:
    """Next pose state for an event. Events that do not apply leave the state unchanged."""
    if isinstance(event, PoseReset):
        return Idle(event.index)

    if isinstance(event, PoseRequested):
        if isinstance(state, Pending):
            return state  # one pose change at a time
        if event.cached:
            return Committed(event.target)
        return Pending(target=event.target, previous=displayed_index(state))

    if isinstance(state, Pending):
        if isinstance(event, PoseResolved):
            return Committed(state.target)
        if isinstance(event, PoseFailed):
            return RolledBack(state.previous, event.message)

    return state
