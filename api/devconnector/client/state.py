"""Client-side profile state: a pure reducer and an owned store.

``reduce`` folds one action into a ``ProfileState`` and always returns a new
top-level state, or the very same state for actions it does not handle.
``ProfileStore`` holds the current state and notifies subscribers.
"""

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class ActionType(str, Enum):
    GET_PROFILE = "GET_PROFILE"
    GET_PROFILES = "GET_PROFILES"
    PROFILE_ERROR = "PROFILE_ERROR"
    CLEAR_PROFILE = "CLEAR_PROFILE"
    UPDATE_PROFILE = "UPDATE_PROFILE"
    GET_REPOS = "GET_REPOS"
    NO_REPOS = "NO_REPOS"


@dataclass(frozen=True)
class Action:
    type: ActionType | str
    payload: Any = None


@dataclass(frozen=True)
class ProfileState:
    profile: dict[str, Any] | None = None
    profiles: list[dict[str, Any]] = field(default_factory=list)
    repos: list[dict[str, Any]] = field(default_factory=list)
    loading: bool = True
    error: dict[str, Any] = field(default_factory=dict)


initial_state = ProfileState()


def reduce(state: ProfileState, action: Action) -> ProfileState:
    """Return the state that results from applying ``action``."""
    kind, payload = action.type, action.payload

    if kind in (ActionType.GET_PROFILE, ActionType.UPDATE_PROFILE):
        return replace(state, profile=payload, loading=False)
    if kind == ActionType.GET_PROFILES:
        return replace(state, profiles=payload, loading=False)
    if kind == ActionType.PROFILE_ERROR:
        return replace(state, error=payload, loading=False)
    if kind == ActionType.CLEAR_PROFILE:
        return replace(state, profile=None, repos=[], loading=False)
    if kind == ActionType.GET_REPOS:
        return replace(state, repos=payload, loading=False)
    if kind == ActionType.NO_REPOS:
        return replace(state, repos=[])
    return state


Listener = Callable[[ProfileState], None]


class ProfileStore:
    """Owns the current ``ProfileState`` and tells listeners when it changes."""

    def __init__(self, state: ProfileState | None = None):
        self._state = state if state is not None else initial_state
        self._listeners: list[Listener] = []

    @property
    def state(self) -> ProfileState:
        return self._state

    def dispatch(self, action: Action) -> ProfileState:
        new_state = reduce(self._state, action)
        if new_state is not self._state:
            self._state = new_state
            for listener in list(self._listeners):
                listener(new_state)
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; call the returned function to unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
