"""Client-side profile state and API actions."""

from devconnector.client.actions import ProfileActions
from devconnector.client.state import (
    Action,
    ActionType,
    ProfileState,
    ProfileStore,
    initial_state,
    reduce,
)

__all__ = [
    "Action",
    "ActionType",
    "ProfileState",
    "ProfileStore",
    "ProfileActions",
    "initial_state",
    "reduce",
]
