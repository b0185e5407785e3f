"""Pure transition function over ApplicationState."""

from __future__ import annotations

from dataclasses import replace

from permissions_console.domain.state import ApplicationState
from permissions_console.exceptions import UnrecognizedActionError
from permissions_console.store.actions import (
    Action,
    AsyncComplete,
    AsyncError,
    AsyncStart,
    DelegatesLoaded,
    Error,
    FeatureStatusLoaded,
    LoadingSettled,
    MutationAcked,
    TokenSelected,
)


def _payload_changes(action: AsyncComplete) -> dict:
    payload = action.payload
    if payload is None:
        return {}
    if isinstance(payload, (FeatureStatusLoaded, DelegatesLoaded, MutationAcked)):
        return payload.changes()
    raise UnrecognizedActionError(payload)


def reducer(state: ApplicationState, action: Action) -> ApplicationState:
    """Return the state that follows `state` after `action`.

    Never performs I/O. Raises UnrecognizedActionError for anything that is
    not a known action; the error is meant to surface wiring bugs and is
    not caught anywhere in the console.
    """
    if isinstance(action, AsyncStart):
        return replace(
            state, loading=True, loading_message=action.message, error=None
        )

    if isinstance(action, AsyncComplete):
        return replace(
            state,
            **_payload_changes(action),
            loading=False,
            loading_message="",
            error=None,
        )

    if isinstance(action, (AsyncError, Error)):
        return replace(
            state, loading=False, loading_message="", error=action.message
        )

    if isinstance(action, TokenSelected):
        return replace(
            state,
            delegates=None,
            records=None,
            pm_enabled=None,
            error=None,
            features=None,
        )

    if isinstance(action, LoadingSettled):
        return replace(state, loading=False, loading_message="")

    raise UnrecognizedActionError(action)
