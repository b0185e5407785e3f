"""State machine: actions, the reducer, the store and the async envelope."""

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
    Ticket,
    TokenSelected,
)
from permissions_console.store.envelope import (
    Discarded,
    Failure,
    Outcome,
    Success,
    run_async,
)
from permissions_console.store.reducer import reducer
from permissions_console.store.store import Store

__all__ = [
    "Action",
    "AsyncComplete",
    "AsyncError",
    "AsyncStart",
    "DelegatesLoaded",
    "Discarded",
    "Error",
    "Failure",
    "FeatureStatusLoaded",
    "LoadingSettled",
    "MutationAcked",
    "Outcome",
    "Store",
    "Success",
    "Ticket",
    "TokenSelected",
    "reducer",
    "run_async",
]
