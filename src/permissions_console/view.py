"""Read-only view model derived from ApplicationState.

Front ends (the CLI here) render a ConsoleView; they never read the store
fields directly.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from permissions_console.domain.delegates import RoleRecord, SecurityToken
from permissions_console.domain.features import PERMISSIONS_FEATURE, feature_label
from permissions_console.domain.state import ApplicationState

INITIALIZING_MESSAGE = "Initializing ledger backend"
LOADING_TOKENS_MESSAGE = "Loading your security tokens"


@dataclass(frozen=True, slots=True)
class FeatureRow:
    feature: str
    label: str
    enabled: bool


@dataclass(frozen=True, slots=True)
class ConsoleView:
    loading: bool
    loading_message: str
    error: str | None
    token: SecurityToken | None
    show_features: bool
    feature_rows: tuple[FeatureRow, ...]
    show_delegates: bool
    available_roles: tuple[str, ...]
    delegate_rows: tuple[RoleRecord, ...]


def derive_view(
    state: ApplicationState,
    *,
    backend_ready: bool = True,
    tokens: Sequence[SecurityToken] = (),
    token: SecurityToken | None = None,
    connection_error: str | None = None,
) -> ConsoleView:
    loading = state.loading
    loading_message = state.loading_message
    error = state.error or connection_error

    if not error and not loading_message:
        if not backend_ready:
            loading, loading_message = True, INITIALIZING_MESSAGE
        elif not tokens:
            loading, loading_message = True, LOADING_TOKENS_MESSAGE

    show_features = token is not None and state.features is not None
    feature_rows: tuple[FeatureRow, ...] = ()
    if show_features:
        rows = [
            FeatureRow(PERMISSIONS_FEATURE, feature_label(PERMISSIONS_FEATURE), bool(state.pm_enabled))
        ]
        rows.extend(
            FeatureRow(name, feature_label(name), enabled)
            for name, enabled in sorted(state.features.items())
        )
        feature_rows = tuple(rows)

    show_delegates = (
        token is not None
        and state.available_roles is not None
        and state.records is not None
    )

    return ConsoleView(
        loading=loading,
        loading_message=loading_message,
        error=error,
        token=token,
        show_features=show_features,
        feature_rows=feature_rows,
        show_delegates=show_delegates,
        available_roles=state.available_roles or (),
        delegate_rows=state.records if show_delegates else (),
    )
