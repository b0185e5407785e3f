"""Application state for the permissions console.

The store owns exactly one ApplicationState at a time; the reducer produces
a new value for every action instead of mutating the old one.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields

from permissions_console.domain.delegates import Delegate, RoleRecord


@dataclass(frozen=True, slots=True)
class ApplicationState:
    """Single source of truth for the console.

    Token-scoped fields (features, pm_enabled, available_roles, delegates,
    records) are None until loaded for the currently selected token.
    """

    loading: bool = False
    loading_message: str = ""
    error: str | None = None

    pm_enabled: bool | None = None
    features: Mapping[str, bool] | None = None
    available_roles: tuple[str, ...] | None = None
    delegates: tuple[Delegate, ...] | None = None
    records: tuple[RoleRecord, ...] | None = None


# Fields cleared when the token selection changes
TOKEN_SCOPED_FIELDS = frozenset(
    {"delegates", "records", "pm_enabled", "error", "features"}
)

STATUS_FIELDS = frozenset({"loading", "loading_message", "error"})

STATE_FIELDS = frozenset(f.name for f in fields(ApplicationState))

# Fields a completion payload may set
DATA_FIELDS = STATE_FIELDS - STATUS_FIELDS
