"""Actions consumed by the reducer.

Actions are transient and immutable. Terminal actions (AsyncComplete,
AsyncError) may carry the Ticket of the envelope that produced them so the
store can discard results that arrive after the selection moved on.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from permissions_console.domain.delegates import Delegate, RoleRecord
from permissions_console.domain.state import DATA_FIELDS
from permissions_console.exceptions import InvalidPayloadError


@dataclass(frozen=True, slots=True)
class Ticket:
    """Identity of one async envelope: token, resource and generation."""

    token_key: str | None
    resource: str
    generation: int


# =============================================================================
# Completion payloads
# =============================================================================


@dataclass(frozen=True, slots=True)
class FeatureStatusLoaded:
    features: Mapping[str, bool]
    pm_enabled: bool
    available_roles: tuple[str, ...]

    def changes(self) -> dict[str, Any]:
        return {
            "features": self.features,
            "pm_enabled": self.pm_enabled,
            "available_roles": self.available_roles,
        }


@dataclass(frozen=True, slots=True)
class DelegatesLoaded:
    delegates: tuple[Delegate, ...]
    records: tuple[RoleRecord, ...]

    def changes(self) -> dict[str, Any]:
        return {"delegates": self.delegates, "records": self.records}


@dataclass(frozen=True, slots=True)
class MutationAcked:
    """A single field whose new value is known once a mutation succeeds."""

    field: str
    value: Any

    def __post_init__(self) -> None:
        if self.field not in DATA_FIELDS:
            raise InvalidPayloadError(self.field)

    def changes(self) -> dict[str, Any]:
        return {self.field: self.value}


CompletionPayload = FeatureStatusLoaded | DelegatesLoaded | MutationAcked


# =============================================================================
# Actions
# =============================================================================


@dataclass(frozen=True, slots=True)
class AsyncStart:
    type: ClassVar[str] = "ASYNC_START"

    message: str = ""


@dataclass(frozen=True, slots=True)
class AsyncComplete:
    type: ClassVar[str] = "ASYNC_COMPLETE"

    payload: CompletionPayload | None = None
    ticket: Ticket | None = field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class AsyncError:
    type: ClassVar[str] = "ASYNC_ERROR"

    message: str
    ticket: Ticket | None = field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class Error:
    type: ClassVar[str] = "ERROR"

    message: str


@dataclass(frozen=True, slots=True)
class TokenSelected:
    type: ClassVar[str] = "TOKEN_SELECTED"


@dataclass(frozen=True, slots=True)
class LoadingSettled:
    """Releases the spinner after a discarded result; leaves error alone."""

    type: ClassVar[str] = "LOADING_SETTLED"


Action = AsyncStart | AsyncComplete | AsyncError | Error | TokenSelected | LoadingSettled

TERMINAL_ACTIONS = (AsyncComplete, AsyncError)
