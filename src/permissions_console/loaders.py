"""Loaders that populate token-scoped state from the ledger backend."""

from __future__ import annotations

from permissions_console.backend.interfaces import LedgerBackend
from permissions_console.domain.delegates import SecurityToken, flatten_delegates
from permissions_console.domain.features import PERMISSIONS_FEATURE
from permissions_console.domain.state import ApplicationState
from permissions_console.logging_config import get_logger
from permissions_console.store.actions import DelegatesLoaded, FeatureStatusLoaded

logger = get_logger(__name__)

FEATURE_STATUS = "feature_status"
DELEGATES = "delegates"


async def load_feature_status(
    backend: LedgerBackend, token: SecurityToken
) -> FeatureStatusLoaded:
    """Fetch feature enablement, splitting out the permissions feature.

    Grantable roles are only fetched when permissions are enabled; the
    backend rejects the call otherwise.
    """
    features = dict(await backend.get_feature_status(token))
    pm_enabled = bool(features.pop(PERMISSIONS_FEATURE, False))

    available_roles: tuple[str, ...] = ()
    if pm_enabled:
        available_roles = tuple(await backend.get_grantable_roles(token))

    logger.debug(
        "feature_status_loaded",
        token=token.symbol,
        pm_enabled=pm_enabled,
        feature_count=len(features),
        role_count=len(available_roles),
    )
    return FeatureStatusLoaded(
        features=features, pm_enabled=pm_enabled, available_roles=available_roles
    )


async def load_delegates(
    backend: LedgerBackend, token: SecurityToken
) -> DelegatesLoaded:
    delegates = tuple(await backend.get_all_delegates(token))
    records = flatten_delegates(delegates)
    logger.debug(
        "delegates_loaded",
        token=token.symbol,
        delegate_count=len(delegates),
        record_count=len(records),
    )
    return DelegatesLoaded(delegates=delegates, records=records)


def needs_feature_status(
    state: ApplicationState, token: SecurityToken | None
) -> bool:
    return token is not None and state.features is None


def needs_delegates(state: ApplicationState, token: SecurityToken | None) -> bool:
    return token is not None and state.pm_enabled is True and state.records is None
