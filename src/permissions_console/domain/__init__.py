from permissions_console.domain.delegates import (
    Delegate,
    Role,
    RoleRecord,
    SecurityToken,
    flatten_delegates,
    is_valid_address,
)
from permissions_console.domain.features import (
    PERMISSIONS_FEATURE,
    Feature,
    feature_label,
)
from permissions_console.domain.state import ApplicationState

__all__ = [
    "PERMISSIONS_FEATURE",
    "ApplicationState",
    "Delegate",
    "Feature",
    "Role",
    "RoleRecord",
    "SecurityToken",
    "feature_label",
    "flatten_delegates",
    "is_valid_address",
]
