from permissions_console.domain import (
    ApplicationState,
    Delegate,
    Feature,
    Role,
    RoleRecord,
    SecurityToken,
)
from permissions_console.store import Store, reducer

__all__ = [
    "ApplicationState",
    "Delegate",
    "Feature",
    "Role",
    "RoleRecord",
    "SecurityToken",
    "Store",
    "reducer",
]

__version__ = "0.1.0"
