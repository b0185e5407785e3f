import re
from collections.abc import Iterable
from dataclasses import dataclass, field

_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


class Role:
    """Roles the ledger grants to delegates."""

    PERMISSIONS_ADMINISTRATOR = "PermissionsAdministrator"
    PERMISSIONS_OPERATOR = "PermissionsOperator"
    SHAREHOLDERS_ADMINISTRATOR = "ShareholdersAdministrator"
    SHAREHOLDERS_OPERATOR = "ShareholdersOperator"
    DIVIDENDS_ADMINISTRATOR = "DividendsAdministrator"
    DIVIDENDS_OPERATOR = "DividendsOperator"
    TIERED_STO_OPERATOR = "TieredStoOperator"


@dataclass(frozen=True, slots=True)
class SecurityToken:
    symbol: str
    address: str = ""
    name: str = ""

    @property
    def key(self) -> str:
        return self.symbol.lower()


@dataclass(frozen=True, slots=True)
class Delegate:
    address: str
    description: str = ""
    roles: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: dict) -> "Delegate":
        return cls(
            address=data["address"],
            description=data.get("description") or "",
            roles=tuple(data.get("roles") or ()),
        )


@dataclass(frozen=True, slots=True)
class RoleRecord:
    address: str
    description: str
    role: str


def flatten_delegates(delegates: Iterable[Delegate]) -> tuple[RoleRecord, ...]:
    """One record per (delegate, role) pair, in delegate then role order."""
    return tuple(
        RoleRecord(address=delegate.address, description=delegate.description, role=role)
        for delegate in delegates
        for role in delegate.roles
    )


def is_valid_address(address: str) -> bool:
    return bool(_ADDRESS_PATTERN.match(address))
