from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence

from permissions_console.domain.delegates import Delegate, SecurityToken


class Job(ABC):
    """A submitted ledger operation that takes effect only once run."""

    @property
    @abstractmethod
    def id(self) -> str:
        pass

    @abstractmethod
    async def run(self) -> None:
        """Complete when the operation is durably applied; raise on failure."""


class LedgerBackend(ABC):
    @abstractmethod
    async def get_feature_status(self, token: SecurityToken) -> Mapping[str, bool]:
        pass

    @abstractmethod
    async def get_grantable_roles(self, token: SecurityToken) -> Sequence[str]:
        pass

    @abstractmethod
    async def get_all_delegates(self, token: SecurityToken) -> Sequence[Delegate]:
        pass

    @abstractmethod
    async def enable_feature(self, token: SecurityToken, feature: str) -> Job:
        pass

    @abstractmethod
    async def disable_feature(self, token: SecurityToken, feature: str) -> Job:
        pass

    @abstractmethod
    async def assign_role(
        self, token: SecurityToken, address: str, role: str, description: str
    ) -> Job:
        pass

    @abstractmethod
    async def revoke_role(self, token: SecurityToken, address: str, role: str) -> Job:
        pass

    async def list_tokens(self) -> Sequence[SecurityToken]:
        """Tokens the connected wallet can administer."""
        return ()

    async def aclose(self) -> None:
        """Release any connections held by the backend."""
