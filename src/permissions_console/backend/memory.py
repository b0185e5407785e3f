"""In-memory ledger backend.

Keeps tokens, features and delegates in process. Mutations return jobs that
change nothing until run, like the real transaction queues. Used by the test
suite and by the CLI's `--backend memory` mode.
"""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from permissions_console.backend.interfaces import Job, LedgerBackend
from permissions_console.domain.delegates import Delegate, Role, SecurityToken
from permissions_console.domain.features import PERMISSIONS_FEATURE, Feature
from permissions_console.exceptions import (
    BackendError,
    FeatureNotEnabledError,
    JobExecutionError,
    TokenNotFoundError,
)
from permissions_console.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_ROLES = (
    Role.PERMISSIONS_ADMINISTRATOR,
    Role.PERMISSIONS_OPERATOR,
    Role.SHAREHOLDERS_ADMINISTRATOR,
    Role.SHAREHOLDERS_OPERATOR,
)


@dataclass
class _TokenRecord:
    token: SecurityToken
    features: dict[str, bool]
    grantable_roles: tuple[str, ...]
    # address -> (description, roles in grant order)
    delegates: dict[str, tuple[str, list[str]]] = field(default_factory=dict)


class MemoryJob(Job):
    def __init__(
        self, backend: InMemoryLedgerBackend, job_id: str, apply: Callable[[], None]
    ) -> None:
        self._backend = backend
        self._id = job_id
        self._apply = apply
        self.completed = False

    @property
    def id(self) -> str:
        return self._id

    async def run(self) -> None:
        try:
            await self._backend._enter("run")
            self._apply()
        except BackendError as exc:
            raise JobExecutionError(self._id, exc.message) from exc
        self.completed = True
        logger.debug("memory_job_completed", job_id=self._id)


class InMemoryLedgerBackend(LedgerBackend):
    def __init__(self, *, latency: float = 0.0) -> None:
        self._tokens: dict[str, _TokenRecord] = {}
        self._failures: dict[str, list[Exception]] = {}
        self._job_ids = itertools.count(1)
        self.latency = latency
        self.calls: list[str] = []

    # === Seeding / test hooks ===

    def add_token(
        self,
        token: SecurityToken,
        features: Mapping[str, bool] | None = None,
        *,
        grantable_roles: Iterable[str] = DEFAULT_ROLES,
        delegates: Iterable[Delegate] = (),
    ) -> SecurityToken:
        if features is None:
            features = {feature.value: False for feature in Feature}
        record = _TokenRecord(
            token=token,
            features=dict(features),
            grantable_roles=tuple(grantable_roles),
        )
        for delegate in delegates:
            record.delegates[delegate.address] = (
                delegate.description,
                list(delegate.roles),
            )
        self._tokens[token.key] = record
        return token

    def fail_next(self, method: str, error: Exception | str) -> None:
        """Make the next call to `method` (or job `run`) raise `error`."""
        if isinstance(error, str):
            error = BackendError(error)
        self._failures.setdefault(method, []).append(error)

    async def _enter(self, method: str) -> None:
        self.calls.append(method)
        if self.latency:
            await asyncio.sleep(self.latency)
        pending = self._failures.get(method)
        if pending:
            raise pending.pop(0)

    def _record(self, token: SecurityToken) -> _TokenRecord:
        try:
            return self._tokens[token.key]
        except KeyError:
            raise TokenNotFoundError(token.symbol) from None

    def _require_permissions(self, record: _TokenRecord) -> None:
        if not record.features.get(PERMISSIONS_FEATURE):
            raise FeatureNotEnabledError(record.token.symbol, PERMISSIONS_FEATURE)

    def _job(self, apply: Callable[[], None]) -> MemoryJob:
        job = MemoryJob(self, f"queue-{next(self._job_ids)}", apply)
        logger.debug("memory_job_created", job_id=job.id)
        return job

    # === Queries ===

    async def list_tokens(self) -> Sequence[SecurityToken]:
        return tuple(record.token for record in self._tokens.values())

    async def get_feature_status(self, token: SecurityToken) -> dict[str, bool]:
        await self._enter("get_feature_status")
        return dict(self._record(token).features)

    async def get_grantable_roles(self, token: SecurityToken) -> tuple[str, ...]:
        await self._enter("get_grantable_roles")
        record = self._record(token)
        self._require_permissions(record)
        return record.grantable_roles

    async def get_all_delegates(self, token: SecurityToken) -> tuple[Delegate, ...]:
        await self._enter("get_all_delegates")
        record = self._record(token)
        self._require_permissions(record)
        return tuple(
            Delegate(address=address, description=description, roles=tuple(roles))
            for address, (description, roles) in record.delegates.items()
            if roles
        )

    # === Mutations ===

    async def enable_feature(self, token: SecurityToken, feature: str) -> MemoryJob:
        await self._enter("enable_feature")
        record = self._record(token)

        def apply() -> None:
            record.features[feature] = True

        return self._job(apply)

    async def disable_feature(self, token: SecurityToken, feature: str) -> MemoryJob:
        await self._enter("disable_feature")
        record = self._record(token)

        def apply() -> None:
            record.features[feature] = False

        return self._job(apply)

    async def assign_role(
        self, token: SecurityToken, address: str, role: str, description: str
    ) -> MemoryJob:
        await self._enter("assign_role")
        record = self._record(token)
        self._require_permissions(record)

        def apply() -> None:
            current_description, roles = record.delegates.get(address, ("", []))
            if role in roles:
                raise BackendError(f"{address} already has the {role} role")
            record.delegates[address] = (description or current_description, roles + [role])

        return self._job(apply)

    async def revoke_role(
        self, token: SecurityToken, address: str, role: str
    ) -> MemoryJob:
        await self._enter("revoke_role")
        record = self._record(token)
        self._require_permissions(record)

        def apply() -> None:
            description, roles = record.delegates.get(address, ("", []))
            if role not in roles:
                raise BackendError(f"{address} does not have the {role} role")
            record.delegates[address] = (description, [r for r in roles if r != role])

        return self._job(apply)
