from unittest.mock import AsyncMock, MagicMock

from permissions_console.backend.memory import InMemoryLedgerBackend
from permissions_console.domain.delegates import Role
from permissions_console.domain.state import ApplicationState
from permissions_console.exceptions import JobExecutionError
from permissions_console.mutations import assign_role, revoke_role, toggle_permissions
from permissions_console.store.actions import (
    AsyncComplete,
    AsyncError,
    AsyncStart,
    MutationAcked,
    TokenSelected,
)
from permissions_console.store.store import Store

ADMIN_ADDRESS = "0x" + "a1" * 20
NEW_ADDRESS = "0x" + "c3" * 20


def _job(run_side_effect=None) -> MagicMock:
    job = MagicMock()
    job.id = "queue-1"
    job.run = AsyncMock(side_effect=run_side_effect)
    return job


class TestTogglePermissions:
    async def test_enable_runs_queue_then_invalidates(self, acme) -> None:
        job = _job()
        backend = AsyncMock()
        backend.enable_feature.return_value = job
        dispatched = []

        outcome = await toggle_permissions(dispatched.append, backend, acme, True)

        assert outcome.ok
        backend.enable_feature.assert_awaited_once_with(acme, "Permissions")
        backend.disable_feature.assert_not_awaited()
        job.run.assert_awaited_once()
        assert dispatched == [
            AsyncStart("Toggle role management"),
            AsyncComplete(MutationAcked("pm_enabled", False)),
            TokenSelected(),
        ]

    async def test_disable_uses_disable_feature(self, acme) -> None:
        backend = AsyncMock()
        backend.disable_feature.return_value = _job()
        dispatched = []

        await toggle_permissions(dispatched.append, backend, acme, False)

        backend.disable_feature.assert_awaited_once_with(acme, "Permissions")
        assert dispatched[1] == AsyncComplete(MutationAcked("pm_enabled", True))

    async def test_submission_alone_is_not_completion(self, acme) -> None:
        job = _job(run_side_effect=JobExecutionError("queue-1", "reverted"))
        backend = AsyncMock()
        backend.enable_feature.return_value = job
        dispatched = []

        outcome = await toggle_permissions(dispatched.append, backend, acme, True)

        assert not outcome.ok
        assert dispatched == [
            AsyncStart("Toggle role management"),
            AsyncError("Transaction queue queue-1 failed: reverted"),
        ]


class TestRoleMutations:
    async def test_assign_role_messages_and_effect(
        self, backend: InMemoryLedgerBackend, acme
    ) -> None:
        store = Store()

        outcome = await assign_role(
            store.dispatch, backend, acme, NEW_ADDRESS, Role.PERMISSIONS_OPERATOR, "Ops"
        )

        assert outcome.ok
        delegates = await backend.get_all_delegates(acme)
        assert any(
            d.address == NEW_ADDRESS and d.roles == (Role.PERMISSIONS_OPERATOR,)
            for d in delegates
        )
        assert store.state.loading is False
        assert store.state.error is None

    async def test_assign_message(self, acme) -> None:
        backend = AsyncMock()
        backend.assign_role.return_value = _job()
        dispatched = []

        await assign_role(dispatched.append, backend, acme, NEW_ADDRESS, "Admin", "desc")

        assert dispatched[0] == AsyncStart(f"Assigning Admin role to {NEW_ADDRESS}")
        backend.assign_role.assert_awaited_once_with(acme, NEW_ADDRESS, "Admin", "desc")

    async def test_revoke_role(self, backend: InMemoryLedgerBackend, acme) -> None:
        dispatched = []

        outcome = await revoke_role(
            dispatched.append, backend, acme, ADMIN_ADDRESS, Role.SHAREHOLDERS_OPERATOR
        )

        assert outcome.ok
        assert dispatched[0] == AsyncStart(
            f"Revoking {Role.SHAREHOLDERS_OPERATOR} role from {ADMIN_ADDRESS}"
        )
        assert dispatched[-1] == TokenSelected()
        delegates = await backend.get_all_delegates(acme)
        admin = next(d for d in delegates if d.address == ADMIN_ADDRESS)
        assert admin.roles == (Role.PERMISSIONS_ADMINISTRATOR,)

    async def test_failure_leaves_local_data_intact(
        self, backend: InMemoryLedgerBackend, acme, loaded_state: ApplicationState
    ) -> None:
        store = Store(loaded_state)
        backend.fail_next("run", "out of gas")

        outcome = await revoke_role(
            store.dispatch, backend, acme, ADMIN_ADDRESS, Role.PERMISSIONS_ADMINISTRATOR
        )

        assert not outcome.ok
        assert store.state.error == "Transaction queue queue-1 failed: out of gas"
        assert store.state.records == loaded_state.records
        assert store.state.pm_enabled is True
        delegates = await backend.get_all_delegates(acme)
        admin = next(d for d in delegates if d.address == ADMIN_ADDRESS)
        assert Role.PERMISSIONS_ADMINISTRATOR in admin.roles

    async def test_revoking_missing_role_fails_on_run(
        self, backend: InMemoryLedgerBackend, acme
    ) -> None:
        store = Store()

        outcome = await revoke_role(
            store.dispatch, backend, acme, NEW_ADDRESS, Role.PERMISSIONS_ADMINISTRATOR
        )

        assert not outcome.ok
        assert "does not have" in store.state.error
