"""Mutations: submit a transaction queue, wait for it, then invalidate.

Every mutation goes through submit_job, so they share one protocol:
AsyncStart, submit, run the queue to completion, AsyncComplete with any
directly known result, then TokenSelected to force a reload. On failure
only AsyncError is dispatched and local data is left as it was. A result
the store discards as stale triggers no reload.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from permissions_console.backend.interfaces import Job, LedgerBackend
from permissions_console.domain.delegates import SecurityToken
from permissions_console.domain.features import PERMISSIONS_FEATURE
from permissions_console.logging_config import get_logger
from permissions_console.store.actions import MutationAcked, Ticket, TokenSelected
from permissions_console.store.envelope import Outcome, run_async
from permissions_console.store.store import Dispatch

logger = get_logger(__name__)

MUTATION = "mutation"


async def submit_job(
    dispatch: Dispatch,
    submit: Callable[[], Awaitable[Job]],
    message: str,
    *,
    ack: MutationAcked | None = None,
    ticket: Ticket | None = None,
    is_discarded: Callable[[Ticket], bool] | None = None,
) -> Outcome:
    async def operation() -> MutationAcked | None:
        job = await submit()
        logger.info("job_running", job_id=job.id, operation=message)
        await job.run()
        return ack

    return await run_async(
        dispatch,
        operation,
        message,
        ticket=ticket,
        follow_up=(TokenSelected(),),
        is_discarded=is_discarded,
    )


async def toggle_permissions(
    dispatch: Dispatch,
    backend: LedgerBackend,
    token: SecurityToken,
    enable: bool,
    *,
    ticket: Ticket | None = None,
    is_discarded: Callable[[Ticket], bool] | None = None,
) -> Outcome:
    """Enable or disable the permissions feature for `token`.

    The acknowledged pm_enabled is the opposite of `enable`. It is only
    visible until the TokenSelected that follows clears it; the reload then
    sets whatever the backend reports.
    """

    async def submit() -> Job:
        if enable:
            return await backend.enable_feature(token, PERMISSIONS_FEATURE)
        return await backend.disable_feature(token, PERMISSIONS_FEATURE)

    return await submit_job(
        dispatch,
        submit,
        "Toggle role management",
        ack=MutationAcked("pm_enabled", not enable),
        ticket=ticket,
        is_discarded=is_discarded,
    )


async def assign_role(
    dispatch: Dispatch,
    backend: LedgerBackend,
    token: SecurityToken,
    address: str,
    role: str,
    description: str = "",
    *,
    ticket: Ticket | None = None,
    is_discarded: Callable[[Ticket], bool] | None = None,
) -> Outcome:
    return await submit_job(
        dispatch,
        lambda: backend.assign_role(token, address, role, description),
        f"Assigning {role} role to {address}",
        ticket=ticket,
        is_discarded=is_discarded,
    )


async def revoke_role(
    dispatch: Dispatch,
    backend: LedgerBackend,
    token: SecurityToken,
    address: str,
    role: str,
    *,
    ticket: Ticket | None = None,
    is_discarded: Callable[[Ticket], bool] | None = None,
) -> Outcome:
    return await submit_job(
        dispatch,
        lambda: backend.revoke_role(token, address, role),
        f"Revoking {role} role from {address}",
        ticket=ticket,
        is_discarded=is_discarded,
    )
