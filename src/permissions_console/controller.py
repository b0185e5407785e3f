"""Controller wiring the store, the loaders and the mutations together.

The controller listens to the store. After every action it checks whether
a loader should run for the selected token and schedules it as an asyncio
task. Each loader runs at most once per token selection: a failed load is
not retried until the token is selected again or a mutation invalidates
the data.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from permissions_console.backend.interfaces import LedgerBackend
from permissions_console.domain.delegates import SecurityToken, is_valid_address
from permissions_console.domain.state import ApplicationState
from permissions_console.exceptions import (
    InvalidAddressError,
    NoTokenSelectedError,
    PermissionsConsoleError,
    UnknownRoleError,
)
from permissions_console.loaders import (
    DELEGATES,
    FEATURE_STATUS,
    load_delegates,
    load_feature_status,
    needs_delegates,
    needs_feature_status,
)
from permissions_console.logging_config import get_logger, log_context
from permissions_console.mutations import MUTATION, assign_role, revoke_role, toggle_permissions
from permissions_console.store.actions import Action, Error, Ticket, TokenSelected
from permissions_console.store.envelope import Failure, Outcome, describe_failure, run_async
from permissions_console.store.store import Store
from permissions_console.view import ConsoleView, derive_view

logger = get_logger(__name__)


class PermissionsController:
    def __init__(self, store: Store, backend: LedgerBackend) -> None:
        self._store = store
        self._backend = backend
        self._token: SecurityToken | None = None
        self._attempted: set[str] = set()
        self._tasks: set[asyncio.Task] = set()

        self.tokens: tuple[SecurityToken, ...] = ()
        self.backend_ready = False
        self.connection_error: str | None = None

        self._unsubscribe = store.subscribe(self._on_action)

    @property
    def store(self) -> Store:
        return self._store

    @property
    def state(self) -> ApplicationState:
        return self._store.state

    @property
    def token(self) -> SecurityToken | None:
        return self._token

    def dispatch(self, action: Action) -> None:
        self._store.dispatch(action)

    # === Tokens ===

    async def load_tokens(self) -> tuple[SecurityToken, ...]:
        """Fetch the tokens the backend exposes; failures become connection_error."""
        try:
            self.tokens = tuple(await self._backend.list_tokens())
        except Exception as exc:
            self.connection_error = describe_failure(exc)
            logger.warning("token_list_failed", error=self.connection_error)
        else:
            self.connection_error = None
            self.backend_ready = True
        return self.tokens

    def select_token(self, token: SecurityToken | None) -> None:
        """Switch the selected token and invalidate everything derived from it.

        Must be called from a running event loop; the loaders it triggers
        are scheduled as tasks.
        """
        self._token = token
        self._store.select(token.key if token else None)
        logger.info("token_selected", token=token.symbol if token else None)
        self._store.dispatch(TokenSelected())

    # === Loader scheduling ===

    def _on_action(self, state: ApplicationState, action: Action) -> None:
        if isinstance(action, TokenSelected):
            self._attempted.clear()

        token = self._token
        if self._should_load(FEATURE_STATUS, needs_feature_status(state, token)):
            self._schedule(
                FEATURE_STATUS,
                lambda: load_feature_status(self._backend, token),
                "Loading features status",
            )
        if self._should_load(DELEGATES, needs_delegates(state, token)):
            self._schedule(
                DELEGATES,
                lambda: load_delegates(self._backend, token),
                "Loading delegates",
            )

    def _should_load(self, resource: str, needed: bool) -> bool:
        return needed and resource not in self._attempted

    def _schedule(
        self, resource: str, operation: Callable[[], Awaitable], message: str
    ) -> None:
        self._attempted.add(resource)
        ticket = self._store.issue_ticket(resource)
        logger.debug("loader_scheduled", resource=resource, generation=ticket.generation)
        task = asyncio.get_running_loop().create_task(
            self._run_loader(operation, message, ticket)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_loader(
        self, operation: Callable[[], Awaitable], message: str, ticket: Ticket
    ) -> None:
        with log_context(token=ticket.token_key, resource=ticket.resource):
            await run_async(
                self._store.dispatch,
                operation,
                message,
                ticket=ticket,
                is_discarded=self._store.discards,
            )

    async def wait_idle(self) -> None:
        """Wait until no loader task is pending, including ones scheduled meanwhile."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # === Mutations ===

    def _reject(self, error: PermissionsConsoleError) -> Failure:
        logger.warning("operation_rejected", error=error.message, code=error.error_code)
        self._store.dispatch(Error(error.message))
        return Failure(error.message, error)

    def _check_delegate_input(self, address: str, role: str) -> PermissionsConsoleError | None:
        if self._token is None:
            return NoTokenSelectedError()
        if not is_valid_address(address):
            return InvalidAddressError(address)
        available = self.state.available_roles
        if available and role not in available:
            return UnknownRoleError(role, available)
        return None

    async def toggle_permissions(self, enable: bool) -> Outcome:
        token = self._token
        if token is None:
            return self._reject(NoTokenSelectedError())
        with log_context(token=token.key):
            return await toggle_permissions(
                self._store.dispatch,
                self._backend,
                token,
                enable,
                ticket=self._store.issue_ticket(MUTATION),
                is_discarded=self._store.discards,
            )

    async def assign_role(self, address: str, role: str, description: str = "") -> Outcome:
        problem = self._check_delegate_input(address, role)
        if problem is not None:
            return self._reject(problem)
        with log_context(token=self._token.key):
            return await assign_role(
                self._store.dispatch,
                self._backend,
                self._token,
                address,
                role,
                description,
                ticket=self._store.issue_ticket(MUTATION),
                is_discarded=self._store.discards,
            )

    async def revoke_role(self, address: str, role: str) -> Outcome:
        problem = self._check_delegate_input(address, role)
        if problem is not None:
            return self._reject(problem)
        with log_context(token=self._token.key):
            return await revoke_role(
                self._store.dispatch,
                self._backend,
                self._token,
                address,
                role,
                ticket=self._store.issue_ticket(MUTATION),
                is_discarded=self._store.discards,
            )

    # === Presentation ===

    def view(self) -> ConsoleView:
        return derive_view(
            self.state,
            backend_ready=self.backend_ready,
            tokens=self.tokens,
            token=self._token,
            connection_error=self.connection_error,
        )

    def find_token(self, symbol: str) -> SecurityToken | None:
        key = symbol.lower()
        return next((t for t in self.tokens if t.key == key), None)

    async def close(self) -> None:
        self._unsubscribe()
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        await self._backend.aclose()
