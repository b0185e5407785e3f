"""State store: owns the ApplicationState and the dispatch channel.

Dispatch is synchronous and runs on the event loop thread. Actions
dispatched from inside a listener are queued and applied after the current
one, so every listener sees states in dispatch order.
"""

from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Callable

from permissions_console.domain.state import ApplicationState
from permissions_console.logging_config import get_logger
from permissions_console.store.actions import (
    TERMINAL_ACTIONS,
    Action,
    LoadingSettled,
    Ticket,
)
from permissions_console.store.reducer import reducer

logger = get_logger(__name__)

Listener = Callable[[ApplicationState, Action], None]
Dispatch = Callable[[Action], None]


class Store:
    """Holds the current state and applies actions through the reducer.

    The store also tracks which token is selected and hands out tickets to
    async envelopes. With discard_stale enabled, a terminal action whose
    ticket was issued for another token, or was superseded by a newer
    ticket for the same resource, is dropped instead of merged.
    """

    def __init__(
        self,
        initial_state: ApplicationState | None = None,
        *,
        discard_stale: bool = True,
    ) -> None:
        self._state = initial_state or ApplicationState()
        self._discard_stale = discard_stale
        self._listeners: list[Listener] = []
        self._queue: deque[Action] = deque()
        self._dispatching = False

        self._token_key: str | None = None
        self._generations: dict[str, int] = defaultdict(int)
        self._in_flight: dict[str, int] = defaultdict(int)

    @property
    def state(self) -> ApplicationState:
        return self._state

    @property
    def discard_stale(self) -> bool:
        return self._discard_stale

    @property
    def token_key(self) -> str | None:
        return self._token_key

    def select(self, token_key: str | None) -> None:
        """Record the selected token; tickets issued earlier become stale."""
        self._token_key = token_key

    # === Tickets ===

    def issue_ticket(self, resource: str) -> Ticket:
        self._generations[resource] += 1
        self._in_flight[resource] += 1
        return Ticket(
            token_key=self._token_key,
            resource=resource,
            generation=self._generations[resource],
        )

    def in_flight(self, resource: str | None = None) -> bool:
        if resource is None:
            return any(self._in_flight.values())
        return self._in_flight[resource] > 0

    def is_stale(self, ticket: Ticket) -> bool:
        return (
            ticket.token_key != self._token_key
            or ticket.generation != self._generations[ticket.resource]
        )

    def discards(self, ticket: Ticket) -> bool:
        """True when a terminal action carrying `ticket` would be dropped."""
        return self._discard_stale and self.is_stale(ticket)

    # === Dispatch ===

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> None:
        self._queue.append(action)
        if self._dispatching:
            return

        self._dispatching = True
        try:
            while self._queue:
                self._apply(self._queue.popleft())
        finally:
            self._dispatching = False
            self._queue.clear()

    def _apply(self, action: Action) -> None:
        ticket = getattr(action, "ticket", None)
        if isinstance(action, TERMINAL_ACTIONS) and ticket is not None:
            self._in_flight[ticket.resource] = max(
                self._in_flight[ticket.resource] - 1, 0
            )
            if self.discards(ticket):
                logger.info(
                    "stale_result_discarded",
                    action_type=action.type,
                    resource=ticket.resource,
                    issued_for=ticket.token_key,
                    selected=self._token_key,
                )
                if self.in_flight() or not self._state.loading:
                    return
                # Nothing else will settle the spinner
                action = LoadingSettled()

        logger.debug(
            "action_dispatched",
            action_type=getattr(action, "type", type(action).__name__),
        )
        self._state = reducer(self._state, action)
        for listener in list(self._listeners):
            listener(self._state, action)
