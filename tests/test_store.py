import pytest

from permissions_console.domain.state import ApplicationState
from permissions_console.exceptions import UnrecognizedActionError
from permissions_console.store.actions import (
    AsyncComplete,
    AsyncError,
    AsyncStart,
    LoadingSettled,
    MutationAcked,
    TokenSelected,
)
from permissions_console.store.store import Store


class TestDispatch:
    def test_applies_reducer(self, store: Store) -> None:
        store.dispatch(AsyncStart("Loading"))
        assert store.state.loading is True
        assert store.state.loading_message == "Loading"

    def test_notifies_listeners_in_order(self, store: Store) -> None:
        seen = []
        store.subscribe(lambda state, action: seen.append((action.type, state.loading)))

        store.dispatch(AsyncStart("x"))
        store.dispatch(AsyncComplete())

        assert seen == [("ASYNC_START", True), ("ASYNC_COMPLETE", False)]

    def test_unsubscribe(self, store: Store) -> None:
        seen = []
        unsubscribe = store.subscribe(lambda state, action: seen.append(action))
        unsubscribe()
        unsubscribe()

        store.dispatch(TokenSelected())

        assert seen == []

    def test_dispatch_from_listener_is_queued(self, store: Store) -> None:
        seen = []

        def listener(state, action) -> None:
            seen.append(action.type)
            if isinstance(action, AsyncStart):
                store.dispatch(AsyncError("nested"))

        store.subscribe(listener)
        store.dispatch(AsyncStart("outer"))

        assert seen == ["ASYNC_START", "ASYNC_ERROR"]
        assert store.state.error == "nested"
        assert store.state.loading is False

    def test_unrecognized_action_propagates(self, store: Store) -> None:
        with pytest.raises(UnrecognizedActionError):
            store.dispatch(object())  # type: ignore[arg-type]

        # The store remains usable afterwards
        store.dispatch(AsyncStart("again"))
        assert store.state.loading is True


class TestTickets:
    def test_generation_is_monotonic_per_resource(self, store: Store) -> None:
        first = store.issue_ticket("features")
        second = store.issue_ticket("features")
        other = store.issue_ticket("delegates")

        assert (first.generation, second.generation, other.generation) == (1, 2, 1)
        assert store.is_stale(first)
        assert not store.is_stale(second)

    def test_in_flight_released_by_terminal_action(self, store: Store) -> None:
        ticket = store.issue_ticket("features")
        assert store.in_flight("features")

        store.dispatch(AsyncComplete(ticket=ticket))

        assert not store.in_flight("features")
        assert not store.in_flight()

    def test_result_for_previous_token_is_discarded(self, store: Store) -> None:
        store.select("acme")
        ticket = store.issue_ticket("mutation")
        store.dispatch(AsyncStart("Toggle"))

        store.select("beta")
        store.dispatch(TokenSelected())
        store.dispatch(AsyncComplete(MutationAcked("pm_enabled", True), ticket=ticket))

        assert store.state.pm_enabled is None
        # Nothing else in flight, so the spinner is still released
        assert store.state.loading is False

    def test_superseded_result_is_discarded(self, store: Store) -> None:
        store.select("acme")
        old = store.issue_ticket("mutation")
        new = store.issue_ticket("mutation")
        store.dispatch(AsyncStart("second"))

        store.dispatch(AsyncError("first failed", ticket=old))
        assert store.state.error is None
        assert store.state.loading is True

        store.dispatch(AsyncComplete(MutationAcked("pm_enabled", True), ticket=new))
        assert store.state.pm_enabled is True
        assert store.state.loading is False

    def test_discard_keeps_current_token_error(self, store: Store) -> None:
        store.select("acme")
        stale = store.issue_ticket("features")
        store.select("beta")
        current = store.issue_ticket("features")
        store.dispatch(AsyncStart("Loading features status"))
        store.dispatch(AsyncError("gateway down", ticket=current))

        store.dispatch(AsyncComplete(ticket=stale))

        assert store.state.error == "gateway down"
        assert store.state.loading is False

    def test_settling_leaves_error_untouched(self) -> None:
        store = Store(ApplicationState(loading=True, loading_message="Toggle", error="bad"))
        store.select("acme")
        ticket = store.issue_ticket("mutation")
        store.select("beta")
        seen = []
        store.subscribe(lambda state, action: seen.append(action))

        store.dispatch(AsyncComplete(MutationAcked("pm_enabled", True), ticket=ticket))

        assert seen == [LoadingSettled()]
        assert store.state.loading is False
        assert store.state.error == "bad"
        assert store.state.pm_enabled is None

    def test_discard_without_spinner_notifies_nobody(self, store: Store) -> None:
        store.select("acme")
        ticket = store.issue_ticket("features")
        store.select("beta")
        seen = []
        store.subscribe(lambda state, action: seen.append(action))

        store.dispatch(AsyncComplete(ticket=ticket))

        assert seen == []

    def test_discards_follows_setting(self) -> None:
        strict = Store()
        lenient = Store(discard_stale=False)
        for store in (strict, lenient):
            store.select("acme")

        strict_ticket = strict.issue_ticket("mutation")
        lenient_ticket = lenient.issue_ticket("mutation")
        strict.select("beta")
        lenient.select("beta")

        assert strict.discards(strict_ticket)
        assert not lenient.discards(lenient_ticket)

    def test_last_write_wins_when_discarding_disabled(self) -> None:
        store = Store(discard_stale=False)
        store.select("acme")
        ticket = store.issue_ticket("mutation")

        store.select("beta")
        store.dispatch(AsyncComplete(MutationAcked("pm_enabled", True), ticket=ticket))

        assert store.state.pm_enabled is True

    def test_untagged_terminal_actions_always_apply(self, store: Store) -> None:
        store.select("acme")
        store.dispatch(AsyncError("boom"))
        assert store.state.error == "boom"
