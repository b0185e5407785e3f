"""Async action envelope: start, run, then exactly one terminal action."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from permissions_console.logging_config import get_logger
from permissions_console.store.actions import (
    Action,
    AsyncComplete,
    AsyncError,
    AsyncStart,
    CompletionPayload,
    Ticket,
)
from permissions_console.store.store import Dispatch

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Failure:
    message: str
    exception: Exception | None = None

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class Discarded(Generic[T]):
    """The operation succeeded but its result arrived stale and was dropped."""

    value: T

    @property
    def ok(self) -> bool:
        return False


Outcome = Success[Any] | Discarded[Any] | Failure


def describe_failure(exc: Exception) -> str:
    """User-facing text for a failed operation."""
    message = getattr(exc, "message", None) or str(exc)
    return message or type(exc).__name__


async def run_async(
    dispatch: Dispatch,
    operation: Callable[[], Awaitable[CompletionPayload | None]],
    message: str = "",
    *,
    ticket: Ticket | None = None,
    follow_up: Iterable[Action] = (),
    is_discarded: Callable[[Ticket], bool] | None = None,
) -> Outcome:
    """Run `operation` inside a start/complete/error envelope.

    AsyncStart is dispatched before the operation begins. When it returns,
    its payload is dispatched in AsyncComplete followed by `follow_up`
    actions; when it raises, AsyncError carries the failure text and no
    follow-up is dispatched. When `is_discarded` reports that the store
    will drop the result for `ticket`, the follow-ups are skipped and
    Discarded is returned. Errors raised by dispatch itself (such as an
    unrecognized action) are not caught.
    """
    dispatch(AsyncStart(message))
    try:
        payload = await operation()
    except Exception as exc:
        text = describe_failure(exc)
        logger.warning(
            "async_operation_failed",
            operation=message,
            error=text,
            error_type=type(exc).__name__,
        )
        dispatch(AsyncError(text, ticket=ticket))
        return Failure(text, exc)

    discarded = (
        ticket is not None and is_discarded is not None and is_discarded(ticket)
    )
    dispatch(AsyncComplete(payload, ticket=ticket))
    if discarded:
        logger.info("follow_up_skipped", operation=message, resource=ticket.resource)
        return Discarded(payload)
    for action in follow_up:
        dispatch(action)
    return Success(payload)
