"""Tests for structured logging of store and envelope events."""

import logging

import pytest
import structlog

from permissions_console.config import Settings, get_settings
from permissions_console.logging_config import (
    build_processors,
    configure_logging,
    get_logger,
    log_context,
)
from permissions_console.store.actions import AsyncComplete, AsyncStart
from permissions_console.store.envelope import run_async
from permissions_console.store.store import Store


def _output(capsys, caplog) -> str:
    # structlog may render directly or through stdlib logging
    captured = capsys.readouterr()
    return captured.out + captured.err + caplog.text


class TestEventLogging:
    async def test_failed_operation_logs_warning(self, capsys, caplog) -> None:
        store = Store()

        async def boom():
            raise RuntimeError("gateway down")

        with caplog.at_level(logging.WARNING, logger="permissions_console.store.envelope"):
            outcome = await run_async(store.dispatch, boom, "Loading delegates")

        assert not outcome.ok
        assert "async_operation_failed" in _output(capsys, caplog)

    def test_stale_discard_logs_event(self, capsys, caplog) -> None:
        store = Store()
        store.select("acme")
        ticket = store.issue_ticket("features")
        store.dispatch(AsyncStart("Loading features status"))
        store.select("beta")

        with caplog.at_level(logging.INFO, logger="permissions_console.store.store"):
            store.dispatch(AsyncComplete(ticket=ticket))

        assert "stale_result_discarded" in _output(capsys, caplog)


class TestConfiguration:
    @pytest.mark.parametrize("log_format", ["console", "json"])
    def test_configure_logging_accepts_formats(self, log_format) -> None:
        configure_logging(Settings(log_format=log_format))
        get_logger("permissions_console.tests").info("configured", format=log_format)

    def test_file_handler(self, tmp_path) -> None:
        log_file = tmp_path / "logs" / "console.log"
        root = logging.getLogger()
        before = list(root.handlers)

        configure_logging(Settings(log_file=log_file))
        try:
            assert log_file.parent.exists()
            assert any(
                isinstance(h, logging.FileHandler) and h not in before
                for h in root.handlers
            )
        finally:
            for handler in [h for h in root.handlers if h not in before]:
                root.removeHandler(handler)
                handler.close()

    def test_renderer_follows_format(self) -> None:
        processors = build_processors("json")
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

        console = build_processors("console")
        assert isinstance(console[-1], structlog.dev.ConsoleRenderer)

    def test_json_events_carry_version(self) -> None:
        from permissions_console.logging_config import _add_app_context

        event = _add_app_context(None, "info", {"event": "job_started"})

        settings = get_settings()
        assert event["version"] == settings.app_version
        assert event["environment"] == settings.environment.value


class TestLogContext:
    def test_binds_and_unbinds(self) -> None:
        with log_context(token="acme", resource="delegates"):
            bound = structlog.contextvars.get_contextvars()
            assert bound["token"] == "acme"
            assert bound["resource"] == "delegates"

        bound = structlog.contextvars.get_contextvars()
        assert "token" not in bound
        assert "resource" not in bound

    def test_none_values_are_not_bound(self) -> None:
        with log_context(token=None, resource="features"):
            bound = structlog.contextvars.get_contextvars()
            assert "token" not in bound
            assert bound["resource"] == "features"
