"""Tests for run ID tracking and log formatting."""

import json
import logging

import pytest

from packages.common.logging import CustomJsonFormatter, RunIdFilter
from packages.common.tracing import RunContext, clear_run_id, get_run_id, set_run_id


@pytest.fixture(autouse=True)
def reset_run_id():
    clear_run_id()
    yield
    clear_run_id()


def _record(message: str) -> logging.LogRecord:
    return logging.LogRecord("flag_expiry.test", logging.INFO, __file__, 10, message, None, None)


@pytest.mark.unit
class TestRunContext:
    def test_generates_run_id(self) -> None:
        with RunContext() as run_id:
            assert run_id
            assert get_run_id() == run_id
        assert get_run_id() is None

    def test_uses_given_run_id(self) -> None:
        with RunContext("run-123") as run_id:
            assert run_id == "run-123"

    def test_restores_outer_run_id(self) -> None:
        set_run_id("outer")
        with RunContext("inner"):
            assert get_run_id() == "inner"
        assert get_run_id() == "outer"


@pytest.mark.unit
class TestRunIdFilter:
    def test_injects_placeholder_outside_run(self) -> None:
        record = _record("hello")
        assert RunIdFilter().filter(record) is True
        assert record.run_id == "-"

    def test_injects_current_run_id(self) -> None:
        record = _record("hello")
        with RunContext("run-abc"):
            RunIdFilter().filter(record)
        assert record.run_id == "run-abc"


@pytest.mark.unit
def test_json_formatter_adds_fields() -> None:
    record = _record("Updated 3 flags")
    record.run_id = "run-xyz"

    payload = json.loads(CustomJsonFormatter("%(message)s").format(record))

    assert payload["message"] == "Updated 3 flags"
    assert payload["level"] == "INFO"
    assert payload["run_id"] == "run-xyz"
    assert payload["line"] == 10
