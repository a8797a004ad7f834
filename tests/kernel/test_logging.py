"""Tests for the structured logging system (backoffice_kernel/logging_config.py)."""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from backoffice_kernel.exceptions import InvalidPeriodError
from backoffice_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state around each test, then restore the suite setup."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_all_logs(stream)[0]
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "backoffice.test"
        assert "ts" in record

    def test_extra_fields_serialized(self):
        """Decimal, date and plain values survive as JSON."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info(
            "report_built",
            extra={"total": Decimal("12.50"), "as_of": date(2024, 3, 1), "count": 3},
        )

        record = _parse_all_logs(stream)[0]
        assert record["total"] == "12.50"
        assert record["as_of"] == "2024-03-01"
        assert record["count"] == 3

    def test_exception_fields(self):
        """Typed errors contribute their code and attributes."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise InvalidPeriodError("fortnight", "unknown period token")
        except InvalidPeriodError:
            get_logger("test").error("period_failed", exc_info=True)

        record = _parse_all_logs(stream)[0]
        assert record["exc_type"] == "InvalidPeriodError"
        assert record["exc_code"] == "INVALID_PERIOD"
        assert record["exc_token"] == "fortnight"
        assert "traceback" in record


class TestLogContext:
    """Context propagation."""

    def test_bind_adds_and_restores(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")

        with LogContext.bind(report_type="trial_balance", actor_id="u1"):
            logger.info("inside")
        logger.info("outside")

        inside, outside = _parse_all_logs(stream)
        assert inside["report_type"] == "trial_balance"
        assert inside["actor_id"] == "u1"
        assert "report_type" not in outside

    def test_nested_bind_restores_outer(self):
        with LogContext.bind(report_type="outer"):
            with LogContext.bind(report_type="inner"):
                assert LogContext.get_all()["report_type"] == "inner"
            assert LogContext.get_all()["report_type"] == "outer"
        assert LogContext.get_all() == {}

    def test_set_ignores_none(self):
        LogContext.set(entry_id="e1")
        LogContext.set(entry_id=None, journal_number="JE-000001")

        assert LogContext.get_all() == {"entry_id": "e1", "journal_number": "JE-000001"}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError, match="folio_id"):
            LogContext.set(folio_id="f1")


class TestConfigure:
    """configure_logging behaviour."""

    def test_idempotent(self):
        handler, _ = _make_handler()
        configure_logging(handler=handler)
        configure_logging(handler=handler)

        assert len(logging.getLogger("backoffice").handlers) == 1

    def test_does_not_propagate(self):
        configure_logging(stream=StringIO())

        assert logging.getLogger("backoffice").propagate is False

    def test_level_applied(self):
        handler, stream = _make_handler()
        configure_logging(level=logging.WARNING, handler=handler)
        logger = get_logger("test")
        logger.info("dropped")
        logger.warning("kept")

        assert [r["message"] for r in _parse_all_logs(stream)] == ["kept"]
