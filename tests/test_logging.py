"""
Tests for structured logging (``ledger_kernel.logging_config``).

Invariants tested:
- Each record is one JSON line with ts, level, logger and message.
- LogContext fields appear on every line while bound and vanish after.
- Kernel exceptions contribute their code and structured attributes.
- configure_logging is idempotent until reset_logging.
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from ledger_kernel.exceptions import InvalidDocumentError, RenderIoError
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def json_stream() -> StringIO:
    """Configure the ledger_kernel tree to write JSON lines into a buffer."""
    stream = StringIO()
    configure_logging(stream=stream, level=logging.DEBUG)
    return stream


def _lines(stream: StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------


class TestEnvelope:

    def test_mandatory_fields(self, json_stream):
        get_logger("render").info("ledger_render_started")
        (record,) = _lines(json_stream)
        assert record["level"] == "INFO"
        assert record["logger"] == "ledger_kernel.render"
        assert record["message"] == "ledger_render_started"
        assert record["ts"].endswith("+00:00")

    def test_extra_fields_copied(self, json_stream):
        get_logger("render").info(
            "ledger_render_completed",
            extra={"directive_count": 3, "duration_ms": 1.5},
        )
        (record,) = _lines(json_stream)
        assert record["directive_count"] == 3
        assert record["duration_ms"] == 1.5

    def test_non_json_values_stringified(self, json_stream):
        get_logger("render").info(
            "values", extra={"number": Decimal("0.10"), "as_of": date(2023, 1, 1)}
        )
        (record,) = _lines(json_stream)
        assert record["number"] == "0.10"
        assert record["as_of"] == "2023-01-01"

    def test_one_line_per_record(self, json_stream):
        logger = get_logger("render")
        logger.debug("a")
        logger.info("b")
        logger.warning("c", extra={"kind": "budget"})
        assert [r["message"] for r in _lines(json_stream)] == ["a", "b", "c"]


class TestExceptionFields:

    def test_plain_exception(self, json_stream):
        try:
            raise KeyError("missing")
        except KeyError:
            get_logger("cli").error("render_failed", exc_info=True)
        (record,) = _lines(json_stream)
        assert record["exc_type"] == "KeyError"
        assert "exc_code" not in record
        assert "Traceback" in record["traceback"]

    def test_document_error_attributes(self, json_stream):
        try:
            raise InvalidDocumentError("directives[2].date", "bad date 'x'")
        except InvalidDocumentError:
            get_logger("cli").error("render_failed", exc_info=True)
        (record,) = _lines(json_stream)
        assert record["exc_code"] == "INVALID_DOCUMENT"
        assert record["exc_path"] == "directives[2].date"
        assert record["exc_reason"] == "bad date 'x'"

    def test_io_error_cause_type(self, json_stream):
        try:
            raise RenderIoError(OSError("disk full"))
        except RenderIoError:
            get_logger("cli").error("render_failed", exc_info=True)
        (record,) = _lines(json_stream)
        assert record["exc_code"] == "RENDER_IO_ERROR"
        assert record["exc_cause_type"] == "OSError"


# ---------------------------------------------------------------------------
# LogContext
# ---------------------------------------------------------------------------


class TestLogContext:

    def test_bound_fields_on_every_line(self, json_stream):
        logger = get_logger("render")
        with LogContext.bind(render_id="r1", source="ledger.yaml"):
            logger.info("one")
            logger.info("two")
        logger.info("three")
        one, two, three = _lines(json_stream)
        assert one["render_id"] == two["render_id"] == "r1"
        assert one["source"] == "ledger.yaml"
        assert "render_id" not in three

    def test_nested_bind_restores_outer(self):
        with LogContext.bind(render_id="r1", directive_kind="open"):
            with LogContext.bind(directive_kind="close"):
                assert LogContext.get_all() == {
                    "render_id": "r1",
                    "directive_kind": "close",
                }
            assert LogContext.get_all()["directive_kind"] == "open"
        assert LogContext.get_all() == {}

    def test_bind_restores_on_exception(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(render_id="r1"):
                raise RuntimeError
        assert LogContext.get_all() == {}

    def test_set_ignores_none(self):
        LogContext.set(source="a.yaml")
        LogContext.set(source=None, render_id="r2")
        assert LogContext.get_all() == {"source": "a.yaml", "render_id": "r2"}

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError):
            LogContext.set(correlation_id="x")

    def test_get_all_returns_copy(self):
        LogContext.set(source="a.yaml")
        LogContext.get_all()["source"] = "tampered"
        assert LogContext.get_all()["source"] == "a.yaml"


# ---------------------------------------------------------------------------
# configure_logging / reset_logging
# ---------------------------------------------------------------------------


class TestConfigure:

    def test_second_call_is_noop(self):
        first = logging.StreamHandler(StringIO())
        configure_logging(handler=first)
        configure_logging(handler=logging.StreamHandler(StringIO()))
        assert logging.getLogger("ledger_kernel").handlers == [first]

    def test_handler_gets_structured_formatter(self):
        handler = logging.StreamHandler(StringIO())
        configure_logging(handler=handler)
        assert isinstance(handler.formatter, StructuredFormatter)

    def test_plain_text_option(self):
        stream = StringIO()
        configure_logging(stream=stream, json_format=False)
        get_logger("cli").warning("plain_line")
        line = stream.getvalue().strip()
        assert "ledger_kernel.cli WARNING plain_line" in line
        assert not line.startswith("{")

    def test_level_filters(self):
        stream = StringIO()
        configure_logging(stream=stream, level=logging.WARNING)
        get_logger("render").info("dropped")
        get_logger("render").warning("kept")
        assert [r["message"] for r in _lines(stream)] == ["kept"]

    def test_does_not_propagate(self):
        configure_logging(stream=StringIO())
        assert logging.getLogger("ledger_kernel").propagate is False

    def test_reset_allows_reconfigure(self):
        configure_logging(stream=StringIO())
        reset_logging()
        assert logging.getLogger("ledger_kernel").handlers == []
        second = logging.StreamHandler(StringIO())
        configure_logging(handler=second)
        assert logging.getLogger("ledger_kernel").handlers == [second]
