# tests/unit/logging/test_logging.py — v1
"""Tests for logging/ — context variables, formatters, rotation handler."""

from __future__ import annotations

import json
import logging

import pytest

from podgraph.config.settings import Settings
from podgraph.logging.context import (
    clear_context,
    document_context,
    get_context,
    set_document_context,
    set_operation_context,
)
from podgraph.logging.handlers import create_rotating_handler, parse_size
from podgraph.logging.logger import (
    ROOT_LOGGER_NAME,
    JsonFormatter,
    TextFormatter,
    get_logger,
    setup_logging,
    setup_logging_from_settings,
)


def _record(message: str = "hello") -> logging.LogRecord:
    return logging.LogRecord("podgraph.test", logging.INFO, __file__, 1, message, None, None)


class TestLogContext:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_initial_state(self):
        ctx = get_context()
        assert ctx.document_id is None
        assert ctx.operation is None

    def test_set_document_context(self):
        set_document_context("doc1", "run1")
        ctx = get_context()
        assert ctx.document_id == "doc1"
        assert ctx.run_id == "run1"

    def test_as_dict_filters_none(self):
        set_operation_context("search")
        assert get_context().as_dict() == {"operation": "search"}

    def test_document_context_restores(self):
        set_document_context("outer")
        with document_context("inner", "run2"):
            assert get_context().document_id == "inner"
            assert get_context().run_id == "run2"
        assert get_context().document_id == "outer"
        assert get_context().run_id is None

    def test_document_context_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with document_context("inner"):
                raise RuntimeError("boom")
        assert get_context().document_id is None


class TestFormatters:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_json_includes_context(self):
        set_document_context("doc1")
        set_operation_context("record_document")
        entry = json.loads(JsonFormatter().format(_record()))
        assert entry["message"] == "hello"
        assert entry["level"] == "INFO"
        assert entry["context"] == {"document_id": "doc1", "operation": "record_document"}

    def test_json_without_context(self):
        entry = json.loads(JsonFormatter().format(_record()))
        assert "context" not in entry

    def test_text_format(self):
        set_document_context("doc1")
        line = TextFormatter().format(_record("written"))
        assert "[INFO    ]" in line
        assert "[doc1]" in line
        assert line.endswith("- written")


class TestSetupLogging:
    def teardown_method(self):
        logging.getLogger(ROOT_LOGGER_NAME).handlers.clear()

    def test_get_logger_namespaced(self):
        assert get_logger("store").name == "podgraph.store"

    def test_no_stacked_handlers(self):
        setup_logging(level="DEBUG")
        setup_logging(level="DEBUG")
        root = logging.getLogger(ROOT_LOGGER_NAME)
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "podgraph.log"
        setup_logging(log_format="text", log_file=log_file)
        assert len(logging.getLogger(ROOT_LOGGER_NAME).handlers) == 2
        assert log_file.parent.exists()

    def test_from_settings(self):
        setup_logging_from_settings(Settings(_env_file=None, log_level="WARNING"))
        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.WARNING


class TestHandlers:
    def test_parse_size(self):
        assert parse_size("10MB") == 10 * 1024 * 1024
        assert parse_size("512kb") == 512 * 1024
        assert parse_size("1GB") == 1024**3

    def test_parse_size_invalid(self):
        with pytest.raises(ValueError, match="Invalid size"):
            parse_size("10bytes")

    def test_rotating_handler(self, tmp_path):
        handler = create_rotating_handler(tmp_path / "a" / "x.log", rotation="1MB", retention=5)
        try:
            assert handler.maxBytes == 1024 * 1024
            assert handler.backupCount == 5
        finally:
            handler.close()
