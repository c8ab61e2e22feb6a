"""Unit tests for src/core/logging.py."""

from __future__ import annotations

import logging

from src.core.logging import _add_service, _resolve_level, configure_logging, get_logger


class TestResolveLevel:
    def test_int_passthrough(self):
        assert _resolve_level(logging.DEBUG) == logging.DEBUG

    def test_name_any_case(self):
        assert _resolve_level("warning") == logging.WARNING

    def test_unknown_name_falls_back_to_info(self):
        assert _resolve_level("chatty") == logging.INFO


class TestProcessors:
    def test_service_added(self):
        assert _add_service(None, "info", {"event": "x"})["service"] == "wine-commerce"

    def test_existing_service_kept(self):
        assert _add_service(None, "info", {"service": "other"})["service"] == "other"


class TestGetLogger:
    def test_logs_after_configure(self, capsys):
        configure_logging(json_output=True, level="INFO")
        get_logger("orders").info("order_created", order_id=7)
        out = capsys.readouterr().out
        assert '"event": "order_created"' in out
        assert '"component": "orders"' in out
        assert '"order_id": 7' in out
