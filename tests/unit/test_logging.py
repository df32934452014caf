"""
Tests for the logging module.
"""

import json
import logging

import pytest
import structlog


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_development_mode(self):
        """Development mode uses the console renderer and should not raise."""
        from core.logging import configure_logging

        configure_logging(json_logs=False, log_level="DEBUG")

    def test_configure_log_level(self):
        from core.logging import configure_logging

        configure_logging(log_level="WARNING")

        assert logging.getLogger().level == logging.WARNING

    def test_http_client_loggers_quieted(self):
        """Supabase request chatter from httpx is kept at WARNING."""
        from core.logging import configure_logging

        configure_logging(log_level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_json_lines_include_bound_context(self, capsys):
        """Production mode emits one JSON object per line with request context."""
        from core.logging import bind_context, clear_context, configure_logging, get_logger

        configure_logging(json_logs=True, log_level="INFO")
        clear_context()
        bind_context(request_id="req-42", path="/api/outfits")

        get_logger("test.json").info("Outfit created", outfit_id="o-1", items=2)
        clear_context()

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "Outfit created"
        assert record["request_id"] == "req-42"
        assert record["path"] == "/api/outfits"
        assert record["items"] == 2
        assert record["level"] == "info"
        assert record["service"] == "wardrobe-api"
        assert "timestamp" in record

    @pytest.fixture(autouse=True)
    def restore_console_logging(self):
        yield
        from core.logging import configure_logging
        configure_logging(json_logs=False, log_level="INFO")


class TestContextBinding:
    """Tests for context binding functions."""

    def test_bind_and_clear_context(self):
        from core.logging import bind_context, clear_context

        clear_context()
        bind_context(request_id="abc", method="GET")

        ctx = structlog.contextvars.get_contextvars()
        assert ctx == {"request_id": "abc", "method": "GET"}

        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

