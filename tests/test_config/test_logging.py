"""Testes para config.logging.

Cobre: configure_logging, get_logger, CorrelationIdFilter,
create_json_formatter.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest

from config.logging import (
    FIELD_RENAME_MAP,
    NOISY_LOGGERS,
    REQUIRED_LOG_FIELDS,
    CorrelationIdFilter,
    configure_logging,
    create_json_formatter,
    get_logger,
)
from config.logging.config import DEFAULT_SERVICE_NAME, VALID_LOG_LEVELS


def _record(msg: str = "message", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestConfigureLogging:
    """Testes para configure_logging."""

    def test_configure_logging_default_level(self) -> None:
        """Configura logging com nível padrão INFO."""
        configure_logging()
        assert logging.getLogger().level == logging.INFO

    @pytest.mark.parametrize(
        ("level", "expected"),
        [("DEBUG", logging.DEBUG), ("warning", logging.WARNING), ("ERROR", logging.ERROR)],
    )
    def test_configure_logging_levels(self, level: str, expected: int) -> None:
        configure_logging(level=level)
        assert logging.getLogger().level == expected

    def test_configure_logging_invalid_level_raises(self) -> None:
        """Nível inválido levanta ValueError."""
        with pytest.raises(ValueError, match="Nível de log inválido"):
            configure_logging(level="INVALID")

    def test_configure_logging_replaces_handlers(self) -> None:
        root = logging.getLogger()
        root.handlers = [logging.NullHandler(), logging.NullHandler()]
        configure_logging()
        assert len(root.handlers) == 1
        assert any(isinstance(f, CorrelationIdFilter) for f in root.handlers[0].filters)

    def test_noisy_loggers_are_silenced_outside_debug(self) -> None:
        configure_logging(level="INFO")
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_constants(self) -> None:
        assert {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} == VALID_LOG_LEVELS
        assert DEFAULT_SERVICE_NAME == "crm_multicanal"
        assert "apscheduler" in NOISY_LOGGERS


class TestGetLogger:
    def test_get_logger_same_name_returns_same_instance(self) -> None:
        logger = get_logger("same.module")
        assert isinstance(logger, logging.Logger)
        assert logger is get_logger("same.module")


class TestCorrelationIdFilter:
    """Testes para CorrelationIdFilter."""

    def test_filter_adds_correlation_id_and_service(self) -> None:
        filter_ = CorrelationIdFilter("my_service", lambda: "corr-123")
        record = _record()

        assert filter_.filter(record) is True
        assert record.correlation_id == "corr-123"
        assert record.service == "my_service"

    def test_filter_preserves_explicit_correlation_id(self) -> None:
        """Filter preserva correlation_id passado via extra."""
        filter_ = CorrelationIdFilter("svc", lambda: "from-getter")
        record = _record()
        record.correlation_id = "explicit-id"

        filter_.filter(record)

        assert record.correlation_id == "explicit-id"

    def test_filter_uses_empty_string_when_no_getter(self) -> None:
        record = _record()
        CorrelationIdFilter("service_name").filter(record)
        assert record.correlation_id == ""

    def test_filter_injects_tenant_from_context(self) -> None:
        filter_ = CorrelationIdFilter("svc", tenant_id_getter=lambda: "tenant-9")
        record = _record()

        filter_.filter(record)

        assert record.tenant_id == "tenant-9"

    def test_filter_skips_empty_tenant_and_keeps_explicit(self) -> None:
        empty = _record()
        CorrelationIdFilter("svc", tenant_id_getter=lambda: "").filter(empty)
        explicit = _record()
        explicit.tenant_id = "t-explicit"
        CorrelationIdFilter("svc", tenant_id_getter=lambda: "t-context").filter(explicit)

        assert not hasattr(empty, "tenant_id")
        assert explicit.tenant_id == "t-explicit"


class TestCreateJsonFormatter:
    def test_required_log_fields_content(self) -> None:
        expected = ("asctime", "levelname", "name", "message", "correlation_id", "service")
        assert expected == REQUIRED_LOG_FIELDS
        assert FIELD_RENAME_MAP == {"levelname": "level", "name": "logger"}

    def test_json_formatter_renames_fields(self) -> None:
        """Saída JSON usa level/logger no lugar de levelname/name."""
        formatter = create_json_formatter()
        record = _record("channel_setup_completed")
        record.correlation_id = "abc-123"
        record.service = "crm_multicanal"
        record.channel_type = "telegram"

        payload = json.loads(formatter.format(record))

        assert payload["message"] == "channel_setup_completed"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "test"
        assert payload["correlation_id"] == "abc-123"
        assert payload["channel_type"] == "telegram"


class TestLoggingIntegration:
    def test_full_logging_flow(self) -> None:
        """Fluxo completo: configure, get_logger, log."""
        configure_logging(
            level="DEBUG",
            service_name="integration_test",
            correlation_id_getter=lambda: "int-test-001",
            tenant_id_getter=lambda: "t1",
        )
        logger = get_logger("integration.test")
        logger.debug("debug_event", extra={"custom_field": "value"})
        logger.info("info_event")
        logger.error("error_event")
