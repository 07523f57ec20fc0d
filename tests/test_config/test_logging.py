"""Testes de config.logging."""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock

import pytest

from config.logging import (
    REDACTED,
    CorrelationIdFilter,
    SensitiveFieldFilter,
    configure_logging,
    create_json_formatter,
    log_fallback,
)


def _record(msg: str = "event", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="app.test",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestConfigureLogging:
    """Testes de configure_logging."""

    @pytest.mark.parametrize(
        ("level", "expected"),
        [("INFO", logging.INFO), ("debug", logging.DEBUG), ("Warning", logging.WARNING)],
    )
    def test_sets_root_level(self, level: str, expected: int) -> None:
        configure_logging(level=level)

        assert logging.getLogger().level == expected

    def test_invalid_level_raises(self) -> None:
        with pytest.raises(ValueError, match="Nível de log inválido"):
            configure_logging(level="VERBOSE")

    def test_single_handler_with_context_and_redaction(self) -> None:
        root = logging.getLogger()
        root.handlers = [logging.NullHandler(), logging.NullHandler()]

        configure_logging()

        [handler] = root.handlers
        kinds = {type(f) for f in handler.filters}
        assert kinds == {CorrelationIdFilter, SensitiveFieldFilter}

    def test_http_client_loggers_are_quiet(self) -> None:
        configure_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING


class TestCorrelationIdFilter:
    """Testes do CorrelationIdFilter."""

    def test_injects_context_correlation_id(self) -> None:
        record = _record()

        assert CorrelationIdFilter("kyc_relay", lambda: "corr-123").filter(record) is True
        assert record.correlation_id == "corr-123"
        assert record.service == "kyc_relay"

    def test_explicit_correlation_id_wins(self) -> None:
        record = _record(correlation_id="explicit")

        CorrelationIdFilter("kyc_relay", lambda: "ctx").filter(record)

        assert record.correlation_id == "explicit"

    def test_without_getter_uses_empty(self) -> None:
        record = _record()

        CorrelationIdFilter("kyc_relay").filter(record)

        assert record.correlation_id == ""


class TestSensitiveFieldFilter:
    """Testes do mascaramento de campos sensíveis."""

    def test_masks_signature_and_payload(self) -> None:
        record = _record(claimed_signature="deadbeef", raw_payload='{"a":1}', status_code=200)

        assert SensitiveFieldFilter().filter(record) is True
        assert record.claimed_signature == REDACTED
        assert record.raw_payload == REDACTED
        assert record.status_code == 200

    def test_custom_field_set(self) -> None:
        record = _record(subject_id="user_42")

        SensitiveFieldFilter({"subject_id"}).filter(record)

        assert record.subject_id == REDACTED


class TestJsonFormatter:
    """Testes do formatter JSON."""

    def test_renamed_fields_and_extra(self) -> None:
        record = _record("event_delivered", correlation_id="abc", service="kyc_relay", status_code=200)

        payload = json.loads(create_json_formatter().format(record))

        assert payload["message"] == "event_delivered"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "app.test"
        assert payload["correlation_id"] == "abc"
        assert payload["service"] == "kyc_relay"
        assert payload["status_code"] == 200
        assert "levelname" not in payload

    def test_keeps_non_ascii(self) -> None:
        record = _record("configuração", correlation_id="", service="kyc_relay")

        assert "configuração" in create_json_formatter().format(record)


class TestLogFallback:
    """Testes de log_fallback."""

    def test_event_name_and_extra(self) -> None:
        logger = MagicMock(spec=logging.Logger)

        log_fallback(logger, "dead_letter", reason="record_failed", level=logging.ERROR)

        level, message = logger.log.call_args.args
        assert level == logging.ERROR
        assert message == "fallback_applied"
        assert logger.log.call_args.kwargs["extra"] == {
            "fallback_used": True,
            "component": "dead_letter",
            "reason": "record_failed",
        }

    def test_optional_fields_omitted(self) -> None:
        logger = MagicMock(spec=logging.Logger)

        log_fallback(logger, "webhook_signature", elapsed_ms=1.5)

        extra = logger.log.call_args.kwargs["extra"]
        assert "reason" not in extra
        assert extra["elapsed_ms"] == 1.5
