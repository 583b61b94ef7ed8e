import logging

from core.error_handler import (
    StructuredLogger,
    get_correlation_id,
    set_correlation_id,
)


def test_structured_logger_redacts_sensitive_keys():
    logger = StructuredLogger("tests")

    # allowlist: placeholder values, not real secrets
    data = {
        "openai_api_key": "placeholder_key",  # pragma: allowlist secret
        "email": "cfo@example.com",
        "tool_name": "query_metrics",
    }
    sanitized = logger._sanitize_data(data)

    assert sanitized["openai_api_key"] == "[REDACTED]"
    assert sanitized["email"] == "[REDACTED]"
    assert sanitized["tool_name"] == "query_metrics"


def test_structured_logger_redacts_nested_values():
    logger = StructuredLogger("tests")

    sanitized = logger._sanitize_data(
        {"request": {"headers": [{"name": "Authorization", "value": "Bearer x"}]}}
    )

    assert sanitized["request"]["headers"][0]["value"] == "[REDACTED]"
    assert sanitized["request"]["headers"][0]["name"] == "Authorization"


def test_structured_logger_header_like_redaction():
    logger = StructuredLogger("tests")

    header = {"name": "Authorization", "value": "Bearer placeholder_token"}
    redacted = logger._redact_header_like(header)

    assert redacted is not None
    assert redacted["value"] == "[REDACTED]"


def test_non_sensitive_header_is_left_alone():
    logger = StructuredLogger("tests")

    assert logger._redact_header_like({"name": "Accept", "value": "json"}) is None


def test_log_record_carries_correlation_id(caplog):
    set_correlation_id("cid-123")
    logger = StructuredLogger("tests.structured")

    with caplog.at_level(logging.WARNING, logger="tests.structured"):
        logger.warning("Tool failed", tool_name="get_products", token="abc")

    record = caplog.records[-1]
    assert "cid-123" in record.getMessage()
    assert record.structured_data == {
        "correlation_id": "cid-123",
        "tool_name": "get_products",
        "token": "[REDACTED]",
    }
    set_correlation_id(None)


def test_correlation_id_is_minted_when_missing():
    set_correlation_id(None)

    first = get_correlation_id()

    assert first
    assert get_correlation_id() == first
    set_correlation_id(None)
