"""
Structured logging tests - operation formatting and payload sanitization.
"""

import logging
import pytest

from util.logging import StructuredLogger, sanitize_payload


@pytest.fixture
def structured_logger():
    return StructuredLogger("priority_review.test")


def test_log_operation_format(structured_logger, caplog):
    with caplog.at_level(logging.INFO, logger="priority_review.test"):
        structured_logger.log_operation("weights.set", "success", {"weight_id": "a"})

    assert "Operation: weights.set, Status: success, Details: {'weight_id': 'a'}" in caplog.text


def test_log_weight_change_rounds(structured_logger, caplog):
    with caplog.at_level(logging.INFO, logger="priority_review.test"):
        structured_logger.log_weight_change("a", 1.0, 1.0 / 1.5)

    assert "'normalized': 0.666667" in caplog.text


def test_log_mutation_failure_is_warning(structured_logger, caplog):
    with caplog.at_level(logging.WARNING, logger="priority_review.test"):
        structured_logger.log_mutation_failure("3-Duration-task", RuntimeError("row locked"))

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert "3-Duration-task" in record.getMessage()


def test_sanitize_payload_redacts_secrets():
    payload = {"token": "abc", "nested": {"password": "x", "key": "0-Skills-worker"}, "note": "n" * 150}

    sanitized = sanitize_payload(payload)

    assert sanitized["token"] == "[REDACTED]"
    assert sanitized["nested"] == {"password": "[REDACTED]", "key": "0-Skills-worker"}
    assert sanitized["note"].endswith("...")
    assert len(sanitized["note"]) == 103


def test_sanitize_payload_reveal():
    assert sanitize_payload({"token": "abc"}, reveal_sensitive=True) == {"token": "abc"}
