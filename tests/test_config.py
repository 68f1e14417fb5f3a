"""
Configuration tests.
"""

from unittest.mock import patch

from priority_review.core import config


def test_default_tolerance():
    assert config.get_weight_tolerance() == config.WEIGHT_SUM_TOLERANCE
    assert not any("WEIGHT_SUM_TOLERANCE" in issue for issue in config.validate_config())


def test_invalid_tolerance_reported():
    with patch.object(config, "WEIGHT_SUM_TOLERANCE", 0.5):
        issues = config.validate_config()
    assert any("WEIGHT_SUM_TOLERANCE" in issue for issue in issues)


def test_invalid_port_reported():
    with patch.object(config, "API_PORT", 70000):
        assert any("API_PORT" in issue for issue in config.validate_config())


def test_audit_flag_reads_environment(monkeypatch):
    monkeypatch.setenv("AUDIT_ENABLED", "true")
    assert config.is_audit_enabled() is True
    monkeypatch.setenv("AUDIT_ENABLED", "false")
    assert config.is_audit_enabled() is False
