"""Tests for hostwatch configuration and duration parsing."""

import dataclasses
from unittest.mock import patch

import pytest

from hostwatch.config import (
    ThresholdConfig,
    format_duration,
    parse_duration,
    resolve_hostname,
)


class TestThresholdConfig:
    """Tests for ThresholdConfig validation."""

    def test_defaults(self):
        """Test default configuration values."""
        config = ThresholdConfig()
        assert config.cpu_threshold == 80.0
        assert config.mem_threshold == 80.0
        assert config.disk_threshold == 80.0
        assert config.iowait_threshold == 30.0
        assert config.disk_path == "/"
        assert config.interval == 10.0
        assert config.webhook_url == ""
        assert config.service_name == "system-monitor-service"
        assert config.alert_type == "accountAnomaly"
        assert config.alert_status == "warning"
        assert config.platform == "system"
        assert config.iowait_enabled is True

    @pytest.mark.parametrize("field", ["cpu_threshold", "mem_threshold", "disk_threshold"])
    @pytest.mark.parametrize("value", [0.0, -1.0, 100.1])
    def test_threshold_out_of_range(self, field, value):
        with pytest.raises(ValueError, match=r"thresholds must be within \(0, 100\]"):
            ThresholdConfig(**{field: value})

    @pytest.mark.parametrize("field", ["cpu_threshold", "mem_threshold", "disk_threshold"])
    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_threshold_not_finite(self, field, value):
        with pytest.raises(ValueError, match=r"thresholds must be within \(0, 100\]"):
            ThresholdConfig(**{field: value})

    def test_threshold_upper_bound_inclusive(self):
        config = ThresholdConfig(cpu_threshold=100.0, mem_threshold=100.0, disk_threshold=100.0)
        assert config.cpu_threshold == 100.0

    @pytest.mark.parametrize("value", [0.0, -10.0])
    def test_non_positive_iowait_disables_check(self, value):
        config = ThresholdConfig(iowait_threshold=value)
        assert config.iowait_enabled is False

    def test_iowait_above_100(self):
        with pytest.raises(ValueError, match="io-wait threshold must be <= 100"):
            ThresholdConfig(iowait_threshold=100.5)

    def test_iowait_nan_rejected(self):
        """Test that NaN is not mistaken for a disabled I/O-wait check."""
        with pytest.raises(ValueError, match="io-wait threshold must be <= 100"):
            ThresholdConfig(iowait_threshold=float("nan"))

    @pytest.mark.parametrize("value", [0.0, -1.0])
    def test_interval_must_be_positive(self, value):
        with pytest.raises(ValueError, match="interval must be greater than zero"):
            ThresholdConfig(interval=value)

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_interval_must_be_finite(self, value):
        with pytest.raises(ValueError, match="interval must be greater than zero"):
            ThresholdConfig(interval=value)

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_webhook_timeout_must_be_finite(self, value):
        with pytest.raises(ValueError, match="webhook timeout"):
            ThresholdConfig(webhook_timeout=value)

    def test_webhook_timeout_must_be_positive(self):
        with pytest.raises(ValueError, match="webhook timeout"):
            ThresholdConfig(webhook_timeout=0)

    def test_config_is_immutable(self):
        config = ThresholdConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.cpu_threshold = 50.0


class TestParseDuration:
    """Tests for parse_duration."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("10s", 10.0),
            ("1m", 60.0),
            ("1m30s", 90.0),
            ("500ms", 0.5),
            ("1h", 3600.0),
            ("1.5s", 1.5),
            ("2.5", 2.5),
            (" 30 ", 30.0),
            ("-1s", -1.0),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_duration(text) == pytest.approx(expected)

    @pytest.mark.parametrize("text", ["", "abc", "10x", "s", "10s junk", "nan", "inf"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_duration(text)


class TestFormatDuration:
    """Tests for format_duration."""

    @pytest.mark.parametrize(
        "seconds,expected",
        [(10, "10s"), (90, "1m30s"), (3600, "1h"), (0.5, "500ms"), (2.5, "2.5s")],
    )
    def test_format(self, seconds, expected):
        assert format_duration(seconds) == expected


class TestResolveHostname:
    """Tests for resolve_hostname."""

    @patch("hostwatch.config.socket.gethostname", return_value="web-01")
    def test_hostname(self, mock_gethostname):
        assert resolve_hostname() == "web-01"

    @patch("hostwatch.config.socket.gethostname", side_effect=OSError("no name"))
    def test_fallback_on_error(self, mock_gethostname):
        assert resolve_hostname() == "unknown"

    @patch("hostwatch.config.socket.gethostname", return_value="")
    def test_fallback_on_empty(self, mock_gethostname):
        assert resolve_hostname() == "unknown"
