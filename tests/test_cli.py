"""Tests for the hostwatch command line entry point."""

import signal
from unittest.mock import MagicMock, patch

import pytest

from hostwatch.cli import _install_signal_handlers, build_parser, config_from_args, main
from hostwatch.monitor.sampler import MetricCollectionError


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("HOSTWATCH_WEBHOOK_URL", raising=False)
        args = build_parser().parse_args([])

        assert args.cpu == 80.0
        assert args.mem == 80.0
        assert args.disk == 80.0
        assert args.io_wait == 30.0
        assert args.disk_path == "/"
        assert args.interval == pytest.approx(10.0)
        assert args.webhook_timeout == pytest.approx(10.0)
        assert args.webhook_url == ""
        assert args.verbose is False

    def test_flags(self):
        args = build_parser().parse_args(
            [
                "--cpu", "90",
                "--io-wait", "0",
                "--disk-path", "/data",
                "--interval", "1m30s",
                "--webhook-url", "https://hooks.example.com/a",
                "--account-id", "acct-1",
                "--platform", "k8s",
            ]
        )

        assert args.cpu == 90.0
        assert args.io_wait == 0.0
        assert args.disk_path == "/data"
        assert args.interval == pytest.approx(90.0)
        assert args.webhook_url == "https://hooks.example.com/a"
        assert args.account_id == "acct-1"
        assert args.platform == "k8s"

    def test_webhook_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("HOSTWATCH_WEBHOOK_URL", "https://env.example.com/hook")

        args = build_parser().parse_args([])

        assert args.webhook_url == "https://env.example.com/hook"

    def test_invalid_interval_exits(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--interval", "soon"])

        assert exc_info.value.code == 2
        assert "invalid duration" in capsys.readouterr().err

    def test_config_from_args(self):
        args = build_parser().parse_args(["--mem", "75", "--alert-status", "critical"])

        config = config_from_args(args, hostname="web-01")

        assert config.mem_threshold == 75.0
        assert config.alert_status == "critical"
        assert config.hostname == "web-01"

    def test_config_from_args_resolves_hostname(self):
        args = build_parser().parse_args([])

        with patch("hostwatch.cli.resolve_hostname", return_value="db-02"):
            config = config_from_args(args)

        assert config.hostname == "db-02"


class TestMain:
    """Tests for main() exit codes."""

    @pytest.fixture(autouse=True)
    def no_signals(self):
        with patch("hostwatch.cli._install_signal_handlers") as mock:
            yield mock

    @pytest.fixture
    def mock_loop(self):
        with patch("hostwatch.cli.MonitorLoop") as mock:
            yield mock.return_value

    def test_invalid_threshold_exits_nonzero(self, mock_loop):
        assert main(["--cpu", "0"]) == 1
        mock_loop.run.assert_not_called()

    @pytest.mark.parametrize("flag", ["--cpu", "--mem", "--disk", "--io-wait"])
    def test_nan_threshold_exits_nonzero(self, mock_loop, flag):
        assert main([flag, "nan"]) == 1
        mock_loop.run.assert_not_called()

    def test_invalid_interval_value_exits_nonzero(self, mock_loop):
        assert main(["--interval", "0s"]) == 1
        mock_loop.run.assert_not_called()

    def test_clean_stop_exits_zero(self, mock_loop):
        assert main([]) == 0
        mock_loop.run.assert_called_once()

    def test_keyboard_interrupt_exits_zero(self, mock_loop, capsys):
        mock_loop.run.side_effect = KeyboardInterrupt

        assert main([]) == 0
        assert "shutting down" in capsys.readouterr().out

    def test_priming_failure_exits_nonzero(self, mock_loop):
        mock_loop.run.side_effect = MetricCollectionError("priming CPU metrics: boom")

        assert main([]) == 1

    def test_signal_handlers_installed(self, mock_loop, no_signals):
        main([])

        no_signals.assert_called_once_with(mock_loop)


class TestSignalHandlers:
    """Tests for SIGINT/SIGTERM handling."""

    def test_signal_stops_loop(self, capsys):
        loop = MagicMock()
        loop.stopped = False

        with patch("hostwatch.cli.signal.signal") as mock_signal:
            _install_signal_handlers(loop)

        registered = {c.args[0]: c.args[1] for c in mock_signal.call_args_list}
        assert set(registered) == {signal.SIGINT, signal.SIGTERM}

        registered[signal.SIGTERM](signal.SIGTERM, None)

        loop.stop.assert_called_once()
        assert "Received interrupt signal, shutting down..." in capsys.readouterr().out
