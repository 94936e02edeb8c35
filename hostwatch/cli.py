import argparse
import logging
import os
import signal
import sys

from hostwatch import __version__
from hostwatch.config import (
    DEFAULT_ALERT_STATUS,
    DEFAULT_ALERT_TYPE,
    DEFAULT_CPU_THRESHOLD,
    DEFAULT_DISK_PATH,
    DEFAULT_DISK_THRESHOLD,
    DEFAULT_IOWAIT_THRESHOLD,
    DEFAULT_MEM_THRESHOLD,
    DEFAULT_PLATFORM,
    DEFAULT_SERVICE_NAME,
    WEBHOOK_URL_ENV,
    ThresholdConfig,
    parse_duration,
    resolve_hostname,
)
from hostwatch.monitor.evaluator import Reporter
from hostwatch.monitor.runner import MonitorLoop
from hostwatch.monitor.sampler import MetricCollectionError, MetricsSampler
from hostwatch.monitor.webhook import WebhookDispatcher
from hostwatch.output import print_error, print_line

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _duration(value: str) -> float:
    try:
        return parse_duration(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hostwatch",
        description="Sample host CPU, memory, disk and I/O-wait usage and alert on thresholds",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"The webhook URL may also be set with the {WEBHOOK_URL_ENV} environment variable.",
    )
    parser.add_argument("--version", "-V", action="version", version=f"hostwatch {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    thresholds = parser.add_argument_group("thresholds")
    thresholds.add_argument(
        "--cpu",
        type=float,
        default=DEFAULT_CPU_THRESHOLD,
        help="CPU usage alert threshold as a percentage",
    )
    thresholds.add_argument(
        "--mem",
        type=float,
        default=DEFAULT_MEM_THRESHOLD,
        help="Memory usage alert threshold as a percentage",
    )
    thresholds.add_argument(
        "--disk",
        type=float,
        default=DEFAULT_DISK_THRESHOLD,
        help="Disk usage alert threshold as a percentage",
    )
    thresholds.add_argument(
        "--io-wait",
        type=float,
        default=DEFAULT_IOWAIT_THRESHOLD,
        help="IO wait percentage alert threshold (set <=0 to disable)",
    )
    thresholds.add_argument(
        "--disk-path",
        default=DEFAULT_DISK_PATH,
        help="Filesystem path to monitor for disk usage",
    )
    thresholds.add_argument(
        "--interval",
        type=_duration,
        default="10s",
        help="Sampling interval (e.g. 10s, 1m)",
    )

    webhook = parser.add_argument_group("webhook")
    webhook.add_argument(
        "--webhook-url",
        default=os.environ.get(WEBHOOK_URL_ENV, ""),
        help="Webhook endpoint to post alerts (required for remote notifications)",
    )
    webhook.add_argument(
        "--webhook-timeout",
        type=_duration,
        default="10s",
        help="Timeout for a single webhook request",
    )
    webhook.add_argument(
        "--service-name",
        default=DEFAULT_SERVICE_NAME,
        help="Value for the service field in the webhook payload",
    )
    webhook.add_argument(
        "--alert-type",
        default=DEFAULT_ALERT_TYPE,
        help="Value for the type field in the webhook payload",
    )
    webhook.add_argument(
        "--alert-status",
        default=DEFAULT_ALERT_STATUS,
        help="Status string stored in payload data.status",
    )
    webhook.add_argument(
        "--account-id",
        default="",
        help="Optional account identifier added to payload data.accountId",
    )
    webhook.add_argument(
        "--account-name",
        default="",
        help="Optional account name added to payload data.accountName",
    )
    webhook.add_argument(
        "--platform",
        default=DEFAULT_PLATFORM,
        help="Platform value stored in payload data.platform",
    )
    return parser


def config_from_args(args: argparse.Namespace, hostname: str | None = None) -> ThresholdConfig:
    """Build a validated ThresholdConfig; raises ValueError on bad thresholds."""
    return ThresholdConfig(
        cpu_threshold=args.cpu,
        mem_threshold=args.mem,
        disk_threshold=args.disk,
        iowait_threshold=args.io_wait,
        disk_path=args.disk_path,
        interval=args.interval,
        webhook_url=args.webhook_url,
        service_name=args.service_name,
        alert_type=args.alert_type,
        alert_status=args.alert_status,
        account_id=args.account_id,
        account_name=args.account_name,
        platform=args.platform,
        hostname=hostname if hostname is not None else resolve_hostname(),
        webhook_timeout=args.webhook_timeout,
    )


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)
    # Suppress noisy connection-pool messages in normal operation
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _install_signal_handlers(loop: MonitorLoop) -> None:
    def handle_signal(signum, frame):
        if not loop.stopped:
            print_line("\nReceived interrupt signal, shutting down...")
        loop.stop()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = config_from_args(args)
    except ValueError as e:
        print_error(str(e))
        return 1

    if not config.webhook_url:
        logger.info("webhook URL not configured; alerts will not be sent to a remote endpoint")

    dispatcher = WebhookDispatcher(config)
    loop = MonitorLoop(config, MetricsSampler(config.disk_path), Reporter(config, dispatcher))
    _install_signal_handlers(loop)

    try:
        loop.run()
    except KeyboardInterrupt:
        print_line("\nReceived interrupt signal, shutting down...")
    except MetricCollectionError as e:
        logger.error(f"monitoring failed: {e}")
        return 1
    finally:
        dispatcher.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
