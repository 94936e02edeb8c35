"""
Threshold Evaluator for hostwatch

Compares a snapshot against the configured thresholds, prints the status
line and hands every violation to the alert dispatcher.

Author: Hostwatch Team
SPDX-License-Identifier: BUSL-1.1
"""

import logging

from hostwatch.config import ThresholdConfig
from hostwatch.monitor.sampler import MetricsSnapshot
from hostwatch.monitor.webhook import Alert, WebhookDispatcher
from hostwatch.output import now_timestamp, print_line

logger = logging.getLogger(__name__)


def format_reason(resource: str, actual: float, threshold: float) -> str:
    return f"{resource} usage {actual:.1f}% exceeds threshold {threshold:.1f}%"


def format_status_line(snapshot: MetricsSnapshot, timestamp: str) -> str:
    return (
        f"[{timestamp}] CPU: {snapshot.cpu_percent:5.1f}% | "
        f"MEM: {snapshot.mem_percent:5.1f}% | "
        f"DISK({snapshot.disk_path}): {snapshot.disk_percent:5.1f}% | "
        f"IOWAIT: {snapshot.iowait_percent:5.1f}%"
    )


def _make_alert(resource: str, actual: float, threshold: float) -> Alert:
    return Alert(
        resource=resource,
        actual=actual,
        threshold=threshold,
        reason=format_reason(resource, actual, threshold),
    )


def evaluate(snapshot: MetricsSnapshot, config: ThresholdConfig) -> list[Alert]:
    """
    Check a snapshot against the thresholds.

    A metric violates its threshold only when strictly greater than it. The
    I/O-wait check is skipped entirely when its threshold is <= 0.

    Returns:
        Alerts in CPU, Memory, Disk, IO Wait order (empty if none)
    """
    alerts = []

    if snapshot.cpu_percent > config.cpu_threshold:
        alerts.append(_make_alert("CPU", snapshot.cpu_percent, config.cpu_threshold))

    if snapshot.mem_percent > config.mem_threshold:
        alerts.append(_make_alert("Memory", snapshot.mem_percent, config.mem_threshold))

    # Path in the label keeps alerts from several disk instances apart
    if snapshot.disk_percent > config.disk_threshold:
        alerts.append(
            _make_alert(
                f"Disk {snapshot.disk_path}", snapshot.disk_percent, config.disk_threshold
            )
        )

    if config.iowait_enabled and snapshot.iowait_percent > config.iowait_threshold:
        alerts.append(
            _make_alert("IO Wait", snapshot.iowait_percent, config.iowait_threshold)
        )

    return alerts


class Reporter:
    """Prints the per-tick status line and dispatches alerts."""

    def __init__(self, config: ThresholdConfig, dispatcher: WebhookDispatcher):
        self.config = config
        self.dispatcher = dispatcher

    def report(self, snapshot: MetricsSnapshot) -> list[Alert]:
        """
        Report one snapshot.

        Every alert is printed and passed to the dispatcher, whether or not a
        webhook is configured; the dispatcher decides if anything is sent.
        """
        print_line(format_status_line(snapshot, now_timestamp()))

        alerts = evaluate(snapshot, self.config)
        for alert in alerts:
            print_line(f"ALERT: {alert.reason}")
            self.dispatcher.dispatch(alert)

        if alerts:
            logger.debug(f"{len(alerts)} alert(s) raised this tick")
        return alerts
