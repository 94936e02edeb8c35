"""
hostwatch Monitor Module

Threshold-based resource monitoring with webhook alerts.
"""

from hostwatch.monitor.evaluator import Reporter, evaluate
from hostwatch.monitor.runner import MonitorLoop
from hostwatch.monitor.sampler import (
    CPUTimes,
    MetricCollectionError,
    MetricsSampler,
    MetricsSnapshot,
)
from hostwatch.monitor.webhook import Alert, WebhookDispatcher

__all__ = [
    "Alert",
    "CPUTimes",
    "MetricCollectionError",
    "MetricsSampler",
    "MetricsSnapshot",
    "MonitorLoop",
    "Reporter",
    "WebhookDispatcher",
    "evaluate",
]
