"""
Threshold configuration for hostwatch.

Holds the alert thresholds, sampling cadence and webhook metadata.
Validated once at startup and never mutated afterwards.

Author: Hostwatch Team
SPDX-License-Identifier: BUSL-1.1
"""

import logging
import math
import re
import socket
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_CPU_THRESHOLD = 80.0
DEFAULT_MEM_THRESHOLD = 80.0
DEFAULT_DISK_THRESHOLD = 80.0
DEFAULT_IOWAIT_THRESHOLD = 30.0
DEFAULT_DISK_PATH = "/"
DEFAULT_INTERVAL = 10.0
DEFAULT_WEBHOOK_TIMEOUT = 10.0
DEFAULT_SERVICE_NAME = "system-monitor-service"
DEFAULT_ALERT_TYPE = "accountAnomaly"
DEFAULT_ALERT_STATUS = "warning"
DEFAULT_PLATFORM = "system"

WEBHOOK_URL_ENV = "HOSTWATCH_WEBHOOK_URL"

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: str) -> float:
    """
    Parse a duration string into seconds.

    Accepts Go-style durations ("500ms", "10s", "1m30s", "1h") or a bare
    number of seconds ("2.5").

    Raises:
        ValueError: If the string is not a valid duration
    """
    text = value.strip()
    if not text:
        raise ValueError("empty duration")

    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            raise ValueError(f"invalid duration: {value!r}")
        return seconds

    sign = 1.0
    if text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if not match:
            raise ValueError(f"invalid duration: {value!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()

    if pos == 0:
        raise ValueError(f"invalid duration: {value!r}")
    return sign * total


def format_duration(seconds: float) -> str:
    """
    Format seconds compactly for display.

    Zero-valued units are left out: 90 -> "1m30s", and 3600 -> "1h" rather
    than "1h0m0s".
    """
    if seconds < 1:
        return f"{seconds * 1000:g}ms"
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(int(minutes), 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs or not parts:
        parts.append(f"{secs:g}s")
    return "".join(parts)


def resolve_hostname() -> str:
    """Return the local host name, or "unknown" if it cannot be determined."""
    try:
        hostname = socket.gethostname()
    except OSError as e:
        logger.warning(f"could not determine host name: {e}")
        return "unknown"
    return hostname or "unknown"


@dataclass(frozen=True)
class ThresholdConfig:
    """
    Alert thresholds and webhook metadata.

    Attributes:
        cpu_threshold: CPU usage alert threshold in percent, (0, 100]
        mem_threshold: Memory usage alert threshold in percent, (0, 100]
        disk_threshold: Disk usage alert threshold in percent, (0, 100]
        iowait_threshold: I/O-wait alert threshold in percent; <= 0 disables it
        disk_path: Filesystem path examined for disk usage
        interval: Sampling interval in seconds
        webhook_url: Alert endpoint; empty means alerts stay local
        service_name: Value of the payload "service" field
        alert_type: Value of the payload "type" field
        alert_status: Value of the payload data.status field
        account_id: Optional data.accountId
        account_name: Optional data.accountName
        platform: Value of the payload data.platform field
        hostname: Value of the payload data.host field
        webhook_timeout: Upper bound in seconds for one webhook POST
    """

    cpu_threshold: float = DEFAULT_CPU_THRESHOLD
    mem_threshold: float = DEFAULT_MEM_THRESHOLD
    disk_threshold: float = DEFAULT_DISK_THRESHOLD
    iowait_threshold: float = DEFAULT_IOWAIT_THRESHOLD
    disk_path: str = DEFAULT_DISK_PATH
    interval: float = DEFAULT_INTERVAL
    webhook_url: str = ""
    service_name: str = DEFAULT_SERVICE_NAME
    alert_type: str = DEFAULT_ALERT_TYPE
    alert_status: str = DEFAULT_ALERT_STATUS
    account_id: str = ""
    account_name: str = ""
    platform: str = DEFAULT_PLATFORM
    hostname: str = "unknown"
    webhook_timeout: float = DEFAULT_WEBHOOK_TIMEOUT

    def __post_init__(self):
        for value in (self.cpu_threshold, self.mem_threshold, self.disk_threshold):
            if not math.isfinite(value) or value <= 0 or value > 100:
                raise ValueError("thresholds must be within (0, 100]")
        if math.isnan(self.iowait_threshold) or self.iowait_threshold > 100:
            raise ValueError("io-wait threshold must be <= 100")
        if not math.isfinite(self.interval) or self.interval <= 0:
            raise ValueError("interval must be greater than zero")
        if not math.isfinite(self.webhook_timeout) or self.webhook_timeout <= 0:
            raise ValueError("webhook timeout must be greater than zero")

    @property
    def iowait_enabled(self) -> bool:
        """Whether the I/O-wait check is active."""
        return self.iowait_threshold > 0
