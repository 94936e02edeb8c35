"""
Metrics Sampler for hostwatch

Produces one MetricsSnapshot per tick from psutil.
CPU, memory and disk are single-shot readings; I/O-wait is a rate computed
from two successive cumulative CPU-times readings.

Important Notes:
    - All metrics are SYSTEM-WIDE, not per-process
    - The CPU-times baseline is owned by the caller and threaded through
      collect(); the sampler itself keeps no per-tick state

Author: Hostwatch Team
SPDX-License-Identifier: BUSL-1.1
"""

import logging
import math
from dataclasses import dataclass

import psutil

logger = logging.getLogger(__name__)

# Fields of psutil.cpu_times() that make up total CPU time. guest and
# guest_nice are already counted inside user and nice on Linux.
CPU_TIME_FIELDS = ("user", "nice", "system", "idle", "iowait", "irq", "softirq", "steal")

PERCENT_PRECISION = 1


class MetricCollectionError(Exception):
    """Raised when a metric provider fails and the tick must be skipped."""


@dataclass(frozen=True)
class CPUTimes:
    """Cumulative CPU time, in seconds, used as the I/O-wait baseline."""

    total: float
    iowait: float

    @classmethod
    def from_psutil(cls, times) -> "CPUTimes":
        """Build from a psutil scputimes tuple; fields absent on this platform count as 0."""
        total = sum(getattr(times, name, 0.0) for name in CPU_TIME_FIELDS)
        return cls(total=total, iowait=getattr(times, "iowait", 0.0))


@dataclass(frozen=True)
class MetricsSnapshot:
    """One tick's utilization readings, each rounded to one decimal place."""

    cpu_percent: float
    mem_percent: float
    disk_percent: float
    disk_path: str
    iowait_percent: float


def round_half_away(value: float, precision: int) -> float:
    """Round half away from zero at a fixed precision (10**precision)."""
    factor = 10**precision
    rounded = math.copysign(math.floor(abs(value) * factor + 0.5), value) / factor
    if rounded == 0:
        return 0.0
    return rounded


def compute_iowait_percent(
    current: CPUTimes, previous: CPUTimes | None
) -> tuple[float, CPUTimes]:
    """
    Compute the share of CPU time spent in I/O-wait since the previous reading.

    Args:
        current: Latest cumulative CPU times
        previous: Baseline from the previous tick, or None on the first tick

    Returns:
        (percent in [0, 100], new baseline). The new baseline is always
        ``current`` so that drift never accumulates across ticks.
    """
    if previous is None:
        return 0.0, current

    total_delta = current.total - previous.total
    if total_delta <= 0:
        return 0.0, current

    iowait_delta = current.iowait - previous.iowait
    if iowait_delta <= 0:
        return 0.0, current

    percent = (iowait_delta / total_delta) * 100
    return max(0.0, min(100.0, percent)), current


class MetricsSampler:
    """
    Reads system metrics from psutil.

    Example:
        sampler = MetricsSampler(disk_path="/")
        sampler.prime()
        baseline = None
        snapshot, baseline = sampler.collect(baseline)
        print(f"CPU: {snapshot.cpu_percent}%")
    """

    def __init__(self, disk_path: str = "/"):
        self.disk_path = disk_path

    def prime(self) -> None:
        """
        Prime psutil's CPU percent calculation.

        The first non-blocking cpu_percent() call has no reference point and
        returns a meaningless 0.0, so it is discarded here.
        """
        try:
            psutil.cpu_percent(interval=None)
        except Exception as e:
            raise MetricCollectionError(f"priming CPU metrics: {e}") from e
        logger.debug("CPU percent primed")

    def cpu_percent(self) -> float:
        try:
            return float(psutil.cpu_percent(interval=None))
        except Exception as e:
            raise MetricCollectionError(f"fetching CPU percent: {e}") from e

    def memory_percent(self) -> float:
        try:
            return float(psutil.virtual_memory().percent)
        except Exception as e:
            raise MetricCollectionError(f"fetching memory: {e}") from e

    def disk_percent(self) -> float:
        try:
            return float(psutil.disk_usage(self.disk_path).percent)
        except Exception as e:
            raise MetricCollectionError(
                f"fetching disk usage for {self.disk_path}: {e}"
            ) from e

    def cpu_times(self) -> CPUTimes:
        try:
            times = psutil.cpu_times(percpu=False)
        except Exception as e:
            raise MetricCollectionError(f"fetching CPU times: {e}") from e
        return CPUTimes.from_psutil(times)

    def iowait_percent(self, previous: CPUTimes | None) -> tuple[float, CPUTimes | None]:
        """
        Current I/O-wait percent and the baseline for the next tick.

        A provider failure is not fatal: it is logged, 0.0 is reported and
        the previous baseline is kept.
        """
        try:
            current = self.cpu_times()
        except MetricCollectionError as e:
            logger.warning(f"fetching io wait percent failed: {e}")
            return 0.0, previous
        return compute_iowait_percent(current, previous)

    def collect(
        self, previous: CPUTimes | None
    ) -> tuple[MetricsSnapshot, CPUTimes | None]:
        """
        Collect a full snapshot.

        Args:
            previous: CPU-times baseline returned by the previous call

        Returns:
            (snapshot, baseline to pass to the next call)

        Raises:
            MetricCollectionError: If CPU, memory or disk cannot be read. The
                baseline is not advanced in that case.
        """
        cpu = self.cpu_percent()
        mem = self.memory_percent()
        disk = self.disk_percent()
        iowait, baseline = self.iowait_percent(previous)

        snapshot = MetricsSnapshot(
            cpu_percent=round_half_away(cpu, PERCENT_PRECISION),
            mem_percent=round_half_away(mem, PERCENT_PRECISION),
            disk_percent=round_half_away(disk, PERCENT_PRECISION),
            disk_path=self.disk_path,
            iowait_percent=round_half_away(iowait, PERCENT_PRECISION),
        )
        return snapshot, baseline
