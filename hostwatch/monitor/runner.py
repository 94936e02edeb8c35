"""
Monitoring Loop for hostwatch

Drives sample -> evaluate -> dispatch on a fixed cadence on a single
thread. The wait between ticks is a threading.Event, so stop() takes
effect immediately.

Author: Hostwatch Team
SPDX-License-Identifier: BUSL-1.1
"""

import logging
import threading
import time
from collections.abc import Callable

from hostwatch.config import ThresholdConfig, format_duration
from hostwatch.monitor.evaluator import Reporter
from hostwatch.monitor.sampler import (
    CPUTimes,
    MetricCollectionError,
    MetricsSampler,
    MetricsSnapshot,
)
from hostwatch.output import print_line

logger = logging.getLogger(__name__)


def format_banner(config: ThresholdConfig) -> str:
    if config.iowait_enabled:
        iowait = f"IOWait>{config.iowait_threshold:.1f}%"
    else:
        iowait = "IOWait disabled"
    return (
        f"Monitoring started: CPU>{config.cpu_threshold:.1f}%, "
        f"Mem>{config.mem_threshold:.1f}%, "
        f"Disk({config.disk_path})>{config.disk_threshold:.1f}%, "
        f"{iowait}, interval={format_duration(config.interval)}"
    )


class MonitorLoop:
    """
    Sequential, cancellable monitoring loop.

    Ticks fire every ``config.interval`` seconds measured from start. A tick
    that runs long delays the next one; ticks missed meanwhile are dropped
    rather than queued.

    Example:
        loop = MonitorLoop(config, MetricsSampler(config.disk_path), reporter)
        signal.signal(signal.SIGTERM, lambda *_: loop.stop())
        loop.run()
    """

    def __init__(
        self,
        config: ThresholdConfig,
        sampler: MetricsSampler,
        reporter: Reporter,
        stop_event: threading.Event | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.sampler = sampler
        self.reporter = reporter
        self._stop_event = stop_event or threading.Event()
        self._clock = clock

        # I/O-wait baseline, only touched by run_once()
        self._baseline: CPUTimes | None = None
        self.tick_count = 0

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Request the loop to exit; safe to call from a signal handler."""
        self._stop_event.set()

    def run_once(self) -> MetricsSnapshot | None:
        """
        Run one tick.

        Returns:
            The reported snapshot, or None if collection failed and the tick
            was skipped
        """
        self.tick_count += 1
        try:
            snapshot, self._baseline = self.sampler.collect(self._baseline)
        except MetricCollectionError as e:
            logger.error(f"collecting metrics failed: {e}")
            return None

        self.reporter.report(snapshot)
        return snapshot

    def run(self) -> None:
        """
        Run until stop() is called.

        Raises:
            MetricCollectionError: If the CPU provider cannot be primed
        """
        print_line(format_banner(self.config))
        self.sampler.prime()

        interval = self.config.interval
        next_tick = self._clock() + interval

        while not self._stop_event.is_set():
            if self._stop_event.wait(timeout=max(0.0, next_tick - self._clock())):
                break

            self.run_once()

            next_tick += interval
            now = self._clock()
            if next_tick <= now:
                skipped = int((now - next_tick) // interval) + 1
                logger.debug(f"tick overran the interval, dropping {skipped} tick(s)")
                next_tick += skipped * interval

        logger.debug(f"monitor loop stopped after {self.tick_count} tick(s)")
