"""Background sampling engine for sysgauge."""

import logging
import threading
from typing import Any

from sysgauge.channel import Channel
from sysgauge.metrics import MINIMUM_CPU_UPDATE_INTERVAL, MetricsSource, platform_label
from sysgauge.models import UNKNOWN, MemoryReading, Sample, StaticInfo, clamp_percent

logger = logging.getLogger(__name__)

MINIMUM_INTERVAL = 0.1


class Sampler:
    """
    Sampler that reads CPU and memory metrics from a MetricsSource.

    Runs in a separate daemon thread and hands every Sample to a delivery
    channel. Unreadable fields are replaced with 0 / "Unknown" so a single
    bad read never stops the loop.
    """

    def __init__(
        self,
        source: MetricsSource,
        channel: Channel,
        interval: float = 1.0,
        warmup: float = MINIMUM_CPU_UPDATE_INTERVAL,
    ) -> None:
        """
        Initialize the Sampler.

        Args:
            source: Where metrics are read from.
            channel: Where finished samples are delivered.
            interval: Seconds between ticks. Default 1.0s.
            warmup: Seconds to wait after the discarded baseline CPU read.
        """
        self._source = source
        self._channel = channel
        self._interval = interval
        self._warmup = warmup
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._sequence = 0
        self._static_info = StaticInfo()
        self._warmed_up = False

    @property
    def interval(self) -> float:
        """Get the tick interval."""
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        """Set the tick interval."""
        self._interval = max(MINIMUM_INTERVAL, value)

    @property
    def is_running(self) -> bool:
        """Check if the sampler thread is running."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def samples_produced(self) -> int:
        """Number of samples assembled so far."""
        return self._sequence

    @property
    def static_info(self) -> StaticInfo:
        """Platform and CPU model strings resolved so far."""
        return self._static_info

    def start(self) -> None:
        """Start the sampling thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="Sampler",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the sampling thread.

        An in-flight tick may be abandoned.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def warm_up(self) -> None:
        """Take a baseline CPU reading, discard it and wait out the refresh interval."""
        try:
            self._source.refresh_cpu()
            self._source.cpu_usage()
        except Exception:
            logger.debug("Baseline CPU read failed", exc_info=True)
        if not self._stop_event.wait(timeout=self._warmup):
            self._warmed_up = True

    def _run(self) -> None:
        """Main sampling loop running in the background thread."""
        # The CPU baseline survives a restart
        if not self._warmed_up:
            self.warm_up()
        while not self._stop_event.is_set():
            try:
                sample = self.sample_once()
                self._channel.deliver(sample)
            except Exception:
                logger.exception("Sampler tick failed")

            # Wait for interval seconds or until stop is requested
            self._stop_event.wait(timeout=self._interval)

    def sample_once(self) -> Sample:
        """Refresh the source and assemble the next Sample."""
        self._call("refresh_cpu")
        self._call("refresh_memory")

        cpu_percent = clamp_percent(self._call("cpu_usage"))
        memory = MemoryReading.coerce(self._call("memory"))
        static_info = self._resolve_static_info()

        self._sequence += 1
        return Sample(
            cpu_percent=cpu_percent,
            memory_total=memory.total,
            memory_used=memory.used,
            memory_free=memory.free,
            memory_available=memory.available,
            platform=static_info.platform,
            cpu_model=static_info.cpu_model,
            sequence=self._sequence,
        )

    def _call(self, name: str) -> Any:
        """Call a source method, returning None if it fails."""
        try:
            return getattr(self._source, name)()
        except Exception:
            logger.debug("Metric %s unavailable, substituting default", name, exc_info=True)
            return None

    def _resolve_static_info(self) -> StaticInfo:
        """Resolve platform strings, retrying only while they are still unknown."""
        info = self._static_info
        if UNKNOWN not in info.platform and info.cpu_model != UNKNOWN:
            return info

        label = platform_label(self._call("os_name"), self._call("os_version"))
        cpu_model = self._call("cpu_brand") or UNKNOWN
        self._static_info = StaticInfo(platform=label, cpu_model=cpu_model)
        return self._static_info

