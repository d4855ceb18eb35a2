"""Presentation model: owns the history, latest memory and both renderers."""

import logging

from sysgauge.channel import MetricsState
from sysgauge.charts import ChartColors, GaugeRenderer, LineChartRenderer
from sysgauge.history import DEFAULT_CAPACITY, HistoryBuffer, LatestMemory
from sysgauge.models import Sample

logger = logging.getLogger(__name__)


class Dashboard:
    """
    State driven by the presentation loop.

    Only the presentation loop mutates this object. Samples arrive either
    from a push event (apply) or from polling a MetricsState (poll).
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, colors: ChartColors = ChartColors()) -> None:
        self.history = HistoryBuffer(capacity)
        self.memory = LatestMemory()
        self.cpu_chart = LineChartRenderer(self.history, colors)
        self.memory_gauge = GaugeRenderer(self.memory, colors)
        self.latest: Sample | None = None
        self.applied = 0
        self.skipped = 0

    @property
    def last_sequence(self) -> int:
        """Sequence of the last applied sample, 0 before the first."""
        return self.latest.sequence if self.latest is not None else 0

    def apply(self, sample: Sample) -> bool:
        """
        Fold a sample into the history and latest memory.

        Samples that are not newer than the last applied one are skipped so
        the charts only ever move forward. Returns True if the sample was
        applied.
        """
        if sample.sequence <= self.last_sequence:
            self.skipped += 1
            logger.debug("Skipping sample #%d, already at #%d", sample.sequence, self.last_sequence)
            return False

        self.history.push(sample.cpu_percent)
        self.memory.update(sample.memory)
        self.latest = sample
        self.applied += 1
        return True

    def poll(self, state: MetricsState) -> bool:
        """Pull-model tick: read the shared state and apply what it holds."""
        sample = state.read()
        if sample is None:
            return False
        return self.apply(sample)
