"""Chart renderers with explicit draw caches."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from sysgauge.history import HistoryBuffer, LatestMemory
from sysgauge.models import clamp_percent
from sysgauge.surface import Frame, LineCap, Point, Stroke

Region = tuple[float, float]


@dataclass(slots=True, frozen=True)
class ChartColors:
    """Colors used by both renderers."""

    background: str = "#1a1a1a"
    line: str = "#00ffff"
    track: str = "#333333"
    accent: str = "#ff00ff"


class RenderCache:
    """
    Cached Frame plus the region it was built for.

    The cached Frame is reused until invalidate() is called or the region
    changes.
    """

    def __init__(self) -> None:
        """Initialize an empty, dirty cache."""
        self._frame: Frame | None = None
        self._region: Region | None = None
        self._dirty = True
        self.builds = 0

    def invalidate(self) -> None:
        """Force a rebuild on the next draw()."""
        self._dirty = True

    def draw(self, region: Region, build: Callable[[], Frame]) -> Frame:
        """Return the cached Frame, rebuilding it first if stale."""
        if self._frame is None or self._dirty or region != self._region:
            self._frame = build()
            self._region = region
            self._dirty = False
            self.builds += 1
        return self._frame


def line_points(values: Sequence[float], width: float, height: float) -> list[Point]:
    """Map percentages onto evenly spaced points, 0% at the bottom.

    Values are clamped to [0, 100]; NaN, infinities and junk plot as 0%.
    """
    step = width / max(len(values) - 1, 1)
    points = []
    for i, value in enumerate(values):
        value = clamp_percent(value)
        points.append((i * step, height * (1.0 - value / 100.0)))
    return points


def gauge_ratio(used: int, total: int) -> float:
    """Used/total, 0 when total is 0. Never negative, may exceed 1."""
    if total <= 0:
        return 0.0
    return max(0.0, used / total)


def gauge_sweep(ratio: float) -> float:
    """Arc sweep in degrees, saturating at a full circle."""
    return min(max(ratio, 0.0), 1.0) * 360.0


class LineChartRenderer:
    """Line chart of the CPU history, oldest sample on the left."""

    def __init__(
        self,
        history: HistoryBuffer,
        colors: ChartColors = ChartColors(),
        line_width: float = 2.0,
    ) -> None:
        self._history = history
        self._colors = colors
        self._line_width = line_width
        self.cache = RenderCache()
        history.bind(self.invalidate)

    def invalidate(self) -> None:
        self.cache.invalidate()

    def render(self, width: float, height: float) -> Frame:
        """Return the chart for the given region, reusing the cache when clean."""
        return self.cache.draw((width, height), lambda: self._build(width, height))

    def _build(self, width: float, height: float) -> Frame:
        frame = Frame(width, height)
        frame.fill_rect(0, 0, width, height, self._colors.background)

        values = self._history.snapshot()
        if not values:
            return frame

        frame.stroke_path(
            line_points(values, width, height),
            Stroke(self._colors.line, self._line_width),
        )
        return frame


class GaugeRenderer:
    """Donut gauge of used/total memory, filling clockwise from 12 o'clock."""

    def __init__(
        self,
        memory: LatestMemory,
        colors: ChartColors = ChartColors(),
        stroke_width: float = 6.0,
    ) -> None:
        self._memory = memory
        self._colors = colors
        self._stroke_width = stroke_width
        self.cache = RenderCache()
        memory.bind(self.invalidate)

    @property
    def ratio(self) -> float:
        """Current used/total ratio."""
        return gauge_ratio(self._memory.used, self._memory.total)

    def invalidate(self) -> None:
        self.cache.invalidate()

    def render(self, width: float, height: float) -> Frame:
        """Return the gauge for the given region, reusing the cache when clean."""
        return self.cache.draw((width, height), lambda: self._build(width, height))

    def _build(self, width: float, height: float) -> Frame:
        frame = Frame(width, height)
        frame.fill_rect(0, 0, width, height, self._colors.background)

        center = (width / 2, height / 2)
        radius = 0.9 * min(width, height) / 2

        # Track
        frame.stroke_arc(center, radius, 0.0, 360.0, Stroke(self._colors.track, self._stroke_width))

        ratio = self.ratio
        if ratio > 0:
            frame.stroke_arc(
                center,
                radius,
                0.0,
                gauge_sweep(ratio),
                Stroke(self._colors.accent, self._stroke_width, LineCap.ROUND),
            )
        return frame
