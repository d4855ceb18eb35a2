"""sysgauge - Main Textual application."""

import logging
from collections.abc import Sequence
from typing import Any

from rich.console import RenderableType
from rich.markup import escape
from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.css.query import NoMatches
from textual.logging import TextualHandler
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Footer, Static

from sysgauge.braille import BrailleSurface, dot_size
from sysgauge.channel import SAMPLE_EVENT, Channel, MetricsState, PushChannel
from sysgauge.charts import GaugeRenderer, LineChartRenderer
from sysgauge.config import DeliveryMode, MonitorConfig
from sysgauge.dashboard import Dashboard
from sysgauge.metrics import MetricsSource, PsutilMetricsSource
from sysgauge.models import Sample
from sysgauge.sampler import Sampler

logger = logging.getLogger(__name__)

LABEL_COLOR = "#ffffff"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def format_bytes(size: float) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "K", "M", "G", "T"]:
        if size < 1024:
            return f"{size:.1f}{unit}" if unit != "B" else f"{int(size)}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


class SampleReceived(Message):
    """A sample pushed from the sampler thread."""

    def __init__(self, event: str, payload: dict[str, Any]) -> None:
        super().__init__()
        self.event = event
        self.payload = payload


class StatsHeader(Static):
    """Header widget with the latest CPU, memory and platform labels."""

    DEFAULT_CSS = """
    StatsHeader {
        height: auto;
        min-height: 2;
        padding: 0 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize StatsHeader."""
        super().__init__("Waiting for first sample...", *args, **kwargs)
        self._sample: Sample | None = None

    def update_stats(self, sample: Sample) -> None:
        """Show the labels for a sample."""
        self._sample = sample
        self.update(self._get_info())

    def _get_info(self) -> str:
        sample = self._sample
        if sample is None:
            return "Waiting for first sample..."
        return (
            f"CPU [cyan]{sample.cpu_percent:5.1f}%[/cyan]   "
            f"Mem [magenta]{format_bytes(sample.memory_used)}/{format_bytes(sample.memory_total)}"
            f" ({sample.memory_percent:.1f}%)[/magenta]\n"
            f"[dim]{escape(sample.platform)}  •  {escape(sample.cpu_model)}[/dim]"
        )


class ChartView(Widget):
    """
    Paints a renderer's Frame as braille dots.

    The rasterized Text is kept until the renderer hands back a different
    Frame, so a repaint without new data costs nothing.
    """

    CHART_TITLE = ""

    def __init__(self, renderer: LineChartRenderer | GaugeRenderer, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._renderer = renderer
        self._frame = None
        self._text = Text()

    def on_mount(self) -> None:
        self.border_title = self.CHART_TITLE

    def render(self) -> RenderableType:
        columns, rows = self.content_size.width, self.content_size.height
        width, height = dot_size(columns, rows)
        if width == 0 or height == 0:
            return Text()

        # Last dot index, so the 0% and 100% edges land on the grid
        frame = self._renderer.render(width - 1, height - 1)
        if frame is not self._frame:
            try:
                surface = BrailleSurface(columns, rows)
                frame.replay(surface)
                self._decorate(surface)
                self._text = surface.to_text()
            except Exception:
                logger.exception("Failed to rasterize %s", self.CHART_TITLE or "chart")
            self._frame = frame
        return self._text

    def _decorate(self, surface: BrailleSurface) -> None:
        """Draw extra content over the rasterized frame."""


class CpuChart(ChartView):
    """CPU usage trend."""

    CHART_TITLE = "CPU"

    DEFAULT_CSS = """
    CpuChart {
        width: 2fr;
        height: 1fr;
        border: round $primary;
    }
    """


class MemoryGauge(ChartView):
    """Memory usage donut."""

    CHART_TITLE = "Memory"

    DEFAULT_CSS = """
    MemoryGauge {
        width: 1fr;
        height: 1fr;
        border: round $accent;
    }
    """

    def _decorate(self, surface: BrailleSurface) -> None:
        """Label the donut with the used percentage."""
        surface.draw_label(f"{self._renderer.ratio * 100:.1f}%", LABEL_COLOR)


class SysGaugeApp(App):
    """Main sysgauge application."""

    TITLE = "sysgauge"
    SUB_TITLE = "CPU & Memory Monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #stats-header {
        dock: top;
    }

    #charts {
        height: 1fr;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        config: MonitorConfig = MonitorConfig(),
        source: MetricsSource | None = None,
    ) -> None:
        """Initialize the SysGaugeApp."""
        super().__init__()
        self._config = config
        self._dashboard = Dashboard(config.history)
        self._state: MetricsState | None = None
        self._sample_event = SAMPLE_EVENT

        channel: Channel
        if config.mode is DeliveryMode.PULL:
            self._state = MetricsState()
            channel = self._state
        else:
            channel = PushChannel(self._emit_sample, event=self._sample_event)
        self._channel = channel

        self._sampler = Sampler(
            source if source is not None else PsutilMetricsSource(),
            channel,
            interval=config.interval,
            warmup=config.warmup,
        )

    @property
    def dashboard(self) -> Dashboard:
        return self._dashboard

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield StatsHeader(id="stats-header")
        yield Horizontal(
            CpuChart(self._dashboard.cpu_chart, id="cpu-chart"),
            MemoryGauge(self._dashboard.memory_gauge, id="memory-gauge"),
            id="charts",
        )
        yield Footer()

    def on_mount(self) -> None:
        """Start the sampler when the app is mounted."""
        logger.info("Starting sampler in %s mode", self._config.mode.value)
        self._sampler.start()
        if self._state is not None:
            self.set_interval(self._config.interval, self._poll_metrics)

    def on_unmount(self) -> None:
        self._sampler.stop(timeout=1.0)
        logger.info("Sampler stopped after %d samples", self._sampler.samples_produced)

    def _emit_sample(self, event: str, payload: dict[str, Any]) -> bool:
        """Push emitter, called on the sampler thread."""
        return self.post_message(SampleReceived(event, payload))

    def on_sample_received(self, message: SampleReceived) -> None:
        """Apply a pushed sample and repaint."""
        if message.event != self._sample_event:
            logger.warning("Ignoring unexpected event %r", message.event)
            return
        try:
            if self._dashboard.apply(Sample.from_payload(message.payload)):
                self._update_ui()
        except Exception:
            logger.exception("Failed to apply pushed sample")

    def _poll_metrics(self) -> None:
        """Pull-model tick: read the shared state and repaint if it moved on."""
        try:
            if self._state is not None and self._dashboard.poll(self._state):
                self._update_ui()
        except Exception:
            logger.exception("Failed to apply polled sample")

    def _update_ui(self) -> None:
        """Route the dashboard state into the widgets."""
        latest = self._dashboard.latest
        try:
            if latest is not None:
                self.query_one("#stats-header", StatsHeader).update_stats(latest)
            self.query_one("#cpu-chart", CpuChart).refresh()
            self.query_one("#memory-gauge", MemoryGauge).refresh()
        except NoMatches:
            logger.debug("Widgets not mounted, skipping repaint")

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._sampler.stop()
        self.exit()


def configure_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Send log records to the Textual devtools console and optionally a file."""
    handlers: list[logging.Handler] = [TextualHandler()]
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(file_handler)
    logging.basicConfig(level=level, handlers=handlers, format=LOG_FORMAT, force=True)


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for sysgauge."""
    config = MonitorConfig.from_args(argv)
    configure_logging(config.log_level, config.log_file)
    app = SysGaugeApp(config)
    app.run()


if __name__ == "__main__":
    main()
