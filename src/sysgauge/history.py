"""Presentation-side stores for CPU history and the latest memory reading."""

from collections import deque
from collections.abc import Callable

from sysgauge.models import MemoryReading

DEFAULT_CAPACITY = 60  # One minute at 1 Hz

Listener = Callable[[], None]


class _Observable:
    """Fires change listeners after every mutation."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def bind(self, listener: Listener) -> None:
        """Register a callback fired after every mutation."""
        self._listeners.append(listener)

    def _changed(self) -> None:
        for listener in self._listeners:
            listener()


class HistoryBuffer(_Observable):
    """
    Fixed-capacity sliding window of CPU percentages.

    Oldest values are evicted first. push() is the only mutator and it
    always notifies bound listeners.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, prefill: bool = True) -> None:
        """
        Initialize the HistoryBuffer.

        Args:
            capacity: Maximum number of values kept.
            prefill: Start with `capacity` zeros so charts have a full baseline.
        """
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        super().__init__()
        self._values: deque[float] = deque(
            [0.0] * capacity if prefill else (),
            maxlen=capacity,
        )

    @property
    def capacity(self) -> int:
        """Maximum number of values kept."""
        return self._values.maxlen or 0

    @property
    def latest(self) -> float | None:
        """Newest value, or None when empty."""
        return self._values[-1] if self._values else None

    def __len__(self) -> int:
        return len(self._values)

    def push(self, value: float) -> None:
        """Append a value, evicting the oldest one at capacity."""
        self._values.append(value)
        self._changed()

    def snapshot(self) -> tuple[float, ...]:
        """Immutable copy of the values, oldest first."""
        return tuple(self._values)


class LatestMemory(_Observable):
    """Most recent memory reading. No history is kept."""

    def __init__(self) -> None:
        """Initialize with an all-zero reading."""
        super().__init__()
        self._reading = MemoryReading()

    @property
    def reading(self) -> MemoryReading:
        """The current reading."""
        return self._reading

    @property
    def used(self) -> int:
        return self._reading.used

    @property
    def total(self) -> int:
        return self._reading.total

    def update(self, reading: MemoryReading) -> None:
        """Overwrite the reading. Listeners fire even if nothing changed."""
        self._reading = reading
        self._changed()
