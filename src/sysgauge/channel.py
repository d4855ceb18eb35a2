"""Delivery channels between the sampler thread and the presentation loop."""

import logging
import threading
from collections.abc import Callable
from typing import Any, Protocol

from sysgauge.models import Sample

logger = logging.getLogger(__name__)

SAMPLE_EVENT = "system-stats"

Emitter = Callable[[str, dict[str, Any]], bool | None]


class Channel(Protocol):
    """Receives samples from the sampler thread."""

    def deliver(self, sample: Sample) -> bool: ...


class PushChannel:
    """
    Push delivery: emit every sample as a named event.

    Delivery is fire-and-forget. If the emitter raises or reports the
    receiver is gone, the sample is dropped and logged; the next tick
    supersedes it.
    """

    def __init__(self, emit: Emitter, event: str = SAMPLE_EVENT) -> None:
        """
        Initialize the PushChannel.

        Args:
            emit: Called with (event name, payload). Returning False means the
                receiver could not take the event.
            event: Event name to emit under.
        """
        self._emit = emit
        self._event = event
        self.delivered = 0
        self.dropped = 0

    @property
    def event(self) -> str:
        """Name of the emitted event."""
        return self._event

    def deliver(self, sample: Sample) -> bool:
        """Emit a sample, never raising."""
        try:
            accepted = self._emit(self._event, sample.to_payload())
        except Exception as exc:
            self.dropped += 1
            logger.warning("Failed to emit %s #%d: %s", self._event, sample.sequence, exc)
            return False

        if accepted is False:
            self.dropped += 1
            logger.warning("Receiver unavailable, dropped %s #%d", self._event, sample.sequence)
            return False

        self.delivered += 1
        return True


class MetricsState:
    """
    Pull delivery: lock-guarded latest sample.

    The sampler overwrites the sample; the presentation loop reads it on its
    own timer. There is no queue, readers only ever see the latest sample.
    """

    def __init__(self) -> None:
        """Initialize an empty MetricsState."""
        self._lock = threading.Lock()
        self._sample: Sample | None = None

    def deliver(self, sample: Sample) -> bool:
        """Replace the latest sample."""
        with self._lock:
            self._sample = sample
        return True

    def read(self) -> Sample | None:
        """Return the latest completed sample, or None before the first one."""
        with self._lock:
            return self._sample
