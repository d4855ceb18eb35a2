"""Shared fixtures for sysgauge tests."""

import threading
from collections import Counter
from queue import Queue

import pytest

from sysgauge.braille import BRAILLE_BASE, DOT_BITS
from sysgauge.models import MemoryReading, Sample

GIB = 1024**3


class FakeMetricsSource:
    """Scriptable MetricsSource.

    Each refresh_cpu() consumes the next CPU reading; the last one repeats.
    Method names listed in `failing` raise RuntimeError.
    """

    def __init__(
        self,
        cpu_readings=(50.0,),
        memory=MemoryReading(total=16 * GIB, used=4 * GIB, free=8 * GIB, available=12 * GIB),
        brand="Fake CPU @ 3.00GHz",
        os_name="Linux",
        os_version="6.1.0",
        failing=(),
    ):
        self.cpu_readings = list(cpu_readings)
        self.memory_reading = memory
        self.brand = brand
        self.name = os_name
        self.version = os_version
        self.failing = set(failing)
        self.calls: Counter[str] = Counter()
        self._cpu = None
        self._lock = threading.Lock()

    def _check(self, name):
        with self._lock:
            self.calls[name] += 1
        if name in self.failing:
            raise RuntimeError(f"{name} unavailable")

    def refresh_cpu(self):
        self._check("refresh_cpu")
        self._cpu = self.cpu_readings.pop(0) if len(self.cpu_readings) > 1 else self.cpu_readings[0]

    def refresh_memory(self):
        self._check("refresh_memory")

    def cpu_usage(self):
        self._check("cpu_usage")
        return self._cpu

    def memory(self):
        self._check("memory")
        return self.memory_reading

    def cpu_brand(self):
        self._check("cpu_brand")
        return self.brand

    def os_name(self):
        self._check("os_name")
        return self.name

    def os_version(self):
        self._check("os_version")
        return self.version


class QueueChannel:
    """Channel that hands samples to a Queue so tests can wait on them."""

    def __init__(self):
        self.queue: Queue[Sample] = Queue()

    def deliver(self, sample):
        self.queue.put(sample)
        return True


def make_sample(sequence=1, cpu_percent=25.0, used=4 * GIB, total=16 * GIB):
    """Build a Sample with sensible defaults."""
    return Sample(
        cpu_percent=cpu_percent,
        memory_total=total,
        memory_used=used,
        memory_free=total - used,
        memory_available=total - used,
        platform="Linux 6.1.0",
        cpu_model="Fake CPU @ 3.00GHz",
        sequence=sequence,
    )


def lit_dots(text):
    """Count the lit braille dots in rendered Text."""
    return sum(
        bin(ord(char) - BRAILLE_BASE).count("1")
        for char in text.plain
        if BRAILLE_BASE <= ord(char) < BRAILLE_BASE + 0x100
    )


def dot_is_set(text, x, y):
    """Whether dot (x, y) is lit in rendered braille Text."""
    if x < 0 or y < 0:
        return False
    lines = text.plain.split("\n")
    row, sub_y = divmod(y, 4)
    col, sub_x = divmod(x, 2)
    if row >= len(lines) or col >= len(lines[row]):
        return False
    return bool((ord(lines[row][col]) - BRAILLE_BASE) & DOT_BITS[sub_y][sub_x])


def cell_style(text, col, row):
    """Style of the cell at (col, row) in rendered Text."""
    lines = text.plain.split("\n")
    offset = sum(len(line) + 1 for line in lines[:row]) + col
    return next(span.style for span in text.spans if span.start <= offset < span.end)


def commands_of_type(frame, kind):
    """Recorded Frame commands of one type, in order."""
    return [command for command in frame.commands if isinstance(command, kind)]


@pytest.fixture
def fake_source():
    return FakeMetricsSource()


@pytest.fixture
def queue_channel():
    return QueueChannel()
