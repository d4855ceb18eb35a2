"""Metrics sources for the sampler."""

import platform
import subprocess
from typing import Protocol

import psutil

from sysgauge.models import UNKNOWN, MemoryReading

# psutil needs two CPU reads at least this far apart (seconds) for a usable percentage
MINIMUM_CPU_UPDATE_INTERVAL = 0.2


class MetricsSource(Protocol):
    """Anything the sampler can read system metrics from."""

    def refresh_cpu(self) -> None: ...

    def refresh_memory(self) -> None: ...

    def cpu_usage(self) -> float | None: ...

    def memory(self) -> MemoryReading | None: ...

    def cpu_brand(self) -> str | None: ...

    def os_name(self) -> str | None: ...

    def os_version(self) -> str | None: ...


def read_cpu_brand() -> str | None:
    """
    Return the CPU model string for this machine.

    Linux reads /proc/cpuinfo, macOS asks sysctl, everything else falls back
    to platform.processor(). Returns None when nothing useful is found.
    """
    system = platform.system()

    if system == "Linux":
        try:
            with open("/proc/cpuinfo", encoding="utf-8", errors="ignore") as f:
                for line in f:
                    if line.lower().startswith("model name"):
                        return line.split(":", 1)[1].strip() or None
        except OSError:
            pass
    elif system == "Darwin":
        try:
            out = subprocess.check_output(
                ["sysctl", "-n", "machdep.cpu.brand_string"],
                stderr=subprocess.DEVNULL,
            ).decode(errors="ignore")
            if out.strip():
                return out.strip()
        except (OSError, subprocess.SubprocessError):
            pass

    return platform.processor().strip() or None


class PsutilMetricsSource:
    """MetricsSource backed by psutil."""

    def __init__(self) -> None:
        """Initialize the source with no readings taken."""
        self._cpu_percent: float | None = None
        self._memory: MemoryReading | None = None
        self._cpu_brand: str | None = None

    def refresh_cpu(self) -> None:
        """Take a CPU reading (non-blocking, relative to the previous call)."""
        self._cpu_percent = psutil.cpu_percent(interval=None)

    def refresh_memory(self) -> None:
        """Take a memory reading."""
        mem = psutil.virtual_memory()
        self._memory = MemoryReading(
            total=mem.total,
            used=mem.used,
            free=mem.free,
            available=mem.available,
        )

    def cpu_usage(self) -> float | None:
        """Global CPU usage from the last refresh."""
        return self._cpu_percent

    def memory(self) -> MemoryReading | None:
        """Memory counters from the last refresh."""
        return self._memory

    def cpu_brand(self) -> str | None:
        """CPU model string, looked up once."""
        if self._cpu_brand is None:
            self._cpu_brand = read_cpu_brand()
        return self._cpu_brand

    def os_name(self) -> str | None:
        """Operating system name."""
        return platform.system() or None

    def os_version(self) -> str | None:
        """Operating system release."""
        return platform.release() or None


def platform_label(name: str | None, version: str | None) -> str:
    """Join OS name and version, substituting Unknown for missing parts."""
    return f"{name or UNKNOWN} {version or UNKNOWN}"
