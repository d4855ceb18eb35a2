"""Data models for sysgauge."""

import math
from dataclasses import dataclass
from typing import Any

UNKNOWN = "Unknown"


def clamp_percent(value: Any) -> float:
    """Clamp a percentage into [0, 100], mapping garbage and non-finite values to 0."""
    try:
        percent = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(percent):
        return 0.0
    return min(max(percent, 0.0), 100.0)


def byte_count(value: Any) -> int:
    """Coerce a counter to a non-negative int, 0 if it is not a usable number."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number) or number < 0:
        return 0
    return int(number)


@dataclass(slots=True, frozen=True)
class StaticInfo:
    """Platform strings that rarely change between ticks."""

    platform: str = UNKNOWN
    cpu_model: str = UNKNOWN


@dataclass(slots=True, frozen=True)
class MemoryReading:
    """Memory counters in bytes."""

    total: int = 0
    used: int = 0
    free: int = 0
    available: int = 0

    @classmethod
    def coerce(cls, reading: Any) -> "MemoryReading":
        """Rebuild a reading with every counter cleaned by byte_count, zeros for None."""
        return cls(
            total=byte_count(getattr(reading, "total", 0)),
            used=byte_count(getattr(reading, "used", 0)),
            free=byte_count(getattr(reading, "free", 0)),
            available=byte_count(getattr(reading, "available", 0)),
        )


@dataclass(slots=True, frozen=True)
class Sample:
    """Immutable telemetry sample produced once per sampler tick."""

    cpu_percent: float  # 0.0 - 100.0
    memory_total: int  # Bytes
    memory_used: int
    memory_free: int
    memory_available: int
    platform: str = UNKNOWN
    cpu_model: str = UNKNOWN
    sequence: int = 0  # Production order, starts at 1

    @property
    def memory(self) -> MemoryReading:
        """Memory fields as a MemoryReading."""
        return MemoryReading(
            total=self.memory_total,
            used=self.memory_used,
            free=self.memory_free,
            available=self.memory_available,
        )

    @property
    def memory_percent(self) -> float:
        """Used memory as a percentage of total, 0 when total is unknown."""
        if self.memory_total <= 0:
            return 0.0
        return self.memory_used / self.memory_total * 100.0

    def to_payload(self) -> dict[str, Any]:
        """Build the push event payload."""
        return {
            "cpu": {"currentLoad": self.cpu_percent},
            "memory": {
                "total": self.memory_total,
                "used": self.memory_used,
                "free": self.memory_free,
                "available": self.memory_available,
            },
            "process": {
                "platform": self.platform,
                "cpuModel": self.cpu_model,
            },
            "sequence": self.sequence,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Sample":
        """
        Rebuild a Sample from a push event payload.

        Malformed values are substituted the same way the sampler does it:
        0 for numbers that do not parse, Unknown for missing strings.
        """
        cpu = _section(payload, "cpu")
        memory = _section(payload, "memory")
        process = _section(payload, "process")
        return cls(
            cpu_percent=clamp_percent(cpu.get("currentLoad")),
            memory_total=byte_count(memory.get("total")),
            memory_used=byte_count(memory.get("used")),
            memory_free=byte_count(memory.get("free")),
            memory_available=byte_count(memory.get("available")),
            platform=str(process.get("platform") or UNKNOWN),
            cpu_model=str(process.get("cpuModel") or UNKNOWN),
            sequence=byte_count(payload.get("sequence")),
        )


def _section(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, dict) else {}
