"""Runtime configuration for sysgauge."""

import argparse
import os
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from sysgauge.history import DEFAULT_CAPACITY
from sysgauge.metrics import MINIMUM_CPU_UPDATE_INTERVAL

MODE_ENV_VAR = "SYSGAUGE_MODE"


class DeliveryMode(Enum):
    """How samples travel from the sampler to the UI."""

    PUSH = "push"
    PULL = "pull"


@dataclass(slots=True, frozen=True)
class MonitorConfig:
    """Settings for one sysgauge run."""

    mode: DeliveryMode = DeliveryMode.PUSH
    interval: float = 1.0  # Seconds between ticks
    history: int = DEFAULT_CAPACITY  # Samples kept for the CPU chart
    warmup: float = MINIMUM_CPU_UPDATE_INTERVAL
    log_level: str = "INFO"
    log_file: str | None = None

    @classmethod
    def from_args(cls, argv: Sequence[str] | None = None) -> "MonitorConfig":
        """Build a config from command-line arguments."""
        args = build_parser().parse_args(argv)
        return cls(
            mode=DeliveryMode(args.mode),
            interval=args.interval,
            history=args.history,
            log_level=args.log_level,
            log_file=args.log_file,
        )


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value}")
    return number


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Argument parser for the sysgauge command."""
    default_mode = os.environ.get(MODE_ENV_VAR, DeliveryMode.PUSH.value).lower()
    if default_mode not in {mode.value for mode in DeliveryMode}:
        default_mode = DeliveryMode.PUSH.value

    parser = argparse.ArgumentParser(
        prog="sysgauge",
        description="Live CPU and memory charts in the terminal.",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in DeliveryMode],
        default=default_mode,
        help=f"sample delivery model (default: {default_mode}, env {MODE_ENV_VAR})",
    )
    parser.add_argument(
        "--interval",
        type=_positive_float,
        default=1.0,
        help="seconds between samples (default: 1.0)",
    )
    parser.add_argument(
        "--history",
        type=_positive_int,
        default=DEFAULT_CAPACITY,
        help=f"number of CPU samples charted (default: {DEFAULT_CAPACITY})",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="logging level (default: INFO)",
    )
    parser.add_argument("--log-file", default=None, help="also write logs to this file")
    return parser
