"""2-D drawing primitives shared by the chart renderers and the rasterizer.

Coordinates grow right and down from the top-left corner. Arc angles are in
degrees with 0 at 12 o'clock and positive values turning clockwise.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, Union

Point = tuple[float, float]


class LineCap(Enum):
    """How the ends of a stroke are drawn."""

    BUTT = "butt"
    ROUND = "round"


@dataclass(slots=True, frozen=True)
class Stroke:
    """Stroke style for paths and arcs."""

    color: str
    width: float = 1.0
    line_cap: LineCap = LineCap.BUTT


class Surface(Protocol):
    """Anything the renderers can paint into."""

    def fill_rect(self, x: float, y: float, width: float, height: float, color: str) -> None: ...

    def stroke_path(self, points: list[Point], stroke: Stroke) -> None: ...

    def stroke_arc(
        self,
        center: Point,
        radius: float,
        start_angle: float,
        sweep: float,
        stroke: Stroke,
    ) -> None: ...


def arc_point(center: Point, radius: float, angle: float) -> Point:
    """Point on a circle at `angle` degrees (0 = up, clockwise)."""
    theta = math.radians(angle)
    return (center[0] + radius * math.sin(theta), center[1] - radius * math.cos(theta))


@dataclass(slots=True, frozen=True)
class FillRect:
    x: float
    y: float
    width: float
    height: float
    color: str


@dataclass(slots=True, frozen=True)
class StrokePath:
    points: tuple[Point, ...]
    stroke: Stroke


@dataclass(slots=True, frozen=True)
class StrokeArc:
    center: Point
    radius: float
    start_angle: float
    sweep: float
    stroke: Stroke


Command = Union[FillRect, StrokePath, StrokeArc]


@dataclass(slots=True)
class Frame:
    """
    Recorded vector output of a renderer.

    A Frame is itself a Surface: drawing into it records commands, and
    replay() paints them onto a real surface later.
    """

    width: float
    height: float
    commands: list[Command] = field(default_factory=list)

    def fill_rect(self, x: float, y: float, width: float, height: float, color: str) -> None:
        self.commands.append(FillRect(x, y, width, height, color))

    def stroke_path(self, points: list[Point], stroke: Stroke) -> None:
        self.commands.append(StrokePath(tuple(points), stroke))

    def stroke_arc(
        self,
        center: Point,
        radius: float,
        start_angle: float,
        sweep: float,
        stroke: Stroke,
    ) -> None:
        self.commands.append(StrokeArc(center, radius, start_angle, sweep, stroke))

    def replay(self, surface: Surface) -> None:
        """Paint the recorded commands onto another surface."""
        for command in self.commands:
            if isinstance(command, FillRect):
                surface.fill_rect(command.x, command.y, command.width, command.height, command.color)
            elif isinstance(command, StrokePath):
                surface.stroke_path(list(command.points), command.stroke)
            else:
                surface.stroke_arc(
                    command.center,
                    command.radius,
                    command.start_angle,
                    command.sweep,
                    command.stroke,
                )
