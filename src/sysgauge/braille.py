"""Braille-dot rasterizer that paints Frames into terminal cells."""

import math

from rich.style import Style
from rich.text import Text

from sysgauge.surface import Point, Stroke, arc_point

BRAILLE_BASE = 0x2800

# Dot bit for (x, y) inside a 2x4 cell
DOT_BITS = (
    (0x01, 0x08),
    (0x02, 0x10),
    (0x04, 0x20),
    (0x40, 0x80),
)


def dot_size(columns: int, rows: int) -> tuple[int, int]:
    """Drawing region in dots for a block of terminal cells."""
    return columns * 2, rows * 4


class BrailleSurface:
    """
    Surface with one braille dot per pixel, 2x4 dots per terminal cell.

    A cell has a single foreground color (the last stroke that touched it)
    and a background color from fill_rect(). Strokes are thickened by
    stamping a disc, so ends come out rounded at this resolution. Points
    off the grid or with non-finite coordinates are skipped.
    """

    def __init__(self, columns: int, rows: int) -> None:
        self.columns = max(columns, 0)
        self.rows = max(rows, 0)
        self.width, self.height = dot_size(self.columns, self.rows)
        self._bits = [[0] * self.columns for _ in range(self.rows)]
        self._fg: list[list[str | None]] = [[None] * self.columns for _ in range(self.rows)]
        self._bg: list[list[str | None]] = [[None] * self.columns for _ in range(self.rows)]
        self._labels: dict[tuple[int, int], str] = {}

    def fill_rect(self, x: float, y: float, width: float, height: float, color: str) -> None:
        first_col = max(math.floor(x / 2), 0)
        last_col = min(math.ceil((x + width) / 2), self.columns)
        first_row = max(math.floor(y / 4), 0)
        last_row = min(math.ceil((y + height) / 4), self.rows)
        for row in range(first_row, last_row):
            for col in range(first_col, last_col):
                self._bg[row][col] = color
                self._bits[row][col] = 0
                self._fg[row][col] = None

    def stroke_path(self, points: list[Point], stroke: Stroke) -> None:
        radius = stroke.width / 2
        if len(points) == 1:
            self._stamp(points[0], radius, stroke.color)
            return
        for start, end in zip(points, points[1:]):
            span = max(abs(end[0] - start[0]), abs(end[1] - start[1]))
            if not math.isfinite(span):
                continue
            steps = max(math.ceil(span), 1)
            for i in range(steps + 1):
                t = i / steps
                point = (start[0] + (end[0] - start[0]) * t, start[1] + (end[1] - start[1]) * t)
                self._stamp(point, radius, stroke.color)

    def stroke_arc(
        self,
        center: Point,
        radius: float,
        start_angle: float,
        sweep: float,
        stroke: Stroke,
    ) -> None:
        # Two samples per dot of arc length keeps the curve gap-free
        length = radius * math.radians(abs(sweep))
        if not math.isfinite(length):
            return
        steps = max(math.ceil(length * 2), 1)
        for i in range(steps + 1):
            angle = start_angle + sweep * i / steps
            self._stamp(arc_point(center, radius, angle), stroke.width / 2, stroke.color)

    def draw_label(self, text: str, color: str) -> None:
        """Write text over the middle row, centered, replacing the dots under it."""
        if not self.rows or not text:
            return
        text = text[: self.columns]
        row = self.rows // 2
        first_col = (self.columns - len(text)) // 2
        for offset, char in enumerate(text):
            self._labels[(row, first_col + offset)] = char
            self._fg[row][first_col + offset] = color

    def _stamp(self, point: Point, radius: float, color: str) -> None:
        if not (math.isfinite(point[0]) and math.isfinite(point[1])):
            return
        cx, cy = round(point[0]), round(point[1])
        reach = math.floor(radius)
        if reach < 1:
            self._plot(cx, cy, color)
            return
        for dy in range(-reach, reach + 1):
            for dx in range(-reach, reach + 1):
                if dx * dx + dy * dy <= radius * radius:
                    self._plot(cx + dx, cy + dy, color)

    def _plot(self, x: int, y: int, color: str) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            return
        row, sub_y = divmod(y, 4)
        col, sub_x = divmod(x, 2)
        self._bits[row][col] |= DOT_BITS[sub_y][sub_x]
        self._fg[row][col] = color

    def to_text(self) -> Text:
        """Render the surface as rich Text, one line per cell row."""
        text = Text(no_wrap=True, overflow="crop")
        styles: dict[tuple[str | None, str | None], Style] = {}
        for row in range(self.rows):
            if row:
                text.append("\n")
            for col in range(self.columns):
                key = (self._fg[row][col], self._bg[row][col])
                style = styles.get(key)
                if style is None:
                    style = styles[key] = Style(color=key[0], bgcolor=key[1])
                char = self._labels.get((row, col)) or chr(BRAILLE_BASE + self._bits[row][col])
                text.append(char, style)
        return text
