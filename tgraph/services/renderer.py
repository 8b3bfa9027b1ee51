"""Character-grid rendering of metric series for the terminal."""

import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from tgraph.models.display import DisplaySpec, GlyphStyle, GUTTER_WIDTH
from tgraph.models.sample import Sample
from tgraph.monitoring.metrics import render_duration_seconds
from tgraph.services.downsampler import SIGNIFICANT_VARIATION, compress
from tgraph.services.stats import SeriesStats, compute_stats

Grid = List[List[str]]

BLANK = " "
# Fill glyphs that a line segment may draw over.
SOFT_CELLS = frozenset({BLANK, "░"})
MAX_TIME_LABELS = 5


def _solid_line(glyph: str) -> Callable[[int, int, int, int], str]:
    return lambda dx, dy, sx, sy: glyph


def _ascii_line(dx: int, dy: int, sx: int, sy: int) -> str:
    if dx > dy * 2:
        return "─"
    if dy > dx * 2:
        return "│"
    if sx == sy:
        return "\\"
    return "/"


def _blocks_fill(distance: int) -> str:
    if distance == 1:
        return "▀"
    if distance == 2:
        return "▄"
    return "░"


@dataclass(frozen=True)
class GlyphSet:
    """
    Characters written for one chart style.

    Attributes:
        point: Glyph for a plotted sample.
        line: Glyph for a rasterized line cell, given the segment's
            |dx|, |dy| and step directions.
        fill: Glyph for a cell `distance` rows under a plotted point, or
            None when the style has no area fill.
        line_fill: Glyph for cells under a rasterized line cell.
    """

    point: str
    line: Callable[[int, int, int, int], str]
    fill: Optional[Callable[[int], str]] = None
    line_fill: str = "░"

    @property
    def fills_area(self) -> bool:
        return self.fill is not None


GLYPHS: Dict[GlyphStyle, GlyphSet] = {
    GlyphStyle.BLOCKS: GlyphSet(point="█", line=_solid_line("█"), fill=_blocks_fill),
    GlyphStyle.BRAILLE: GlyphSet(point="⣿", line=_solid_line("⣿")),
    GlyphStyle.DOTS: GlyphSet(point="⡇", line=_solid_line("⡇")),
    GlyphStyle.LEAN: GlyphSet(point=":", line=_solid_line(":")),
    GlyphStyle.ASCII: GlyphSet(point="●", line=_ascii_line),
}


def glyphs_for(style: GlyphStyle) -> GlyphSet:
    return GLYPHS.get(style, GLYPHS[GlyphStyle.BLOCKS])


def format_elapsed(seconds: int) -> str:
    """
    Format elapsed seconds as a compact axis label.

    Examples: 45 -> "45s", 90 -> "1m30s", 120 -> "2m", 3900 -> "1h5m".
    """
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        mins, secs = divmod(seconds, 60)
        return f"{mins}m{secs}s" if secs > 0 else f"{mins}m"
    hours = seconds // 3600
    mins = (seconds % 3600) // 60
    return f"{hours}h{mins}m" if mins > 0 else f"{hours}h"


def time_axis(first_ts: int, last_ts: int, width: int) -> str:
    """
    Build the elapsed-time axis line.

    Args:
        first_ts: Timestamp (ms) of the oldest uncompressed sample.
        last_ts: Timestamp (ms) of the newest uncompressed sample.
        width: Plot width in columns.

    Returns:
        A string of exactly `width` characters.
    """
    labels = [BLANK] * width
    label_count = min(MAX_TIME_LABELS, width // 10)
    duration = last_ts - first_ts
    steps = max(label_count - 1, 1)

    for i in range(label_count):
        seconds = int((i / steps) * duration // 1000)
        label = format_elapsed(seconds)
        if i == label_count - 1:
            # Rightmost label is right-aligned so it never overflows.
            start = max(0, width - len(label))
        else:
            start = int((i / steps) * (width - 1))
        for k, char in enumerate(label):
            if start + k < width:
                labels[start + k] = char

    return "".join(labels)


def scale(value: float, low: float, high: float) -> float:
    """
    Position of value between low (0.0) and high (1.0).

    Works on halves so that `high - low` cannot overflow for finite bounds
    spanning more than the float range. A zero-width range maps to 0.0.
    """
    half_range = high / 2 - low / 2
    if not half_range:
        return 0.0
    fraction = (value / 2 - low / 2) / half_range
    return fraction if math.isfinite(fraction) else 0.0


def interpolate(low: float, high: float, fraction: float) -> float:
    """Value at fraction of the way from high down to low, without overflow."""
    return high * (1 - fraction) + low * fraction


class CharGrid:
    """Style-agnostic rasterizer that plots points and joins them with lines."""

    def __init__(self, width: int, height: int, glyphs: GlyphSet) -> None:
        self.width = width
        self.height = height
        self.glyphs = glyphs
        self.cells: Grid = [[BLANK] * width for _ in range(height)]

    def column(self, index: int, count: int) -> int:
        return int((index / max(count - 1, 1)) * (self.width - 1))

    def row(self, value: float, low: float, high: float) -> int:
        """Map a value to a grid row, clamped to the grid."""
        fraction = scale(value, low, high)
        y = self.height - 1 - int(fraction * (self.height - 1))
        return min(max(y, 0), self.height - 1)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def plot(self, points: Sequence[Sample], low: float, high: float) -> Grid:
        """
        Plot points scaled between low and high and connect them.

        Args:
            points: Series to draw, already reduced to at most `width` points.
            low: Value drawn on the bottom row.
            high: Value drawn on the top row.

        Returns:
            The cell grid (rows top to bottom).
        """
        count = len(points)
        previous = None

        for i, point in enumerate(points):
            x = self.column(i, count)
            y = self.row(point.value, low, high)
            if not self.in_bounds(x, y):
                previous = None
                continue

            self.cells[y][x] = self.glyphs.point
            if self.glyphs.fills_area:
                self._fill_below(x, y, self.glyphs.fill)
            if previous is not None:
                self.draw_line(previous[0], previous[1], x, y)
            previous = (x, y)

        return self.cells

    def _fill_below(self, x: int, y: int, fill: Callable[[int], str]) -> None:
        for fill_y in range(y + 1, self.height):
            if self.cells[fill_y][x] == BLANK:
                self.cells[fill_y][x] = fill(fill_y - y)

    def draw_line(self, x1: int, y1: int, x2: int, y2: int) -> None:
        """Rasterize a segment with Bresenham's algorithm."""
        dx = abs(x2 - x1)
        dy = abs(y2 - y1)
        sx = 1 if x1 < x2 else -1
        sy = 1 if y1 < y2 else -1
        err = dx - dy
        x, y = x1, y1
        line_glyph = self.glyphs.line(dx, dy, sx, sy)

        while True:
            if self.in_bounds(x, y) and self.cells[y][x] in SOFT_CELLS:
                self.cells[y][x] = line_glyph
                if self.glyphs.fills_area:
                    self._fill_below(x, y, lambda _distance: self.glyphs.line_fill)

            if x == x2 and y == y2:
                break

            e2 = 2 * err
            if e2 > -dy:
                err -= dy
                x += sx
            if e2 < dx:
                err += dx
                y += sy

    def rows(self) -> List[str]:
        return ["".join(row) for row in self.cells]


class TerminalRenderer:
    """Render a sample buffer snapshot as a full-screen text block."""

    def __init__(
        self,
        spec: DisplaySpec,
        title: str = "Terminal Graph",
        threshold: float = SIGNIFICANT_VARIATION,
    ) -> None:
        """
        Initialize the renderer.

        Args:
            spec: Layout and style parameters.
            title: Title printed above the chart.
            threshold: Downsampler variation threshold.
        """
        self.spec = spec
        self.title = title
        self.threshold = threshold

    def axis_bounds(self, stats: SeriesStats) -> tuple:
        if stats.count == 0:
            return 0.0, 100.0
        return stats.min, stats.max

    def render(self, samples: Sequence[Sample], info: Optional[str] = None) -> str:
        """
        Render uncompressed samples into a text block.

        Statistics and the time axis use the uncompressed samples; only the
        plotted series is compressed to the plot width.

        Args:
            samples: Buffer snapshot, oldest first.
            info: Optional status line appended under the legend.

        Returns:
            The rendered text, lines joined with newlines.
        """
        start = time.perf_counter()
        spec = self.spec
        plot_width = spec.plot_width
        stats = compute_stats(samples)
        low, high = self.axis_bounds(stats)

        grid = CharGrid(plot_width, spec.height, glyphs_for(spec.style))
        if samples:
            grid.plot(compress(samples, plot_width, self.threshold), low, high)

        lines = []
        padding = max(0, (spec.width - len(self.title)) // 2)
        lines.append(" " * padding + self.title)
        lines.append("═" * spec.width)

        label_steps = max(spec.height - 1, 1)
        for y, row in enumerate(grid.rows()):
            value = interpolate(low, high, y / label_steps)
            lines.append(f"{value:7.1f} │{row}")

        lines.append(" " * (GUTTER_WIDTH - 2) + "└" + "─" * plot_width)

        if spec.show_time_axis and samples:
            axis = time_axis(samples[0].timestamp, samples[-1].timestamp, plot_width)
            lines.append(" " * (GUTTER_WIDTH - 1) + axis)

        if spec.show_legend:
            lines.append("")
            lines.append(stats.legend())

        if info:
            lines.append(info)

        render_duration_seconds.observe(time.perf_counter() - start)
        return "\n".join(lines)
