"""Display and retention models shared by the terminal and web viewers."""

from dataclasses import dataclass
from enum import Enum
from typing import Union


@dataclass(frozen=True)
class Rolling:
    """Bounded retention: the oldest sample is evicted past max_size."""

    max_size: int

    def __post_init__(self) -> None:
        if self.max_size < 1:
            raise ValueError(f"Rolling max_size must be >= 1, got {self.max_size}")

    @property
    def name(self) -> str:
        return "Rolling"


@dataclass(frozen=True)
class Accumulate:
    """Unbounded retention: every sample is kept for later compression."""

    @property
    def name(self) -> str:
        return "Accumulate"


RetentionPolicy = Union[Rolling, Accumulate]


def retention_from_flags(accumulate: bool, max_size: int) -> RetentionPolicy:
    """
    Build a retention policy from CLI/config flags.

    Args:
        accumulate: Keep every sample when True.
        max_size: Window size used for rolling retention.

    Returns:
        Accumulate() or Rolling(max_size).
    """
    if accumulate:
        return Accumulate()
    return Rolling(max_size)


class GlyphStyle(str, Enum):
    """Terminal chart styles."""

    BLOCKS = "blocks"
    ASCII = "ascii"
    BRAILLE = "braille"
    DOTS = "dots"
    LEAN = "lean"

    @classmethod
    def parse(cls, key: str) -> "GlyphStyle":
        try:
            return cls(key)
        except ValueError:
            return cls.BLOCKS

    def next(self) -> "GlyphStyle":
        """Return the style that follows this one in the cycle order."""
        order = list(STYLE_CYCLE)
        return order[(order.index(self) + 1) % len(order)]


# Cycle order used by the terminal "L" shortcut.
STYLE_CYCLE = (
    GlyphStyle.BLOCKS,
    GlyphStyle.LEAN,
    GlyphStyle.ASCII,
    GlyphStyle.DOTS,
    GlyphStyle.BRAILLE,
)


class WebStyle(str, Enum):
    """Browser chart styles; geometry is drawn by the client."""

    LINE = "line"
    AREA = "area"
    BARS = "bars"

    @classmethod
    def parse(cls, key: str) -> "WebStyle":
        try:
            return cls(key)
        except ValueError:
            return cls.LINE


# Columns reserved on the left of the terminal grid for value labels and axis.
GUTTER_WIDTH = 10


@dataclass(frozen=True)
class DisplaySpec:
    """
    Layout parameters for the terminal renderer.

    Attributes:
        width: Total terminal width in columns, gutter included.
        height: Number of grid rows.
        style: Glyph style for points and fill.
        show_legend: Whether to print the stats legend.
        show_time_axis: Whether to print elapsed-time labels.
    """

    width: int = 80
    height: int = 20
    style: GlyphStyle = GlyphStyle.BLOCKS
    show_legend: bool = True
    show_time_axis: bool = True

    @property
    def plot_width(self) -> int:
        """Columns available for plotting."""
        return max(1, self.width - GUTTER_WIDTH)
