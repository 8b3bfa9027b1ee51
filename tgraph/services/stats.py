"""Aggregate statistics over uncompressed samples."""

from dataclasses import dataclass
from typing import Sequence

from tgraph.models.payload import StatsModel
from tgraph.models.sample import Sample


@dataclass(frozen=True)
class SeriesStats:
    """Current, average, min and max of a series."""

    current: float
    average: float
    min: float
    max: float
    count: int

    def legend(self) -> str:
        """Format the terminal legend line."""
        return (
            f"Current: {self.current:.2f} | Average: {self.average:.2f} | "
            f"Min: {self.min:.2f} | Max: {self.max:.2f}"
        )

    def to_model(self) -> StatsModel:
        return StatsModel(
            current=f"{self.current:.2f}",
            average=f"{self.average:.2f}",
            min=f"{self.min:.2f}",
            max=f"{self.max:.2f}",
        )


EMPTY_STATS = SeriesStats(current=0.0, average=0.0, min=0.0, max=0.0, count=0)


def compute_stats(samples: Sequence[Sample]) -> SeriesStats:
    """
    Compute statistics over raw samples.

    Args:
        samples: Uncompressed samples, oldest first.

    Returns:
        Stats where current is the latest sample's value; all zero if empty.
    """
    if not samples:
        return EMPTY_STATS

    total = 0.0
    low = float("inf")
    high = float("-inf")
    for sample in samples:
        total += sample.value
        if sample.value < low:
            low = sample.value
        if sample.value > high:
            high = sample.value

    return SeriesStats(
        current=samples[-1].value,
        average=total / len(samples),
        min=low,
        max=high,
        count=len(samples),
    )
