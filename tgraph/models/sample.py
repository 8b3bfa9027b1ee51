"""Sample model for time-stamped metric values."""

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Sample:
    """
    A single metric observation.

    Attributes:
        timestamp: Epoch milliseconds reported by the producer.
        value: Finite metric value.
    """

    timestamp: int
    value: float

    @classmethod
    def create(cls, timestamp: int, value: float) -> "Sample":
        """
        Build a sample, rejecting non-finite values.

        Raises:
            ValueError: If value is NaN or infinite.
        """
        value = float(value)
        if not math.isfinite(value):
            raise ValueError(f"Sample value must be finite, got {value}")
        return cls(timestamp=int(timestamp), value=value)


# Output of the downsampler: ordered representative samples.
CompressedSeries = Tuple[Sample, ...]
