"""Peak-preserving downsampling of sample sequences."""

from typing import Sequence

from tgraph.models.sample import CompressedSeries, Sample

# A segment whose spread exceeds this fraction of its peak is represented
# by an extreme instead of its mean. Heuristic; kept for compatibility.
SIGNIFICANT_VARIATION = 0.1


def compress(
    samples: Sequence[Sample],
    target_width: int,
    threshold: float = SIGNIFICANT_VARIATION,
) -> CompressedSeries:
    """
    Reduce a sample sequence to at most target_width representative samples.

    The input is split into target_width contiguous segments of about
    len(samples) / target_width samples. Each non-empty segment yields one
    sample stamped with the timestamp of its last raw sample. Segments with
    significant spread keep whichever extreme lies further from the segment
    mean, so isolated spikes and dips survive; flat segments keep the mean.

    Args:
        samples: Ordered samples. Not modified.
        target_width: Maximum number of output samples.
        threshold: Relative spread above which an extreme is kept.

    Returns:
        The compressed series, in input order. Identical to the input when
        it already fits.

    Raises:
        ValueError: If target_width is less than 1.
    """
    if target_width < 1:
        raise ValueError(f"target_width must be >= 1, got {target_width}")

    count = len(samples)
    if count <= target_width:
        return tuple(samples)

    ratio = count / target_width
    compressed = []

    for i in range(target_width):
        start = int(i * ratio)
        end = min(int((i + 1) * ratio), count)
        if start >= end:
            continue

        segment_min = float("inf")
        segment_max = float("-inf")
        total = 0.0
        for j in range(start, end):
            value = samples[j].value
            if value < segment_min:
                segment_min = value
            if value > segment_max:
                segment_max = value
            total += value

        compressed.append(Sample(
            timestamp=samples[end - 1].timestamp,
            value=representative_value(
                segment_min, segment_max, total / (end - start), threshold),
        ))

    return tuple(compressed)


def representative_value(
    segment_min: float,
    segment_max: float,
    segment_avg: float,
    threshold: float = SIGNIFICANT_VARIATION,
) -> float:
    """
    Pick the value that stands for one segment.

    Args:
        segment_min: Smallest value in the segment.
        segment_max: Largest value in the segment.
        segment_avg: Arithmetic mean of the segment.
        threshold: Relative spread above which an extreme is kept.

    Returns:
        segment_max or segment_min when the spread is significant
        (ties go to segment_min), otherwise segment_avg.
    """
    variation = segment_max - segment_min
    if variation > threshold * segment_max:
        if abs(segment_max - segment_avg) > abs(segment_min - segment_avg):
            return segment_max
        return segment_min
    return segment_avg


def compression_ratio(count: int, target_width: int) -> float:
    """Return raw samples per displayed point (1.0 when no compression)."""
    if target_width < 1 or count <= target_width:
        return 1.0
    return count / target_width
