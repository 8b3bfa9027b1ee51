"""Web dashboard payload built from per-metric sample buffers."""

import datetime
import time
from typing import Dict, List, Mapping, Sequence

from tgraph.models.metric import MetricSelector
from tgraph.models.payload import DataPayload, SeriesPoint
from tgraph.models.sample import Sample
from tgraph.monitoring.metrics import payload_build_duration_seconds
from tgraph.services.downsampler import SIGNIFICANT_VARIATION, compress
from tgraph.services.stats import compute_stats


def to_points(series: Sequence[Sample]) -> List[SeriesPoint]:
    """
    Convert samples to chart points with a local wall-clock label.

    Args:
        series: Compressed samples.

    Returns:
        Points carrying timestamp, value and HH:MM:SS time.
    """
    points = []
    for sample in series:
        try:
            clock = datetime.datetime.fromtimestamp(sample.timestamp / 1000).strftime("%H:%M:%S")
        except (OverflowError, OSError, ValueError):
            clock = ""
        points.append(SeriesPoint(timestamp=sample.timestamp, value=sample.value, time=clock))
    return points


def build_payload(
    metric: MetricSelector,
    primary: Sequence[Sample],
    all_series: Mapping[MetricSelector, Sequence[Sample]],
    *,
    accumulate: bool,
    max_data_points: int,
    resolution: int,
    style: str,
    threshold: float = SIGNIFICANT_VARIATION,
) -> DataPayload:
    """
    Compress every metric to the requested resolution and compute stats.

    Stats are computed on the uncompressed samples so the representative
    value rule does not bias them.

    Args:
        metric: Active metric.
        primary: Uncompressed samples of the active metric.
        all_series: Uncompressed samples per metric.
        accumulate: Whether the session accumulates.
        max_data_points: Rolling window size.
        resolution: Target number of points per series.
        style: Web chart style.
        threshold: Downsampler variation threshold.

    Returns:
        The payload served by /data and pushed over /sse.
    """
    start = time.perf_counter()

    all_points: Dict[str, List[SeriesPoint]] = {}
    all_stats = {}
    for selector, samples in all_series.items():
        all_points[selector.value] = to_points(compress(samples, resolution, threshold))
        all_stats[selector.value] = compute_stats(samples).to_model()

    payload = DataPayload(
        dataPoints=to_points(compress(primary, resolution, threshold)),
        allMetricsData=all_points,
        metric=metric.value,
        metricLabel=metric.label,
        accumulate=accumulate,
        maxDataPoints=max_data_points,
        resolution=resolution,
        style=style,
        totalPoints=len(primary),
        stats=compute_stats(primary).to_model(),
        allStats=all_stats,
    )

    payload_build_duration_seconds.observe(time.perf_counter() - start)
    return payload
