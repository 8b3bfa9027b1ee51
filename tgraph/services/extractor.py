"""Sample extraction from raw JSON log lines."""

import json
import math
from typing import Dict, Iterable, Optional

from tgraph.models.metric import MetricSelector
from tgraph.models.sample import Sample

# Sentinel: a missing metric field rejects the line instead of defaulting.
REJECT_MISSING = None


def parse_record(raw_line: str) -> Optional[Dict]:
    """
    Parse one raw line into a JSON object.

    Args:
        raw_line: A single line from the metric log.

    Returns:
        The parsed object, or None if the line is blank, invalid or not an object.
    """
    if not raw_line or not raw_line.strip():
        return None
    try:
        record = json.loads(raw_line)
    except (json.JSONDecodeError, ValueError):
        return None
    if not isinstance(record, dict):
        return None
    return record


def to_number(raw) -> Optional[float]:
    """
    Coerce a JSON value to a finite float.

    Numbers and decimal strings ("52.00") are accepted; booleans are not.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError:
            return None
    else:
        return None
    return value if math.isfinite(value) else None


def to_timestamp(raw) -> Optional[int]:
    """Coerce a JSON value to integer epoch milliseconds."""
    value = to_number(raw)
    if value is None or value != int(value):
        return None
    return int(value)


def _sample_from_record(record: Dict, selector: MetricSelector, missing) -> Optional[Sample]:
    timestamp = to_timestamp(record.get("timestamp"))
    if timestamp is None:
        return None
    value = to_number(selector.extract(record, default=missing))
    if value is None:
        return None
    return Sample.create(timestamp, value)


def extract(
    raw_line: str,
    selector: MetricSelector,
    missing: Optional[float] = REJECT_MISSING,
) -> Optional[Sample]:
    """
    Parse a raw log line into a sample for the selected metric.

    Never raises and never logs: any malformed input yields None.

    Args:
        raw_line: A single JSON line.
        selector: Metric to extract.
        missing: Value substituted when the metric field is absent.
            The default rejects such lines.

    Returns:
        The extracted sample, or None if the line is rejected.
    """
    record = parse_record(raw_line)
    if record is None:
        return None
    return _sample_from_record(record, selector, missing)


def extract_all(
    raw_line: str,
    selectors: Iterable[MetricSelector],
    missing: Optional[float] = 0,
) -> Dict[MetricSelector, Sample]:
    """
    Parse a line once and extract every requested metric.

    Args:
        raw_line: A single JSON line.
        selectors: Metrics to extract.
        missing: Value substituted when a metric field is absent (0 by default).

    Returns:
        Mapping of metric to sample; empty if the line is unparsable.
    """
    record = parse_record(raw_line)
    if record is None:
        return {}

    samples = {}
    for selector in selectors:
        sample = _sample_from_record(record, selector, missing)
        if sample is not None:
            samples[selector] = sample
    return samples
