"""Metric selectors for JSON sample records."""

from enum import Enum
from typing import Dict, List, Optional


class MetricSelector(str, Enum):
    """Enumerated metric keys, each mapped to one field of a sample record."""

    HEAP_USED = "heapUsed"
    HEAP_TOTAL = "heapTotal"
    HEAP_PERCENT = "heapPercent"
    RSS = "rss"
    EXTERNAL = "external"
    CPU_PERCENT = "cpuPercent"
    CPU_USER = "cpuUser"
    CPU_SYSTEM = "cpuSystem"
    CPU_TOTAL = "cpuTotal"

    @classmethod
    def default(cls) -> "MetricSelector":
        """Return the metric used when a key is unknown."""
        return cls.HEAP_USED

    @classmethod
    def parse(cls, key: Optional[str]) -> "MetricSelector":
        """
        Resolve a metric key, falling back to the default for unknown keys.

        Args:
            key: Metric key as written in the log (e.g. "heapPercent").

        Returns:
            Matching selector, or the default selector.
        """
        if isinstance(key, MetricSelector):
            return key
        try:
            return cls(key)
        except ValueError:
            return cls.default()

    @property
    def field(self) -> str:
        """JSON field holding this metric's value."""
        return self.value

    @property
    def group(self) -> str:
        return "cpu" if self.value.startswith("cpu") else "memory"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def unit(self) -> str:
        if self in (MetricSelector.HEAP_PERCENT, MetricSelector.CPU_PERCENT):
            return "Percent (%)"
        if self.group == "cpu":
            return "Time (ms)"
        return "Memory (MB)"

    def extract(self, record: Dict, default=0):
        """
        Return the raw field value for this metric from a parsed record.

        Args:
            record: Parsed JSON object.
            default: Value used when the field is missing or null.

        Returns:
            The raw value (number or decimal string), or default.
        """
        value = record.get(self.field)
        return default if value is None else value


_LABELS: Dict[MetricSelector, str] = {
    MetricSelector.HEAP_USED: "Heap Used (MB)",
    MetricSelector.HEAP_TOTAL: "Heap Total (MB)",
    MetricSelector.HEAP_PERCENT: "Heap Usage (%)",
    MetricSelector.RSS: "RSS Memory (MB)",
    MetricSelector.EXTERNAL: "External Memory (MB)",
    MetricSelector.CPU_PERCENT: "CPU Usage (%)",
    MetricSelector.CPU_USER: "CPU User Time (ms)",
    MetricSelector.CPU_SYSTEM: "CPU System Time (ms)",
    MetricSelector.CPU_TOTAL: "CPU Total Time (ms)",
}

MEMORY_METRICS: List[MetricSelector] = [m for m in MetricSelector if m.group == "memory"]
CPU_METRICS: List[MetricSelector] = [m for m in MetricSelector if m.group == "cpu"]
