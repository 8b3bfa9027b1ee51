"""
Viewer session: ingestion, retention and rendering orchestration.

A session moves through Initializing -> Loading -> Live -> Stopped. Every
mode change (metric, style, retention, reload) goes through a single
reinitialize(): the buffer is discarded and the file is replayed before
live appends resume, so historical and live samples never interleave.
"""

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional, Union

from tgraph.core.config import Settings
from tgraph.core.exceptions import ResolutionError, SessionStateError, SourceError
from tgraph.models.display import (
    Accumulate,
    DisplaySpec,
    GlyphStyle,
    RetentionPolicy,
    Rolling,
    WebStyle,
    retention_from_flags,
)
from tgraph.models.metric import CPU_METRICS, MetricSelector
from tgraph.models.payload import ConfigResponse, DataPayload
from tgraph.models.sample import Sample
from tgraph.monitoring.metrics import (
    buffer_size,
    lines_ingested_total,
    lines_rejected_total,
    reloads_total,
)
from tgraph.services.buffer import SampleBuffer, tail_lines
from tgraph.services.downsampler import SIGNIFICANT_VARIATION, compression_ratio
from tgraph.services.extractor import extract, extract_all
from tgraph.services.renderer import TerminalRenderer
from tgraph.services.tailer import FileTail
from tgraph.services.web_payload import build_payload

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle states of a viewer session."""

    INITIALIZING = "initializing"
    LOADING = "loading"
    LIVE = "live"
    STOPPED = "stopped"


@dataclass(frozen=True)
class ViewerConfig:
    """Display-mode state owned by a session."""

    log_file: str = "heap.log"
    metric: MetricSelector = MetricSelector.HEAP_USED
    retention: RetentionPolicy = Rolling(100)
    max_data_points: int = 100
    style: GlyphStyle = GlyphStyle.BLOCKS
    web_style: WebStyle = WebStyle.LINE
    refresh_rate_ms: int = 100
    resolution: int = 100
    min_resolution: int = 50
    max_resolution: int = 1000
    threshold: float = SIGNIFICANT_VARIATION
    chart_height: int = 20

    @classmethod
    def from_settings(cls, settings: Settings, **overrides) -> "ViewerConfig":
        """
        Build a config from settings, letting explicit overrides win.

        Overrides with a None value are ignored so CLI flags that were not
        given fall back to settings.
        """
        values = {
            "log_file": settings.log_file,
            "metric": settings.metric,
            "max_data_points": settings.max_data_points,
            "accumulate": settings.accumulate,
            "style": settings.style,
            "web_style": settings.web_style,
            "refresh_rate_ms": settings.refresh_rate_ms,
            "resolution": settings.resolution,
            "min_resolution": settings.min_resolution,
            "max_resolution": settings.max_resolution,
            "threshold": settings.variation_threshold,
            "chart_height": settings.chart_height,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        accumulate = values.pop("accumulate")
        return cls(
            log_file=str(values["log_file"]),
            metric=MetricSelector.parse(values["metric"]),
            retention=retention_from_flags(accumulate, values["max_data_points"]),
            max_data_points=values["max_data_points"],
            style=GlyphStyle.parse(values["style"]),
            web_style=WebStyle.parse(values["web_style"]),
            refresh_rate_ms=values["refresh_rate_ms"],
            resolution=values["resolution"],
            min_resolution=values["min_resolution"],
            max_resolution=values["max_resolution"],
            threshold=values["threshold"],
            chart_height=values["chart_height"],
        )

    @property
    def accumulate(self) -> bool:
        return isinstance(self.retention, Accumulate)


class ViewerSession:
    """
    Terminal viewer session for a single metric.

    Not thread-safe: appends (ingest/poll) and renders must be called from
    one thread of control.
    """

    def __init__(self, config: ViewerConfig, tail: Optional[FileTail] = None) -> None:
        """
        Initialize the session.

        Args:
            config: Display-mode configuration.
            tail: File tailer; one is created for config.log_file if omitted.
        """
        self.config = config
        self.tail = tail or FileTail(config.log_file)
        self.state = SessionState.INITIALIZING
        self.buffer = SampleBuffer(config.retention)

    # --- state helpers -------------------------------------------------

    def _require(self, action: str, *states: SessionState) -> None:
        if self.state not in states:
            raise SessionStateError(
                f"Cannot {action} while session is {self.state.value}")

    @property
    def is_live(self) -> bool:
        return self.state == SessionState.LIVE

    # --- ingestion hooks -----------------------------------------------

    def _reset_buffers(self) -> None:
        self.buffer.reset(self.config.retention)

    def _extract(self, line: str) -> Optional[Sample]:
        return extract(line, self.config.metric)

    def _ingest_line(self, line: str) -> bool:
        sample = self._extract(line)
        if sample is None:
            return False
        self.buffer.append(sample)
        return True

    def _bulk_load(self, lines: List[str]) -> int:
        return self.buffer.bulk_load(lines, self._extract)

    # --- lifecycle -----------------------------------------------------

    def _load(self) -> int:
        """Replay the source file into freshly reset buffers."""
        self.state = SessionState.LOADING
        self._reset_buffers()

        try:
            lines = self.tail.read_history()
        except SourceError as e:
            logger.error(f"Error loading existing data: {str(e)}")
            lines = []

        if not lines and not self.tail.exists():
            logger.info(f"{self.config.log_file} does not exist yet. Waiting for data...")

        loaded = self._bulk_load(lines)
        lines_ingested_total.inc(loaded)
        buffer_size.set(self.buffer.size())
        logger.info(
            f"Loaded {loaded} data points from {self.config.log_file} "
            f"({self.config.retention.name})"
        )
        self.state = SessionState.LIVE
        return loaded

    def start(self) -> int:
        """
        Load historical data and go live.

        A missing or empty source still ends in the live state.

        Returns:
            Number of samples loaded.
        """
        self._require("start", SessionState.INITIALIZING)
        return self._load()

    def reinitialize(self) -> int:
        """
        Discard in-memory samples and replay the whole source file.

        Returns:
            Number of samples loaded.
        """
        self._require("reinitialize", SessionState.LIVE)
        reloads_total.inc()
        return self._load()

    def stop(self) -> None:
        """Release the tailer and buffers. Stopped is terminal."""
        if self.state == SessionState.STOPPED:
            return
        self.state = SessionState.STOPPED
        self.tail.close()
        self.buffer.clear()
        logger.info(f"Session for {self.config.log_file} stopped")

    # --- live operations -----------------------------------------------

    def ingest(self, line: str) -> bool:
        """
        Parse and append one raw line.

        Returns:
            True if a sample was appended, False if the line was discarded.
        """
        self._require("ingest", SessionState.LIVE)
        if not self._ingest_line(line):
            lines_rejected_total.inc()
            return False
        lines_ingested_total.inc()
        buffer_size.set(self.buffer.size())
        return True

    def poll(self) -> int:
        """
        Ingest lines appended to the source since the last read.

        Returns:
            Number of samples appended.
        """
        self._require("poll", SessionState.LIVE)
        try:
            lines = self.tail.poll()
        except SourceError as e:
            logger.warning(f"Tail error: {str(e)}")
            return 0
        return sum(1 for line in lines if self.ingest(line))

    def snapshot(self) -> tuple:
        self._require("read samples", SessionState.LIVE)
        return self.buffer.snapshot()

    # --- mode changes --------------------------------------------------

    def _change(self, **changes) -> int:
        self._require("change mode", SessionState.LIVE)
        self.config = replace(self.config, **changes)
        return self.reinitialize()

    def switch_metric(self, metric: Union[str, MetricSelector]) -> int:
        return self._change(metric=MetricSelector.parse(metric))

    def switch_style(self, style: Union[str, GlyphStyle]) -> int:
        return self._change(style=GlyphStyle.parse(style))

    def switch_retention(self, policy: RetentionPolicy) -> int:
        changes = {"retention": policy}
        if isinstance(policy, Rolling):
            changes["max_data_points"] = policy.max_size
        return self._change(**changes)

    def reload(self) -> int:
        return self.reinitialize()

    def cycle_style(self) -> GlyphStyle:
        """Switch to the next terminal style."""
        self.switch_style(self.config.style.next())
        return self.config.style

    def toggle_metric_group(self) -> MetricSelector:
        """Switch between the memory and CPU metric families."""
        if self.config.metric.group == "memory":
            target = CPU_METRICS[0]
        else:
            target = MetricSelector.default()
        self.switch_metric(target)
        return self.config.metric

    # --- rendering -----------------------------------------------------

    def title(self) -> str:
        return f"Resource Monitor - {self.config.metric.label}"

    def info_line(self, plot_width: int) -> str:
        count = self.buffer.size()
        info = f"Data points: {count}"
        if self.config.accumulate and count > plot_width:
            info += f" ({compression_ratio(count, plot_width):.1f}:1 compression)"
        info += f" | Mode: {self.config.retention.name}"
        info += f" | Refresh: {self.config.refresh_rate_ms}ms | File: {self.config.log_file}"
        return info

    def render(self, width: int, height: Optional[int] = None) -> str:
        """
        Render the current buffer for a terminal of the given width.

        Args:
            width: Terminal width in columns.
            height: Grid rows; defaults to config.chart_height.

        Returns:
            The full text block including the info line.
        """
        self._require("render", SessionState.LIVE)
        spec = DisplaySpec(
            width=width,
            height=height or self.config.chart_height,
            style=self.config.style,
        )
        renderer = TerminalRenderer(spec, title=self.title(), threshold=self.config.threshold)
        return renderer.render(self.buffer.snapshot(), info=self.info_line(spec.plot_width))


def validate_resolution(value, minimum: int = 50, maximum: int = 1000) -> int:
    """
    Validate a requested resolution.

    Args:
        value: Requested value (int, integral float or numeric string).
        minimum: Smallest accepted resolution.
        maximum: Largest accepted resolution.

    Returns:
        The resolution as an int.

    Raises:
        ResolutionError: If the value is non-numeric or out of range.
    """
    if isinstance(value, bool) or value is None:
        raise ResolutionError("Resolution must be a number", value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ResolutionError("Resolution must be a number", value)
    if not math.isfinite(number) or number != int(number):
        raise ResolutionError("Resolution must be a whole number", value)

    resolution = int(number)
    if not minimum <= resolution <= maximum:
        raise ResolutionError(
            f"Resolution must be between {minimum} and {maximum}", value)
    return resolution


class WebViewerSession(ViewerSession):
    """
    Web dashboard session keeping a buffer for every metric.

    Lines are parsed once and fanned out to all metric buffers; a metric
    field missing from a line counts as 0 so memory-only logs still chart.
    """

    def __init__(self, config: ViewerConfig, tail: Optional[FileTail] = None) -> None:
        self.buffers: Dict[MetricSelector, SampleBuffer] = {}
        super().__init__(config, tail)
        self.resolution = config.resolution
        self._reset_buffers()

    def _reset_buffers(self) -> None:
        self.buffers = {metric: SampleBuffer(self.config.retention) for metric in MetricSelector}
        self.buffer = self.buffers[self.config.metric]

    def _ingest_line(self, line: str) -> bool:
        samples = extract_all(line, self.buffers.keys())
        if not samples:
            return False
        for metric, sample in samples.items():
            self.buffers[metric].append(sample)
        return self.config.metric in samples

    def _bulk_load(self, lines: List[str]) -> int:
        for line in tail_lines(lines, self.config.retention):
            self._ingest_line(line)
        return self.buffer.size()

    def switch_style(self, style: Union[str, WebStyle]) -> int:
        return self._change(web_style=WebStyle.parse(style))

    def set_resolution(self, value) -> int:
        """
        Change the number of points each series is compressed to.

        Leaves the session unchanged when the value is rejected.

        Raises:
            ResolutionError: If the value is non-numeric or out of range.
            SessionStateError: If the session is stopped.
        """
        self._require("change resolution", SessionState.LIVE)
        self.resolution = validate_resolution(
            value, self.config.min_resolution, self.config.max_resolution)
        logger.info(f"Resolution set to {self.resolution}")
        return self.resolution

    def payload(self) -> DataPayload:
        """Build the data payload for /data and /sse."""
        self._require("build payload", SessionState.LIVE)
        return build_payload(
            self.config.metric,
            self.buffer.snapshot(),
            {metric: buf.snapshot() for metric, buf in self.buffers.items()},
            accumulate=self.config.accumulate,
            max_data_points=self.config.max_data_points,
            resolution=self.resolution,
            style=self.config.web_style.value,
            threshold=self.config.threshold,
        )

    def config_response(self) -> ConfigResponse:
        return ConfigResponse(
            metric=self.config.metric.value,
            metricLabel=self.config.metric.label,
            accumulate=self.config.accumulate,
            maxDataPoints=self.config.max_data_points,
            refreshRate=self.config.refresh_rate_ms,
            style=self.config.web_style.value,
            logFile=self.config.log_file,
            resolution=self.resolution,
        )

    def stop(self) -> None:
        super().stop()
        for buf in self.buffers.values():
            buf.clear()
