"""Prometheus metrics for monitoring."""

from prometheus_client import Counter, Gauge, Histogram

lines_ingested_total = Counter("tgraph_lines_ingested_total",
                               "Total number of log lines accepted into a buffer")
lines_rejected_total = Counter(
    "tgraph_lines_rejected_total", "Total number of malformed log lines discarded")
reloads_total = Counter("tgraph_reloads_total",
                        "Total number of session re-initializations")
resolution_changes_total = Counter(
    "tgraph_resolution_changes_total", "Resolution change requests", ["outcome"])

render_duration_seconds = Histogram(
    "tgraph_render_duration_seconds", "Terminal render duration", buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5])
payload_build_duration_seconds = Histogram(
    "tgraph_payload_build_duration_seconds", "Web payload build duration", buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5])

buffer_size = Gauge("tgraph_buffer_size", "Samples held for the active metric")
sse_subscribers = Gauge("tgraph_sse_subscribers", "Connected SSE subscribers")
