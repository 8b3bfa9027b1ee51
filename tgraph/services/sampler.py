"""
Process resource sampler.

Writes one JSON line per interval with memory figures in MB and, unless
disabled, CPU usage since the previous sample. Values are 2-decimal strings,
the format the extractor and both viewers read.

Memory fields map onto a native process as follows: ``rss`` is the resident
set, ``heapUsed`` its private part (rss minus shared pages), ``heapTotal``
the full resident set, ``external`` the shared pages.
"""

import json
import logging
import threading
import time
from pathlib import Path
from typing import Dict, Optional

import psutil

from tgraph.core.exceptions import SourceError

logger = logging.getLogger(__name__)

MB = 1024 * 1024


class ProcessSampler:
    """Capture memory and CPU usage of one process."""

    def __init__(self, pid: Optional[int] = None, include_cpu: bool = True) -> None:
        """
        Initialize the sampler.

        Args:
            pid: Process to sample; the current process if omitted.
            include_cpu: Add cpu* fields from the second sample on.

        Raises:
            SourceError: If the process does not exist.
        """
        try:
            self.process = psutil.Process(pid)
        except psutil.NoSuchProcess as e:
            raise SourceError(f"No such process: {pid}") from e
        self.include_cpu = include_cpu
        self._previous_cpu = None
        self._previous_time: Optional[float] = None
        if include_cpu:
            self._previous_cpu = self.process.cpu_times()
            self._previous_time = time.monotonic()

    def sample(self) -> Dict[str, object]:
        """
        Capture one record.

        Returns:
            Record with timestamp (epoch ms) and metric fields.
        """
        mem = self.process.memory_info()
        shared = getattr(mem, "shared", 0)
        private = max(mem.rss - shared, 0)

        data: Dict[str, object] = {
            "timestamp": int(time.time() * 1000),
            "heapUsed": f"{private / MB:.2f}",
            "heapTotal": f"{mem.rss / MB:.2f}",
            "heapPercent": f"{(private / mem.rss * 100) if mem.rss else 0:.2f}",
            "rss": f"{mem.rss / MB:.2f}",
            "external": f"{shared / MB:.2f}",
        }

        if self.include_cpu and self._previous_cpu is not None:
            cpu = self.process.cpu_times()
            now = time.monotonic()
            user_ms = (cpu.user - self._previous_cpu.user) * 1000
            system_ms = (cpu.system - self._previous_cpu.system) * 1000
            elapsed_ms = (now - self._previous_time) * 1000
            percent = (user_ms + system_ms) / elapsed_ms * 100 if elapsed_ms > 0 else 0

            data["cpuPercent"] = f"{min(percent, 100):.2f}"
            data["cpuUser"] = f"{user_ms:.2f}"
            data["cpuSystem"] = f"{system_ms:.2f}"
            data["cpuTotal"] = f"{user_ms + system_ms:.2f}"

            self._previous_cpu = cpu
            self._previous_time = now

        return data


def run_sampler(
    sampler: ProcessSampler,
    log_file: str,
    interval_ms: int = 100,
    count: Optional[int] = None,
    stop_event: Optional[threading.Event] = None,
) -> int:
    """
    Append samples to a log file until stopped.

    Args:
        sampler: Source of records.
        log_file: File to append JSON lines to.
        interval_ms: Delay between samples.
        count: Stop after this many samples; run until stopped if omitted.
        stop_event: Event that ends the loop when set.

    Returns:
        Number of lines written.
    """
    stop_event = stop_event or threading.Event()
    written = 0
    logger.info(f"Sampling pid {sampler.process.pid} to {log_file} every {interval_ms}ms")

    with Path(log_file).open("a", encoding="utf-8") as stream:
        while not stop_event.is_set():
            try:
                record = sampler.sample()
            except psutil.NoSuchProcess:
                logger.info(f"Process {sampler.process.pid} exited")
                break
            stream.write(json.dumps(record) + "\n")
            stream.flush()
            written += 1
            if count is not None and written >= count:
                break
            stop_event.wait(interval_ms / 1000)

    logger.info(f"Wrote {written} samples to {log_file}")
    return written


def simulate_memory_activity(stop_event: threading.Event, step: float = 0.05) -> threading.Thread:
    """
    Grow and release memory in a background thread to produce a saw-tooth.

    Args:
        stop_event: Event that ends the simulation.
        step: Seconds between allocations.

    Returns:
        The started daemon thread.
    """

    def churn() -> None:
        blocks = []
        growing = True
        while not stop_event.is_set():
            if growing:
                blocks.append(bytearray(80_000))
                growing = len(blocks) <= 100
            else:
                blocks.pop()
                growing = not blocks
            stop_event.wait(step)

    thread = threading.Thread(target=churn, daemon=True)
    thread.start()
    return thread
