"""Synthetic metric data for trying out compression and resolution control."""

import json
import logging
import math
import random
import time
from pathlib import Path
from typing import Dict, Iterator, Optional

logger = logging.getLogger(__name__)


def generate_records(
    count: int = 1200,
    interval_ms: int = 100,
    start_ms: Optional[int] = None,
    seed: Optional[int] = None,
) -> Iterator[Dict[str, object]]:
    """
    Yield records with CPU spikes and garbage-collection style memory drops.

    CPU idles around 5-20% with a major spike every 12 points and minor ones
    every 5. Memory trends upward with small drops every 15 points and a
    large drop at most every 45.

    Args:
        count: Number of records.
        interval_ms: Milliseconds between consecutive timestamps.
        start_ms: Timestamp of the first record; defaults to count intervals
            before now so the data ends at the current time.
        seed: Random seed for reproducible output.

    Yields:
        Records in the sampler's line format.
    """
    rng = random.Random(seed)
    timestamp = start_ms if start_ms is not None else int(time.time() * 1000) - count * interval_ms

    memory_load = 0.0
    cpu_spike = 0.0
    major_gc_counter = 0

    for i in range(count):
        if i % 12 == 0:
            cpu_spike = 40 + rng.random() * 50
        elif i % 5 == 0:
            cpu_spike = max(cpu_spike, 20 + rng.random() * 25)
        else:
            cpu_spike *= 0.8

        cpu_base = 8 + math.sin(i * 0.1) * 5 + math.sin(i * 0.05) * 3 + rng.random() * 4
        cpu_percent = min(100.0, cpu_base + cpu_spike)

        major_gc_counter += 1
        if major_gc_counter > 30 and i % 45 == 0:
            memory_load *= 0.3
            major_gc_counter = 0
        elif i % 15 == 0:
            memory_load *= 0.7
        else:
            memory_load += rng.random() * 3 + math.sin(i * 0.02)

        memory_base = 35 + math.sin(i * 0.08) * 15 + i * 0.02 + math.sin(i * 0.003) * 5
        heap_used = max(10.0, memory_base + memory_load)
        heap_total = max(heap_used * 1.4, 80.0)
        rss = heap_used + 25 + rng.random() * 8 + math.sin(i * 0.07) * 5
        external = 8 + math.sin(i * 0.15) * 4 + rng.random() * 3 + heap_used * 0.05

        cpu_user = i * 12 + cpu_percent * 3 + math.sin(i * 0.03) * 20
        cpu_system = i * 6 + cpu_percent * 1.5 + math.sin(i * 0.04) * 10

        yield {
            "timestamp": timestamp + i * interval_ms,
            "heapUsed": f"{heap_used:.2f}",
            "heapTotal": f"{heap_total:.2f}",
            "heapPercent": f"{heap_used / heap_total * 100:.2f}",
            "rss": f"{rss:.2f}",
            "external": f"{external:.2f}",
            "cpuPercent": f"{cpu_percent:.2f}",
            "cpuUser": f"{cpu_user:.2f}",
            "cpuSystem": f"{cpu_system:.2f}",
            "cpuTotal": f"{cpu_user + cpu_system:.2f}",
        }


def write_demo_file(log_file: str, count: int = 1200, seed: Optional[int] = None) -> int:
    """
    Replace a log file with freshly generated demo data.

    Returns:
        Number of lines written.
    """
    path = Path(log_file)
    with path.open("w", encoding="utf-8") as stream:
        for record in generate_records(count, seed=seed):
            stream.write(json.dumps(record) + "\n")
    logger.info(f"Generated {count} demo data points in {path}")
    return count
