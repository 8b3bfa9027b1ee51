"""Shared pytest fixtures."""

import json
from pathlib import Path
from typing import Callable, Iterable, List, Union

import pytest

from tgraph.models.sample import Sample


@pytest.fixture
def log_path(tmp_path) -> Path:
    return tmp_path / "heap.log"


@pytest.fixture
def write_log(log_path) -> Callable[..., Path]:
    """Append records (dicts are JSON-encoded, strings written as-is) to the log."""

    def write(records: Iterable[Union[dict, str]], mode: str = "a") -> Path:
        with log_path.open(mode, encoding="utf-8") as f:
            for record in records:
                line = record if isinstance(record, str) else json.dumps(record)
                f.write(line + "\n")
        return log_path

    return write


@pytest.fixture
def heap_records() -> Callable[..., List[dict]]:
    """Build heapUsed records one second apart."""

    def build(values: Iterable[float], start: int = 1000, step: int = 1000) -> List[dict]:
        return [
            {"timestamp": start + i * step, "heapUsed": f"{value:.2f}"}
            for i, value in enumerate(values)
        ]

    return build


@pytest.fixture
def make_samples() -> Callable[..., List[Sample]]:
    """Build samples with evenly spaced timestamps."""

    def build(values: Iterable[float], start: int = 1000, step: int = 1000) -> List[Sample]:
        return [Sample.create(start + i * step, value) for i, value in enumerate(values)]

    return build
