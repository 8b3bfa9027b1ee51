"""Tests for rolling and accumulating sample buffers."""

import json

import pytest

from tgraph.models.display import Accumulate, Rolling, retention_from_flags
from tgraph.models.metric import MetricSelector
from tgraph.services.buffer import SampleBuffer, tail_lines
from tgraph.services.extractor import extract


def _extract_heap(line):
    return extract(line, MetricSelector.HEAP_USED)


def _lines(values):
    return [json.dumps({"timestamp": i, "heapUsed": str(v)}) for i, v in enumerate(values)]


def test_rolling_never_exceeds_max_size(make_samples):
    """After every append the buffer holds at most max_size samples."""
    buffer = SampleBuffer(Rolling(5))
    samples = make_samples(range(20))
    for i, sample in enumerate(samples):
        buffer.append(sample)
        assert buffer.size() <= 5
        assert buffer.snapshot() == tuple(samples[max(0, i - 4):i + 1])


def test_accumulate_is_monotonic(make_samples):
    buffer = SampleBuffer(Accumulate())
    previous = 0
    for sample in make_samples(range(500)):
        buffer.append(sample)
        assert buffer.size() == previous + 1
        previous = buffer.size()
    assert len(buffer) == 500


def test_snapshot_is_immutable_copy(make_samples):
    buffer = SampleBuffer(Accumulate())
    buffer.append(make_samples([1])[0])
    snapshot = buffer.snapshot()
    buffer.append(make_samples([2])[0])
    assert len(snapshot) == 1
    assert isinstance(snapshot, tuple)


def test_bulk_load_rolling_reads_last_lines():
    buffer = SampleBuffer(Rolling(3))
    loaded = buffer.bulk_load(_lines(range(10)), _extract_heap)
    assert loaded == 3
    assert [s.value for s in buffer.snapshot()] == [7.0, 8.0, 9.0]


def test_bulk_load_rolling_window_counts_lines():
    """Malformed lines inside the window reduce the loaded count."""
    lines = _lines(range(5)) + ["not json"]
    buffer = SampleBuffer(Rolling(3))
    assert buffer.bulk_load(lines, _extract_heap) == 2
    assert [s.value for s in buffer.snapshot()] == [3.0, 4.0]


def test_bulk_load_accumulate_reads_everything():
    lines = _lines(range(50))
    lines.insert(10, "garbage")
    buffer = SampleBuffer(Accumulate())
    assert buffer.bulk_load(lines, _extract_heap) == 50
    assert [s.timestamp for s in buffer.snapshot()] == list(range(50))


def test_reset_switches_policy(make_samples):
    buffer = SampleBuffer(Accumulate())
    for sample in make_samples(range(10)):
        buffer.append(sample)
    buffer.reset(Rolling(2))
    assert buffer.size() == 0
    for sample in make_samples(range(10)):
        buffer.append(sample)
    assert buffer.size() == 2
    assert buffer.snapshot()[-1].value == 9.0


def test_clear(make_samples):
    buffer = SampleBuffer(Rolling(4))
    for sample in make_samples([1, 2]):
        buffer.append(sample)
    buffer.clear()
    assert buffer.size() == 0


def test_tail_lines():
    assert tail_lines(["a", "b", "c"], Rolling(2)) == ["b", "c"]
    assert tail_lines(["a", "b", "c"], Rolling(10)) == ["a", "b", "c"]
    assert tail_lines(["a", "b", "c"], Accumulate()) == ["a", "b", "c"]


def test_invalid_policies():
    with pytest.raises(ValueError):
        Rolling(0)
    with pytest.raises(TypeError):
        SampleBuffer("rolling")


def test_retention_from_flags():
    assert retention_from_flags(True, 100) == Accumulate()
    assert retention_from_flags(False, 42) == Rolling(42)
    assert Rolling(5).name == "Rolling"
    assert Accumulate().name == "Accumulate"
