"""Tests for CLI argument handling and configuration."""

import pytest

from tgraph.cli import build_parser, config_from_args, main
from tgraph.core.config import Settings
from tgraph.models.display import Accumulate, GlyphStyle, Rolling, WebStyle
from tgraph.models.metric import MetricSelector


def test_view_flags_override_settings():
    args = build_parser().parse_args([
        "view", "--file", "app.log", "--accumulate", "--metric", "cpuPercent",
        "--style", "lean", "--refresh", "250",
    ])
    config = config_from_args(args)
    assert config.log_file == "app.log"
    assert config.retention == Accumulate()
    assert config.metric is MetricSelector.CPU_PERCENT
    assert config.style is GlyphStyle.LEAN
    assert config.refresh_rate_ms == 250


def test_view_defaults():
    config = config_from_args(build_parser().parse_args(["view", "-p", "30"]))
    assert config.retention == Rolling(30)
    assert config.metric is MetricSelector.HEAP_USED


def test_unknown_metric_falls_back():
    config = config_from_args(build_parser().parse_args(["view", "-m", "nope"]))
    assert config.metric is MetricSelector.HEAP_USED


def test_web_flags():
    args = build_parser().parse_args([
        "web", "-s", "area", "--resolution", "300", "--port", "9999", "--no-open",
    ])
    config = config_from_args(args)
    assert config.web_style is WebStyle.AREA
    assert config.resolution == 300
    assert args.port == 9999
    assert args.auto_open is False


def test_invalid_style_rejected():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["view", "--style", "sparkles"])


@pytest.mark.parametrize("argv", [
    ["view", "--points", "0"],
    ["view", "-p", "-5"],
    ["web", "--refresh", "0"],
    ["monitor", "--interval", "0"],
    ["demo", "--count", "abc"],
])
def test_non_positive_counts_rejected(argv, capsys):
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args(argv)
    assert exc_info.value.code == 2
    assert "error:" in capsys.readouterr().err


def test_command_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_demo_without_viewer(log_path):
    assert main(["demo", "--file", str(log_path), "--count", "40", "--seed", "5", "--no-view"]) == 0
    assert len(log_path.read_text().splitlines()) == 40


# ============================================================================
# Settings
# ============================================================================

def test_settings_defaults():
    settings = Settings()
    assert settings.port == 3456
    assert settings.min_resolution == 50
    assert settings.max_resolution == 1000
    assert settings.variation_threshold == 0.1


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("TGRAPH_PORT", "9000")
    monkeypatch.setenv("TGRAPH_ACCUMULATE", "true")
    monkeypatch.setenv("TGRAPH_METRIC", "rss")
    settings = Settings()
    assert settings.port == 9000
    assert settings.accumulate is True
    assert settings.metric == "rss"
