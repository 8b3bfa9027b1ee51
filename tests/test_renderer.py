"""Tests for the terminal character-grid renderer."""

import pytest

from tgraph.models.display import DisplaySpec, GlyphStyle
from tgraph.services.renderer import (
    CharGrid,
    TerminalRenderer,
    format_elapsed,
    glyphs_for,
    scale,
    time_axis,
)

# "  100.0 │" prefix in front of every grid row.
ROW_PREFIX = 9


def _render(samples, width=40, height=10, style=GlyphStyle.BLOCKS, **kwargs):
    spec = DisplaySpec(width=width, height=height, style=style)
    return TerminalRenderer(spec, **kwargs).render(samples).split("\n")


def _grid(lines, height):
    return [line[ROW_PREFIX:] for line in lines[2:2 + height]]


def test_legend_uses_uncompressed_stats(heap_records, make_samples):
    """Three samples at width 100: no compression, exact legend."""
    samples = make_samples([50.0, 55.0, 52.0])
    lines = _render(samples, width=100, height=20)
    assert "Current: 52.00 | Average: 52.33 | Min: 50.00 | Max: 55.00" in lines


def test_layout(make_samples):
    lines = _render(make_samples([1, 2, 3]), width=40, height=10, title="Resource Monitor")
    assert lines[0].strip() == "Resource Monitor"
    assert lines[1] == "═" * 40
    for line in lines[2:12]:
        assert line[7:ROW_PREFIX] == " │"
        assert len(line) == ROW_PREFIX + 30
    assert lines[12] == " " * 8 + "└" + "─" * 30
    assert lines[14] == ""
    assert lines[15].startswith("Current:")


def test_value_labels_run_from_max_to_min(make_samples):
    lines = _render(make_samples([0, 100]), height=11)
    assert lines[2].startswith("  100.0 │")
    assert lines[7].startswith("   50.0 │")
    assert lines[12].startswith("    0.0 │")


def test_higher_values_are_drawn_higher(make_samples):
    grid = _grid(_render(make_samples([0, 100])), 10)
    assert grid[0][29] == "█"
    assert grid[9][0] == "█"


def test_blocks_fill_under_points(make_samples):
    grid = _grid(_render(make_samples([0, 100])), 10)
    assert [grid[row][29] for row in (1, 2, 3, 9)] == ["▀", "▄", "░", "░"]


def test_lean_style_has_no_fill(make_samples):
    grid = _grid(_render(make_samples([0, 100, 20, 80]), style=GlyphStyle.LEAN), 10)
    text = "".join(grid)
    assert ":" in text
    assert not set("░▀▄█") & set(text)


def test_ascii_horizontal_line(make_samples):
    grid = _grid(_render(make_samples([7, 7]), style=GlyphStyle.ASCII), 10)
    assert grid[9] == "●" + "─" * 28 + "●"


def test_degenerate_range_does_not_divide_by_zero(make_samples):
    lines = _render(make_samples([5, 5, 5]))
    grid = _grid(lines, 10)
    assert "█" in grid[9]
    assert "Min: 5.00 | Max: 5.00" in lines[-1]


def test_range_wider_than_float_max(make_samples):
    """Extreme finite bounds still plot low at the bottom and high at the top."""
    lines = _render(make_samples([-1e308, 1e308]), width=40, height=5, style=GlyphStyle.LEAN)
    rows = [line.split("│", 1)[1] for line in lines[2:7]]
    assert rows[0][29] == ":"
    assert rows[4][0] == ":"
    assert all(len(row) == 30 for row in rows)
    assert "Min: -1" in lines[-1]


def test_scale_is_clamped_to_grid():
    grid = CharGrid(10, 5, glyphs_for(GlyphStyle.LEAN))
    assert grid.row(1e308, -1e308, 1e308) == 0
    assert grid.row(-1e308, -1e308, 1e308) == 4
    assert grid.row(5.0, 5.0, 5.0) == 4
    assert scale(0.0, -1e308, 1e308) == 0.5


def test_empty_buffer(make_samples):
    lines = _render([], height=10)
    assert lines[2].startswith("  100.0 │")
    assert lines[11].startswith("    0.0 │")
    assert lines[-1] == "Current: 0.00 | Average: 0.00 | Min: 0.00 | Max: 0.00"
    assert set("".join(_grid(lines, 10))) == {" "}
    # No time axis without samples.
    assert len(lines) == 2 + 10 + 1 + 2


def test_time_axis_line(make_samples):
    lines = _render(make_samples([50.0, 55.0, 52.0]), width=100, height=20)
    axis = lines[23]
    assert axis.startswith(" " * 9 + "0s")
    assert axis.rstrip().endswith("2s")
    assert len(axis) == 9 + 90


def test_compressed_spike_reaches_top_row(make_samples):
    """Renderer compresses to the plot width without losing the spike."""
    values = [10.0] * 1000
    values[500] = 500.0
    lines = _render(make_samples(values), width=60, height=12)
    grid = _grid(lines, 12)
    assert "█" in grid[0]
    assert lines[2].startswith("  500.0 │")
    assert "Max: 500.00" in lines[-1]


def test_info_line_appended(make_samples):
    spec = DisplaySpec(width=40, height=5)
    text = TerminalRenderer(spec).render(make_samples([1]), info="Data points: 1")
    assert text.split("\n")[-1] == "Data points: 1"


# ============================================================================
# Time labels
# ============================================================================

@pytest.mark.parametrize("seconds,label", [
    (0, "0s"), (45, "45s"), (60, "1m"), (90, "1m30s"), (120, "2m"),
    (3600, "1h"), (3900, "1h5m"), (10800, "3h"),
])
def test_format_elapsed(seconds, label):
    assert format_elapsed(seconds) == label


def test_time_axis_positions():
    axis = time_axis(0, 120_000, 50)
    assert len(axis) == 50
    assert axis.startswith("0s")
    assert axis[12:15] == "30s"
    assert axis[24:26] == "1m"
    assert axis.endswith("2m")


def test_time_axis_too_narrow_for_labels():
    assert time_axis(0, 5000, 9) == " " * 9


# ============================================================================
# Grid rasterizer
# ============================================================================

def test_line_does_not_overwrite_points():
    grid = CharGrid(5, 5, glyphs_for(GlyphStyle.LEAN))
    grid.cells[2][2] = "X"
    grid.draw_line(0, 2, 4, 2)
    assert grid.rows()[2] == "::X::"


def test_glyph_lookup_covers_every_style():
    for style in GlyphStyle:
        glyphs = glyphs_for(style)
        assert glyphs.point
        assert glyphs.fills_area == (style == GlyphStyle.BLOCKS)
