from __future__ import annotations

import pytest

from bubble_chart.models.chart_spec import NormalizedRecord
from bubble_chart.models.errors import EmptyDatasetError
from bubble_chart.pipeline.statistics import compute_statistics


def _records(color_values=None) -> list[NormalizedRecord]:
    xs = [1.0, 5.0, 3.0]
    ys = [10.0, 2.0, 7.0]
    sizes = [4.0, 8.0, 6.0]
    colors = color_values or ["1", "2", "3"]
    return [
        NormalizedRecord(x=x, y=y, size=s, color=c)
        for x, y, s, c in zip(xs, ys, sizes, colors)
    ]


def test_statistics_are_computed_per_field() -> None:
    stats = compute_statistics(_records())

    assert (stats.min_x, stats.max_x) == (1.0, 5.0)
    assert (stats.min_y, stats.max_y) == (2.0, 10.0)
    assert (stats.min_size, stats.max_size) == (4.0, 8.0)
    assert (stats.min_color, stats.max_color) == (1.0, 3.0)
    assert stats.color_is_numeric


def test_statistics_bound_every_record() -> None:
    records = _records()
    stats = compute_statistics(records)

    for record in records:
        assert stats.min_x <= record.x <= stats.max_x
        assert stats.min_y <= record.y <= stats.max_y
        assert stats.min_size <= record.size <= stats.max_size


def test_statistics_are_deterministic() -> None:
    records = _records()

    assert compute_statistics(records) == compute_statistics(records)


def test_non_numeric_colors_have_no_color_bounds() -> None:
    stats = compute_statistics(_records(["#FF0000", "2", "3"]))

    assert stats.min_color is None
    assert stats.max_color is None
    assert not stats.color_is_numeric


def test_empty_records_raise() -> None:
    with pytest.raises(EmptyDatasetError):
        compute_statistics([])
