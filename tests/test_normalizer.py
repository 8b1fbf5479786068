from __future__ import annotations

import math

import pytest

from bubble_chart.pipeline.normalizer import coerce_number, normalize_records


def test_normalize_drops_row_with_non_numeric_x() -> None:
    rows = [
        {"x": "1", "y": "2", "size": "3", "color": "#FF0000"},
        {"x": "abc", "y": "5", "size": "6", "color": "#00FF00"},
    ]

    records = normalize_records(rows, "x", "y", "size", "color")

    assert len(records) == 1
    record = records[0]
    assert (record.x, record.y, record.size) == (1.0, 2.0, 3.0)
    assert record.color == "#FF0000"
    assert record.label == ""


def test_normalize_keeps_input_order_and_reports_drops() -> None:
    rows = [
        {"name": "a", "x": "1", "y": "1", "s": "1"},
        {"name": "b", "x": "", "y": "2", "s": "2"},
        {"name": "c", "x": "3", "y": "inf", "s": "3"},
        {"name": "d", "x": "4", "y": "4", "s": None},
        {"name": "e", "x": 5, "y": 5.5, "s": "5"},
    ]
    dropped = []

    records = normalize_records(
        rows,
        "x",
        "y",
        "s",
        "name",
        "name",
        on_drop=lambda index, row, fields: dropped.append((index, row["name"], fields)),
    )

    assert [r.label for r in records] == ["a", "e"]
    assert records[1].y == 5.5
    assert dropped == [(1, "b", ["x"]), (2, "c", ["y"]), (3, "d", ["s"])]
    assert all(math.isfinite(v) for r in records for v in (r.x, r.y, r.size))


def test_normalize_missing_field_drops_every_row() -> None:
    rows = [{"x": "1", "y": "2"}, {"x": "3", "y": "4"}]

    assert normalize_records(rows, "x", "y", "size", "y") == []


def test_normalize_label_uses_name_field_when_truthy() -> None:
    rows = [
        {"country": "Norway", "x": "1", "y": "1"},
        {"country": "", "x": "2", "y": "2"},
        {"x": "3", "y": "3"},
    ]

    records = normalize_records(rows, "x", "y", "y", "y", "country")

    assert [r.label for r in records] == ["Norway", "", ""]


def test_normalize_without_name_field_has_empty_labels() -> None:
    rows = [{"country": "Norway", "x": "1", "y": "1"}]

    records = normalize_records(rows, "x", "y", "y", "y", None)

    assert records[0].label == ""


def test_normalize_empty_input() -> None:
    assert normalize_records([], "x", "y", "size", "color") == []


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (" 3.5 ", 3.5),
        ("10", 10.0),
        (7, 7.0),
        ("abc", None),
        ("", None),
        ("nan", None),
        ("-inf", None),
        (None, None),
        (True, None),
    ],
)
def test_coerce_number(value, expected) -> None:
    assert coerce_number(value) == expected
