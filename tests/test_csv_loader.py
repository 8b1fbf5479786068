from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from bubble_chart.data.csv_loader import fetch_rows, load_rows
from bubble_chart.models.errors import MissingParameterError

FIXTURE = Path(__file__).parent / "fixtures" / "sample.csv"


def test_load_rows_keeps_raw_text() -> None:
    rows = load_rows(str(FIXTURE))

    assert len(rows) == 7
    assert rows[0]["country"] == "Norway"
    assert rows[0]["gdp_per_capita"] == "75420"
    assert rows[5]["gdp_per_capita"] == "n/a"


def test_load_rows_reads_tsv_by_extension(tmp_path: Path) -> None:
    path = tmp_path / "data.tsv"
    path.write_text("x\ty\n1\t2\n3\t\n", encoding="utf-8")

    rows = load_rows(str(path))

    assert rows == [{"x": "1", "y": "2"}, {"x": "3", "y": ""}]


def test_load_rows_explicit_delimiter(tmp_path: Path) -> None:
    path = tmp_path / "data.txt"
    path.write_text("x;y\n1;2\n", encoding="utf-8")

    assert load_rows(str(path), delimiter=";") == [{"x": "1", "y": "2"}]


def test_load_rows_requires_path() -> None:
    with pytest.raises(MissingParameterError):
        load_rows("")


def test_fetch_rows_returns_full_dataset() -> None:
    rows = asyncio.run(fetch_rows(str(FIXTURE)))

    assert [row["country"] for row in rows][:2] == ["Norway", "Japan"]
    assert len(rows) == 7
