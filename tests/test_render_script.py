from __future__ import annotations

import json
from pathlib import Path

from scripts import render_bubble_chart as cli

FIXTURE = Path(__file__).parent / "fixtures" / "sample.csv"


def test_main_writes_html_and_json(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.setattr("bubble_chart.render.plotly_renderer.STATIC_IMAGE_ENABLED", False)
    html_path = tmp_path / "out" / "chart.html"
    json_path = tmp_path / "out" / "chart.json"

    code = cli.main(
        [
            str(FIXTURE),
            "gdp_per_capita",
            "life_expectancy",
            "--name-field",
            "country",
            "--size-field",
            "population",
            "--color-field",
            "region_code",
            "--x-scale-type",
            "log",
            "--title",
            "Life expectancy",
            "--output",
            str(html_path),
            "--json",
            str(json_path),
        ]
    )

    assert code == 0
    assert "<html>" in html_path.read_text(encoding="utf-8")
    dumped = json.loads(json_path.read_text(encoding="utf-8"))
    assert "html" not in dumped
    assert dumped["point_count"] == 6
    assert dumped["dropped_row_count"] == 1

    summary = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert summary["output"] == str(html_path)
    assert summary["render_engine"] == "plotly"


def test_main_reports_error_code(tmp_path: Path, capsys) -> None:
    html_path = tmp_path / "chart.html"

    code = cli.main(
        [
            str(FIXTURE),
            "gdp_per_capita",
            "life_expectancy",
            "--discrete-color-scale",
            "--color-mapping",
            "1",
            "2",
            "3",
            "--color-scale",
            "red",
            "blue",
            "--output",
            str(html_path),
        ]
    )

    assert code == 1
    err_lines = capsys.readouterr().err.splitlines()
    assert any(line.startswith("MAPPING_LENGTH_MISMATCH:") for line in err_lines)
    assert not html_path.exists()
