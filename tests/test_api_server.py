from __future__ import annotations

from fastapi.testclient import TestClient

from bubble_chart.api.server import MAX_ROWS, app
from bubble_chart.models.chart_spec import RenderResult
from bubble_chart.render.plotly_renderer import PlotlyBubbleRenderer


client = TestClient(app)


def _rows() -> list[dict]:
    return [
        {"country": "Norway", "gdp": "75420", "life": "82.3", "pop": "5.4", "region": 1},
        {"country": "Japan", "gdp": "39290", "life": "84.5", "pop": "125.7", "region": 2},
        {"country": "Atlantis", "gdp": "n/a", "life": "99.0", "pop": "1.0", "region": 3},
    ]


def test_health() -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_bubble_chart_renders_rows(monkeypatch) -> None:
    monkeypatch.setattr("bubble_chart.render.plotly_renderer.STATIC_IMAGE_ENABLED", False)
    payload = {
        "x_field": "gdp",
        "y_field": "life",
        "rows": _rows(),
        "options": {"nameField": "country", "sizeField": "pop", "colorField": "region"},
    }

    response = client.post("/bubble-chart", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["point_count"] == 2
    assert body["dropped_row_count"] == 1
    assert body["html"] is None
    assert body["figure_json"]["data"][0]["customdata"][0][0] == "Norway"
    assert body["statistics"]["min_color"] == 1.0
    assert body["request_id"].startswith("bc-")


def test_bubble_chart_rejects_large_rows() -> None:
    payload = {
        "x_field": "x",
        "y_field": "y",
        "rows": [{"x": i, "y": i} for i in range(MAX_ROWS + 1)],
    }
    response = client.post("/bubble-chart", json=payload)
    assert response.status_code == 413
    assert response.json()["detail"]["code"] == "ROWS_LIMIT_EXCEEDED"


def test_bubble_chart_missing_field_is_bad_request() -> None:
    payload = {"x_field": "", "y_field": "life", "rows": _rows()}
    response = client.post("/bubble-chart", json=payload)
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "MISSING_PARAMETER"


def test_bubble_chart_maps_pipeline_errors() -> None:
    payload = {
        "x_field": "gdp",
        "y_field": "life",
        "rows": _rows(),
        "options": {
            "colorField": "region",
            "discreetColorScale": True,
            "colorMapping": [1, 2, 3],
            "colorScale": ["red", "green"],
        },
    }
    response = client.post("/bubble-chart", json=payload)
    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "MAPPING_LENGTH_MISMATCH"

    empty = {"x_field": "gdp", "y_field": "life", "rows": []}
    response = client.post("/bubble-chart", json=empty)
    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "EMPTY_DATASET"


def test_bubble_chart_uses_plotly_renderer_without_html(monkeypatch) -> None:
    captured: dict[str, object] = {}

    def _fake_render(self, request):
        captured["include_html"] = self.include_html
        captured["point_count"] = len(request.points)
        return RenderResult(figure_json={"data": []}, render_engine="plotly")

    monkeypatch.setattr(PlotlyBubbleRenderer, "render", _fake_render)

    response = client.post(
        "/bubble-chart",
        json={"x_field": "gdp", "y_field": "life", "rows": _rows()},
    )

    assert response.status_code == 200
    assert captured == {"include_html": False, "point_count": 2}


def test_row_limit_comes_from_chart_config() -> None:
    from bubble_chart.config import chart_config

    assert MAX_ROWS == chart_config.MAX_ROWS
    assert chart_config.CORS_ALLOW_ORIGINS
