from __future__ import annotations

import math
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from bubble_chart.config.chart_config import CORS_ALLOW_ORIGINS, MAX_ROWS
from bubble_chart.models.chart_spec import BubbleChartOptions, BubbleChartResponse
from bubble_chart.models.errors import BubbleChartError, MissingParameterError
from bubble_chart.utils.logging import log_event, new_request_id

app = FastAPI(title="Bubble Chart API")

origins = list(CORS_ALLOW_ORIGINS)
if origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


class BubbleChartRequest(BaseModel):
    x_field: str
    y_field: str
    rows: List[Dict[str, Any]]
    options: BubbleChartOptions = Field(default_factory=BubbleChartOptions)


def _sanitize_non_finite(value: Any) -> Any:
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, (int, float)):
        return value if math.isfinite(float(value)) else None
    if isinstance(value, dict):
        return {str(k): _sanitize_non_finite(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_sanitize_non_finite(item) for item in value]
    return value


def _validate_payload(req: BubbleChartRequest) -> None:
    if len(req.rows) > MAX_ROWS:
        raise HTTPException(
            status_code=413,
            detail={"code": "ROWS_LIMIT_EXCEEDED", "message": f"rows size must be <= {MAX_ROWS}"},
        )


@app.get("/health")
def health_check() -> dict:
    return {"status": "ok"}


@app.post("/bubble-chart", response_model=BubbleChartResponse)
def render_bubble_chart(req: BubbleChartRequest) -> BubbleChartResponse:
    _validate_payload(req)
    request_id = new_request_id()
    log_event(
        "request.bubble_chart",
        {
            "request_id": request_id,
            "row_count": len(req.rows),
            "x_field": req.x_field,
            "y_field": req.y_field,
        },
    )

    from bubble_chart.pipeline.bubble_chart import render_rows
    from bubble_chart.render.plotly_renderer import PlotlyBubbleRenderer

    try:
        result = render_rows(
            req.rows,
            req.x_field,
            req.y_field,
            req.options,
            renderer=PlotlyBubbleRenderer(include_html=False),
            request_id=request_id,
        )
    except MissingParameterError as exc:
        raise HTTPException(
            status_code=400,
            detail={"code": exc.code, "message": str(exc)},
        ) from exc
    except BubbleChartError as exc:
        raise HTTPException(
            status_code=422,
            detail={"code": exc.code, "message": str(exc)},
        ) from exc

    payload = _sanitize_non_finite(result.model_dump(mode="json"))
    return BubbleChartResponse.model_validate(payload)
