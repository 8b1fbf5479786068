"""Bubble chart orchestration pipeline.

load -> normalize -> statistics -> scales -> colors -> render
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from bubble_chart.data.csv_loader import fetch_rows
from bubble_chart.models.chart_spec import (
    BubbleChartOptions,
    BubbleChartResponse,
    BubblePoint,
    FieldStatistics,
    RenderRequest,
    ScaleSpec,
)
from bubble_chart.models.errors import BubbleChartError, MissingParameterError
from bubble_chart.pipeline.color_resolver import ColorResolver, resolve_colors
from bubble_chart.pipeline.normalizer import DropHook, normalize_records
from bubble_chart.pipeline.scales import build_scale, scale_spec
from bubble_chart.pipeline.statistics import compute_statistics
from bubble_chart.render.base import BubbleRenderer
from bubble_chart.render.plotly_renderer import PlotlyBubbleRenderer
from bubble_chart.utils.logging import log_event, new_request_id

OptionsLike = Union[BubbleChartOptions, Mapping[str, Any], None]


@dataclass
class PreparedChart:
    request: RenderRequest
    statistics: FieldStatistics
    color_resolver: ColorResolver
    dropped_row_count: int
    stage_latency_ms: Dict[str, float] = field(default_factory=dict)


def _elapsed_ms(started: float) -> float:
    return round((perf_counter() - started) * 1000.0, 2)


def require_parameters(**values: Any) -> None:
    """Raise MissingParameterError for the first empty required argument."""
    for name, value in values.items():
        if value is None or not str(value).strip():
            raise MissingParameterError(f"{name} variable not set")


def resolve_options(x_field: str, y_field: str, options: OptionsLike = None) -> BubbleChartOptions:
    """Validate options and fill the defaults that depend on the required fields."""
    require_parameters(x_field=x_field, y_field=y_field)
    if options is None:
        resolved = BubbleChartOptions()
    elif isinstance(options, BubbleChartOptions):
        resolved = options
    else:
        resolved = BubbleChartOptions.model_validate(dict(options))

    # color_field / size_field default to y_field
    updates: Dict[str, Any] = {}
    if not resolved.color_field:
        updates["color_field"] = y_field
    if not resolved.size_field:
        updates["size_field"] = y_field
    return resolved.model_copy(update=updates) if updates else resolved


def _check_mappable(spec: ScaleSpec, values: Sequence[float]) -> None:
    # log scales raise here for non-positive values, before anything is drawn
    scale = build_scale(spec)
    for value in values:
        scale(value)


def prepare_render_request(
    rows: Sequence[Mapping[str, Any]],
    x_field: str,
    y_field: str,
    options: OptionsLike = None,
    *,
    on_drop: Optional[DropHook] = None,
) -> PreparedChart:
    """Run every step up to (not including) rendering."""
    resolved = resolve_options(x_field, y_field, options)
    stage_latency_ms: Dict[str, float] = {}

    started = perf_counter()
    records = normalize_records(
        rows,
        x_field,
        y_field,
        resolved.size_field,
        resolved.color_field,
        resolved.name_field,
        on_drop=on_drop,
    )
    stage_latency_ms["normalize"] = _elapsed_ms(started)

    started = perf_counter()
    statistics = compute_statistics(records)
    stage_latency_ms["statistics"] = _elapsed_ms(started)

    started = perf_counter()
    x_domain = list(resolved.x_range) if resolved.x_range else [statistics.min_x, statistics.max_x]
    y_domain = list(resolved.y_range) if resolved.y_range else [statistics.min_y, statistics.max_y]
    x_spec = scale_spec(
        resolved.x_scale_type, x_domain, [0.0, float(resolved.width)], exponent=resolved.power_exponent
    )
    y_spec = scale_spec(
        resolved.y_scale_type, y_domain, [float(resolved.height), 0.0], exponent=resolved.power_exponent
    )
    size_spec = scale_spec(
        resolved.size_scale_type,
        [statistics.min_size, statistics.max_size],
        list(resolved.size_scale),
        exponent=resolved.power_exponent,
    )
    _check_mappable(x_spec, [r.x for r in records])
    _check_mappable(y_spec, [r.y for r in records])
    _check_mappable(size_spec, [r.size for r in records])
    stage_latency_ms["scales"] = _elapsed_ms(started)

    started = perf_counter()
    color_resolver = resolve_colors(records, statistics, resolved)
    points: List[BubblePoint] = [
        BubblePoint(
            x=record.x,
            y=record.y,
            size=record.size,
            color=color_resolver.resolve(record.color),
            label=record.label,
        )
        for record in records
    ]
    stage_latency_ms["colors"] = _elapsed_ms(started)

    request = RenderRequest(
        points=points,
        x_scale=x_spec,
        y_scale=y_spec,
        size_scale=size_spec,
        color=color_resolver.resolution,
        x_field=x_field,
        y_field=y_field,
        show_labels=resolved.show_labels,
        width=resolved.width,
        height=resolved.height,
        padding=resolved.padding,
        title=resolved.title,
    )
    return PreparedChart(
        request=request,
        statistics=statistics,
        color_resolver=color_resolver,
        dropped_row_count=len(rows) - len(records),
        stage_latency_ms=stage_latency_ms,
    )


def _render(
    rows: Sequence[Mapping[str, Any]],
    x_field: str,
    y_field: str,
    options: OptionsLike,
    renderer: Optional[BubbleRenderer],
    request_id: str,
    started: float,
    stage_latency_ms: Dict[str, float],
) -> BubbleChartResponse:
    prepared = prepare_render_request(rows, x_field, y_field, options)
    stage_latency_ms.update(prepared.stage_latency_ms)

    render_started = perf_counter()
    result = (renderer or PlotlyBubbleRenderer()).render(prepared.request)
    stage_latency_ms["render"] = _elapsed_ms(render_started)

    request = prepared.request
    scales = {"x": request.x_scale, "y": request.y_scale, "size": request.size_scale}
    if request.color.scale is not None:
        scales["color"] = request.color.scale
    response = BubbleChartResponse(
        request_id=request_id,
        figure_json=result.figure_json,
        html=result.html,
        image_data_url=result.image_data_url,
        render_engine=result.render_engine,
        point_count=len(request.points),
        dropped_row_count=prepared.dropped_row_count,
        statistics=prepared.statistics,
        scales=scales,
        color=request.color,
        total_latency_ms=_elapsed_ms(started),
        stage_latency_ms=stage_latency_ms,
    )

    log_event(
        "bubble_chart.success",
        {
            "request_id": request_id,
            "point_count": response.point_count,
            "dropped_row_count": response.dropped_row_count,
            "render_engine": response.render_engine,
            "total_latency_ms": response.total_latency_ms,
        },
    )
    return response


def render_rows(
    rows: Sequence[Mapping[str, Any]],
    x_field: str,
    y_field: str,
    options: OptionsLike = None,
    *,
    renderer: Optional[BubbleRenderer] = None,
    request_id: Optional[str] = None,
) -> BubbleChartResponse:
    """Render already-loaded rows (no data fetch)."""
    request_id = request_id or new_request_id()
    started = perf_counter()
    log_event(
        "bubble_chart.start",
        {"request_id": request_id, "x_field": x_field, "y_field": y_field, "row_count": len(rows)},
    )
    try:
        return _render(rows, x_field, y_field, options, renderer, request_id, started, {})
    except BubbleChartError as exc:
        log_event(
            "bubble_chart.error",
            {"request_id": request_id, "code": exc.code, "error": str(exc)},
            level="error",
        )
        raise


async def render_bubble_chart(
    data_source_path: str,
    x_field: str,
    y_field: str,
    options: OptionsLike = None,
    *,
    renderer: Optional[BubbleRenderer] = None,
    request_id: Optional[str] = None,
) -> BubbleChartResponse:
    """Load a delimited file and render it as a bubble chart.

    Required arguments are checked before the file is read. The only
    suspension point is the data fetch; everything after it is synchronous.
    """
    request_id = request_id or new_request_id()
    started = perf_counter()
    try:
        require_parameters(data_source_path=data_source_path, x_field=x_field, y_field=y_field)
        resolved = resolve_options(x_field, y_field, options)
        log_event(
            "bubble_chart.start",
            {
                "request_id": request_id,
                "data_source_path": data_source_path,
                "x_field": x_field,
                "y_field": y_field,
            },
        )

        load_started = perf_counter()
        rows = await fetch_rows(data_source_path, resolved.delimiter)
        stage_latency_ms = {"load": _elapsed_ms(load_started)}

        return _render(rows, x_field, y_field, resolved, renderer, request_id, started, stage_latency_ms)
    except BubbleChartError as exc:
        log_event(
            "bubble_chart.error",
            {"request_id": request_id, "code": exc.code, "error": str(exc)},
            level="error",
        )
        raise


def bubble_chart(
    data_source_path: str,
    x_field: str,
    y_field: str,
    options: OptionsLike = None,
    *,
    renderer: Optional[BubbleRenderer] = None,
    request_id: Optional[str] = None,
) -> BubbleChartResponse:
    """Blocking wrapper around :func:`render_bubble_chart`."""
    return asyncio.run(
        render_bubble_chart(
            data_source_path,
            x_field,
            y_field,
            options,
            renderer=renderer,
            request_id=request_id,
        )
    )
