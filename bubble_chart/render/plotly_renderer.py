"""Plotly 버블 차트 렌더러.

- 스케일을 거친 픽셀 좌표로 버블을 그리고, 눈금은 데이터 단위로 표시한다.
- 결과는 figure JSON(+ HTML, 정적 PNG)으로 반환한다.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import plotly.graph_objects as go
import plotly.io as pio

from bubble_chart.config.chart_config import FONT_FAMILY, PLOT_TEMPLATE, STATIC_IMAGE_ENABLED, TICK_COUNT
from bubble_chart.models.chart_spec import RenderRequest, RenderResult
from bubble_chart.pipeline.color_resolver import fill_color
from bubble_chart.pipeline.scales import ContinuousScale, build_scale
from bubble_chart.render.static_renderer import generate_static_image
from bubble_chart.utils.logging import log_event

_GRID_COLOR = "rgba(226, 232, 240, 0.8)"
_ZERO_LINE_COLOR = "rgba(148, 163, 184, 0.5)"


def _resolve_template_name() -> str:
    preferred = PLOT_TEMPLATE
    if preferred in pio.templates:
        return preferred
    if "plotly_white" in pio.templates:
        return "plotly_white"
    return "plotly"


def _axis_ticks(scale: ContinuousScale, tick_count: int) -> Dict[str, Any]:
    ticks = scale.ticks(tick_count)
    return {
        "tickmode": "array",
        "tickvals": [scale(t) for t in ticks],
        "ticktext": [scale.tick_format(t) for t in ticks],
    }


def _apply_axis_style(fig: go.Figure) -> None:
    axis_style = dict(
        showgrid=True,
        gridcolor=_GRID_COLOR,
        gridwidth=1,
        zeroline=False,
        zerolinecolor=_ZERO_LINE_COLOR,
        automargin=True,
        ticks="outside",
        ticklen=5,
        tickcolor="rgba(148, 163, 184, 0.75)",
        tickfont=dict(size=12, color="#64748b"),
        title_font=dict(size=13, color="#334155"),
        showline=True,
        linecolor="rgba(148, 163, 184, 0.45)",
    )
    fig.update_xaxes(**axis_style)
    fig.update_yaxes(**axis_style)


def _hover_template(x_field: str, y_field: str) -> str:
    # 툴팁: 라벨, x 필드 값, y 필드 값
    return (
        "%{customdata[0]}<br>"
        f"{x_field}: %{{customdata[1]}}<br>"
        f"{y_field}: %{{customdata[2]}}"
        "<extra></extra>"
    )


def build_figure(request: RenderRequest, tick_count: int = TICK_COUNT) -> go.Figure:
    """Build the bubble chart figure in pixel space."""
    x_scale = build_scale(request.x_scale)
    y_scale = build_scale(request.y_scale)
    size_scale = build_scale(request.size_scale)
    points = request.points

    # marker size는 지름(px), size 스케일은 반지름(px)
    diameters: List[float] = [max(0.0, 2 * size_scale(p.size)) for p in points]
    fig = go.Figure(
        go.Scatter(
            x=[x_scale(p.x) for p in points],
            y=[y_scale(p.y) for p in points],
            mode="markers+text" if request.show_labels else "markers",
            text=[p.label for p in points] if request.show_labels else None,
            textposition="middle center",
            textfont=dict(family="sans-serif", size=14, color="black"),
            customdata=[[p.label, p.x, p.y] for p in points],
            hovertemplate=_hover_template(request.x_field, request.y_field),
            marker=dict(
                size=diameters,
                sizemode="diameter",
                color=[fill_color(p.color) for p in points],
                opacity=0.85,
                line=dict(width=1, color="white"),
            ),
            showlegend=False,
        )
    )

    fig.update_layout(
        template=_resolve_template_name(),
        width=request.width + 2 * request.padding,
        height=request.height + 2 * request.padding,
        margin=dict(l=request.padding, r=request.padding, t=request.padding, b=request.padding),
        font=dict(family=FONT_FAMILY, size=14, color="#1e293b"),
        hovermode="closest",
        hoverlabel=dict(
            bgcolor="#f0f0f0",
            bordercolor="#f0f0f0",
            font=dict(color="blue", size=13, family="monospace"),
        ),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        title=dict(
            text=request.title or None,
            font=dict(size=16, color="#0f172a"),
            x=0.0,
            xanchor="left",
            y=0.98,
        ),
    )
    fig.update_xaxes(
        range=[0, request.width],
        title_text=request.x_field,
        **_axis_ticks(x_scale, tick_count),
    )
    # SVG와 같이 y=0이 위쪽 (range [height, 0])
    fig.update_yaxes(
        range=[request.height, 0],
        title_text=request.y_field,
        **_axis_ticks(y_scale, tick_count),
    )
    _apply_axis_style(fig)
    return fig


class PlotlyBubbleRenderer:
    """Default renderer: Plotly figure JSON, standalone HTML and a static PNG."""

    def __init__(
        self,
        *,
        include_html: bool = True,
        static_image: Optional[bool] = None,
        tick_count: int = TICK_COUNT,
    ) -> None:
        self.include_html = include_html
        self.static_image = STATIC_IMAGE_ENABLED if static_image is None else static_image
        self.tick_count = tick_count

    def render(self, request: RenderRequest) -> RenderResult:
        log_event(
            "render.start",
            {
                "point_count": len(request.points),
                "show_labels": request.show_labels,
                "x_scale": request.x_scale.scale_type.value,
                "y_scale": request.y_scale.scale_type.value,
            },
        )
        fig = build_figure(request, self.tick_count)
        image_data_url = generate_static_image(request, self.tick_count) if self.static_image else None
        render_engine = "plotly+seaborn" if image_data_url else "plotly"

        # Numpy types in figure JSON can break Pydantic serialization
        fig_json = json.loads(pio.to_json(fig))
        html = pio.to_html(fig, include_plotlyjs="cdn", full_html=True) if self.include_html else None
        log_event(
            "render.success",
            {
                "render_engine": render_engine,
                "has_image_data_url": bool(image_data_url),
                "has_html": bool(html),
            },
        )
        return RenderResult(
            figure_json=fig_json,
            html=html,
            image_data_url=image_data_url,
            render_engine=render_engine,
        )
