"""Seaborn/Matplotlib 정적 이미지 렌더러.

- Plotly figure와 같은 픽셀 좌표계(위쪽이 y=0)로 버블을 그린다.
- 결과는 PNG data URL로 반환한다.
"""
from __future__ import annotations

import base64
import io
from typing import Any, Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import seaborn as sns

from bubble_chart.models.chart_spec import RenderRequest
from bubble_chart.pipeline.color_resolver import fill_color
from bubble_chart.pipeline.scales import build_scale
from bubble_chart.utils.logging import log_event

# 캔버스 1px = figure 1px (dpi 100 기준)
_CANVAS_DPI = 100
_POINTS_PER_PIXEL = 72 / _CANVAS_DPI


def _figure_to_data_url(fig: Any) -> str:
    buf = io.BytesIO()
    fig.savefig(
        buf,
        format="png",
        dpi=160,
        bbox_inches="tight",
        facecolor="white",
    )
    buf.seek(0)
    encoded = base64.b64encode(buf.read()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def generate_static_image(request: RenderRequest, tick_count: int = 10) -> Optional[str]:
    """Render the bubble chart to a PNG data URL; None if drawing fails."""
    if not request.points:
        return None

    x_scale = build_scale(request.x_scale)
    y_scale = build_scale(request.y_scale)
    size_scale = build_scale(request.size_scale)

    sns.set_theme(
        style="ticks",
        context="notebook",
        rc={
            "axes.facecolor": "#f8fafc",
            "figure.facecolor": "white",
            "axes.edgecolor": "#cbd5e1",
            "axes.grid": True,
            "grid.color": "#e2e8f0",
            "grid.linewidth": 0.8,
            "axes.titlesize": 15,
            "axes.titleweight": "semibold",
            "axes.labelsize": 12,
            "xtick.labelsize": 11,
            "ytick.labelsize": 11,
            "font.family": "sans-serif",
            "font.sans-serif": ["Noto Sans CJK JP", "DejaVu Sans", "Liberation Sans", "Arial"],
        },
    )
    fig, ax = plt.subplots(
        figsize=(
            (request.width + 2 * request.padding) / _CANVAS_DPI,
            (request.height + 2 * request.padding) / _CANVAS_DPI,
        ),
        dpi=_CANVAS_DPI,
    )
    try:
        xs = [x_scale(p.x) for p in request.points]
        ys = [y_scale(p.y) for p in request.points]
        # scatter의 s는 지름(pt)의 제곱
        areas = [(max(0.0, 2 * size_scale(p.size)) * _POINTS_PER_PIXEL) ** 2 for p in request.points]
        ax.scatter(
            xs,
            ys,
            s=areas,
            c=[fill_color(p.color) for p in request.points],
            alpha=0.85,
            edgecolors="white",
            linewidths=0.9,
            zorder=3,
        )
        if request.show_labels:
            for x, y, point in zip(xs, ys, request.points):
                if point.label:
                    ax.text(x, y, point.label, ha="center", va="center", fontsize=10, color="black", zorder=4)

        x_ticks = x_scale.ticks(tick_count)
        y_ticks = y_scale.ticks(tick_count)
        ax.set_xticks([x_scale(t) for t in x_ticks])
        ax.set_xticklabels([x_scale.tick_format(t) for t in x_ticks])
        ax.set_yticks([y_scale(t) for t in y_ticks])
        ax.set_yticklabels([y_scale.tick_format(t) for t in y_ticks])
        ax.set_xlim(0, request.width)
        ax.set_ylim(request.height, 0)
        ax.set_xlabel(request.x_field)
        ax.set_ylabel(request.y_field)
        ax.set_title(request.title or "BUBBLE CHART", loc="left", fontsize=15, fontweight="semibold")
        sns.despine(ax=ax, top=True, right=True)

        fig.tight_layout()
        return _figure_to_data_url(fig)
    except (ValueError, RuntimeError) as exc:
        log_event("render.static_image.error", {"error": str(exc)}, level="warning")
        return None
    finally:
        plt.close(fig)
