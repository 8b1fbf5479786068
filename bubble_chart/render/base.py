"""Renderer seam: anything that turns a RenderRequest into output."""
from __future__ import annotations

from typing import Protocol

from bubble_chart.models.chart_spec import RenderRequest, RenderResult


class BubbleRenderer(Protocol):
    def render(self, request: RenderRequest) -> RenderResult:
        ...
