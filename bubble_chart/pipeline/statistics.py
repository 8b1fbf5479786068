"""Per-field min/max over the normalized record set."""
from __future__ import annotations

from typing import List, Optional, Sequence

from bubble_chart.models.chart_spec import FieldStatistics, NormalizedRecord
from bubble_chart.models.errors import EmptyDatasetError
from bubble_chart.pipeline.normalizer import coerce_number


def _numeric_colors(records: Sequence[NormalizedRecord]) -> Optional[List[float]]:
    values: List[float] = []
    for record in records:
        numeric = coerce_number(record.color)
        if numeric is None:
            return None
        values.append(numeric)
    return values


def compute_statistics(records: Sequence[NormalizedRecord]) -> FieldStatistics:
    """Compute min/max independently for x, y, size and (when numeric) color."""
    if not records:
        raise EmptyDatasetError("no valid rows left after normalization")

    xs = [record.x for record in records]
    ys = [record.y for record in records]
    sizes = [record.size for record in records]
    colors = _numeric_colors(records)

    return FieldStatistics(
        min_x=min(xs),
        max_x=max(xs),
        min_y=min(ys),
        max_y=max(ys),
        min_size=min(sizes),
        max_size=max(sizes),
        min_color=min(colors) if colors else None,
        max_color=max(colors) if colors else None,
    )
