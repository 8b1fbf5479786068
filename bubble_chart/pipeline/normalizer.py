"""Raw row -> NormalizedRecord conversion."""
from __future__ import annotations

import math
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from bubble_chart.models.chart_spec import NormalizedRecord
from bubble_chart.utils.logging import log_event

DropHook = Callable[[int, Mapping[str, Any], List[str]], None]


def coerce_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        numeric = float(value.strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    return numeric if math.isfinite(numeric) else None


def _numeric_column(frame: pd.DataFrame, field: str) -> pd.Series:
    if field not in frame.columns:
        return pd.Series([float("nan")] * len(frame), index=frame.index, dtype="float64")
    return pd.to_numeric(frame[field].map(coerce_number), errors="coerce")


def _label_of(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    if not value:
        return ""
    return str(value)


def normalize_records(
    rows: Sequence[Mapping[str, Any]],
    x_field: str,
    y_field: str,
    size_field: str,
    color_field: str,
    name_field: Optional[str] = None,
    *,
    on_drop: Optional[DropHook] = None,
) -> List[NormalizedRecord]:
    """Convert raw rows into dense, input-ordered NormalizedRecords.

    Rows whose x, y or size value is missing or not a finite number are
    dropped. Each drop is logged and reported to ``on_drop`` when given.
    """
    frame = pd.DataFrame(list(rows))
    numeric = pd.DataFrame(
        {
            "x": _numeric_column(frame, x_field),
            "y": _numeric_column(frame, y_field),
            "size": _numeric_column(frame, size_field),
        },
        index=frame.index,
    )
    valid = numeric.notna().all(axis=1)
    field_names: Dict[str, str] = {"x": x_field, "y": y_field, "size": size_field}

    records: List[NormalizedRecord] = []
    for position, row in enumerate(rows):
        if not bool(valid.iloc[position]):
            invalid_fields = [
                field_names[key]
                for key in ("x", "y", "size")
                if pd.isna(numeric[key].iloc[position])
            ]
            log_event(
                "normalize.row_dropped",
                {"row_index": position, "invalid_fields": invalid_fields},
                level="warning",
            )
            if on_drop is not None:
                on_drop(position, row, invalid_fields)
            continue

        records.append(
            NormalizedRecord(
                label=_label_of(row.get(name_field)) if name_field else "",
                x=float(numeric["x"].iloc[position]),
                y=float(numeric["y"].iloc[position]),
                size=float(numeric["size"].iloc[position]),
                color=row.get(color_field),
            )
        )

    log_event(
        "normalize.summary",
        {"row_count": len(rows), "kept": len(records), "dropped": len(rows) - len(records)},
    )
    return records
