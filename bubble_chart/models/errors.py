"""Bubble chart error taxonomy.

Every error here is fatal for a render call and is raised before the
renderer runs. Row-level coercion failures are not errors (rows are dropped).
"""
from __future__ import annotations


class BubbleChartError(Exception):
    """Base error carrying a machine-readable code."""

    code = "BUBBLE_CHART_ERROR"


class MissingParameterError(BubbleChartError, ValueError):
    code = "MISSING_PARAMETER"


class EmptyDatasetError(BubbleChartError):
    code = "EMPTY_DATASET"


class ScaleDomainError(BubbleChartError, ValueError):
    code = "SCALE_DOMAIN"


class MappingLengthMismatch(BubbleChartError, ValueError):
    code = "MAPPING_LENGTH_MISMATCH"


class InvalidColorFormat(BubbleChartError, ValueError):
    code = "INVALID_COLOR_FORMAT"


class UnmappedColorValue(BubbleChartError, KeyError):
    code = "UNMAPPED_COLOR_VALUE"

    def __str__(self) -> str:
        # KeyError quotes its message by default
        return str(self.args[0]) if self.args else ""
