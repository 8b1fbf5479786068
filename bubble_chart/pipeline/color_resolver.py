"""Color resolution: continuous gradients or discrete category lookups."""
from __future__ import annotations

import colorsys
import math
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Hashable, List, Optional, Sequence, Tuple

import numpy as np
from matplotlib import colors as mcolors
from plotly import colors as pcolors

from bubble_chart.models.chart_spec import (
    BubbleChartOptions,
    ColorResolution,
    FieldStatistics,
    NormalizedRecord,
)
from bubble_chart.models.errors import InvalidColorFormat, MappingLengthMismatch, UnmappedColorValue
from bubble_chart.pipeline.normalizer import coerce_number
from bubble_chart.pipeline.scales import ContinuousScale, scale_spec

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")
_HSL = re.compile(r"hsla?\(\s*([-\d.]+)(?:deg)?\s*[, ]\s*([\d.]+)%\s*[, ]\s*([\d.]+)%.*\)")

RGB = Tuple[float, float, float]


def color_hex_to_number(color: Any) -> int:
    """Parse a hex color code ("#FF0000", "ff0000") into an integer."""
    text = str(color if color is not None else "").strip()
    if text.startswith("#"):
        text = text[1:]
    if not _HEX_DIGITS.fullmatch(text):
        raise InvalidColorFormat(f"color value {color!r} could not be made into a number")
    return int(text, 16)


def parse_color(color: Any) -> RGB:
    """Parse a CSS color (name, hex, rgb()/rgba(), hsl()/hsla()) into 0..1 RGB."""
    text = str(color if color is not None else "").strip()
    lowered = text.lower()
    try:
        if lowered.startswith("rgb"):
            red, green, blue = pcolors.unlabel_rgb(lowered)
            return (red / 255.0, green / 255.0, blue / 255.0)
        if lowered.startswith("hsl"):
            match = _HSL.fullmatch(lowered)
            if match is None:
                raise ValueError(text)
            hue, saturation, lightness = (float(v) for v in match.groups())
            return colorsys.hls_to_rgb((hue % 360) / 360.0, lightness / 100.0, saturation / 100.0)
        return mcolors.to_rgb(text)
    except (TypeError, ValueError, IndexError) as exc:
        raise InvalidColorFormat(f"{color!r} is not a valid color") from exc


def to_display_color(color: Any) -> str:
    """Return any supported CSS color as a #rrggbb string."""
    return mcolors.to_hex(parse_color(color))


def fill_color(color: Any, default: str = "black") -> str:
    # unparseable fills render as the SVG initial fill
    try:
        return to_display_color(color)
    except InvalidColorFormat:
        return default


def _category_key(value: Any) -> Optional[Tuple[str, Hashable]]:
    # "2" and 2 are the same category
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    numeric = coerce_number(value)
    if numeric is not None:
        return ("n", numeric)
    return ("s", str(value).strip())


def _spread(high: float, low: float, count: int) -> List[float]:
    if count <= 2:
        return [high, low]
    return [float(v) for v in np.linspace(high, low, count)]


class ColorResolver(ABC):
    """Turns a raw color value into a display color."""

    def __init__(self, resolution: ColorResolution) -> None:
        self.resolution = resolution

    @abstractmethod
    def resolve(self, value: Any) -> str:
        ...

    def __call__(self, value: Any) -> str:
        return self.resolve(value)


class DiscreteColorResolver(ColorResolver):
    """Category lookup. Colors are passed through as given."""

    def __init__(
        self,
        categories: Sequence[Any],
        colors: Sequence[Any],
        unknown_color: Optional[str] = None,
    ) -> None:
        if len(categories) != len(colors):
            raise MappingLengthMismatch(
                f"color mapping has {len(categories)} keys but color scale has {len(colors)} colors"
            )
        super().__init__(
            ColorResolution(
                kind="discrete",
                categories=list(categories),
                colors=[str(color) for color in colors],
                unknown_color=unknown_color or None,
            )
        )
        self._lookup: Dict[Tuple[str, Hashable], str] = {}
        for category, color in zip(categories, colors):
            key = _category_key(category)
            # first occurrence wins on duplicate keys
            if key is not None and key not in self._lookup:
                self._lookup[key] = str(color)

    def resolve(self, value: Any) -> str:
        key = _category_key(value)
        if key is not None and key in self._lookup:
            return self._lookup[key]
        if self.resolution.unknown_color is None:
            raise UnmappedColorValue(f"color value {value!r} is not in the color mapping")
        return self.resolution.unknown_color


class ContinuousColorResolver(ColorResolver):
    def __init__(
        self,
        scale_type: str,
        high: float,
        low: float,
        colors: Sequence[str],
        *,
        hex_values: bool = False,
        exponent: float = 1.0,
    ) -> None:
        rgb = np.array([parse_color(color) for color in colors])
        spec = scale_spec(scale_type, _spread(high, low, len(colors)), list(colors), exponent=exponent)
        super().__init__(ColorResolution(kind="continuous", scale=spec))
        self._scale = ContinuousScale.from_spec(spec)
        self._hex_values = hex_values
        self._channels = rgb.T
        # color stop positions along the transformed domain, 0..1
        if self._scale.degenerate or len(colors) < 2:
            self._positions = np.linspace(0.0, 1.0, len(colors))
        else:
            self._positions = np.array([self._scale.normalize(v) for v in spec.domain])

    def _numeric(self, value: Any) -> float:
        if self._hex_values:
            return float(color_hex_to_number(value))
        numeric = coerce_number(value)
        if numeric is None:
            raise InvalidColorFormat(f"color value {value!r} is not numeric")
        return numeric

    def resolve(self, value: Any) -> str:
        position = self._scale.normalize(self._numeric(value))
        # np.interp clamps positions outside the end stops
        rgb = [float(np.interp(position, self._positions, channel)) for channel in self._channels]
        return mcolors.to_hex(rgb)


def resolve_colors(
    records: Sequence[NormalizedRecord],
    statistics: FieldStatistics,
    options: BubbleChartOptions,
) -> ColorResolver:
    """Pick discrete, numeric-continuous or hex-continuous coloring."""
    if options.discrete_color_scale:
        if options.color_mapping:
            return DiscreteColorResolver(options.color_mapping, options.color_scale, options.unknown_color)

        # no mapping: every distinct color in the data is its own color
        seen = set()
        literal: List[Any] = []
        for record in records:
            key = _category_key(record.color)
            if key is None or key in seen:
                continue
            seen.add(key)
            literal.append(record.color)
        return DiscreteColorResolver(literal, [str(value) for value in literal], options.unknown_color)

    if statistics.color_is_numeric:
        return ContinuousColorResolver(
            options.color_scale_type,
            statistics.max_color,
            statistics.min_color,
            options.color_scale,
            exponent=options.power_exponent,
        )

    hex_values = [color_hex_to_number(record.color) for record in records]
    return ContinuousColorResolver(
        options.color_scale_type,
        max(hex_values),
        min(hex_values),
        options.color_scale,
        hex_values=True,
        exponent=options.power_exponent,
    )
