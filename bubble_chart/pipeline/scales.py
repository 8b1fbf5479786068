"""Scale selection and continuous scale evaluation.

Scales follow d3's continuous scale semantics: the domain (two or more stops)
is transformed (identity, log10 or signed power), then mapped piecewise
linearly onto the range. Values outside the domain extrapolate.
"""
from __future__ import annotations

import math
from typing import Any, List, Sequence, Union

import numpy as np
from matplotlib import colors as mcolors
from matplotlib import ticker as mticker

from bubble_chart.models.chart_spec import ScaleSpec, ScaleType
from bubble_chart.models.errors import ScaleDomainError

_NICE_STEPS = [1, 2, 5, 10]


def choose_scale(name: Any) -> ScaleType:
    """Map a scale name to a ScaleType. Unknown names fall back to linear."""
    token = str(name or "").strip().lower()
    if token in {"logarithm", "log", "l"}:
        return ScaleType.LOG
    if token in {"pow", "power", "p"}:
        return ScaleType.POWER
    if token in {"sqrt", "s"}:
        return ScaleType.SQRT
    return ScaleType.LINEAR


def scale_spec(
    name: Any,
    domain: Sequence[float],
    range_: Sequence[Union[float, str]],
    *,
    exponent: float = 1.0,
) -> ScaleSpec:
    """Build a ScaleSpec for a scale name and validate its domain."""
    scale_type = choose_scale(name)
    spec = ScaleSpec(
        scale_type=scale_type,
        domain=[float(v) for v in domain],
        range=list(range_),
        exponent=0.5 if scale_type == ScaleType.SQRT else float(exponent),
    )
    # fail on bad domains before anything is rendered
    ContinuousScale.from_spec(spec)
    return spec


def build_scale(spec: ScaleSpec) -> "ContinuousScale":
    return ContinuousScale.from_spec(spec)


def _within(values: np.ndarray, low: float, high: float) -> List[float]:
    # locators pad one step past the view limits
    tolerance = (high - low) * 1e-10
    kept = values[(values >= low - tolerance) & (values <= high + tolerance)]
    return [float(v) for v in np.round(kept, 12)]


def linear_ticks(start: float, stop: float, count: int = 10) -> List[float]:
    """Return "nice" ticks (1, 2 or 5 x 10^n steps) between start and stop."""
    if count <= 0 or not (math.isfinite(start) and math.isfinite(stop)):
        return []
    if start == stop:
        return [float(start)]
    low, high = sorted((start, stop))
    locator = mticker.MaxNLocator(nbins=count, steps=_NICE_STEPS)
    ticks = _within(locator.tick_values(low, high), low, high)
    return ticks[::-1] if stop < start else ticks


def log_ticks(start: float, stop: float, count: int = 10) -> List[float]:
    """Decade ticks; 1..9 multiples when the domain spans fewer decades than ``count``."""
    if count <= 0:
        return []
    low, high = sorted((start, stop))
    decades = math.ceil(math.log10(high)) - math.floor(math.log10(low))
    subs = np.arange(1.0, 10.0) if decades < count else (1.0,)
    locator = mticker.LogLocator(base=10.0, subs=subs, numticks=count + 2)
    ticks = _within(locator.tick_values(low, high), low, high)
    if len(ticks) * 2 < count:
        ticks = linear_ticks(low, high, count)
    return ticks[::-1] if stop < start else ticks


class ContinuousScale:
    """Callable mapping from a numeric domain onto a range."""

    def __init__(
        self,
        scale_type: ScaleType,
        domain: Sequence[float],
        range_: Sequence[Union[float, str]] = (0.0, 1.0),
        exponent: float = 1.0,
    ) -> None:
        self.scale_type = scale_type
        self.exponent = 0.5 if scale_type == ScaleType.SQRT else float(exponent)
        self.domain = [float(v) for v in domain]
        self.range = list(range_)

        if len(self.domain) < 2:
            raise ScaleDomainError(f"scale domain needs at least two bounds, got {self.domain}")
        if not all(math.isfinite(v) for v in self.domain):
            raise ScaleDomainError(f"scale domain must be finite, got {self.domain}")
        if scale_type == ScaleType.LOG and any(v <= 0 for v in self.domain):
            raise ScaleDomainError(f"log scale domain must be strictly positive, got {self.domain}")

        self.stops = np.array([self._transform(v) for v in self.domain])
        self._norm = mcolors.Normalize(vmin=float(self.stops.min()), vmax=float(self.stops.max()))

    @classmethod
    def from_spec(cls, spec: ScaleSpec) -> "ContinuousScale":
        return cls(spec.scale_type, spec.domain, spec.range, spec.exponent)

    def _transform(self, value: float) -> float:
        if self.scale_type == ScaleType.LOG:
            if value <= 0:
                raise ScaleDomainError(f"log scale cannot map non-positive value {value}")
            return float(np.log10(value))
        if self.scale_type in (ScaleType.POWER, ScaleType.SQRT):
            return float(np.sign(value) * np.abs(value) ** self.exponent)
        return float(value)

    @property
    def degenerate(self) -> bool:
        return bool(self.stops[0] == self.stops[-1])

    def normalize(self, value: float) -> float:
        """Fractional position of ``value`` from the first to the last domain stop."""
        if self.degenerate:
            return 0.5
        position = float(self._norm(self._transform(float(value))))
        # Normalize runs low to high; flip for descending domains
        return position if self.stops[-1] > self.stops[0] else 1.0 - position

    def __call__(self, value: float) -> float:
        targets = np.array([float(v) for v in self.range])
        segments = min(len(self.stops), len(targets))
        if segments < 2:
            return float(targets[0])
        stops, targets = self.stops[:segments], targets[:segments]
        if self.degenerate:
            return float((targets[0] + targets[1]) / 2)

        # np.interp needs ascending sample points
        if stops[-1] < stops[0]:
            stops, targets = stops[::-1], targets[::-1]
        transformed = self._transform(float(value))
        if transformed < stops[0]:
            return float(self._extend(transformed, stops[:2], targets[:2]))
        if transformed > stops[-1]:
            return float(self._extend(transformed, stops[-2:], targets[-2:]))
        return float(np.interp(transformed, stops, targets))

    @staticmethod
    def _extend(transformed: float, stops: np.ndarray, targets: np.ndarray) -> float:
        slope = (targets[1] - targets[0]) / (stops[1] - stops[0])
        return targets[0] + (transformed - stops[0]) * slope

    def ticks(self, count: int = 10) -> List[float]:
        start, stop = self.domain[0], self.domain[-1]
        if self.scale_type == ScaleType.LOG:
            return log_ticks(start, stop, count)
        return linear_ticks(start, stop, count)

    @staticmethod
    def tick_format(value: float) -> str:
        return format(value, ",.12g")
