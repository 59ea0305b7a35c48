"""Coordinate-mapping scales.

Scales are immutable: ``nice()``, ``with_domain()`` and friends return new scales, so a
chart rebuilds its scales from the visible subset on every render and two scales built
from the same inputs always map identically.
"""
from __future__ import annotations

import math
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence, Tuple

from netviz.viz.interpolate import Interpolator, interpolate_blues

Pair = Tuple[float, float]

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def tick_increment(start: float, stop: float, count: int) -> float:
    """Step between nice ticks; negative values mean ``1 / -step`` (sub-unit steps)."""
    step = (stop - start) / max(0, count)
    power = math.floor(math.log10(step))
    error = step / 10**power
    factor = 10 if error >= _E10 else 5 if error >= _E5 else 2 if error >= _E2 else 1
    if power >= 0:
        return factor * 10**power
    return -(10 ** -power) / factor


def _tick_spec(start: float, stop: float, count: float) -> Tuple[int, int, float]:
    step = (stop - start) / max(0, count)
    power = math.floor(math.log10(step))
    error = step / 10**power
    factor = 10 if error >= _E10 else 5 if error >= _E5 else 2 if error >= _E2 else 1
    if power < 0:
        inc = 10 ** -power / factor
        i1 = _round_half_up(start * inc)
        i2 = _round_half_up(stop * inc)
        if i1 / inc < start:
            i1 += 1
        if i2 / inc > stop:
            i2 -= 1
        inc = -inc
    else:
        inc = 10**power * factor
        i1 = _round_half_up(start / inc)
        i2 = _round_half_up(stop / inc)
        if i1 * inc < start:
            i1 += 1
        if i2 * inc > stop:
            i2 -= 1
    if i2 < i1 and 0.5 <= count < 2:
        return _tick_spec(start, stop, count * 2)
    return i1, i2, inc


def ticks(start: float, stop: float, count: int) -> List[float]:
    """Evenly spaced round values within ``[start, stop]``, roughly ``count`` of them."""
    if count <= 0:
        return []
    if start == stop:
        return [float(start)]
    reverse = stop < start
    lo, hi = (stop, start) if reverse else (start, stop)
    i1, i2, inc = _tick_spec(lo, hi, count)
    if i2 < i1:
        return []
    if inc < 0:
        values = [(i1 + i) / -inc for i in range(i2 - i1 + 1)]
    else:
        values = [float((i1 + i) * inc) for i in range(i2 - i1 + 1)]
    return values[::-1] if reverse else values


def extent(values: Sequence[float]) -> Optional[Pair]:
    finite = [v for v in values if v is not None and math.isfinite(v)]
    if not finite:
        return None
    return min(finite), max(finite)


class LinearScale:
    """Continuous ``domain -> range`` mapping, optionally clamped to the domain."""

    def __init__(self, domain: Pair = (0.0, 1.0), range: Pair = (0.0, 1.0), clamp: bool = False):
        self.domain: Pair = (float(domain[0]), float(domain[1]))
        self.range: Pair = (float(range[0]), float(range[1]))
        self.clamp = clamp

    def _transform(self, value: float) -> float:
        return value

    def _untransform(self, value: float) -> float:
        return value

    def _normalize(self, value: float) -> float:
        d0, d1 = (self._transform(d) for d in self.domain)
        if d1 == d0:
            return 0.5
        t = (self._transform(value) - d0) / (d1 - d0)
        if self.clamp:
            t = min(1.0, max(0.0, t))
        return t

    def __call__(self, value: float) -> float:
        r0, r1 = self.range
        t = self._normalize(float(value))
        if t == 1.0:
            return r1
        return r0 + (r1 - r0) * t

    def invert(self, pixel: float) -> float:
        r0, r1 = self.range
        d0, d1 = (self._transform(d) for d in self.domain)
        t = 0.5 if r1 == r0 else (float(pixel) - r0) / (r1 - r0)
        if self.clamp:
            t = min(1.0, max(0.0, t))
        return self._untransform(d0 + (d1 - d0) * t)

    def _copy(self, **changes: Any) -> "LinearScale":
        params = {"domain": self.domain, "range": self.range, "clamp": self.clamp}
        params.update(changes)
        return type(self)(**params)

    def with_domain(self, domain: Pair) -> "LinearScale":
        return self._copy(domain=domain)

    def with_range(self, range: Pair) -> "LinearScale":
        return self._copy(range=range)

    def nice(self, count: int = 10) -> "LinearScale":
        """Extend the domain outward to round values on the tick grid."""
        d0, d1 = self.domain
        start, stop = (d1, d0) if d1 < d0 else (d0, d1)
        if start == stop or count <= 0 or not (math.isfinite(start) and math.isfinite(stop)):
            return self._copy()
        previous = None
        for _ in range(10):
            step = tick_increment(start, stop, count)
            if step == previous:
                break
            if step > 0:
                start = math.floor(start / step) * step
                stop = math.ceil(stop / step) * step
            elif step < 0:
                start = math.ceil(start * step) / step
                stop = math.floor(stop * step) / step
            else:
                break
            previous = step
        domain = (stop, start) if d1 < d0 else (start, stop)
        return self._copy(domain=domain)

    def ticks(self, count: int = 10) -> List[float]:
        return ticks(self.domain[0], self.domain[-1], count)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(domain={self.domain}, range={self.range})"


class SqrtScale(LinearScale):
    """Square-root scale for circle sizes.

    With a domain and range both starting at zero, ``radius = k * sqrt(value)``, so the
    circle's area (not its radius) is proportional to the value.
    """

    def _transform(self, value: float) -> float:
        return math.copysign(math.sqrt(abs(value)), value)

    def _untransform(self, value: float) -> float:
        return math.copysign(value * value, value)


class BandScale:
    """Maps an ordered set of categories onto evenly spaced bands of equal width."""

    def __init__(
        self,
        domain: Sequence[Hashable] = (),
        range: Pair = (0.0, 1.0),
        padding_inner: float = 0.0,
        padding_outer: float = 0.0,
        align: float = 0.5,
    ):
        self.domain: Tuple[Hashable, ...] = tuple(dict.fromkeys(domain))
        self.range: Pair = (float(range[0]), float(range[1]))
        self.padding_inner = min(1.0, max(0.0, padding_inner))
        self.padding_outer = max(0.0, padding_outer)
        self.align = min(1.0, max(0.0, align))
        self._positions: Dict[Hashable, float] = {}
        self.step = 0.0
        self.bandwidth = 0.0
        self._rescale()

    @classmethod
    def padded(cls, domain: Sequence[Hashable], range: Pair, padding: float) -> "BandScale":
        return cls(domain, range, padding_inner=padding, padding_outer=padding)

    def _rescale(self) -> None:
        n = len(self.domain)
        r0, r1 = self.range
        reverse = r1 < r0
        start, stop = (r1, r0) if reverse else (r0, r1)
        step = (stop - start) / max(1.0, n - self.padding_inner + self.padding_outer * 2)
        start += (stop - start - step * (n - self.padding_inner)) * self.align
        self.step = step
        self.bandwidth = step * (1 - self.padding_inner)
        positions = [start + step * i for i in range(n)]
        if reverse:
            positions.reverse()
        self._positions = dict(zip(self.domain, positions))

    def __call__(self, key: Hashable) -> Optional[float]:
        return self._positions.get(key)

    def center(self, key: Hashable) -> Optional[float]:
        start = self(key)
        return None if start is None else start + self.bandwidth / 2

    def with_domain(self, domain: Sequence[Hashable]) -> "BandScale":
        return BandScale(domain, self.range, self.padding_inner, self.padding_outer, self.align)

    def with_range(self, range: Pair) -> "BandScale":
        return BandScale(self.domain, range, self.padding_inner, self.padding_outer, self.align)

    def ticks(self, count: int = 0) -> List[Hashable]:
        return list(self.domain)

    def __repr__(self) -> str:
        return f"BandScale(domain={list(self.domain)}, range={self.range}, bandwidth={self.bandwidth:.2f})"


class OrdinalScale:
    """Category -> value lookup, cycling through ``range`` when the domain is longer."""

    def __init__(self, domain: Sequence[Hashable], range: Sequence[Any], unknown: Any = None):
        self.domain: Tuple[Hashable, ...] = tuple(dict.fromkeys(domain))
        self.range: Tuple[Any, ...] = tuple(range)
        self.unknown = unknown
        self._index = {key: i for i, key in enumerate(self.domain)}

    def __call__(self, key: Hashable) -> Any:
        i = self._index.get(key)
        if i is None or not self.range:
            return self.unknown
        return self.range[i % len(self.range)]


class SequentialColorScale:
    """Numeric domain -> colour via an interpolator such as :func:`interpolate_blues`."""

    def __init__(self, domain: Pair = (0.0, 1.0), interpolator: Interpolator = interpolate_blues):
        self.domain: Pair = (float(domain[0]), float(domain[1]))
        self.interpolator = interpolator

    def __call__(self, value: float) -> str:
        d0, d1 = self.domain
        t = 0.5 if d1 == d0 else (float(value) - d0) / (d1 - d0)
        return self.interpolator(min(1.0, max(0.0, t)))


def tick_labels(scale: Any, count: int, fmt: Callable[[Any], str]) -> List[Tuple[float, str]]:
    """Pixel position and label of each tick; band scales tick at band centres."""
    out: List[Tuple[float, str]] = []
    if isinstance(scale, BandScale):
        for key in scale.domain:
            out.append((scale.center(key), fmt(key)))
        return out
    for value in scale.ticks(count):
        out.append((scale(value), fmt(value)))
    return out
