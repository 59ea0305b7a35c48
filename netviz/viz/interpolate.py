"""Value interpolators shared by scales and transitions.

An interpolator is a function ``t -> value`` with ``t`` in ``[0, 1]``. Numbers blend
linearly, CSS colours blend component-wise in RGB, and anything else (labels, path
strings, flags) switches to the target value as soon as ``t > 0``.
"""
from __future__ import annotations

import math
import re
from numbers import Real
from typing import Any, Callable, Optional, Sequence, Tuple

Interpolator = Callable[[float], Any]
RGB = Tuple[float, float, float]

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_RGB_RE = re.compile(r"^rgb\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*\)$")

# ColorBrewer "Blues", 9 classes.
BLUES = (
    "#f7fbff",
    "#deebf7",
    "#c6dbef",
    "#9ecae1",
    "#6baed6",
    "#4292c6",
    "#2171b5",
    "#08519c",
    "#08306b",
)


def parse_color(value: Any) -> Optional[RGB]:
    if not isinstance(value, str):
        return None
    text = value.strip()
    match = _HEX_RE.match(text)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return float(int(digits[0:2], 16)), float(int(digits[2:4], 16)), float(int(digits[4:6], 16))
    match = _RGB_RE.match(text)
    if match:
        return float(match.group(1)), float(match.group(2)), float(match.group(3))
    return None


def format_color(rgb: RGB) -> str:
    r, g, b = (max(0, min(255, int(math.floor(c + 0.5)))) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def interpolate_number(a: float, b: float) -> Interpolator:
    return lambda t: a * (1 - t) + b * t


def interpolate_rgb(a: str, b: str) -> Interpolator:
    start = parse_color(a)
    end = parse_color(b)
    if start is None or end is None:
        raise ValueError(f"Cannot interpolate colours {a!r} -> {b!r}")

    def blend(t: float) -> str:
        return format_color(tuple(s + (e - s) * t for s, e in zip(start, end)))

    return blend


def interpolate_discrete(a: Any, b: Any) -> Interpolator:
    return lambda t: b if t > 0 else a


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def interpolate(a: Any, b: Any) -> Interpolator:
    """Pick an interpolator from the types of the two endpoints."""
    if _is_number(a) and _is_number(b):
        return interpolate_number(float(a), float(b))
    if parse_color(a) is not None and parse_color(b) is not None:
        return interpolate_rgb(a, b)
    return interpolate_discrete(a, b)


def ramp(colors: Sequence[str]) -> Interpolator:
    """Piecewise RGB interpolation through evenly spaced colour stops."""
    stops = [parse_color(c) for c in colors]
    if len(stops) < 2 or any(s is None for s in stops):
        raise ValueError("A colour ramp needs at least two valid colours")
    segments = len(stops) - 1

    def sample(t: float) -> str:
        t = min(1.0, max(0.0, t))
        i = min(segments - 1, int(t * segments))
        local = t * segments - i
        start, end = stops[i], stops[i + 1]
        return format_color(tuple(s + (e - s) * local for s, e in zip(start, end)))

    return sample


interpolate_blues = ramp(BLUES)
