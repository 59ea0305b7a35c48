"""SVG path strings for line series.

Points with a non-finite coordinate are undefined: the line breaks there and restarts
with a fresh ``M`` command at the next defined point. Each run is drawn with
monotone-x cubic interpolation, which never overshoots the data between points.
"""
from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

Point = Tuple[float, float]


def _defined(point: Tuple[Optional[float], Optional[float]]) -> bool:
    x, y = point
    return x is not None and y is not None and math.isfinite(x) and math.isfinite(y)


def split_defined(points: Sequence[Tuple[Optional[float], Optional[float]]]) -> List[List[Point]]:
    runs: List[List[Point]] = []
    current: List[Point] = []
    for point in points:
        if _defined(point):
            current.append((float(point[0]), float(point[1])))
        elif current:
            runs.append(current)
            current = []
    if current:
        runs.append(current)
    return runs


def _sign(value: float) -> float:
    return -1.0 if value < 0 else 1.0


def _slope3(p0: Point, p1: Point, p2: Point) -> float:
    h0 = p1[0] - p0[0]
    h1 = p2[0] - p1[0]
    if h0 == 0 or h1 == 0 or h0 + h1 == 0:
        return 0.0
    s0 = (p1[1] - p0[1]) / h0
    s1 = (p2[1] - p1[1]) / h1
    p = (s0 * h1 + s1 * h0) / (h0 + h1)
    return (_sign(s0) + _sign(s1)) * min(abs(s0), abs(s1), 0.5 * abs(p))


def _slope2(p0: Point, p1: Point, t: float) -> float:
    h = p1[0] - p0[0]
    return (3 * (p1[1] - p0[1]) / h - t) / 2 if h else t


def tangents(run: Sequence[Point]) -> List[float]:
    n = len(run)
    if n < 3:
        return [0.0] * n
    m = [0.0] * n
    for i in range(1, n - 1):
        m[i] = _slope3(run[i - 1], run[i], run[i + 1])
    m[0] = _slope2(run[0], run[1], m[1])
    m[-1] = _slope2(run[-2], run[-1], m[-2])
    return m


def _num(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def _pt(x: float, y: float) -> str:
    return f"{_num(x)},{_num(y)}"


def monotone_path(points: Sequence[Tuple[Optional[float], Optional[float]]]) -> str:
    commands: List[str] = []
    for run in split_defined(points):
        commands.append("M" + _pt(*run[0]))
        if len(run) == 2:
            commands.append("L" + _pt(*run[1]))
            continue
        m = tangents(run)
        for i in range(len(run) - 1):
            (x0, y0), (x1, y1) = run[i], run[i + 1]
            dx = (x1 - x0) / 3
            commands.append(
                "C" + _pt(x0 + dx, y0 + dx * m[i]) + "," + _pt(x1 - dx, y1 - dx * m[i + 1]) + "," + _pt(x1, y1)
            )
    return "".join(commands)
