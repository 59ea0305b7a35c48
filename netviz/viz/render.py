"""Altair layers drawn straight from element attributes.

Element attributes are already pixels, so every positional/visual channel uses an
identity scale (``scale=None``) and the Vega-Lite spec shows exactly the frame the
transitions produced, including mid-animation frames.
"""
from __future__ import annotations

import math
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import altair as alt
import pandas as pd

from netviz.viz.base import Viewport
from netviz.viz.elements import Element, ElementLayer
from netviz.viz.paths import split_defined
from netviz.viz.theme import AXIS_COLOR, FONT, LABEL_FONT_SIZE, TITLE_FONT_SIZE

BASE_COLUMNS = ["layer", "kind", "key", "element_id", "exiting"]


def element_rows(
    layer: ElementLayer,
    dx: float = 0.0,
    dy: float = 0.0,
    x_fields: Sequence[str] = ("x", "cx"),
    y_fields: Sequence[str] = ("y", "cy"),
    opacity: float = 1.0,
) -> List[Dict[str, Any]]:
    """One row per element (live then exiting) with offsets applied to positions."""
    rows = []
    for element in layer.all_elements():
        row: Dict[str, Any] = {
            "layer": layer.name,
            "kind": element.kind,
            "key": str(element.key),
            "element_id": element.id,
            "exiting": element.exiting,
        }
        row.update(element.attrs)
        for name in x_fields:
            if name in row:
                row[name] = row[name] + dx
        for name in y_fields:
            if name in row:
                row[name] = row[name] + dy
        if opacity != 1.0:
            row["opacity"] = row.get("opacity", 1.0) * opacity
        rows.append(row)
    return rows


def rows_to_frame(rows: Iterable[Dict[str, Any]]) -> pd.DataFrame:
    rows = list(rows)
    if not rows:
        return pd.DataFrame(columns=BASE_COLUMNS)
    return pd.DataFrame(rows)


def _px(field: str, channel: Callable[..., Any] = alt.X) -> Any:
    return channel(f"{field}:Q", scale=None, axis=None)


def rect_layer(rows: List[Dict[str, Any]], tooltip: Optional[List[Any]] = None) -> Optional[alt.Chart]:
    if not rows:
        return None
    df = pd.DataFrame(rows)
    df["x2"] = df["x"] + df["width"]
    df["y2"] = df["y"] + df["height"]
    if "opacity" not in df.columns:
        df["opacity"] = 1.0
    encoding: Dict[str, Any] = dict(
        x=_px("x"),
        x2="x2:Q",
        y=_px("y", alt.Y),
        y2="y2:Q",
        color=alt.Color("fill:N", scale=None),
        opacity=alt.Opacity("opacity:Q", scale=None),
    )
    if tooltip:
        encoding["tooltip"] = tooltip
    columns = [c for c in df.columns if c != "points"]
    return alt.Chart(df[columns]).mark_rect(cornerRadius=2).encode(**encoding)


def text_layer(
    rows: List[Dict[str, Any]],
    align: str = "left",
    baseline: str = "middle",
    font_size: int = LABEL_FONT_SIZE,
    color: str = AXIS_COLOR,
) -> Optional[alt.Chart]:
    if not rows:
        return None
    df = pd.DataFrame(rows)
    if "opacity" not in df.columns:
        df["opacity"] = 1.0
    df = df[["key", "x", "y", "text", "opacity"]]
    return (
        alt.Chart(df)
        .mark_text(align=align, baseline=baseline, font=FONT, fontSize=font_size, color=color)
        .encode(
            x=_px("x"),
            y=_px("y", alt.Y),
            text="text:N",
            opacity=alt.Opacity("opacity:Q", scale=None),
        )
    )


def circle_layer(rows: List[Dict[str, Any]], tooltip: Optional[List[Any]] = None) -> Optional[alt.Chart]:
    if not rows:
        return None
    df = pd.DataFrame(rows)
    # Vega-Lite sizes points by area in square pixels.
    df["size"] = df["r"].map(lambda r: math.pi * max(0.0, r) ** 2)
    encoding: Dict[str, Any] = dict(
        x=_px("cx"),
        y=_px("cy", alt.Y),
        size=alt.Size("size:Q", scale=None),
        color=alt.Color("fill:N", scale=None),
        opacity=alt.Opacity("opacity:Q", scale=None),
        stroke=alt.Stroke("stroke:N", scale=None),
        strokeWidth=alt.StrokeWidth("stroke_width:Q", scale=None),
    )
    if tooltip:
        encoding["tooltip"] = tooltip
    return alt.Chart(df).mark_circle().encode(**encoding)


def line_rows(layer: ElementLayer, dx: float = 0.0, dy: float = 0.0) -> List[Dict[str, Any]]:
    """Explode each path element's ``points`` into rows, one detail group per unbroken run."""
    rows = []
    for element in layer.all_elements():
        for run_index, run in enumerate(split_defined(element.attrs.get("points", ()))):
            for order, (x, y) in enumerate(run):
                rows.append(
                    {
                        "key": str(element.key),
                        "run": f"{element.key}:{run_index}",
                        "order": order,
                        "x": x + dx,
                        "y": y + dy,
                        "stroke": element.attrs.get("stroke"),
                        "stroke_width": element.attrs.get("stroke_width", 2),
                        "opacity": element.attrs.get("opacity", 1.0),
                    }
                )
    return rows


def line_layer(rows: List[Dict[str, Any]]) -> Optional[alt.Chart]:
    if not rows:
        return None
    return (
        alt.Chart(pd.DataFrame(rows))
        .mark_line(interpolate="monotone")
        .encode(
            x=_px("x"),
            y=_px("y", alt.Y),
            detail="run:N",
            order="order:Q",
            color=alt.Color("stroke:N", scale=None),
            opacity=alt.Opacity("opacity:Q", scale=None),
            strokeWidth=alt.StrokeWidth("stroke_width:Q", scale=None),
        )
    )


def axis_rows(
    ticks: Sequence[Tuple[float, str]], orient: str, viewport: Viewport, offset: float = 0.0
) -> List[Dict[str, Any]]:
    """Tick label positions for an axis along one edge of the plot area."""
    m = viewport.margin
    rows = []
    for i, (pos, label) in enumerate(ticks):
        if pos is None:
            continue
        if orient == "bottom":
            x, y = m.left + pos, m.top + viewport.inner_height + 16 + offset
        elif orient == "left":
            x, y = m.left - 8 - offset, m.top + pos
        elif orient == "right":
            x, y = m.left + viewport.inner_width + 8 + offset, m.top + pos
        else:
            raise ValueError(f"Unknown axis orientation: {orient}")
        rows.append({"key": f"{orient}:{i}", "x": x, "y": y, "text": label, "opacity": 1.0})
    return rows


def axis_layer(ticks: Sequence[Tuple[float, str]], orient: str, viewport: Viewport) -> Optional[alt.Chart]:
    align = {"bottom": "center", "left": "right", "right": "left"}[orient]
    return text_layer(axis_rows(ticks, orient, viewport), align=align, font_size=LABEL_FONT_SIZE - 1)


def compose(
    layers: Iterable[Optional[alt.Chart]],
    viewport: Viewport,
    title: str,
    usermeta: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    present = [layer for layer in layers if layer is not None]
    if not present:
        present = [empty_layer(viewport)]
    chart = alt.layer(*present).properties(
        width=viewport.width,
        height=viewport.height,
        title=alt.TitleParams(title, font=FONT, fontSize=TITLE_FONT_SIZE),
        usermeta=usermeta or {},
    )
    return chart.to_dict()


def empty_layer(viewport: Viewport, message: str = "No data") -> alt.Chart:
    df = pd.DataFrame([{"x": viewport.width / 2, "y": viewport.height / 2, "text": message}])
    return (
        alt.Chart(df)
        .mark_text(align="center", font=FONT, fontSize=LABEL_FONT_SIZE, color=AXIS_COLOR)
        .encode(x=_px("x"), y=_px("y", alt.Y), text="text:N")
    )
